"""
Pytest fixtures for the dashboard report tests.

Tests run against a real SQLite document store in a temporary file.
"""
from datetime import datetime, timezone

import pytest

from config import Config, ReportSettings
from db.engine import create_db_engine, init_db
from db.models import Base
from db.store import DocumentStore
from ingestion.fetcher import RecordFetcher


def utc(*args):
    return datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def config(tmp_path):
    config = Config(str(tmp_path / "missing.ini"))
    config.config["DATABASE"]["type"] = "sqlite"
    config.config["DATABASE"]["name"] = str(tmp_path / "dashboard.db")
    config.config["PATHS"]["input_dir"] = str(tmp_path / "input")
    config.config["PATHS"]["output_dir"] = str(tmp_path / "output")
    return config


@pytest.fixture
def store(config):
    engine = create_db_engine(config)
    init_db(engine, Base)
    yield DocumentStore(engine)
    engine.dispose()


@pytest.fixture
def fetcher(store):
    return RecordFetcher(store, batch_size=10)


@pytest.fixture
def settings():
    return ReportSettings(top_n=3)


@pytest.fixture
def seed(store):
    """Write documents into a collection; each document must carry its id."""

    def _seed(collection, documents):
        for document in documents:
            body = {k: v for k, v in document.items() if k != "id"}
            store.add(collection, body, doc_id=document["id"])

    return _seed
