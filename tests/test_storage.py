"""
Tests for the object storage client with a mocked HTTP session.
"""
from unittest.mock import MagicMock

import pytest
import requests

from errors import StorageError
from storage.client import ObjectStorage

BASE = "https://files.example.com"


@pytest.fixture
def http():
    return MagicMock()


@pytest.fixture
def storage(http):
    return ObjectStorage(BASE + "/", api_key="secret", session=http)


class TestUrls:
    def test_public_url(self, storage):
        assert storage.public_url("dishes", "r1/adobo.jpg") == (
            f"{BASE}/storage/v1/object/public/dishes/r1/adobo.jpg"
        )

    def test_absolute_url_unchanged(self, storage):
        url = "https://cdn.example.com/x.png"
        assert storage.public_url("dishes", url) == url

    def test_empty_path(self, storage):
        assert storage.public_url("dishes", "") is None

    def test_relative_path(self):
        url = f"{BASE}/storage/v1/object/public/applications/u1/cover.jpg"
        assert ObjectStorage.relative_path(url, "applications") == "u1/cover.jpg"
        assert ObjectStorage.relative_path(url, "restaurants") is None
        assert ObjectStorage.relative_path(None, "applications") is None


class TestTransfers:
    def test_download_returns_bytes(self, storage, http):
        http.get.return_value = MagicMock(content=b"jpeg")

        assert storage.download("applications", "u1/cover.jpg") == b"jpeg"
        url = http.get.call_args.args[0]
        assert url == f"{BASE}/storage/v1/object/applications/u1/cover.jpg"
        assert http.get.call_args.kwargs["headers"]["Authorization"] == "Bearer secret"

    def test_upload_returns_public_url(self, storage, http):
        http.post.return_value = MagicMock()

        url = storage.upload("restaurants", "r9/coverURL", b"jpeg")
        assert url == f"{BASE}/storage/v1/object/public/restaurants/r9/coverURL"
        assert http.post.call_args.kwargs["data"] == b"jpeg"

    def test_http_error_raises_storage_error(self, storage, http):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Not Found")
        http.get.return_value = response

        with pytest.raises(StorageError):
            storage.download("applications", "missing.jpg")

    def test_connection_error_raises_storage_error(self, storage, http):
        http.post.side_effect = requests.ConnectionError("offline")
        with pytest.raises(StorageError):
            storage.upload("restaurants", "r9/x", b"")
