"""
Database connection handling for the dashboard record store.
"""
import logging
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from config import Config

logger = logging.getLogger(__name__)


def create_db_engine(config=None):

    try:
        if config is None:
            config = Config()

        db_config = config.get_database_config()
        connect_args = {}

        if db_config['type'] == 'sqlite':
            db_dir = os.path.dirname(db_config['name'])
            if db_dir and not os.path.exists(db_dir):
                os.makedirs(db_dir)
            connection_string = f"sqlite:///{db_config['name']}"
            # Fetches run in worker threads
            connect_args['check_same_thread'] = False
        elif db_config['type'] in ('postgres', 'postgresql'):
            connection_string = f"postgresql://{db_config['user']}:{db_config['password']}@{db_config['host']}:{db_config['port']}/{db_config['name']}"
        else:
            raise ValueError(f"Unsupported database type: {db_config['type']}")

        engine = create_engine(connection_string, connect_args=connect_args)
        logger.info(f"Database connection created for {db_config['type']}")
        return engine
    except Exception as e:
        logger.error(f"Failed to create database connection: {str(e)}")
        raise


def create_session_factory(engine):
    """
    Create a SQLAlchemy session factory bound to the engine.
    """
    return sessionmaker(bind=engine)


def init_db(engine, base):
    """
    Initialize database tables.
    """
    base.metadata.create_all(engine)
    logger.info("Database tables initialized")
