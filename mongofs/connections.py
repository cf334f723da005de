import logging
from contextlib import contextmanager
from typing import Generator

from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

from mongofs.config import get_settings
from mongofs.filesystem.gridfs_adapter import GridFSAdapter
from mongofs.storage.gridfs_client import GridFSClient


class MongofsConnections:
    mongo: MongoClient | None

    def __init__(self, mongo: MongoClient | None = None):
        self.mongo = mongo


CONNECTIONS = MongofsConnections(mongo=None)


@contextmanager
def mongofs_connections() -> Generator[None, None, None]:
    """
    The main context manager to start and stop the mongo connection.
    Always use this once (and only once):
        - For CLI commands: within the CLI command
        - For tests: in the setup fixture of the integration tests
    """
    try:
        _start_mongo()
        yield
    finally:
        _close_mongo()


def mongo() -> MongoClient:
    """
    Use this function to access the mongo connection.
    """
    if CONNECTIONS.mongo is None:
        raise ConnectionError("MongoDB connection not initialized")
    return CONNECTIONS.mongo


def database() -> Database:
    return mongo()[get_settings().database_name]


def filesystem() -> GridFSAdapter:
    """
    A GridFS adapter on the configured database and bucket
    """
    settings = get_settings()
    client = GridFSClient(
        database(),
        bucket=settings.gridfs_bucket,
        allow_index_creation=settings.create_filename_index,
    )
    return GridFSAdapter(client, prefix=settings.path_prefix)


def _start_mongo():
    """
    Connect to mongo and check that the server responds
    """
    settings = get_settings()
    logging.debug(f"Connecting with mongodb at {settings.mongo_host}, database {settings.database_name}")
    client: MongoClient = MongoClient(settings.mongo_host, serverSelectionTimeoutMS=5000)
    try:
        client.admin.command("ping")
    except PyMongoError as e:
        client.close()
        raise ConnectionError(f"Cannot connect to mongodb server {settings.mongo_host}: {e}") from e
    CONNECTIONS.mongo = client


def _close_mongo():
    if CONNECTIONS.mongo is not None:
        CONNECTIONS.mongo.close()
        CONNECTIONS.mongo = None
