"""
Store client for MongoDB GridFS, using the gridfs package that ships with pymongo.
"""

import logging
from datetime import UTC, datetime
from typing import Any, BinaryIO, Iterator, Mapping

import gridfs
from gridfs import GridOut
from gridfs.errors import GridFSError
from pymongo import ASCENDING
from pymongo.database import Database
from pymongo.errors import PyMongoError

from mongofs.storage.client import StoreError

# Highest code point, used as exclusive upper bound for prefix range queries
MAX_CHAR = "\U0010ffff"


class GridFSObject:
    """A stored GridFS file, exposing the fields the adapter needs"""

    def __init__(self, grid_out: GridOut):
        self._grid_out = grid_out
        self.id = grid_out._id
        self.filename: str | None = grid_out.filename
        self.size: int | None = grid_out.length
        self.upload_timestamp = _timestamp(grid_out.upload_date)
        self.metadata: dict | None = grid_out.metadata

    def read(self) -> bytes:
        try:
            return self._grid_out.read()
        except (PyMongoError, GridFSError) as e:
            raise StoreError(f"Cannot read {self.filename!r}: {e}") from e


def _timestamp(upload_date: datetime | None) -> int | None:
    if upload_date is None:
        return None
    # pymongo returns naive datetimes in UTC unless the client is tz_aware
    if upload_date.tzinfo is None:
        upload_date = upload_date.replace(tzinfo=UTC)
    return int(upload_date.timestamp())


def prefix_filter(prefix: str) -> dict:
    if not prefix:
        return {}
    return {"filename": {"$gte": prefix, "$lt": prefix + MAX_CHAR}}


class GridFSClient:
    def __init__(
        self,
        database: Database,
        bucket: str = "fs",
        allow_index_creation: bool = True,
        fs: gridfs.GridFS | None = None,
    ):
        self.database = database
        self.bucket = bucket
        self.allow_index_creation = allow_index_creation
        self.fs = fs if fs is not None else gridfs.GridFS(database, collection=bucket)

    @property
    def files(self):
        return self.database[f"{self.bucket}.files"]

    @property
    def chunks(self):
        return self.database[f"{self.bucket}.chunks"]

    def find_one(self, filter: str | Mapping[str, Any]) -> GridFSObject | None:
        query = {"filename": filter} if isinstance(filter, str) else dict(filter)
        try:
            result = self.fs.find_one(query)
        except PyMongoError as e:
            raise StoreError(f"Lookup {query} failed: {e}") from e
        return GridFSObject(result) if result is not None else None

    def find_prefix(self, prefix: str) -> Iterator[GridFSObject]:
        logging.debug(f"Listing GridFS files in {self.bucket!r} with prefix {prefix!r}")
        try:
            for grid_out in self.fs.find(prefix_filter(prefix)).sort("filename", ASCENDING):
                yield GridFSObject(grid_out)
        except PyMongoError as e:
            raise StoreError(f"Listing prefix {prefix!r} failed: {e}") from e

    def store_bytes(self, data: bytes, filename: str, metadata: Mapping[str, Any]) -> Any:
        return self._put(data, filename, metadata)

    def store_file(self, stream: BinaryIO, filename: str, metadata: Mapping[str, Any]) -> Any:
        # GridFS reads the stream chunk by chunk, so the content is never fully in memory
        return self._put(stream, filename, metadata)

    def _put(self, data: bytes | BinaryIO, filename: str, metadata: Mapping[str, Any]) -> Any:
        try:
            return self.fs.put(data, filename=filename, metadata=dict(metadata))
        except (PyMongoError, GridFSError) as e:
            raise StoreError(f"Cannot store {filename!r}: {e}") from e

    def delete(self, id: Any) -> bool:
        try:
            self.fs.delete(id)
        except PyMongoError as e:
            raise StoreError(f"Cannot delete GridFS file {id}: {e}") from e
        return True

    def remove_prefix(self, prefix: str) -> bool:
        try:
            ids = self.files.distinct("_id", prefix_filter(prefix))
            if not ids:
                return True
            chunks = self.chunks.delete_many({"files_id": {"$in": ids}})
            files = self.files.delete_many({"_id": {"$in": ids}})
        except PyMongoError as e:
            logging.warning(f"Removing GridFS files with prefix {prefix!r} failed: {e}")
            return False
        logging.info(f"Removed {len(ids)} GridFS files with prefix {prefix!r}")
        return chunks.acknowledged and files.acknowledged

    def get_index_info(self) -> list[dict]:
        try:
            indexes = self.files.index_information()
        except PyMongoError as e:
            raise StoreError(f"Cannot read indexes of {self.files.name}: {e}") from e
        return [dict(name=name, **info) for name, info in indexes.items()]

    def supports_index_creation(self) -> bool:
        return self.allow_index_creation

    def create_index(self, keys: list[tuple[str, int]]) -> None:
        try:
            self.files.create_index(keys)
        except PyMongoError as e:
            raise StoreError(f"Cannot create index {keys} on {self.files.name}: {e}") from e
