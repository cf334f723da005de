"""
Filesystem adapter for GridFS-like blob stores.

The store only knows flat objects with a filename, so this adapter maps the filesystem contract onto it:
- the path is the filename, directories only exist as filename prefixes
- update is write: overwriting a path stores a new object and leaves the old one in place
- rename is copy followed by delete, and delete is lookup followed by delete-by-id

- a directory is everything under "<dir>/", so listing or deleting "dir" does not touch "directory/..."

Store failures are logged and reported as False (or a failed outcome), never raised.
None of these compound operations is atomic, and nothing here locks or caches.
Callers that run concurrent writers on the same paths need to serialize them themselves.
"""

import logging
from typing import Any, BinaryIO, Literal, Mapping

from pymongo import ASCENDING

from mongofs.filesystem.base import (
    FilesystemAdapter,
    NotSupportingVisibility,
    StreamedCopy,
    StreamedReading,
    UnsupportedOperation,
    WriteConfig,
)
from mongofs.filesystem.util import dirname as path_dirname, emulate_directories, normalize_prefix
from mongofs.models import DeleteOutcome, FileRecord, RenameOutcome
from mongofs.storage.client import StoreClient, StoredObject, StoreError

FILENAME_INDEX = "filename_1"


class GridFSAdapter(NotSupportingVisibility, StreamedCopy, StreamedReading, FilesystemAdapter):
    def __init__(self, client: StoreClient, prefix: str | None = None):
        self.client = client
        self.set_path_prefix(prefix)
        self.can_create_index = client.supports_index_creation()

    def get_client(self) -> StoreClient:
        return self.client

    def has(self, path: str) -> bool:
        try:
            return self.client.find_one(self.apply_path_prefix(path)) is not None
        except StoreError as e:
            logging.warning(f"Could not look up {path!r}: {e}")
            return False

    def write(self, path: str, contents: bytes | str | BinaryIO, config: WriteConfig) -> FileRecord | Literal[False]:
        metadata = {}
        if config.has("mimetype"):
            metadata["mimetype"] = config.get("mimetype")
        return self._write_object(path, contents, metadata)

    def write_stream(self, path: str, stream: BinaryIO, config: WriteConfig) -> FileRecord | Literal[False]:
        return self.write(path, stream, config)

    def update(self, path: str, contents: bytes | str, config: WriteConfig) -> FileRecord | Literal[False]:
        return self.write(path, contents, config)

    def update_stream(self, path: str, stream: BinaryIO, config: WriteConfig) -> FileRecord | Literal[False]:
        return self.write_stream(path, stream, config)

    def read(self, path: str) -> dict | Literal[False]:
        try:
            file = self.client.find_one(self.apply_path_prefix(path))
            if file is None:
                return False
            return dict(contents=file.read())
        except StoreError as e:
            logging.warning(f"Could not read {path!r}: {e}")
            return False

    def get_metadata(self, path: str) -> FileRecord | Literal[False]:
        try:
            file = self.client.find_one(self.apply_path_prefix(path))
        except StoreError as e:
            logging.warning(f"Could not look up {path!r}: {e}")
            return False
        if file is None:
            return False
        return normalize_stored_object(file, path)

    def get_mimetype(self, path: str) -> FileRecord | Literal[False]:
        return self.get_metadata(path)

    def get_size(self, path: str) -> FileRecord | Literal[False]:
        return self.get_metadata(path)

    def get_timestamp(self, path: str) -> FileRecord | Literal[False]:
        return self.get_metadata(path)

    def delete(self, path: str) -> bool:
        return self.delete_steps(path) is DeleteOutcome.DELETED

    def delete_steps(self, path: str) -> DeleteOutcome:
        """
        Look up the object and delete it by id. Another client can delete it between these two round trips,
        in which case the store decides what deleting a missing id returns.
        """
        try:
            file = self.client.find_one(self.apply_path_prefix(path))
        except StoreError as e:
            logging.warning(f"Could not look up {path!r} for deletion: {e}")
            return DeleteOutcome.LOOKUP_FAILED
        if file is None:
            return DeleteOutcome.NOT_FOUND
        try:
            deleted = self.client.delete(file.id)
        except StoreError as e:
            logging.warning(f"Could not delete {path!r}: {e}")
            return DeleteOutcome.DELETE_FAILED
        if deleted is False:
            return DeleteOutcome.DELETE_FAILED
        return DeleteOutcome.DELETED

    def rename(self, path: str, newpath: str) -> bool:
        return self.rename_steps(path, newpath) is RenameOutcome.RENAMED

    def rename_steps(self, path: str, newpath: str) -> RenameOutcome:
        if not self.copy(path, newpath):
            return RenameOutcome.COPY_FAILED
        if not self.delete(path):
            logging.warning(f"Renamed {path!r} to {newpath!r}, but could not delete the original: both now exist")
            return RenameOutcome.DELETE_FAILED
        return RenameOutcome.RENAMED

    def create_dir(self, path: str, config: WriteConfig):
        raise UnsupportedOperation(f"{type(self).__name__} does not support directory creation. Path: {path}")

    def delete_dir(self, path: str) -> bool:
        prefix = self.apply_path_prefix(path).rstrip("/") + "/"
        logging.info(f"Deleting all files with prefix {prefix!r}")
        try:
            return self.client.remove_prefix(prefix) is True
        except StoreError as e:
            logging.warning(f"Could not delete files with prefix {prefix!r}: {e}")
            return False

    def list_contents(self, dirname: str = "", recursive: bool = False) -> list[dict] | Literal[False]:
        if recursive:
            raise NotImplementedError("Recursive listing is not yet implemented")
        prefix = normalize_prefix(self.apply_path_prefix(dirname))
        try:
            records = [
                normalize_stored_object(file, self.remove_path_prefix(file.filename or ""))
                for file in self.client.find_prefix(prefix)
            ]
        except StoreError as e:
            logging.warning(f"Could not list {dirname!r}: {e}")
            return False
        return emulate_directories(records)

    def _write_object(
        self, path: str, contents: bytes | str | BinaryIO, metadata: Mapping[str, Any]
    ) -> FileRecord | Literal[False]:
        filename = self.apply_path_prefix(path)
        try:
            if isinstance(contents, (bytes, bytearray, str)):
                data = contents.encode("utf-8") if isinstance(contents, str) else bytes(contents)
                id = self.client.store_bytes(data, filename, metadata)
            else:
                id = self.client.store_file(contents, filename, metadata)
            self.ensure_index()
        except StoreError as e:
            logging.warning(f"Could not write {filename!r}: {e}")
            return False

        try:
            file = self.client.find_one({"_id": id})
        except StoreError as e:
            logging.warning(f"Stored {filename!r}, but could not read it back: {e}")
            return False
        if file is None:
            # removed by someone else before we could read it back
            return False
        return normalize_stored_object(file, path)

    def ensure_index(self) -> bool:
        """
        Create the filename index if there is no index named filename_1. Only the name is checked,
        not the indexed keys. Returns True if an index was created.
        """
        indexes = self.client.get_index_info()
        if any(index.get("name") == FILENAME_INDEX for index in indexes):
            return False
        if not self.can_create_index:
            logging.debug(f"No {FILENAME_INDEX} index, but the store does not support creating it")
            return False
        logging.info(f"Creating {FILENAME_INDEX} index")
        self.client.create_index([("filename", ASCENDING)])
        return True


def normalize_stored_object(file: StoredObject, path: str | None = None) -> FileRecord:
    """Convert a stored object to a FileRecord. If path is given it is used instead of the stored filename"""
    record_path = (path or file.filename or "").strip("/")
    result = FileRecord(
        path=record_path,
        type="file",
        size=file.size,
        timestamp=file.upload_timestamp,
        dirname=path_dirname(record_path),
    )
    if file.metadata and file.metadata.get("mimetype"):
        result["mimetype"] = file.metadata["mimetype"]
    return result
