"""
mongofs: a filesystem interface for MongoDB GridFS
"""

from mongofs.filesystem.base import UnsupportedOperation, WriteConfig
from mongofs.filesystem.gridfs_adapter import GridFSAdapter
from mongofs.models import DeleteOutcome, FileRecord, RenameOutcome
from mongofs.storage.client import StoreClient, StoreError

__all__ = [
    "DeleteOutcome",
    "FileRecord",
    "GridFSAdapter",
    "RenameOutcome",
    "StoreClient",
    "StoreError",
    "UnsupportedOperation",
    "WriteConfig",
]
