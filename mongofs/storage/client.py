"""
The contract between the filesystem adapter and a GridFS-like blob store.

A store keeps objects keyed by a generated id. Each object carries a filename, a byte size,
an upload time and free-form metadata. Filenames are not unique and there is no notion of a directory:
the adapter builds those on top of filename prefix queries.
"""

from typing import Any, BinaryIO, Iterable, Mapping, Protocol


class StoreError(Exception):
    """Any failure reported by the underlying store"""

    pass


class StoredObject(Protocol):
    id: Any
    filename: str | None
    size: int | None
    upload_timestamp: int | None
    metadata: dict | None

    def read(self) -> bytes: ...


class StoreClient(Protocol):
    def find_one(self, filter: str | Mapping[str, Any]) -> StoredObject | None:
        """
        Find a single object, either by filename (if filter is a string) or by a query document
        such as {"_id": id}. Returns None if nothing matches.
        """
        ...

    def find_prefix(self, prefix: str) -> Iterable[StoredObject]:
        """All objects whose filename starts with prefix (everything if prefix is empty)"""
        ...

    def store_bytes(self, data: bytes, filename: str, metadata: Mapping[str, Any]) -> Any: ...

    def store_file(self, stream: BinaryIO, filename: str, metadata: Mapping[str, Any]) -> Any: ...

    def delete(self, id: Any) -> bool: ...

    def remove_prefix(self, prefix: str) -> bool:
        """Remove all objects whose filename starts with prefix. True iff the store reports full success"""
        ...

    def get_index_info(self) -> list[dict]: ...

    def supports_index_creation(self) -> bool: ...

    def create_index(self, keys: list[tuple[str, int]]) -> None: ...
