"""
Tests for the GridFS client that do not need a MongoDB server.
The files and chunks collections and the GridFS object are replaced by small in-memory fakes.
"""

from datetime import UTC, datetime, timedelta, timezone
from types import SimpleNamespace

import pytest
from gridfs.errors import GridFSError
from pymongo.errors import PyMongoError
from pymongo.results import DeleteResult

from mongofs.storage.client import StoreError
from mongofs.storage.gridfs_client import MAX_CHAR, GridFSClient, GridFSObject, _timestamp, prefix_filter


def matches(doc: dict, filter: dict) -> bool:
    for field, condition in filter.items():
        value = doc.get(field)
        if isinstance(condition, dict):
            if "$in" in condition and value not in condition["$in"]:
                return False
            if "$gte" in condition and not (value is not None and value >= condition["$gte"]):
                return False
            if "$lt" in condition and not (value is not None and value < condition["$lt"]):
                return False
        elif value != condition:
            return False
    return True


class FakeCollection:
    def __init__(self, name: str):
        self.name = name
        self.docs: list[dict] = []
        self.indexes: dict[str, dict] = {"_id_": {"key": [("_id", 1)], "v": 2}}
        self.fail = False
        self.acknowledged = True

    def _check(self):
        if self.fail:
            raise PyMongoError(f"{self.name} is down")

    def distinct(self, key: str, filter: dict) -> list:
        self._check()
        return [doc[key] for doc in self.docs if matches(doc, filter)]

    def delete_many(self, filter: dict) -> DeleteResult:
        self._check()
        keep = [doc for doc in self.docs if not matches(doc, filter)]
        n = len(self.docs) - len(keep)
        self.docs = keep
        return DeleteResult({"n": n}, self.acknowledged)

    def index_information(self) -> dict:
        self._check()
        return dict(self.indexes)

    def create_index(self, keys: list) -> None:
        self._check()
        name = "_".join(f"{field}_{direction}" for field, direction in keys)
        self.indexes[name] = {"key": keys, "v": 2}


class FakeDatabase:
    def __init__(self):
        self.collections: dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        return self.collections.setdefault(name, FakeCollection(name))


class FailingGridFS:
    def find_one(self, filter):
        raise PyMongoError("server selection timeout")

    def find(self, filter):
        raise PyMongoError("server selection timeout")

    def put(self, data, **kargs):
        raise GridFSError("file exists")

    def delete(self, id):
        raise PyMongoError("server selection timeout")


@pytest.fixture()
def db() -> FakeDatabase:
    db = FakeDatabase()
    for id, filename in enumerate(["dir/a.txt", "dir/sub/b.txt", "dir.txt", "directory/c.txt"]):
        db["fs.files"].docs.append({"_id": id, "filename": filename})
        db["fs.chunks"].docs.append({"_id": 100 + id, "files_id": id, "n": 0})
    return db


@pytest.fixture()
def client(db) -> GridFSClient:
    return GridFSClient(db, fs=FailingGridFS())  # type: ignore[arg-type]


def test_prefix_filter():
    assert prefix_filter("") == {}
    assert prefix_filter("dir/") == {"filename": {"$gte": "dir/", "$lt": "dir/" + MAX_CHAR}}
    # no regex: metacharacters end up in the bounds unchanged
    assert prefix_filter("a.(b)*/") == {"filename": {"$gte": "a.(b)*/", "$lt": "a.(b)*/\U0010ffff"}}


def test_prefix_filter_bounds():
    filter = prefix_filter("dir/")
    assert matches({"filename": "dir/a.txt"}, filter)
    assert matches({"filename": "dir/\uffff\U0001f600"}, filter)
    assert not matches({"filename": "dir.txt"}, filter)
    assert not matches({"filename": "directory/c.txt"}, filter)
    assert not matches({"filename": "dir"}, filter)


def test_timestamp():
    assert _timestamp(None) is None
    # naive datetimes from pymongo are in UTC
    assert _timestamp(datetime(1970, 1, 1, 0, 0, 42)) == 42
    assert _timestamp(datetime(1970, 1, 1, 0, 0, 42, tzinfo=UTC)) == 42
    assert _timestamp(datetime(1970, 1, 1, 1, 0, 42, tzinfo=timezone(timedelta(hours=1)))) == 42
    assert _timestamp(datetime(2024, 5, 1, 12, 30, 15, 999000)) == 1714566615


def test_gridfs_object():
    grid_out = SimpleNamespace(
        _id="some_id",
        filename="dir/file.txt",
        length=7,
        upload_date=datetime(1970, 1, 1, 0, 0, 42),
        metadata={"mimetype": "text/plain"},
        read=lambda: b"content",
    )
    obj = GridFSObject(grid_out)  # type: ignore[arg-type]
    assert obj.id == "some_id"
    assert obj.filename == "dir/file.txt"
    assert obj.size == 7
    assert obj.upload_timestamp == 42
    assert obj.metadata == {"mimetype": "text/plain"}
    assert obj.read() == b"content"


def test_gridfs_object_read_error():
    def failing_read():
        raise GridFSError("no chunk #0")

    grid_out = SimpleNamespace(_id=1, filename="x", length=1, upload_date=None, metadata=None, read=failing_read)
    obj = GridFSObject(grid_out)  # type: ignore[arg-type]
    assert obj.upload_timestamp is None
    with pytest.raises(StoreError):
        obj.read()


def test_remove_prefix(db, client):
    assert client.remove_prefix("dir/")
    assert [doc["filename"] for doc in db["fs.files"].docs] == ["dir.txt", "directory/c.txt"]
    assert [doc["files_id"] for doc in db["fs.chunks"].docs] == [2, 3]


def test_remove_prefix_nothing_matches(db, client):
    assert client.remove_prefix("nothing/")
    assert len(db["fs.files"].docs) == 4


def test_remove_prefix_not_acknowledged(db, client):
    db["fs.files"].acknowledged = False
    assert client.remove_prefix("dir/") is False


def test_remove_prefix_error(db, client):
    db["fs.chunks"].fail = True
    assert client.remove_prefix("dir/") is False
    assert len(db["fs.files"].docs) == 4


def test_index_info(db, client):
    assert [ix["name"] for ix in client.get_index_info()] == ["_id_"]
    client.create_index([("filename", 1)])
    info = client.get_index_info()
    assert info[-1] == {"name": "filename_1", "key": [("filename", 1)], "v": 2}
    assert client.supports_index_creation()
    assert not GridFSClient(db, allow_index_creation=False, fs=FailingGridFS()).supports_index_creation()  # type: ignore[arg-type]


def test_index_errors(db, client):
    db["fs.files"].fail = True
    with pytest.raises(StoreError):
        client.get_index_info()
    with pytest.raises(StoreError):
        client.create_index([("filename", 1)])


def test_errors_are_wrapped(client):
    with pytest.raises(StoreError):
        client.find_one("file.txt")
    with pytest.raises(StoreError):
        list(client.find_prefix("dir/"))
    with pytest.raises(StoreError):
        client.store_bytes(b"content", "file.txt", {})
    with pytest.raises(StoreError):
        client.delete("some_id")
