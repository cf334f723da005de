import pytest

from mongofs.config import get_settings
from mongofs.filesystem.gridfs_adapter import GridFSAdapter
from tests.tools import MemoryStore


@pytest.fixture(scope="session", autouse=True)
def my_setup():
    # Never touch a real database from the tests
    get_settings().use_test_db = True


@pytest.fixture()
def store() -> MemoryStore:
    """A store that already has the filename index, so writes don't create one"""
    return MemoryStore(indexes=["_id_", "filename_1"])


@pytest.fixture()
def adapter(store) -> GridFSAdapter:
    return GridFSAdapter(store)
