"""Shared test fixtures."""

import pytest

from kvl import InMemoryStore, SQLiteStore, StoreConfig


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "kvl.db")


@pytest.fixture
async def sqlite_store(db_path):
    store = SQLiteStore(config=StoreConfig(path=db_path, page_size=512))
    await store.open()
    yield store
    await store.close()


@pytest.fixture
async def memory_store():
    store = InMemoryStore(page_size=512)
    yield store
    await store.close()


@pytest.fixture(params=["sqlite", "memory"])
async def store(request, db_path):
    """Every store implementation, for contract tests."""
    if request.param == "sqlite":
        s = SQLiteStore(config=StoreConfig(path=db_path, page_size=512))
    else:
        s = InMemoryStore(page_size=512)
    yield s
    await s.close()
