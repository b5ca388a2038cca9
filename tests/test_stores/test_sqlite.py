"""Tests specific to SQLiteStore: durability, transactions and engine errors."""

import asyncio
import sqlite3

import pytest

from kvl import (
    BytesSerializer,
    DecodeError,
    EncodeError,
    SQLiteStore,
    StoreClosedError,
    StoreConfig,
    StoreError,
)

_FAIL_ON_BAD_KEY = """
CREATE TRIGGER reject_bad BEFORE INSERT ON keyvaluestore
WHEN NEW.key = X'626164'
BEGIN
    SELECT RAISE(ABORT, 'bad key rejected');
END
"""


def _install_trigger(db_path):
    conn = sqlite3.connect(db_path)
    try:
        conn.execute(_FAIL_ON_BAD_KEY)
        conn.commit()
    finally:
        conn.close()


async def test_data_survives_reopen(db_path):
    async with SQLiteStore(db_path) as store:
        await store.add(b"k", {"persisted": True})

    async with SQLiteStore(db_path) as store:
        assert (await store.get(b"k")).value == {"persisted": True}


async def test_schema_created_on_open(db_path):
    async with SQLiteStore(db_path):
        pass
    conn = sqlite3.connect(db_path)
    try:
        columns = [row[1] for row in conn.execute("PRAGMA table_info(keyvaluestore)")]
    finally:
        conn.close()
    assert columns == ["id", "key", "value"]


async def test_custom_table_name(db_path):
    config = StoreConfig(path=db_path, table="sessions")
    async with SQLiteStore(config=config) as store:
        await store.add(b"k", 1)
    conn = sqlite3.connect(db_path)
    try:
        assert conn.execute("SELECT COUNT(*) FROM sessions").fetchone()[0] == 1
    finally:
        conn.close()


async def test_in_memory_database():
    async with SQLiteStore(":memory:") as store:
        await store.upsert(b"k", [1, 2, 3])
        assert (await store.get(b"k")).value == [1, 2, 3]


async def test_batch_is_all_or_nothing(db_path):
    async with SQLiteStore(db_path) as store:
        await store.add(b"existing", 0)
    _install_trigger(db_path)

    async with SQLiteStore(db_path) as store:
        with pytest.raises(StoreError) as exc:
            await store.add_many([(b"first", 1), (b"bad", 2), (b"third", 3)])
        assert exc.value.operation == "add_many"
        assert "bad key rejected" in str(exc.value)

        assert await store.count() == 1
        assert not await store.exists(b"first")
        assert not await store.exists(b"third")

        # the connection is usable again after the rollback
        await store.add(b"after", 4)
        assert await store.count() == 2


async def test_single_entry_engine_error(db_path):
    async with SQLiteStore(db_path):
        pass
    _install_trigger(db_path)

    async with SQLiteStore(db_path) as store:
        with pytest.raises(StoreError) as exc:
            await store.upsert(b"bad", 1)
        assert exc.value.operation == "upsert"
        assert isinstance(exc.value.__cause__, sqlite3.Error)


async def test_encode_failure_writes_nothing(sqlite_store):
    with pytest.raises(EncodeError):
        await sqlite_store.upsert_many([(b"a", 1), (b"b", object())])
    assert await sqlite_store.count() == 0


async def test_undecodable_value_raises_on_get_and_scan(db_path):
    async with SQLiteStore(db_path, serializer=BytesSerializer()) as raw:
        await raw.add(b"good", b'"fine"')
        await raw.add(b"broken", b"\xff\xfe not json")

    async with SQLiteStore(db_path) as store:
        with pytest.raises(DecodeError) as exc:
            await store.get(b"broken")
        assert exc.value.key == b"broken"

        scanner = store.scan()
        assert await scanner.__anext__() == (b"good", "fine")
        with pytest.raises(DecodeError):
            await scanner.__anext__()


async def test_scan_sees_rows_inserted_ahead_of_cursor(sqlite_store):
    await sqlite_store.add_many([(b"a", 1), (b"b", 2), (b"c", 3)])

    seen = []
    async for key, _ in sqlite_store.scan(page_size=2):
        seen.append(key)
        if key == b"a":
            await sqlite_store.add(b"d", 4)

    assert seen == [b"a", b"b", b"c", b"d"]


async def test_scan_skips_rows_deleted_ahead_of_cursor(sqlite_store):
    await sqlite_store.add_many([(b"a", 1), (b"b", 2), (b"c", 3)])

    seen = []
    async for key, _ in sqlite_store.scan(page_size=1):
        seen.append(key)
        if key == b"a":
            await sqlite_store.delete(b"b")

    assert seen == [b"a", b"c"]


async def test_concurrent_operations_are_serialized(sqlite_store):
    await asyncio.gather(
        *(sqlite_store.upsert(f"k{i}".encode(), i) for i in range(50)),
        sqlite_store.add_many((f"batch{i}".encode(), i) for i in range(50)),
    )
    assert await sqlite_store.count() == 100


async def test_scan_fails_after_close_mid_iteration(db_path):
    store = SQLiteStore(config=StoreConfig(path=db_path, page_size=1))
    await store.add_many([(b"a", 1), (b"b", 2)])
    scanner = store.scan()
    assert (await scanner.__anext__())[0] == b"a"
    await store.close()
    with pytest.raises(StoreClosedError):
        await scanner.__anext__()
