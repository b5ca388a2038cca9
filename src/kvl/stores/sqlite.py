"""SQLiteStore — durable, single-file key-value store using aiosqlite."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

import aiosqlite

from kvl.config import StoreConfig
from kvl.connection import StoreConnection
from kvl.exceptions import DecodeError, StoreClosedError
from kvl.result import Lookup
from kvl.scanner import PaginatedScanner
from kvl.schema import TableSchema
from kvl.serializers import JsonSerializer, Serializer
from kvl.stores.base import Entries, KeyValueStore, normalize_entries, normalize_key

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SQLiteStore(KeyValueStore[T]):
    """Persistent store backed by a single SQLite file.

    The connection is opened lazily on first use (or explicitly with
    ``await store.open()`` / ``async with store``) and held until
    :meth:`close`.  Any operation after ``close`` raises
    :class:`~kvl.exceptions.StoreClosedError`.

    Parameters:
        db_path:    Path to the SQLite database file.  Use ``":memory:"``
                    for an in-memory database (useful for testing).
        serializer: Value serializer.  Defaults to :class:`JsonSerializer`.
        config:     Full store configuration.  Takes precedence over
                    *db_path* when given.
    """

    def __init__(
        self,
        db_path: str = "kvl.db",
        serializer: Serializer[T] | None = None,
        *,
        config: StoreConfig | None = None,
    ) -> None:
        self._config = config or StoreConfig.build(path=db_path)
        self._serializer: Serializer[T] = serializer or JsonSerializer()
        self._conn = StoreConnection(self._config)

    async def open(self) -> SQLiteStore[T]:
        await self._conn.connect()
        return self

    async def close(self) -> None:
        await self._conn.close()

    async def __aenter__(self) -> SQLiteStore[T]:
        return await self.open()

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def serializer(self) -> Serializer[T]:
        return self._serializer

    @property
    def closed(self) -> bool:
        return self._conn.closed

    @property
    def _schema(self) -> TableSchema:
        return self._conn.schema

    # ── single-entry writes ──────────────────────────────────

    async def add(self, key: bytes, value: T) -> None:
        entry = self._prepare(key, value)
        async with self._conn.transaction("add") as db:
            await self._add(db, entry)

    async def upsert(self, key: bytes, value: T) -> None:
        entry = self._prepare(key, value)
        async with self._conn.transaction("upsert") as db:
            await self._upsert(db, entry)

    async def update(self, key: bytes, value: T) -> None:
        entry = self._prepare(key, value)
        async with self._conn.transaction("update") as db:
            await self._update(db, entry)

    async def delete(self, key: bytes) -> None:
        key = normalize_key(key)
        async with self._conn.transaction("delete") as db:
            await self._delete(db, key)

    # ── batch writes ─────────────────────────────────────────

    async def add_many(self, entries: Entries[T]) -> None:
        prepared = self._prepare_all(entries)
        if not prepared:
            self._check_open("add_many")
            return
        logger.debug("add_many: %d entries", len(prepared))
        async with self._conn.transaction("add_many") as db:
            for entry in prepared:
                await self._add(db, entry)

    async def upsert_many(self, entries: Entries[T]) -> None:
        prepared = self._prepare_all(entries)
        if not prepared:
            self._check_open("upsert_many")
            return
        logger.debug("upsert_many: %d entries", len(prepared))
        async with self._conn.transaction("upsert_many") as db:
            for entry in prepared:
                await self._upsert(db, entry)

    async def update_many(self, entries: Entries[T]) -> None:
        prepared = self._prepare_all(entries)
        if not prepared:
            self._check_open("update_many")
            return
        logger.debug("update_many: %d entries", len(prepared))
        async with self._conn.transaction("update_many") as db:
            for entry in prepared:
                await self._update(db, entry)

    async def delete_many(self, keys: Iterable[bytes]) -> None:
        prepared = [normalize_key(key) for key in keys]
        if not prepared:
            self._check_open("delete_many")
            return
        logger.debug("delete_many: %d keys", len(prepared))
        async with self._conn.transaction("delete_many") as db:
            for key in prepared:
                await self._delete(db, key)

    # ── reads ────────────────────────────────────────────────

    async def get(self, key: bytes) -> Lookup[T]:
        key = normalize_key(key)
        row = await self._conn.fetch_one("get", self._schema.select_value, (key,))
        if row is None:
            return Lookup.miss()
        return Lookup.hit(self._decode(key, row[0]))

    async def exists(self, key: bytes) -> bool:
        key = normalize_key(key)
        row = await self._conn.fetch_one("exists", self._schema.select_exists, (key,))
        return row is not None

    async def count(self) -> int:
        row = await self._conn.fetch_one("count", self._schema.count)
        return int(row[0]) if row else 0

    def scan(self, page_size: int | None = None) -> PaginatedScanner[T]:
        self._check_open("scan")
        return PaginatedScanner(
            self._fetch_page,
            self._decode,
            self._config.page_size if page_size is None else page_size,
        )

    async def _fetch_page(self, cursor: int, limit: int) -> Sequence[Sequence[Any]]:
        return await self._conn.fetch_all("scan", self._schema.select_page, (cursor, limit))

    # ── per-entry statements ─────────────────────────────────
    #
    # Shared by the single-entry and batch forms so both behave identically.

    async def _add(self, db: aiosqlite.Connection, entry: tuple[bytes, bytes]) -> None:
        await db.execute(self._schema.insert_or_ignore, entry)

    async def _upsert(self, db: aiosqlite.Connection, entry: tuple[bytes, bytes]) -> None:
        await db.execute(self._schema.upsert, entry)

    async def _update(self, db: aiosqlite.Connection, entry: tuple[bytes, bytes]) -> None:
        key, payload = entry
        await db.execute(self._schema.update, (payload, key))

    async def _delete(self, db: aiosqlite.Connection, key: bytes) -> None:
        await db.execute(self._schema.delete, (key,))

    # ── helpers ──────────────────────────────────────────────

    def _check_open(self, operation: str) -> None:
        if self._conn.closed:
            raise StoreClosedError(operation)

    def _prepare(self, key: bytes, value: T) -> tuple[bytes, bytes]:
        return normalize_key(key), self._serializer.encode(value)

    def _prepare_all(self, entries: Entries[T]) -> list[tuple[bytes, bytes]]:
        return [
            (key, self._serializer.encode(value)) for key, value in normalize_entries(entries)
        ]

    def _decode(self, key: bytes, payload: bytes) -> T:
        try:
            return self._serializer.decode(bytes(payload))
        except DecodeError as exc:
            raise DecodeError(exc.detail, key=key) from exc
