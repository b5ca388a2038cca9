"""StoreConnection — the single engine handle behind an SQLite store."""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import AsyncIterator, Awaitable, Iterable
from contextlib import asynccontextmanager
from typing import Any

import aiosqlite

from kvl.config import StoreConfig
from kvl.exceptions import StoreClosedError, StoreError
from kvl.schema import TableSchema

logger = logging.getLogger(__name__)


class StoreConnection:
    """Owns exactly one ``aiosqlite`` connection for the lifetime of a store.

    The driver runs in autocommit mode; transactions are explicit.  All
    statements go through an :class:`asyncio.Lock`, so operations on one
    connection execute one at a time, in invocation order, and nothing
    interleaves with an open transaction.

    Using one connection from several threads or event loops is not
    supported; callers must synchronize externally.

    Parameters:
        config: Store configuration (path, pragmas, schema bootstrap).
    """

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        self._schema = TableSchema(table=config.table)
        self._db: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()
        self._closed = False

    @classmethod
    async def open(cls, config: StoreConfig) -> StoreConnection:
        conn = cls(config)
        await conn.connect()
        return conn

    async def __aenter__(self) -> StoreConnection:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    @property
    def schema(self) -> TableSchema:
        return self._schema

    @property
    def config(self) -> StoreConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    # ── lifecycle ────────────────────────────────────────────

    async def connect(self) -> None:
        """Open the engine handle.  No-op if already open."""
        async with self._lock:
            await self._ensure_open("connect")

    async def close(self) -> None:
        """Release the engine handle.  Safe to call more than once."""
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            if self._db is not None:
                db, self._db = self._db, None
                await db.close()
                logger.debug("Closed store %s", self._config.path)

    async def _ensure_open(self, operation: str) -> aiosqlite.Connection:
        # Caller holds the lock
        if self._closed:
            raise StoreClosedError(operation)
        if self._db is not None:
            return self._db
        try:
            db = await aiosqlite.connect(self._config.path, isolation_level=None)
        except sqlite3.Error as exc:
            raise StoreError(operation, str(exc)) from exc
        try:
            await self._configure(db)
        except sqlite3.Error as exc:
            await db.close()
            raise StoreError(operation, str(exc)) from exc
        self._db = db
        logger.debug("Opened store %s (table=%s)", self._config.path, self._config.table)
        return db

    async def _configure(self, db: aiosqlite.Connection) -> None:
        cursor = await db.execute(f"PRAGMA journal_mode={self._config.journal_mode}")
        row = await cursor.fetchone()
        if row is not None and str(row[0]).lower() != self._config.journal_mode:
            # in-memory databases always report "memory"
            logger.debug(
                "journal_mode=%s requested, engine reports %s", self._config.journal_mode, row[0]
            )
        await db.execute(f"PRAGMA synchronous={self._config.synchronous}")
        await db.execute(f"PRAGMA busy_timeout={self._config.busy_timeout_ms}")
        if self._config.create_schema:
            await db.execute(self._schema.create_table)

    # ── execution ────────────────────────────────────────────

    @asynccontextmanager
    async def transaction(self, operation: str) -> AsyncIterator[aiosqlite.Connection]:
        """Run the enclosed statements atomically.

        Commits when the block exits normally.  Any exception rolls the
        transaction back before propagating; engine errors are re-raised
        as :class:`StoreError`.
        """
        async with self._lock:
            db = await self._ensure_open(operation)
            try:
                await db.execute("BEGIN")
                yield db
                await db.execute("COMMIT")
            except BaseException as exc:
                # the lock must not be released while the rollback is pending
                await _run_to_completion(self._rollback(db, operation))
                if isinstance(exc, sqlite3.Error):
                    raise StoreError(operation, str(exc)) from exc
                raise

    async def _rollback(self, db: aiosqlite.Connection, operation: str) -> None:
        if not db.in_transaction:
            return
        logger.warning("Rolling back '%s'", operation)
        try:
            await db.execute("ROLLBACK")
        except sqlite3.Error:
            logger.exception("Rollback of '%s' failed", operation)

    async def fetch_one(
        self, operation: str, sql: str, params: Iterable[Any] = ()
    ) -> tuple[Any, ...] | None:
        async with self._lock:
            db = await self._ensure_open(operation)
            try:
                cursor = await db.execute(sql, tuple(params))
                return await cursor.fetchone()
            except sqlite3.Error as exc:
                raise StoreError(operation, str(exc)) from exc

    async def fetch_all(
        self, operation: str, sql: str, params: Iterable[Any] = ()
    ) -> list[Any]:
        async with self._lock:
            db = await self._ensure_open(operation)
            try:
                cursor = await db.execute(sql, tuple(params))
                rows = await cursor.fetchall()
                return list(rows)
            except sqlite3.Error as exc:
                raise StoreError(operation, str(exc)) from exc


async def _run_to_completion(coro: Awaitable[None]) -> None:
    """Await *coro* to the end even if the caller is cancelled meanwhile.

    A cancellation received while waiting is re-raised once *coro* is done.
    """
    task = asyncio.ensure_future(coro)
    cancelled = False
    while not task.done():
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.cancelled():
                raise
            cancelled = True
    if cancelled:
        raise asyncio.CancelledError
