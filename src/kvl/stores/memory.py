"""InMemoryStore — zero-config, dict-backed storage for development and testing."""

from __future__ import annotations

import bisect
import itertools
from collections.abc import Iterable, Sequence
from typing import Any, TypeVar

from kvl.config import DEFAULT_PAGE_SIZE
from kvl.exceptions import DecodeError, StoreClosedError
from kvl.result import Lookup
from kvl.scanner import PaginatedScanner
from kvl.serializers import JsonSerializer, Serializer
from kvl.stores.base import Entries, KeyValueStore, normalize_entries, normalize_key

T = TypeVar("T")


class InMemoryStore(KeyValueStore[T]):
    """In-memory store using a dict.  Data is lost on process exit.

    Values still go through the serializer, so what comes back from
    ``get`` is a decoded copy, exactly as with :class:`SQLiteStore`.
    Each entry carries an ordering token like an SQLite row id, and a
    token-ordered index lets a scan page start right after its cursor.
    """

    def __init__(
        self,
        serializer: Serializer[T] | None = None,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        self._serializer: Serializer[T] = serializer or JsonSerializer()
        self.page_size = page_size
        self._data: dict[bytes, tuple[int, bytes]] = {}
        # ascending tokens of live entries, and the key each one belongs to
        self._order: list[int] = []
        self._by_token: dict[int, bytes] = {}
        self._tokens = itertools.count(1)
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def close(self) -> None:
        self._closed = True
        self._data = {}
        self._order = []
        self._by_token = {}

    # ── single-entry writes ──────────────────────────────────

    async def add(self, key: bytes, value: T) -> None:
        entry = self._prepare(key, value)
        self._check_open("add")
        self._add(entry)

    async def upsert(self, key: bytes, value: T) -> None:
        entry = self._prepare(key, value)
        self._check_open("upsert")
        self._upsert(entry)

    async def update(self, key: bytes, value: T) -> None:
        entry = self._prepare(key, value)
        self._check_open("update")
        self._update(entry)

    async def delete(self, key: bytes) -> None:
        key = normalize_key(key)
        self._check_open("delete")
        self._delete(key)

    # ── batch writes ─────────────────────────────────────────
    #
    # Every key is validated and every value encoded before the first
    # entry is applied, and applying never awaits, so a batch lands whole.

    async def add_many(self, entries: Entries[T]) -> None:
        prepared = self._prepare_all(entries)
        self._check_open("add_many")
        for entry in prepared:
            self._add(entry)

    async def upsert_many(self, entries: Entries[T]) -> None:
        prepared = self._prepare_all(entries)
        self._check_open("upsert_many")
        for entry in prepared:
            self._upsert(entry)

    async def update_many(self, entries: Entries[T]) -> None:
        prepared = self._prepare_all(entries)
        self._check_open("update_many")
        for entry in prepared:
            self._update(entry)

    async def delete_many(self, keys: Iterable[bytes]) -> None:
        prepared = [normalize_key(key) for key in keys]
        self._check_open("delete_many")
        for key in prepared:
            self._delete(key)

    # ── reads ────────────────────────────────────────────────

    async def get(self, key: bytes) -> Lookup[T]:
        key = normalize_key(key)
        self._check_open("get")
        row = self._data.get(key)
        if row is None:
            return Lookup.miss()
        return Lookup.hit(self._decode(key, row[1]))

    async def exists(self, key: bytes) -> bool:
        key = normalize_key(key)
        self._check_open("exists")
        return key in self._data

    async def count(self) -> int:
        self._check_open("count")
        return len(self._data)

    def scan(self, page_size: int | None = None) -> PaginatedScanner[T]:
        self._check_open("scan")
        return PaginatedScanner(
            self._fetch_page,
            self._decode,
            self.page_size if page_size is None else page_size,
        )

    async def _fetch_page(self, cursor: int, limit: int) -> Sequence[Sequence[Any]]:
        self._check_open("scan")
        start = bisect.bisect_right(self._order, cursor)
        rows = []
        for token in self._order[start : start + limit]:
            key = self._by_token[token]
            rows.append((token, key, self._data[key][1]))
        return rows

    # ── per-entry operations ─────────────────────────────────

    def _add(self, entry: tuple[bytes, bytes]) -> None:
        key, payload = entry
        if key not in self._data:
            self._insert(key, payload)

    def _upsert(self, entry: tuple[bytes, bytes]) -> None:
        key, payload = entry
        if key in self._data:
            self._data[key] = (self._data[key][0], payload)
        else:
            self._insert(key, payload)

    def _update(self, entry: tuple[bytes, bytes]) -> None:
        key, payload = entry
        if key in self._data:
            self._data[key] = (self._data[key][0], payload)

    def _delete(self, key: bytes) -> None:
        row = self._data.pop(key, None)
        if row is None:
            return
        token = row[0]
        del self._by_token[token]
        del self._order[bisect.bisect_left(self._order, token)]

    def _insert(self, key: bytes, payload: bytes) -> None:
        # tokens only grow, so appending keeps the index sorted
        token = next(self._tokens)
        self._data[key] = (token, payload)
        self._order.append(token)
        self._by_token[token] = key

    # ── helpers ──────────────────────────────────────────────

    def _check_open(self, operation: str) -> None:
        if self._closed:
            raise StoreClosedError(operation)

    def _prepare(self, key: bytes, value: T) -> tuple[bytes, bytes]:
        return normalize_key(key), self._serializer.encode(value)

    def _prepare_all(self, entries: Entries[T]) -> list[tuple[bytes, bytes]]:
        return [
            (key, self._serializer.encode(value)) for key, value in normalize_entries(entries)
        ]

    def _decode(self, key: bytes, payload: bytes) -> T:
        try:
            return self._serializer.decode(payload)
        except DecodeError as exc:
            raise DecodeError(exc.detail, key=key) from exc
