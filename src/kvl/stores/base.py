"""KeyValueStore protocol — typed CRUD over byte keys."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterable, Mapping
from typing import Any, Generic, TypeVar, Union

from kvl.result import Lookup

T = TypeVar("T")

Entries = Union[Iterable[tuple[bytes, T]], Mapping[bytes, T]]


class KeyValueStore(ABC, Generic[T]):
    """Abstract base for all stores.

    Keys are raw ``bytes`` compared byte for byte; values are any ``T``
    the store's serializer can handle.

    The write operations differ only in how they treat an existing key:

    * ``add`` inserts only when the key is absent and never overwrites.
    * ``update`` replaces only when the key is present and never creates.
    * ``upsert`` always writes.

    Each ``*_many`` variant applies the single-entry operation to every
    entry, in order, inside one transaction.  A batch is all-or-nothing:
    if any entry fails, none of them are kept.
    """

    @abstractmethod
    async def add(self, key: bytes, value: T) -> None:
        """Insert *value* if *key* is absent.  No-op if it already exists."""
        ...

    @abstractmethod
    async def upsert(self, key: bytes, value: T) -> None:
        """Insert or replace the value for *key*."""
        ...

    @abstractmethod
    async def update(self, key: bytes, value: T) -> None:
        """Replace the value for *key*.  No-op if the key does not exist."""
        ...

    @abstractmethod
    async def delete(self, key: bytes) -> None:
        """Delete *key*.  No-op if the key does not exist."""
        ...

    @abstractmethod
    async def get(self, key: bytes) -> Lookup[T]:
        """Return ``Lookup.hit(value)``, or ``Lookup.miss()`` if absent."""
        ...

    @abstractmethod
    async def exists(self, key: bytes) -> bool:
        """Return ``True`` if *key* is present."""
        ...

    @abstractmethod
    async def count(self) -> int:
        """Return the number of entries."""
        ...

    @abstractmethod
    def scan(self, page_size: int | None = None) -> AsyncIterator[tuple[bytes, T]]:
        """Return a fresh forward-only iterator over every ``(key, value)``.

        Entries come out in insertion order.  The iterator cannot be
        restarted; call ``scan()`` again for a new pass.
        """
        ...

    @abstractmethod
    async def add_many(self, entries: Entries[T]) -> None: ...

    @abstractmethod
    async def upsert_many(self, entries: Entries[T]) -> None: ...

    @abstractmethod
    async def update_many(self, entries: Entries[T]) -> None: ...

    @abstractmethod
    async def delete_many(self, keys: Iterable[bytes]) -> None: ...

    @abstractmethod
    async def close(self) -> None:
        """Release resources.  Safe to call more than once."""
        ...

    async def __aenter__(self) -> KeyValueStore[T]:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()


def normalize_key(key: Any) -> bytes:
    """Return *key* as ``bytes``, rejecting anything that is not bytes-like."""
    if isinstance(key, bytes):
        return key
    if isinstance(key, (bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"key must be bytes, got {type(key).__name__}")


def normalize_entries(entries: Entries[T]) -> list[tuple[bytes, T]]:
    """Materialize a batch, validating every key up front."""
    pairs = entries.items() if isinstance(entries, Mapping) else entries
    return [(normalize_key(key), value) for key, value in pairs]
