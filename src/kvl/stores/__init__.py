"""Storage backends for typed key-value entries."""

from kvl.stores.base import KeyValueStore
from kvl.stores.memory import InMemoryStore
from kvl.stores.sqlite import SQLiteStore

__all__ = ["InMemoryStore", "KeyValueStore", "SQLiteStore"]
