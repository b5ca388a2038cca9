"""kvl — a typed key-value store over SQLite.

Keys are raw bytes, values are anything a serializer can encode.  ``add``
never overwrites, ``update`` never creates, ``upsert`` always writes, and
every batch runs in one all-or-nothing transaction.
"""

from kvl.config import StoreConfig
from kvl.connection import StoreConnection
from kvl.exceptions import (
    DecodeError,
    EncodeError,
    KVError,
    MissingEntryError,
    ScanStateError,
    StoreClosedError,
    StoreConfigError,
    StoreError,
)
from kvl.result import Lookup
from kvl.scanner import PaginatedScanner
from kvl.schema import TableSchema
from kvl.serializers import BytesSerializer, JsonSerializer, PydanticSerializer, Serializer
from kvl.stores import InMemoryStore, KeyValueStore, SQLiteStore

__all__ = [
    "BytesSerializer",
    "DecodeError",
    "EncodeError",
    "InMemoryStore",
    "JsonSerializer",
    "KVError",
    "KeyValueStore",
    "Lookup",
    "MissingEntryError",
    "PaginatedScanner",
    "PydanticSerializer",
    "SQLiteStore",
    "ScanStateError",
    "Serializer",
    "StoreClosedError",
    "StoreConfig",
    "StoreConfigError",
    "StoreConnection",
    "StoreError",
    "TableSchema",
]
