"""StoreConfig — settings for opening an SQLite-backed store."""

from __future__ import annotations

import os
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from kvl.exceptions import StoreConfigError

DEFAULT_TABLE = "keyvaluestore"
DEFAULT_PAGE_SIZE = 512
DEFAULT_BUSY_TIMEOUT_MS = 5000

_IDENTIFIER_PATTERN = r"^[A-Za-z_][A-Za-z0-9_]*$"


class StoreConfig(BaseModel):
    """Store configuration.

    Attributes:
        path: Path to the SQLite database file.  Use ``":memory:"`` for an
              in-memory database (useful for testing).
        table: Table holding the entries.  Must be a plain SQL identifier.
        page_size: Rows fetched per page during a full scan.
        journal_mode: SQLite journal mode applied on open.
        synchronous: SQLite ``synchronous`` pragma applied on open.
        busy_timeout_ms: How long the engine waits on a locked database.
        create_schema: Create the entries table on open if missing.
    """

    path: str = "kvl.db"
    table: str = Field(default=DEFAULT_TABLE, pattern=_IDENTIFIER_PATTERN)
    page_size: int = Field(default=DEFAULT_PAGE_SIZE, gt=0)
    journal_mode: Literal["wal", "delete", "truncate", "memory"] = "wal"
    synchronous: Literal["off", "normal", "full"] = "normal"
    busy_timeout_ms: int = Field(default=DEFAULT_BUSY_TIMEOUT_MS, ge=0)
    create_schema: bool = True

    @field_validator("path")
    @classmethod
    def _path_not_directory(cls, value: str) -> str:
        if not value:
            raise ValueError("path must not be empty")
        if value != ":memory:" and os.path.isdir(value):
            raise ValueError(f"path points to a directory, expected file: {value}")
        return value

    @field_validator("journal_mode", "synchronous", mode="before")
    @classmethod
    def _lowercase_pragma(cls, value: Any) -> Any:
        # SQLite accepts pragma values in any case
        return value.lower() if isinstance(value, str) else value

    @classmethod
    def build(cls, **values: Any) -> StoreConfig:
        """Validate *values*, raising :class:`StoreConfigError` on failure."""
        try:
            return cls(**values)
        except ValidationError as exc:
            raise _config_error(exc) from exc

    @classmethod
    def from_env(cls, prefix: str = "KVL_") -> StoreConfig:
        """Build a config from ``{prefix}PATH``, ``{prefix}PAGE_SIZE``, etc.

        Unset variables fall back to the defaults.
        """
        values: dict[str, Any] = {}
        for name in cls.model_fields:
            raw = os.environ.get(f"{prefix}{name.upper()}")
            if raw is not None:
                values[name] = raw
        return cls.build(**values)


def _config_error(exc: ValidationError) -> StoreConfigError:
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or "config"
    return StoreConfigError(field, first["msg"])
