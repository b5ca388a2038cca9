# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Data transfer objects for runner input/output.

These Pydantic models define the JSON contract of
``python -m kvl.runner``.  Keys travel as strings in the chosen
``key_encoding``; values are plain JSON.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator

from kvl.config import StoreConfig

OperationName = Literal[
    "add",
    "upsert",
    "update",
    "delete",
    "get",
    "exists",
    "count",
    "scan",
    "add_many",
    "upsert_many",
    "update_many",
    "delete_many",
]

_KEYED = {"add", "upsert", "update", "delete", "get", "exists"}
_BATCH_ENTRIES = {"add_many", "upsert_many", "update_many"}


class EntrySchema(BaseModel):
    """Single key/value pair.

    Attributes:
        key: Key string in the request's ``key_encoding``
        value: JSON value
    """

    key: str
    value: Any = None


class OperationSchema(BaseModel):
    """One store operation to execute.

    Attributes:
        op: Operation name (e.g., "add", "scan", "upsert_many")
        key: Target key for single-entry operations
        value: Value for add/upsert/update
        entries: Pairs for add_many/upsert_many/update_many
        keys: Keys for delete_many
        page_size: Page size override for scan
    """

    op: OperationName
    key: str | None = None
    value: Any = None
    entries: list[EntrySchema] = Field(default_factory=list)
    keys: list[str] = Field(default_factory=list)
    page_size: int | None = Field(default=None, gt=0)

    @model_validator(mode="after")
    def _check_arguments(self) -> OperationSchema:
        if self.op in _KEYED and self.key is None:
            raise ValueError(f"operation '{self.op}' requires 'key'")
        if self.op in _BATCH_ENTRIES and not self.entries:
            raise ValueError(f"operation '{self.op}' requires 'entries'")
        if self.op == "delete_many" and not self.keys:
            raise ValueError("operation 'delete_many' requires 'keys'")
        return self


class RunnerInput(BaseModel):
    """Complete input read from stdin.

    Attributes:
        store: Store configuration (path, table, pragmas)
        key_encoding: How keys are written as strings ("utf-8" or "base64")
        operations: Operations to run, in order
    """

    store: StoreConfig = Field(default_factory=StoreConfig)
    key_encoding: Literal["utf-8", "base64"] = "utf-8"
    operations: list[OperationSchema] = Field(default_factory=list)


class OperationResult(BaseModel):
    """Outcome of one operation.

    Attributes:
        op: Operation name
        found: Whether the key was present (get/exists)
        value: Decoded value (get)
        count: Number of entries (count) or rows emitted (scan)
        entries: Emitted pairs (scan)
    """

    op: str
    found: bool | None = None
    value: Any = None
    count: int | None = None
    entries: list[EntrySchema] | None = None


class RunnerOutput(BaseModel):
    """Complete output written to stdout.

    The runner always outputs valid JSON matching this schema,
    even on errors.

    Attributes:
        success: Whether every operation completed
        results: One result per completed operation
        error: Error message (on failure)
        error_type: Error class name (on failure)
    """

    success: bool
    results: list[OperationResult] = Field(default_factory=list)
    error: str = ""
    error_type: str = ""
