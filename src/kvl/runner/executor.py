# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Executor for running store operations described in JSON.

Orchestrates the full execution flow:
1. Create store from configuration
2. Run each operation in order
3. Translate results to the output schema
4. Close the store
"""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any

from kvl.exceptions import KVError
from kvl.serializers import JsonSerializer
from kvl.stores import KeyValueStore, SQLiteStore

from .schema import EntrySchema, OperationResult, OperationSchema, RunnerInput, RunnerOutput

logger = logging.getLogger(__name__)


class ExecutionError(Exception):
    """Raised when an operation cannot be executed."""

    pass


class KeyCodec:
    """Converts keys between their JSON string form and raw bytes."""

    def __init__(self, encoding: str) -> None:
        self.encoding = encoding

    def to_bytes(self, key: str) -> bytes:
        if self.encoding == "base64":
            try:
                return base64.b64decode(key, validate=True)
            except binascii.Error as e:
                raise ExecutionError(f"Invalid base64 key {key!r}: {e}") from e
        return key.encode("utf-8")

    def to_text(self, key: bytes) -> str:
        if self.encoding == "base64":
            return base64.b64encode(key).decode("ascii")
        return key.decode("utf-8", errors="backslashreplace")


class Executor:
    """Executes store operations from a :class:`RunnerInput`.

    The executor is designed for dependency injection to support testing.
    Pass a store to the constructor to override store creation.

    Example:
        executor = Executor()
        output = await executor.execute(input_data)

        # For testing with an in-memory store:
        executor = Executor(store=InMemoryStore())
    """

    def __init__(self, store: KeyValueStore[Any] | None = None) -> None:
        """Initialize executor with optional injected store.

        Args:
            store: Optional store to use instead of creating from config.
                   The executor never closes an injected store.
        """
        self._injected_store = store

    async def execute(self, input_data: RunnerInput) -> RunnerOutput:
        """Run every operation, stopping at the first failure.

        Args:
            input_data: Complete runner input

        Returns:
            RunnerOutput with per-operation results, or error details

        Note:
            This method catches all exceptions and returns them as
            RunnerOutput errors, ensuring valid JSON is always returned.
        """
        results: list[OperationResult] = []
        try:
            await self._execute_internal(input_data, results)
        except ExecutionError as e:
            return self._failure(results, str(e), "ExecutionError")
        except KVError as e:
            return self._failure(results, str(e), type(e).__name__)
        except Exception as e:
            logger.exception("Unexpected error while running operations")
            return self._failure(results, str(e), type(e).__name__)
        return RunnerOutput(success=True, results=results)

    async def _execute_internal(
        self, input_data: RunnerInput, results: list[OperationResult]
    ) -> None:
        """Internal execution logic.

        Separated from execute() to allow exception propagation
        for testing while execute() catches all errors.
        """
        store = self._injected_store or SQLiteStore(
            serializer=JsonSerializer(), config=input_data.store
        )
        owns_store = self._injected_store is None
        codec = KeyCodec(input_data.key_encoding)

        try:
            for operation in input_data.operations:
                results.append(await self._run_operation(store, operation, codec))
        finally:
            if owns_store:
                await store.close()

    async def _run_operation(
        self,
        store: KeyValueStore[Any],
        operation: OperationSchema,
        codec: KeyCodec,
    ) -> OperationResult:
        """Dispatch one operation to the store.

        Args:
            store: Target store
            operation: Validated operation
            codec: Key codec for this request

        Returns:
            OperationResult for the operation
        """
        op = operation.op
        key = codec.to_bytes(operation.key) if operation.key is not None else b""
        entries = [(codec.to_bytes(e.key), e.value) for e in operation.entries]

        if op == "add":
            await store.add(key, operation.value)
        elif op == "upsert":
            await store.upsert(key, operation.value)
        elif op == "update":
            await store.update(key, operation.value)
        elif op == "delete":
            await store.delete(key)
        elif op == "get":
            lookup = await store.get(key)
            return OperationResult(op=op, found=lookup.found, value=lookup.value)
        elif op == "exists":
            return OperationResult(op=op, found=await store.exists(key))
        elif op == "count":
            return OperationResult(op=op, count=await store.count())
        elif op == "scan":
            emitted = [
                EntrySchema(key=codec.to_text(k), value=v)
                async for k, v in store.scan(operation.page_size)
            ]
            return OperationResult(op=op, count=len(emitted), entries=emitted)
        elif op == "add_many":
            await store.add_many(entries)
        elif op == "upsert_many":
            await store.upsert_many(entries)
        elif op == "update_many":
            await store.update_many(entries)
        elif op == "delete_many":
            await store.delete_many(codec.to_bytes(k) for k in operation.keys)
        else:  # pragma: no cover - guarded by the schema
            raise ExecutionError(f"Unknown operation '{op}'")

        return OperationResult(op=op)

    def _failure(
        self, results: list[OperationResult], error: str, error_type: str
    ) -> RunnerOutput:
        return RunnerOutput(
            success=False,
            results=results,
            error=error,
            error_type=error_type,
        )
