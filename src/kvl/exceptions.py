"""Custom exceptions for the kvl package."""

from __future__ import annotations


class KVError(Exception):
    """Base exception for all key-value store errors."""


class StoreError(KVError):
    """Raised when the storage engine fails while executing an operation."""

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        msg = f"Store error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class StoreClosedError(KVError):
    """Raised when an operation is attempted on a closed store or connection."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"Cannot '{operation}': store is closed")


class StoreConfigError(KVError):
    """Raised when a store is misconfigured."""

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"Invalid store configuration '{field}': {message}")


class EncodeError(KVError):
    """Raised when a serializer cannot encode a value."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Cannot encode value: {detail}")


class DecodeError(KVError):
    """Raised when stored bytes cannot be decoded back to a value."""

    def __init__(self, detail: str, key: bytes | None = None) -> None:
        self.detail = detail
        self.key = key
        msg = "Cannot decode value"
        if key is not None:
            msg += f" for key {key!r}"
        super().__init__(f"{msg}: {detail}")


class MissingEntryError(KVError, KeyError):
    """Raised when unwrapping a lookup that found nothing."""

    def __str__(self) -> str:
        return "Lookup found no entry"


class ScanStateError(KVError):
    """Raised when a forward-only scan is iterated a second time."""
