"""Lookup — the outcome of a single point read."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from kvl.exceptions import MissingEntryError

T = TypeVar("T")

_UNSET: Any = object()


@dataclass(frozen=True)
class Lookup(Generic[T]):
    """Immutable result returned by a store's ``get``.

    A miss is a normal outcome, not an error.  Stored values may
    legitimately be ``None`` (e.g. JSON ``null``), which is why presence
    is tracked separately from the value.

    Attributes:
        found: ``True`` if the key was present.
        value: The decoded value (``None`` on a miss).
    """

    found: bool
    value: T | None = None

    # ── Factory helpers ──────────────────────────────────────

    @staticmethod
    def hit(value: T) -> Lookup[T]:
        return Lookup(found=True, value=value)

    @staticmethod
    def miss() -> Lookup[Any]:
        return _MISS

    # ── Accessors ────────────────────────────────────────────

    def unwrap(self) -> T:
        """Return the value, raising :class:`MissingEntryError` on a miss."""
        if not self.found:
            raise MissingEntryError()
        return self.value  # type: ignore[return-value]

    def value_or(self, default: T = _UNSET) -> T | None:
        """Return the value, or *default* (``None`` if omitted) on a miss."""
        if self.found:
            return self.value
        return None if default is _UNSET else default

    def __bool__(self) -> bool:
        return self.found


_MISS: Lookup[Any] = Lookup(found=False)
