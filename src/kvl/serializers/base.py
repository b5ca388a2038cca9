"""Serializer protocol — converts typed values to and from stored bytes."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, TypeVar

T = TypeVar("T")


class Serializer(ABC, Generic[T]):
    """Abstract base for value serializers.

    A store never inspects values; it hands them to its serializer and
    persists whatever bytes come back.

    Implementations must raise :class:`~kvl.exceptions.EncodeError` or
    :class:`~kvl.exceptions.DecodeError` on failure rather than return a
    wrong value.
    """

    @abstractmethod
    def encode(self, value: T) -> bytes:
        """Return the byte payload for *value*."""
        ...

    @abstractmethod
    def decode(self, payload: bytes) -> T:
        """Rebuild a value from a payload produced by :meth:`encode`."""
        ...
