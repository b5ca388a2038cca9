"""BytesSerializer — stores byte values unchanged."""

from __future__ import annotations

from kvl.exceptions import EncodeError
from kvl.serializers.base import Serializer


class BytesSerializer(Serializer[bytes]):
    """Identity serializer for ``bytes``-like values."""

    def encode(self, value: bytes) -> bytes:
        if not isinstance(value, (bytes, bytearray, memoryview)):
            raise EncodeError(f"expected bytes, got {type(value).__name__}")
        return bytes(value)

    def decode(self, payload: bytes) -> bytes:
        return bytes(payload)
