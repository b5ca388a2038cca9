"""JsonSerializer — JSON documents stored as UTF-8 text."""

from __future__ import annotations

import json
from typing import Any

from kvl.exceptions import DecodeError, EncodeError
from kvl.serializers.base import Serializer


class JsonSerializer(Serializer[Any]):
    """Serializes any JSON-compatible value (dicts, lists, str, numbers, ``None``).

    Parameters:
        sort_keys: Emit object keys in sorted order, so equal documents
                   always produce equal bytes.
    """

    def __init__(self, *, sort_keys: bool = False) -> None:
        self.sort_keys = sort_keys

    def encode(self, value: Any) -> bytes:
        try:
            text = json.dumps(value, sort_keys=self.sort_keys, separators=(",", ":"))
        except (TypeError, ValueError) as exc:
            raise EncodeError(str(exc)) from exc
        return text.encode("utf-8")

    def decode(self, payload: bytes) -> Any:
        try:
            return json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DecodeError(str(exc)) from exc
