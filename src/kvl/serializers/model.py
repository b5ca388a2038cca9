"""PydanticSerializer — typed values validated through a pydantic ``TypeAdapter``."""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from kvl.exceptions import DecodeError, EncodeError
from kvl.serializers.base import Serializer

T = TypeVar("T")


class PydanticSerializer(Serializer[T], Generic[T]):
    """Serializes any type pydantic understands, as JSON bytes.

    Encoding rejects a value that is not an instance of *type_* with
    :class:`EncodeError`, so nothing undecodable is ever written.  Decoding
    validates the payload against *type_*, so bytes written for a different
    shape fail loudly with :class:`DecodeError` instead of producing a
    half-filled value.

    Example:
        class User(BaseModel):
            name: str
            age: int

        serializer = PydanticSerializer(User)
        serializer.decode(serializer.encode(User(name="ada", age=36)))

    Parameters:
        type_: Target type, e.g. a ``BaseModel`` subclass or ``list[int]``.
    """

    def __init__(self, type_: Any) -> None:
        self.type_ = type_
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def encode(self, value: T) -> bytes:
        try:
            # a value of the wrong type is an error, not a serialization warning
            return self._adapter.dump_json(value, warnings="error")
        except (TypeError, ValueError) as exc:
            raise EncodeError(str(exc)) from exc

    def decode(self, payload: bytes) -> T:
        try:
            return self._adapter.validate_json(payload)
        except ValidationError as exc:
            raise DecodeError(str(exc)) from exc
