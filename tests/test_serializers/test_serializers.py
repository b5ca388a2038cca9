"""Tests for the bundled serializers."""

import pytest
from pydantic import BaseModel

from kvl import (
    BytesSerializer,
    DecodeError,
    EncodeError,
    JsonSerializer,
    PydanticSerializer,
    SQLiteStore,
)


class User(BaseModel):
    name: str
    age: int


# ── JsonSerializer ───────────────────────────────────────────


def test_json_encodes_compact_utf8():
    assert JsonSerializer().encode({"a": [1, "é"]}) == '{"a":[1,"\\u00e9"]}'.encode()


def test_json_sort_keys_gives_stable_bytes():
    s = JsonSerializer(sort_keys=True)
    assert s.encode({"b": 1, "a": 2}) == s.encode({"a": 2, "b": 1})


def test_json_rejects_unserializable():
    with pytest.raises(EncodeError):
        JsonSerializer().encode(object())


@pytest.mark.parametrize("payload", [b"{not json", b"\xff\xfe"])
def test_json_decode_failure(payload):
    with pytest.raises(DecodeError):
        JsonSerializer().decode(payload)


# ── BytesSerializer ──────────────────────────────────────────


def test_bytes_identity():
    s = BytesSerializer()
    assert s.encode(bytearray(b"\x00\x01")) == b"\x00\x01"
    assert s.decode(b"\x00\x01") == b"\x00\x01"


def test_bytes_rejects_text():
    with pytest.raises(EncodeError):
        BytesSerializer().encode("text")


# ── PydanticSerializer ───────────────────────────────────────


def test_model_roundtrip():
    s = PydanticSerializer(User)
    assert s.decode(s.encode(User(name="ada", age=36))) == User(name="ada", age=36)


def test_model_decode_validates_shape():
    with pytest.raises(DecodeError):
        PydanticSerializer(User).decode(b'{"name": "ada"}')


def test_model_rejects_wrong_type_on_encode():
    with pytest.raises(EncodeError):
        PydanticSerializer(int).encode("not an int")


def test_generic_type():
    s = PydanticSerializer(list[int])
    assert s.decode(b"[1,2,3]") == [1, 2, 3]


async def test_store_with_model_values(db_path):
    async with SQLiteStore(db_path, serializer=PydanticSerializer(User)) as store:
        await store.add(b"u1", User(name="ada", age=36))
        await store.add(b"u2", User(name="alan", age=41))
        users = [u async for _, u in store.scan()]
    assert [u.name for u in users] == ["ada", "alan"]


async def test_store_refuses_wrongly_typed_value(db_path):
    async with SQLiteStore(db_path, serializer=PydanticSerializer(int)) as store:
        with pytest.raises(EncodeError):
            await store.upsert(b"n", "not an int")
        assert await store.count() == 0
