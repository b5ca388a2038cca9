"""Tests for Lookup."""

import pytest

from kvl import Lookup, MissingEntryError


def test_hit():
    r = Lookup.hit(42)
    assert r.found
    assert r
    assert r.value == 42
    assert r.unwrap() == 42


def test_miss():
    r = Lookup.miss()
    assert not r.found
    assert not r
    assert r.value is None


def test_unwrap_miss_raises():
    with pytest.raises(MissingEntryError):
        Lookup.miss().unwrap()


def test_missing_entry_is_a_key_error():
    with pytest.raises(KeyError):
        Lookup.miss().unwrap()


def test_value_or():
    assert Lookup.miss().value_or("fallback") == "fallback"
    assert Lookup.miss().value_or() is None
    assert Lookup.hit(None).value_or("fallback") is None


def test_hit_of_none_is_still_found():
    r = Lookup.hit(None)
    assert r.found
    assert r != Lookup.miss()


def test_frozen():
    r = Lookup.hit(1)
    with pytest.raises(AttributeError):
        r.value = 2  # type: ignore[misc]
