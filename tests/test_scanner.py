"""Tests for PaginatedScanner against a fake page source."""

import pytest

from kvl import PaginatedScanner, ScanStateError
from kvl.scanner import BEFORE_FIRST


class FakeTable:
    """Rows as ``(token, key, payload)`` with a recorded query log."""

    def __init__(self, tokens):
        self.rows = [(t, f"k{t}".encode(), str(t).encode()) for t in tokens]
        self.queries = []

    async def fetch_page(self, cursor, limit):
        self.queries.append((cursor, limit))
        return [row for row in self.rows if row[0] > cursor][:limit]


def decode(key, payload):
    return int(payload)


async def test_keyset_cursor_follows_last_token():
    table = FakeTable([1, 2, 5, 9, 10])
    scanner = PaginatedScanner(table.fetch_page, decode, page_size=2)

    values = [v async for _, v in scanner]

    assert values == [1, 2, 5, 9, 10]
    assert table.queries == [(BEFORE_FIRST, 2), (2, 2), (9, 2), (10, 2)]
    assert scanner.pages_fetched == 4


async def test_empty_table_issues_one_query():
    table = FakeTable([])
    scanner = PaginatedScanner(table.fetch_page, decode, page_size=512)
    assert [entry async for entry in scanner] == []
    assert table.queries == [(BEFORE_FIRST, 512)]


async def test_short_last_page_still_checks_for_more():
    table = FakeTable(range(1, 4))
    scanner = PaginatedScanner(table.fetch_page, decode, page_size=2)
    assert [k async for k, _ in scanner] == [b"k1", b"k2", b"k3"]
    assert scanner.pages_fetched == 3


async def test_decode_is_lazy():
    calls = []

    def tracking_decode(key, payload):
        calls.append(key)
        return payload

    table = FakeTable([1, 2, 3])
    scanner = PaginatedScanner(table.fetch_page, tracking_decode, page_size=10)
    aiter_ = scanner.__aiter__()
    await aiter_.__anext__()
    assert calls == [b"k1"]


async def test_second_iteration_raises():
    scanner = PaginatedScanner(FakeTable([1]).fetch_page, decode)
    async for _ in scanner:
        pass
    with pytest.raises(ScanStateError):
        scanner.__aiter__()


async def test_exhausted_scanner_stays_exhausted():
    table = FakeTable([1])
    scanner = PaginatedScanner(table.fetch_page, decode)
    async for _ in scanner:
        pass
    with pytest.raises(StopAsyncIteration):
        await scanner.__anext__()
    assert len(table.queries) == 2


@pytest.mark.parametrize("page_size", [0, -1])
def test_page_size_must_be_positive(page_size):
    with pytest.raises(ValueError):
        PaginatedScanner(FakeTable([]).fetch_page, decode, page_size=page_size)
