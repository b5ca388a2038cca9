"""PaginatedScanner — streams a whole table page by page.

Pages are fetched with keyset pagination: each query asks for rows whose
ordering token is above the last token already emitted, so moving to the
next page costs the same no matter how far into the table the scan is.

The scan reads the live table, not a snapshot.  Rows inserted while a
scan is running are picked up if their token lies above the cursor, and
rows deleted before the cursor reaches them are skipped.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Generic, TypeVar

from kvl.config import DEFAULT_PAGE_SIZE
from kvl.exceptions import ScanStateError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ``fetch_page(cursor, limit)`` returns up to *limit* ``(token, key, payload)``
# rows with ``token > cursor``, in ascending token order.
PageFetcher = Callable[[int, int], Awaitable[Sequence[Sequence[Any]]]]

# Lowest possible SQLite rowid, so the first page starts at the beginning
BEFORE_FIRST = -(2**63)


class PaginatedScanner(Generic[T]):
    """Forward-only async iterator over every ``(key, value)`` in a table.

    A scanner can be iterated once.  Starting a second pass raises
    :class:`ScanStateError`; ask the store for a fresh scanner instead.

    Parameters:
        fetch_page: Page source, see :data:`PageFetcher`.
        decode:     Called as ``decode(key, payload)`` for each row, lazily,
                    right before the row is emitted.
        page_size:  Rows per page.
    """

    def __init__(
        self,
        fetch_page: PageFetcher,
        decode: Callable[[bytes, bytes], T],
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> None:
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self._fetch_page = fetch_page
        self._decode = decode
        self.page_size = page_size
        self.pages_fetched = 0
        self._cursor = BEFORE_FIRST
        self._buffer: deque[tuple[bytes, bytes]] = deque()
        self._started = False
        self._exhausted = False

    def __aiter__(self) -> PaginatedScanner[T]:
        if self._started:
            raise ScanStateError("Scan already started; request a new scan to read again")
        self._started = True
        return self

    async def __anext__(self) -> tuple[bytes, T]:
        while not self._buffer:
            if self._exhausted:
                raise StopAsyncIteration
            await self._next_page()
        key, payload = self._buffer.popleft()
        return key, self._decode(key, payload)

    async def _next_page(self) -> None:
        rows = await self._fetch_page(self._cursor, self.page_size)
        self.pages_fetched += 1
        logger.debug(
            "Fetched page %d (%d rows) after token %d",
            self.pages_fetched,
            len(rows),
            self._cursor,
        )
        if not rows:
            self._exhausted = True
            return
        self._cursor = rows[-1][0]
        self._buffer.extend((bytes(key), bytes(payload)) for _, key, payload in rows)
