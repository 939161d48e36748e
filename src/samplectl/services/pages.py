"""Lazy, forward-only page sequence for listing operations.

The first page is fetched by the executor before a PageSequence exists, so
a listing that fails outright fails at ``execute()``. Every later page is
fetched only when the consumer advances past the previous one: the
sequence never holds more than one unconsumed page.

INVARIANT: A PageSequence is consumed once. Iterating it again after
exhaustion yields nothing; it never re-fetches.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass

from samplectl.transport.base import Row

logger = logging.getLogger(__name__)

PageFetcher = Callable[[str], tuple[Sequence[Row], str | None]]


@dataclass(frozen=True)
class Page:
    """One batch of rows and the token that continues after it."""

    index: int
    rows: tuple[Row, ...]
    next_page_token: str | None = None

    @property
    def is_last(self) -> bool:
        return not self.next_page_token


class PageSequence:
    """Iterator over :class:`Page` objects of one listing call.

    Args:
        operation: Name of the listing operation (for display and logs).
        first: The eagerly fetched first page.
        fetch: Called with a continuation token to fetch the following page.
        columns: Declared result column order, if the schema has one.
    """

    def __init__(
        self,
        operation: str,
        first: Page,
        fetch: PageFetcher,
        *,
        columns: tuple[str, ...] = (),
    ) -> None:
        self.operation = operation
        self.columns = columns
        self._fetch = fetch
        self._pending: Page | None = first
        self._last: Page = first
        self._exhausted = False
        self.pages_fetched = 1

    def __iter__(self) -> PageSequence:
        return self

    def __next__(self) -> Page:
        if self._pending is not None:
            page, self._pending = self._pending, None
            return page
        token = self._last.next_page_token
        if self._exhausted or not token:
            self._exhausted = True
            raise StopIteration
        rows, next_token = self._fetch(token)
        self.pages_fetched += 1
        page = Page(index=self._last.index + 1, rows=tuple(rows), next_page_token=next_token or None)
        logger.debug("Fetched page %d of %s (%d rows)", page.index, self.operation, len(page.rows))
        self._last = page
        return page

    def rows(self) -> Iterator[Row]:
        """Yield every row of every remaining page, in order."""
        for page in self:
            yield from page.rows

    def __repr__(self) -> str:
        return f"PageSequence({self.operation!r}, pages_fetched={self.pages_fetched})"
