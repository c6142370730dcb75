"""Lazy, page-at-a-time iteration over search results."""

import logging
from collections import deque
from typing import Any, Callable, Generic, Protocol, TypeVar

from .models import SEARCH_PAGE_SIZE, SearchResults

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SearchPager(Protocol):
    def search_page(self, query: Any, page: int, per_page: int) -> SearchResults: ...


class PaginatedSearch(Generic[T]):
    """Forward-only iterator over every item of a paged search.

    A page is requested only when the consumer asks for an item past the
    end of the previous page, so at most one request happens per page.
    Iteration stops after a short or empty page. When a page fetch fails
    the error is raised from ``next()`` and the iterator is exhausted from
    then on; nothing is retried.

    Pages the backend flags as ``incomplete_results`` are still yielded.
    Their page numbers are kept in ``incomplete_pages`` and passed to
    ``on_incomplete`` if given.
    """

    def __init__(
        self,
        client: SearchPager,
        query: Any,
        per_page: int = SEARCH_PAGE_SIZE,
        on_incomplete: Callable[[int, SearchResults], None] | None = None,
    ):
        if per_page < 1:
            raise ValueError(f"per_page must be positive, got {per_page}")
        self._client = client
        self._query = query
        self.per_page = per_page
        self._on_incomplete = on_incomplete
        self._next_page = 1
        self._buffer: deque[T] = deque()
        self._exhausted = False
        self.requests = 0
        self.incomplete_pages: list[int] = []

    def __iter__(self) -> "PaginatedSearch[T]":
        return self

    def __next__(self) -> T:
        while not self._buffer:
            if self._exhausted:
                raise StopIteration
            self._fetch_next_page()
        return self._buffer.popleft()

    def __repr__(self) -> str:
        return (
            f"PaginatedSearch(client={self._client!r}, next_page={self._next_page}, "
            f"exhausted={self._exhausted})"
        )

    @property
    def exhausted(self) -> bool:
        return self._exhausted and not self._buffer

    @property
    def incomplete(self) -> bool:
        """True once any fetched page was truncated by the backend."""
        return bool(self.incomplete_pages)

    def _fetch_next_page(self) -> None:
        page = self._next_page
        self.requests += 1
        try:
            results = self._client.search_page(self._query, page=page, per_page=self.per_page)
        except Exception:
            self._exhausted = True
            raise

        self._next_page += 1
        if results.incomplete_results:
            # Not followed up: the missing entries are simply absent.
            logger.warning("Incomplete results received from search (page %d)", page)
            self.incomplete_pages.append(page)
            if self._on_incomplete is not None:
                try:
                    self._on_incomplete(page, results)
                except Exception:
                    self._exhausted = True
                    raise
        if len(results.items) < self.per_page:
            self._exhausted = True
        self._buffer.extend(results.items)
