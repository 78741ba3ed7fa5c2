"""PaginatedListCoordinator: cursor-based, deduplicating incremental fetches.

One instance per logical list. Rules:
  - page 1 replaces the accumulated entries; later pages are merged by id
    (entries already present are discarded, not re-appended), because the
    backing store's pages are not guaranteed disjoint across retries.
  - has_more = page < total_pages, from the response.
  - load_more() is dropped while a fetch is in flight or when nothing is left.
  - set_filters() resets to page 1 with an empty entry set before re-fetching.
    A fetch that was started under the previous filters is discarded when it
    lands, then the new filters are fetched; there is never more than one
    fetch in flight.
  - A failed fetch leaves page/has_more/entries untouched and re-raises.
"""

import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

from config.settings import settings
from src.dl_listing.domain.models import ListCursor, ListFilters, PageResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[[str, int, int, ListFilters], Awaitable[PageResult[T]]]


def _entry_id(entry: object) -> str:
    return entry.id  # type: ignore[attr-defined]


class PaginatedListCoordinator(Generic[T]):
    def __init__(
        self,
        name: str,
        subject_id: str,
        fetcher: Fetcher[T],
        key: Callable[[T], str] = _entry_id,
        page_size: int | None = None,
        filters: ListFilters | None = None,
    ) -> None:
        self.name = name
        self.subject_id = subject_id
        self._fetcher = fetcher
        self._key = key
        self._page_size = page_size or settings.LIST_PAGE_SIZE
        self._cursor: ListCursor[T] = ListCursor(filters=filters or ListFilters())
        self._generation = 0
        self._refetch_pending = False

    # ------------------------------------------------------------------
    # Read side
    # ------------------------------------------------------------------

    @property
    def cursor(self) -> ListCursor[T]:
        return self._cursor

    @property
    def entries(self) -> list[T]:
        """Accumulated entries in first-seen order."""
        return list(self._cursor.entries.values())

    @property
    def filters(self) -> ListFilters:
        return self._cursor.filters

    @property
    def is_loading(self) -> bool:
        return self._cursor.in_flight

    @property
    def has_more(self) -> bool:
        return self._cursor.has_more

    # ------------------------------------------------------------------
    # Fetching
    # ------------------------------------------------------------------

    async def fetch(self, page: int = 1, filters: ListFilters | None = None) -> bool:
        """Fetch one page. Returns False when dropped by the in-flight guard."""
        if page < 1:
            raise ValueError(f"page must be >= 1, got {page}")
        if page > 1 and filters is not None and filters != self._cursor.filters:
            raise ValueError("filters can only change on page 1; use set_filters()")
        if self._cursor.in_flight:
            logger.warning("%s: fetch(page=%d) dropped, a fetch is already in flight", self.name, page)
            return False

        active_filters = filters if filters is not None else self._cursor.filters
        generation = self._generation
        result: PageResult[T] | None = None
        self._cursor.in_flight = True
        try:
            result = await self._fetcher(self.subject_id, page, self._page_size, active_filters)
        except Exception:
            if generation == self._generation:
                raise
            logger.debug("%s: fetch under previous filters failed, ignoring", self.name)
        finally:
            self._cursor.in_flight = False

        if generation != self._generation or result is None:
            logger.debug("%s: discarding page %d fetched under previous filters", self.name, page)
            return await self._run_pending_refetch()

        self._apply(result, page, active_filters)
        return True

    async def load_more(self) -> bool:
        if not self._cursor.has_more or self._cursor.in_flight:
            logger.debug(
                "%s: load_more ignored (has_more=%s, in_flight=%s)",
                self.name,
                self._cursor.has_more,
                self._cursor.in_flight,
            )
            return False
        return await self.fetch(self._cursor.page + 1)

    async def refresh(self) -> bool:
        return await self.fetch(1)

    async def set_filters(self, filters: ListFilters) -> bool:
        """Reset to page 1 with a fresh entry set, then fetch under the new filters."""
        self._generation += 1
        self._cursor.page = 1
        self._cursor.has_more = True
        self._cursor.entries = {}
        self._cursor.filters = filters
        self._cursor.loaded = False
        if self._cursor.in_flight:
            self._refetch_pending = True
            logger.debug("%s: filter change queued behind in-flight fetch", self.name)
            return False
        return await self.fetch(1, filters)

    async def _run_pending_refetch(self) -> bool:
        if not self._refetch_pending:
            return False
        self._refetch_pending = False
        return await self.fetch(1, self._cursor.filters)

    def _apply(self, result: PageResult[T], page: int, filters: ListFilters) -> None:
        if page == 1:
            merged: dict[str, T] = {}
        else:
            merged = self._cursor.entries
        added = 0
        for item in result.items:
            entry_id = self._key(item)
            if entry_id in merged:
                continue
            merged[entry_id] = item
            added += 1

        self._cursor.entries = merged
        self._cursor.page = page
        self._cursor.has_more = page < result.total_pages
        self._cursor.filters = filters
        self._cursor.loaded = True
        logger.debug(
            "%s: page %d/%d applied, +%d new, %d total",
            self.name,
            page,
            result.total_pages,
            added,
            len(merged),
        )
