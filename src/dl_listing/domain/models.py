"""Cursor and filter models shared by every paginated list."""

from dataclasses import dataclass, field, replace
from datetime import date
from typing import Generic, TypeVar

from src.dl_common.enums import SortKey, SortOrder

T = TypeVar("T")


@dataclass(frozen=True)
class ListFilters:
    """Active filter snapshot. status=None means 'any status the actor may see'."""

    start_date: date | None = None
    end_date: date | None = None
    status: str | None = None
    sort_key: SortKey = SortKey.DATE
    sort_order: SortOrder = SortOrder.DESC

    def with_status(self, status: str | None) -> "ListFilters":
        return replace(self, status=status)


@dataclass(frozen=True)
class PageResult(Generic[T]):
    items: list[T]
    page: int
    total_pages: int


@dataclass
class ListCursor(Generic[T]):
    """Per-list pagination state.

    Invariant: in_flight is True for at most one fetch at a time.
    entries preserves first-seen (fetch) order; keys are entry ids.
    """

    page: int = 1
    has_more: bool = True
    in_flight: bool = False
    entries: dict[str, T] = field(default_factory=dict)
    filters: ListFilters = field(default_factory=ListFilters)
    loaded: bool = False
