"""Cursor pagination over provider connections."""

from typing import Awaitable, Callable, Generic, TypeVar

from gitprovider_scraper.models import Page

T = TypeVar("T")

PageFetcher = Callable[[str | None], Awaitable[Page[T]]]


class PaginationError(Exception):
    """A page fetch failed; carries the items merged before the failure."""

    def __init__(self, items: list, cursor: str | None, cause: BaseException):
        super().__init__(str(cause))
        self.items = items
        self.cursor = cursor
        self.cause = cause


class PageCollector(Generic[T]):
    """Merges pages into one ordered, append-only collection."""

    def __init__(self) -> None:
        self.items: list[T] = []
        self.total_count: int | None = None
        self.pages = 0

    def merge(self, page: Page[T]) -> None:
        self.items.extend(page.nodes)
        self.pages += 1
        if page.total_count is not None:
            self.total_count = page.total_count


async def paginate(
    fetch: PageFetcher[T], limit: int | None = None
) -> PageCollector[T]:
    """
    Walk a connection from the first page until has_next_page is false.

    Args:
        fetch: Coroutine function taking a cursor (None for the first page).
        limit: Stop once this many items were merged. Only used for windowed
            connections such as commit history; connections that are counted
            are always walked to the end.

    Returns:
        PageCollector with all merged items in page order.

    Raises:
        PaginationError: If any page fetch fails. The exception carries the
            items merged so far and the cursor that failed.
    """
    collector: PageCollector[T] = PageCollector()
    cursor: str | None = None
    while True:
        try:
            page = await fetch(cursor)
        except Exception as e:
            raise PaginationError(collector.items, cursor, e) from e

        collector.merge(page)
        if limit is not None and len(collector.items) >= limit:
            del collector.items[limit:]
            return collector
        if not page.has_next_page:
            return collector
        cursor = page.end_cursor

