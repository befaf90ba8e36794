"""
Tests for cursor pagination.
"""

import asyncio

import pytest

from gitprovider_scraper.models import Page
from gitprovider_scraper.pagination import PaginationError, paginate


def _fetcher(pages: list[Page], calls: list, fail_at: int | None = None):
    async def fetch(cursor):
        calls.append(cursor)
        index = 0 if cursor is None else int(cursor)
        if index == fail_at:
            raise RuntimeError("boom")
        return pages[index]

    return fetch


@pytest.mark.parametrize("page_size", [1, 2, 3, 7, 100])
def test_paginate_is_page_size_invariant(paged, page_size):
    """Merging any number of pages yields every item in original order."""
    items = list(range(7))
    calls: list = []
    collector = asyncio.run(paginate(_fetcher(paged(items, page_size), calls)))
    assert collector.items == items
    assert collector.pages == len(calls)


def test_paginate_first_call_uses_empty_cursor(paged):
    calls: list = []
    asyncio.run(paginate(_fetcher(paged(["a", "b", "c"], 1), calls)))
    assert calls == [None, "1", "2"]


def test_paginate_empty_connection(paged):
    calls: list = []
    collector = asyncio.run(paginate(_fetcher(paged([], 10), calls)))
    assert collector.items == []
    assert calls == [None]


def test_paginate_follows_has_next_page_not_node_count():
    """An empty page with has_next_page set does not stop pagination."""
    pages = [
        Page(nodes=[1], end_cursor="1", has_next_page=True),
        Page(nodes=[], end_cursor="2", has_next_page=True),
        Page(nodes=[2], has_next_page=False),
    ]
    collector = asyncio.run(paginate(_fetcher(pages, [])))
    assert collector.items == [1, 2]


def test_paginate_keeps_total_count(paged):
    pages = paged([1, 2, 3], 2, total_count=3)
    collector = asyncio.run(paginate(_fetcher(pages, [])))
    assert collector.total_count == 3


def test_paginate_limit_truncates_window(paged):
    calls: list = []
    collector = asyncio.run(
        paginate(_fetcher(paged(list(range(10)), 3), calls), limit=4)
    )
    assert collector.items == [0, 1, 2, 3]
    assert calls == [None, "1"]


def test_paginate_failure_carries_merged_items_and_cursor(paged):
    pages = paged(["a", "b", "c", "d"], 2)
    with pytest.raises(PaginationError) as excinfo:
        asyncio.run(paginate(_fetcher(pages, [], fail_at=1)))
    assert excinfo.value.items == ["a", "b"]
    assert excinfo.value.cursor == "1"
    assert isinstance(excinfo.value.cause, RuntimeError)
