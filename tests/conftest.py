"""
Shared fixtures: an in-memory query provider and sample entities.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from gitprovider_scraper.models import (
    Branch,
    Connection,
    Organization,
    Page,
    Repository,
)
from gitprovider_scraper.vcs.base import BaseQueryProvider

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _key(parent) -> str:
    if isinstance(parent, Organization):
        return parent.login
    if isinstance(parent, Repository):
        return parent.name
    if isinstance(parent, Branch):
        return f"{parent.repository.name}:{parent.name}"
    raise TypeError(f"Unexpected parent: {parent!r}")


def split_pages(items: list, page_size: int, total_count: int | None = None) -> list[Page]:
    """Split items into pages whose cursors are the next page index."""
    if not items:
        return [Page(nodes=[], total_count=total_count)]
    pages = []
    chunks = [items[i : i + page_size] for i in range(0, len(items), page_size)]
    for index, chunk in enumerate(chunks):
        has_next = index < len(chunks) - 1
        pages.append(
            Page(
                nodes=list(chunk),
                end_cursor=str(index + 1) if has_next else None,
                has_next_page=has_next,
                total_count=total_count,
            )
        )
    return pages


class FakeProvider(BaseQueryProvider):
    """Serves prepared pages; can fail or stall on a chosen page."""

    def __init__(self, owner: Organization | Exception = Organization("liatrio")):
        self.owner = owner
        self.pages: dict[tuple[Connection, str], list[Page]] = {}
        self.failures: dict[tuple[Connection, str], tuple[int, Exception]] = {}
        self.delays: dict[tuple[Connection, str], float] = {}
        self.calls: list[tuple] = []
        self.closed = False

    def get_platform_name(self) -> str:
        return "github"

    def add(self, connection: Connection, key: str, items: list, page_size: int = 100):
        self.pages[(connection, key)] = split_pages(items, page_size)
        return self

    def add_pages(self, connection: Connection, key: str, pages: list[Page]):
        self.pages[(connection, key)] = pages
        return self

    def fail(self, connection: Connection, key: str, error: Exception, at_page: int = 0):
        self.failures[(connection, key)] = (at_page, error)
        return self

    def stall(self, connection: Connection, key: str, seconds: float):
        self.delays[(connection, key)] = seconds
        return self

    async def resolve_owner(self, login: str) -> Organization:
        self.calls.append(("owner", login))
        if isinstance(self.owner, Exception):
            raise self.owner
        return self.owner

    async def fetch_page(self, connection, parent, cursor, page_size, **options):
        key = (connection, _key(parent))
        self.calls.append((connection, key[1], cursor, page_size, options))
        index = 0 if cursor is None else int(cursor)

        if key in self.delays:
            await asyncio.sleep(self.delays[key])
        failure = self.failures.get(key)
        if failure is not None and failure[0] == index:
            raise failure[1]

        pages = self.pages.get(key, [Page(nodes=[])])
        return pages[index]

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def paged():
    return split_pages


@pytest.fixture
def repo1() -> Repository:
    return Repository(id="R_1", name="repo1", owner="liatrio", default_branch="main")
