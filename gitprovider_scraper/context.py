"""
Per-cycle scrape context.

Holds everything that lives for exactly one scrape cycle: the wall-clock
reference time, the concurrency limit, the deadline, and the contributor
registry shared by all repositories.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, TypeVar

from gitprovider_scraper.models import Connection, Contributor, Page
from gitprovider_scraper.vcs.base import BaseQueryProvider, Parent

T = TypeVar("T")


class ContributorRegistry:
    """Contributor identifiers seen during one cycle.

    Tracks the distinct contributors across the whole organization. Collectors
    for different repositories add to it concurrently, so inserts hold a lock.
    """

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._organization: set[str] = set()

    async def add(self, contributors: list[Contributor]) -> None:
        async with self._lock:
            self._organization.update(contributor.id for contributor in contributors)

    def organization_count(self) -> int:
        return len(self._organization)


class ScrapeContext:
    """Cycle-scoped state and the gate every provider call goes through."""

    def __init__(
        self,
        provider: BaseQueryProvider,
        page_size: int = 100,
        concurrency: int = 8,
        call_timeout: float = 30.0,
        scrape_timeout: float | None = None,
        now: datetime | None = None,
    ):
        self.provider = provider
        self.page_size = page_size
        self.call_timeout = call_timeout
        self.now = now or datetime.now(timezone.utc)
        self.contributors = ContributorRegistry()
        self._semaphore = asyncio.Semaphore(concurrency)
        self._deadline = (
            time.monotonic() + scrape_timeout if scrape_timeout is not None else None
        )

    def remaining_time(self) -> float:
        """Timeout for the next call, clipped to the cycle deadline."""
        if self._deadline is None:
            return self.call_timeout
        return min(self.call_timeout, self._deadline - time.monotonic())

    async def call(self, factory: Callable[[], Awaitable[T]]) -> T:
        """
        Run one provider call under the concurrency limit and timeout.

        Raises:
            TimeoutError: If the call exceeds its timeout or the cycle
                deadline has already passed.
        """
        async with self._semaphore:
            timeout = self.remaining_time()
            if timeout <= 0:
                raise TimeoutError("scrape deadline exceeded")
            return await asyncio.wait_for(factory(), timeout=timeout)

    async def fetch_page(
        self,
        connection: Connection,
        parent: Parent,
        cursor: str | None,
        page_size: int | None = None,
        **options: Any,
    ) -> Page:
        return await self.call(
            lambda: self.provider.fetch_page(
                connection, parent, cursor, page_size or self.page_size, **options
            )
        )
