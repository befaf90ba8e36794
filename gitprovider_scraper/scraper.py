"""
One scrape cycle: validate, discover, collect, aggregate, emit.
"""

import asyncio
import logging
import time
from datetime import datetime, timezone
from typing import NamedTuple

from gitprovider_scraper.aggregator import MetricAggregator
from gitprovider_scraper.collectors import (
    build_search_query,
    collect_repository,
    list_repositories,
    validate_organization,
)
from gitprovider_scraper.config import ScraperConfig
from gitprovider_scraper.context import ScrapeContext
from gitprovider_scraper.metadata import default_metrics_builder_config
from gitprovider_scraper.models import (
    MetricDataPoint,
    Organization,
    RepositoryData,
    ScrapeData,
)
from gitprovider_scraper.sink import MemorySink, MetricSink
from gitprovider_scraper.vcs import get_query_provider
from gitprovider_scraper.vcs.base import BaseQueryProvider

logger = logging.getLogger(__name__)


class ScrapeResult(NamedTuple):
    """Summary of a successful scrape cycle."""

    organization: Organization
    data_points: list[MetricDataPoint]
    repositories: list[RepositoryData]
    unique_contributors: int
    started_at: datetime
    elapsed_secs: float

    @property
    def errors(self) -> list[Exception]:
        return [error for repo in self.repositories for error in repo.errors]

    @property
    def partial(self) -> bool:
        return bool(self.errors)


class GitProviderScraper:
    """
    Scrapes one organization on one provider.

    A cycle either fails as a whole (OrgNotFound, OrgValidationError,
    RepositoryListError propagate and nothing is emitted) or emits every
    metric it could compute, including those from partially collected data.
    """

    def __init__(
        self,
        config: ScraperConfig,
        provider: BaseQueryProvider | None = None,
        sink: MetricSink | None = None,
    ):
        self.config = config
        self.provider = provider or get_query_provider(
            config.platform, endpoint=config.endpoint
        )
        self.sink = sink if sink is not None else MemorySink()
        self.aggregator = MetricAggregator(
            config.metrics or default_metrics_builder_config(),
            self.provider.get_platform_name(),
        )

    def new_context(self, now: datetime | None = None) -> ScrapeContext:
        return ScrapeContext(
            self.provider,
            page_size=self.config.page_size,
            concurrency=self.config.concurrency,
            call_timeout=self.config.call_timeout,
            scrape_timeout=self.config.scrape_timeout,
            now=now,
        )

    async def collect(self, ctx: ScrapeContext) -> ScrapeData:
        """Gather everything for the cycle without emitting anything."""
        organization = await validate_organization(ctx, self.config.organization)
        search_query = build_search_query(
            organization, self.config.search_query, self.config.include_archived
        )
        repositories = await list_repositories(ctx, organization, search_query)
        logger.info(
            "Found %d repositories for %s", len(repositories), organization.login
        )

        repository_data = await asyncio.gather(
            *(collect_repository(ctx, repository) for repository in repositories)
        )
        return ScrapeData(
            organization=organization,
            repositories=list(repository_data),
            now=ctx.now,
            unique_contributors=ctx.contributors.organization_count(),
        )

    async def scrape(self, now: datetime | None = None) -> ScrapeResult:
        """
        Run one scrape cycle and emit its data points to the sink.

        Raises:
            OrgNotFound, OrgValidationError, RepositoryListError: The cycle failed.
        """
        started = time.monotonic()
        ctx = self.new_context(now)
        data = await self.collect(ctx)

        points = self.aggregator.aggregate(data)
        self.aggregator.emit(points, self.sink)

        result = ScrapeResult(
            organization=data.organization,
            data_points=points,
            repositories=data.repositories,
            unique_contributors=data.unique_contributors,
            started_at=ctx.now,
            elapsed_secs=time.monotonic() - started,
        )
        logger.info(
            "Scrape of %s complete | %d repositories | %d data points | "
            "%d isolated error(s) | %.1fs",
            data.organization.login,
            len(data.repositories),
            len(points),
            len(result.errors),
            result.elapsed_secs,
        )
        return result

    async def aclose(self) -> None:
        await self.provider.aclose()


def run_scrape(
    config: ScraperConfig,
    provider: BaseQueryProvider | None = None,
    sink: MetricSink | None = None,
) -> ScrapeResult:
    """Synchronous entry point: run a single cycle and close the provider."""

    async def _run() -> ScrapeResult:
        scraper = GitProviderScraper(config, provider=provider, sink=sink)
        try:
            return await scraper.scrape(datetime.now(timezone.utc))
        finally:
            await scraper.aclose()

    return asyncio.run(_run())
