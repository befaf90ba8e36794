"""Repository count metric."""

from gitprovider_scraper.metadata import REPOSITORY_COUNT
from gitprovider_scraper.metrics.base import (
    ORGANIZATION_SCOPE,
    Measurement,
    MetricContext,
    MetricSpec,
)
from gitprovider_scraper.models import ScrapeData


def record_repository_count(data: ScrapeData, _context: MetricContext) -> list[Measurement]:
    """Number of repositories discovered for the organization."""
    return [Measurement(len(data.repositories))]


METRIC = MetricSpec(
    name=REPOSITORY_COUNT,
    kind="count",
    unit="{repository}",
    description="Number of repositories in an organization",
    scope=ORGANIZATION_SCOPE,
    recorder=record_repository_count,
)
