"""Contributor count metric."""

from gitprovider_scraper.metadata import CONTRIBUTOR_COUNT, REPOSITORY_NAME_ATTR
from gitprovider_scraper.metrics.base import (
    REPOSITORY_SCOPE,
    Measurement,
    MetricContext,
    MetricSpec,
)
from gitprovider_scraper.models import RepositoryData


def record_contributor_count(
    data: RepositoryData, _context: MetricContext
) -> list[Measurement]:
    """Distinct contributor identifiers on the repository."""
    contributors = data.contributors
    if contributors.partial and not contributors.items:
        return []
    distinct = {contributor.id for contributor in contributors.items}
    return [Measurement(len(distinct), {REPOSITORY_NAME_ATTR: data.repository.name})]


METRIC = MetricSpec(
    name=CONTRIBUTOR_COUNT,
    kind="count",
    unit="{contributor}",
    description="Total number of unique contributors to this repository",
    scope=REPOSITORY_SCOPE,
    recorder=record_contributor_count,
)
