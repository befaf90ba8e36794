"""Branch count metric."""

from gitprovider_scraper.metadata import BRANCH_COUNT, REPOSITORY_NAME_ATTR
from gitprovider_scraper.metrics.base import (
    REPOSITORY_SCOPE,
    Measurement,
    MetricContext,
    MetricSpec,
)
from gitprovider_scraper.models import RepositoryData


def record_branch_count(
    data: RepositoryData, _context: MetricContext
) -> list[Measurement]:
    """
    Number of branches in the repository.

    Nothing is recorded when the branch collector failed before merging any
    page, so a failure is never reported as zero branches.
    """
    branches = data.branches
    if branches.partial and not branches.items:
        return []
    return [
        Measurement(
            len(branches.items), {REPOSITORY_NAME_ATTR: data.repository.name}
        )
    ]


METRIC = MetricSpec(
    name=BRANCH_COUNT,
    kind="count",
    unit="{branch}",
    description="Number of branches in a repository",
    scope=REPOSITORY_SCOPE,
    recorder=record_branch_count,
)
