"""Branch staleness metric."""

from gitprovider_scraper.metadata import (
    BRANCH_NAME_ATTR,
    BRANCH_TIME,
    REPOSITORY_NAME_ATTR,
)
from gitprovider_scraper.metrics.base import (
    REPOSITORY_SCOPE,
    Measurement,
    MetricContext,
    MetricSpec,
)
from gitprovider_scraper.models import RepositoryData


def record_branch_time(data: RepositoryData, context: MetricContext) -> list[Measurement]:
    """
    Staleness in seconds, one measurement per stale branch.

    Only branches behind the default branch have a resolved history; current
    branches are left out instead of being recorded as zero.
    """
    measurements = []
    for history in data.histories:
        staleness = history.staleness(context.now)
        if staleness is None:
            continue
        measurements.append(
            Measurement(
                staleness,
                {
                    REPOSITORY_NAME_ATTR: data.repository.name,
                    BRANCH_NAME_ATTR: history.branch.name,
                },
            )
        )
    return measurements


METRIC = MetricSpec(
    name=BRANCH_TIME,
    kind="duration",
    unit="s",
    description="Time the branch has existed behind the default branch",
    scope=REPOSITORY_SCOPE,
    recorder=record_branch_time,
)
