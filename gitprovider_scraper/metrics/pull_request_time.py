"""Pull request merge time metric."""

from gitprovider_scraper.metadata import (
    BRANCH_NAME_ATTR,
    PULL_REQUEST_TIME,
    REPOSITORY_NAME_ATTR,
)
from gitprovider_scraper.metrics.base import (
    REPOSITORY_SCOPE,
    Measurement,
    MetricContext,
    MetricSpec,
)
from gitprovider_scraper.models import RepositoryData


def record_pull_request_time(
    data: RepositoryData, _context: MetricContext
) -> list[Measurement]:
    """Seconds from creation to merge for each merged PR; open PRs are skipped."""
    measurements = []
    for pull_request in data.pull_requests.items:
        duration = pull_request.time_to_merge()
        if duration is None:
            continue
        measurements.append(
            Measurement(
                duration,
                {
                    REPOSITORY_NAME_ATTR: data.repository.name,
                    BRANCH_NAME_ATTR: pull_request.head_ref,
                },
            )
        )
    return measurements


METRIC = MetricSpec(
    name=PULL_REQUEST_TIME,
    kind="duration",
    unit="s",
    description="Time the pull request was open before it was merged",
    scope=REPOSITORY_SCOPE,
    recorder=record_pull_request_time,
)
