"""Vulnerability alert count metric."""

from gitprovider_scraper.metadata import (
    CVE_COUNT,
    CVE_SEVERITY_ATTR,
    REPOSITORY_NAME_ATTR,
)
from gitprovider_scraper.metrics.base import (
    REPOSITORY_SCOPE,
    Measurement,
    MetricContext,
    MetricSpec,
)
from gitprovider_scraper.models import RepositoryData, Severity


def count_by_severity(data: RepositoryData) -> dict[Severity, int]:
    """Alert counts per severity, in the order severities first appear."""
    counts: dict[Severity, int] = {}
    for alert in data.alerts.items:
        counts[alert.severity] = counts.get(alert.severity, 0) + 1
    return counts


def record_cve_count(data: RepositoryData, _context: MetricContext) -> list[Measurement]:
    """One measurement per severity; together they sum to the alert total."""
    return [
        Measurement(
            count,
            {
                REPOSITORY_NAME_ATTR: data.repository.name,
                CVE_SEVERITY_ATTR: severity.value,
            },
        )
        for severity, count in count_by_severity(data).items()
    ]


METRIC = MetricSpec(
    name=CVE_COUNT,
    kind="count",
    unit="{cve}",
    description="Number of open vulnerability alerts in a repository",
    scope=REPOSITORY_SCOPE,
    recorder=record_cve_count,
)
