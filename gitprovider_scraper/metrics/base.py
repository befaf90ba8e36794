"""
Shared metric types and context helpers.
"""

from datetime import datetime
from typing import Any, Callable, NamedTuple

from gitprovider_scraper.models import Organization


class Measurement(NamedTuple):
    """A value recorded by a metric, before resource tagging."""

    value: int | float
    attributes: dict[str, str] | None = None


class MetricContext(NamedTuple):
    """Context provided to metric recorders."""

    organization: Organization
    now: datetime


class MetricSpec(NamedTuple):
    """Definition of a metric and the recorder that computes it."""

    name: str
    kind: str  # "count" or "duration"
    unit: str
    description: str
    scope: str  # "organization" records from ScrapeData, "repository" from RepositoryData
    recorder: Callable[[Any, MetricContext], list[Measurement]]


ORGANIZATION_SCOPE = "organization"
REPOSITORY_SCOPE = "repository"
