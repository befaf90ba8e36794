"""
Reduce collected scrape data into metric data points.
"""

import logging

from gitprovider_scraper.metadata import (
    ORGANIZATION_NAME,
    VENDOR_NAME,
    MetricsBuilderConfig,
)
from gitprovider_scraper.metrics import load_metric_specs
from gitprovider_scraper.metrics.base import (
    ORGANIZATION_SCOPE,
    MetricContext,
    MetricSpec,
)
from gitprovider_scraper.models import MetricDataPoint, Organization, ScrapeData
from gitprovider_scraper.sink import MetricSink

logger = logging.getLogger(__name__)


class MetricAggregator:
    """Turns ScrapeData into data points for the enabled metrics.

    Ordering: organization-scoped metrics first, then each repository in
    discovery order with its metrics in catalog order. Disabled metrics are
    not computed.
    """

    def __init__(
        self,
        config: MetricsBuilderConfig,
        vendor: str,
        specs: list[MetricSpec] | None = None,
    ):
        self.config = config
        self.vendor = vendor
        self.specs = specs if specs is not None else load_metric_specs()

    def resource_attributes(self, organization: Organization) -> dict[str, str]:
        """Resource tags for the cycle; disabled attributes are omitted."""
        candidates = {
            VENDOR_NAME: self.vendor,
            ORGANIZATION_NAME: organization.login,
        }
        return {
            name: value
            for name, value in candidates.items()
            if self.config.is_resource_attribute_enabled(name)
        }

    def aggregate(self, data: ScrapeData) -> list[MetricDataPoint]:
        enabled = [
            spec for spec in self.specs if self.config.is_metric_enabled(spec.name)
        ]
        context = MetricContext(organization=data.organization, now=data.now)
        resource = self.resource_attributes(data.organization)

        points: list[MetricDataPoint] = []

        def record(spec: MetricSpec, source) -> None:
            for measurement in spec.recorder(source, context):
                points.append(
                    MetricDataPoint(
                        name=spec.name,
                        kind=spec.kind,
                        unit=spec.unit,
                        value=measurement.value,
                        attributes=dict(measurement.attributes or {}),
                        resource=dict(resource),
                        timestamp=data.now,
                    )
                )

        for spec in enabled:
            if spec.scope == ORGANIZATION_SCOPE:
                record(spec, data)

        for repository_data in data.repositories:
            for error in repository_data.errors:
                logger.info(
                    "Metrics for %s computed from partial data: %s",
                    repository_data.repository.name,
                    error,
                )
            for spec in enabled:
                if spec.scope != ORGANIZATION_SCOPE:
                    record(spec, repository_data)

        return points

    def emit(self, points: list[MetricDataPoint], sink: MetricSink) -> None:
        for point in points:
            sink.emit(point)
