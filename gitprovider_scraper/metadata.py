"""
Metric and resource-attribute enablement for gitprovider-scraper.

Mirrors the generated metrics-builder config of the collector receiver: every
metric and every resource attribute carries an ``enabled`` flag, with defaults
below. The scraper only reads these values.
"""

from typing import Any, NamedTuple

# Metric names
BRANCH_COUNT = "git.repository.branch.count"
BRANCH_TIME = "git.repository.branch.time"
CONTRIBUTOR_COUNT = "git.repository.contributor.count"
REPOSITORY_COUNT = "git.repository.count"
PULL_REQUEST_TIME = "git.repository.pull_request.time"
CVE_COUNT = "git.repository.cve.count"

# Resource attribute names
VENDOR_NAME = "git.vendor.name"
ORGANIZATION_NAME = "organization.name"

# Data point attribute names
REPOSITORY_NAME_ATTR = "repository.name"
BRANCH_NAME_ATTR = "branch.name"
CVE_SEVERITY_ATTR = "cve.severity"

DEFAULT_METRICS: dict[str, bool] = {
    BRANCH_COUNT: True,
    BRANCH_TIME: True,
    CONTRIBUTOR_COUNT: False,
    REPOSITORY_COUNT: True,
    PULL_REQUEST_TIME: True,
    CVE_COUNT: False,
}

DEFAULT_RESOURCE_ATTRIBUTES: dict[str, bool] = {
    VENDOR_NAME: True,
    ORGANIZATION_NAME: True,
}


class MetricsBuilderConfig(NamedTuple):
    """Enablement flags for metrics and resource attributes."""

    metrics: dict[str, bool]
    resource_attributes: dict[str, bool]

    def is_metric_enabled(self, name: str) -> bool:
        return self.metrics.get(name, False)

    def is_resource_attribute_enabled(self, name: str) -> bool:
        return self.resource_attributes.get(name, False)

    def with_metric(self, name: str, enabled: bool) -> "MetricsBuilderConfig":
        """Return a copy with one metric toggled."""
        if name not in DEFAULT_METRICS:
            raise ValueError(f"Unknown metric: {name}")
        return self._replace(metrics={**self.metrics, name: enabled})

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "MetricsBuilderConfig":
        """
        Build a config from the ``metrics`` / ``resource_attributes`` mapping.

        Example:
            {"metrics": {"git.repository.cve.count": {"enabled": true}}}

        Unset entries keep their defaults.

        Raises:
            ValueError: If a key is unknown or ``enabled`` is not a boolean.
        """
        config = default_metrics_builder_config()
        if not data:
            return config

        unknown = set(data) - {"metrics", "resource_attributes"}
        if unknown:
            raise ValueError(f"Unknown metrics config section(s): {sorted(unknown)}")

        metrics = dict(config.metrics)
        metrics.update(
            _parse_section(data.get("metrics", {}), DEFAULT_METRICS, "metric")
        )
        resource_attributes = dict(config.resource_attributes)
        resource_attributes.update(
            _parse_section(
                data.get("resource_attributes", {}),
                DEFAULT_RESOURCE_ATTRIBUTES,
                "resource attribute",
            )
        )
        return cls(metrics=metrics, resource_attributes=resource_attributes)


def _parse_section(
    section: dict[str, Any], known: dict[str, bool], label: str
) -> dict[str, bool]:
    parsed: dict[str, bool] = {}
    for name, entry in section.items():
        if name not in known:
            raise ValueError(f"Unknown {label}: {name}")
        if not isinstance(entry, dict) or set(entry) - {"enabled"}:
            raise ValueError(f"Invalid {label} config for {name}: {entry!r}")
        if "enabled" not in entry:
            continue
        enabled = entry["enabled"]
        if not isinstance(enabled, bool):
            raise ValueError(f"'enabled' for {name} must be a boolean")
        parsed[name] = enabled
    return parsed


def default_metrics_builder_config() -> MetricsBuilderConfig:
    """Return the default enablement for all metrics and resource attributes."""
    return MetricsBuilderConfig(
        metrics=dict(DEFAULT_METRICS),
        resource_attributes=dict(DEFAULT_RESOURCE_ATTRIBUTES),
    )
