"""
Metric registry.

Built-in metrics live in one module each and expose a ``METRIC`` spec.
"""

from importlib import import_module

from gitprovider_scraper.metrics.base import MetricSpec

# Catalog order; data points are emitted in this order within a repository.
_BUILTIN_MODULES = [
    "gitprovider_scraper.metrics.repository_count",
    "gitprovider_scraper.metrics.branch_count",
    "gitprovider_scraper.metrics.branch_time",
    "gitprovider_scraper.metrics.contributor_count",
    "gitprovider_scraper.metrics.pull_request_time",
    "gitprovider_scraper.metrics.cve_count",
]


def _load_builtin_metric_specs() -> list[MetricSpec]:
    specs = []
    for module_path in _BUILTIN_MODULES:
        module = import_module(module_path)
        spec = getattr(module, "METRIC", None)
        if isinstance(spec, MetricSpec):
            specs.append(spec)
    return specs


def load_metric_specs() -> list[MetricSpec]:
    """All metric specs in catalog order, without duplicate names."""
    specs = []
    seen = set()
    for spec in _load_builtin_metric_specs():
        if spec.name not in seen:
            specs.append(spec)
            seen.add(spec.name)
    return specs
