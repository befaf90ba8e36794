"""
Emission sinks.

The aggregator hands finished data points to a sink one at a time; batching
and export belong to the sink.
"""

from typing import Protocol

from gitprovider_scraper.models import MetricDataPoint


class MetricSink(Protocol):
    def emit(self, point: MetricDataPoint) -> None: ...


class MemorySink:
    """Keeps emitted data points in order. Used by the CLI and tests."""

    def __init__(self) -> None:
        self.points: list[MetricDataPoint] = []

    def emit(self, point: MetricDataPoint) -> None:
        self.points.append(point)

    def by_name(self, name: str) -> list[MetricDataPoint]:
        return [point for point in self.points if point.name == name]

    def clear(self) -> None:
        self.points.clear()
