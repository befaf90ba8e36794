"""
gitprovider-scraper: repository metrics scraped from a git-hosting provider.
"""

from gitprovider_scraper.config import ScraperConfig, load_scraper_config
from gitprovider_scraper.metadata import (
    MetricsBuilderConfig,
    default_metrics_builder_config,
)
from gitprovider_scraper.models import MetricDataPoint
from gitprovider_scraper.scraper import GitProviderScraper, ScrapeResult, run_scrape
from gitprovider_scraper.sink import MemorySink, MetricSink

__version__ = "0.1.0"

__all__ = [
    "GitProviderScraper",
    "MemorySink",
    "MetricDataPoint",
    "MetricSink",
    "MetricsBuilderConfig",
    "ScrapeResult",
    "ScraperConfig",
    "default_metrics_builder_config",
    "load_scraper_config",
    "run_scrape",
]
