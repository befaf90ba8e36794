"""
Command-line interface for gitprovider-scraper.
"""

import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from gitprovider_scraper.config import load_scraper_config, set_verify_ssl
from gitprovider_scraper.errors import OrgNotFound, ScraperError
from gitprovider_scraper.metadata import (
    DEFAULT_METRICS,
    DEFAULT_RESOURCE_ATTRIBUTES,
)
from gitprovider_scraper.metrics import load_metric_specs
from gitprovider_scraper.models import MetricDataPoint
from gitprovider_scraper.scraper import ScrapeResult, run_scrape

# --- Typer App ---
app = typer.Typer()
console = Console()


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _format_value(point: MetricDataPoint) -> str:
    if point.kind == "duration":
        days = point.value / 86400
        return f"{point.value}s ({days:.1f}d)"
    return str(point.value)


def display_results(result: ScrapeResult) -> None:
    """Display the scrape results in a rich table."""
    table = Table(title=f"Git provider metrics: {result.organization.login}")
    table.add_column("Metric", justify="left", style="cyan", no_wrap=True)
    table.add_column("Value", justify="right", style="magenta")
    table.add_column("Attributes", justify="left")

    for point in result.data_points:
        attributes = ", ".join(f"{key}={value}" for key, value in point.attributes.items())
        table.add_row(point.name, _format_value(point), attributes or "-")

    console.print(table)

    if result.data_points:
        resource = ", ".join(
            f"{key}={value}" for key, value in result.data_points[0].resource.items()
        )
        console.print(f"[dim]Resource: {resource or '-'}[/dim]")
    console.print(
        f"[dim]{len(result.repositories)} repositories, "
        f"{result.unique_contributors} unique contributors, "
        f"{result.elapsed_secs:.1f}s[/dim]"
    )
    if result.partial:
        console.print(
            f"[yellow]⚠️  {len(result.errors)} sub-resource(s) collected partially:[/yellow]"
        )
        for error in result.errors:
            console.print(f"   • {error}")


def _point_to_dict(point: MetricDataPoint) -> dict:
    data = point._asdict()
    data["timestamp"] = point.timestamp.isoformat()
    return data


@app.command()
def scrape(
    org: str | None = typer.Option(
        None,
        "--org",
        "-o",
        help="Organization (or user) login to scrape. Overrides the config file.",
    ),
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a TOML config file (default: .gitprovider-scraper.toml or pyproject.toml).",
    ),
    search_filter: str | None = typer.Option(
        None,
        "--filter",
        "-f",
        help="Extra repository search qualifiers, e.g. 'topic:otel'.",
    ),
    endpoint: str | None = typer.Option(
        None,
        "--endpoint",
        help="GraphQL endpoint (GitHub Enterprise).",
    ),
    concurrency: int | None = typer.Option(
        None,
        "--concurrency",
        help="Maximum concurrent API calls (default: 8).",
    ),
    timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Per-call timeout in seconds (default: 30).",
    ),
    output_json: bool = typer.Option(
        False,
        "--json",
        help="Print data points as JSON lines instead of a table.",
    ),
    insecure: bool = typer.Option(
        False,
        "--insecure",
        help="Disable SSL certificate verification for HTTPS requests.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging.",
    ),
):
    """Run one scrape cycle and print the emitted data points."""
    configure_logging(verbose)
    set_verify_ssl(not insecure)

    try:
        config = load_scraper_config(
            config_path,
            organization=org,
            search_query=search_filter,
            endpoint=endpoint,
            concurrency=concurrency,
            call_timeout=timeout,
        )
    except ValueError as e:
        console.print(f"[red]Configuration error: {e}[/red]")
        raise typer.Exit(code=2)

    try:
        result = run_scrape(config)
    except OrgNotFound as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1)
    except ScraperError as e:
        console.print(f"[red]Scrape failed: {e}[/red]")
        raise typer.Exit(code=1)
    except ValueError as e:
        # Missing credentials
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=2)

    if output_json:
        for point in result.data_points:
            typer.echo(json.dumps(_point_to_dict(point)))
    else:
        display_results(result)


@app.command()
def metrics(
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Show enablement from this config file instead of the defaults.",
    ),
):
    """List the metric catalog and which metrics are enabled."""
    enabled_metrics = dict(DEFAULT_METRICS)
    enabled_attributes = dict(DEFAULT_RESOURCE_ATTRIBUTES)
    if config_path is not None:
        try:
            config = load_scraper_config(config_path)
        except ValueError as e:
            console.print(f"[red]Configuration error: {e}[/red]")
            raise typer.Exit(code=2)
        enabled_metrics = config.metrics.metrics
        enabled_attributes = config.metrics.resource_attributes

    table = Table(title="Metric catalog")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Kind")
    table.add_column("Unit")
    table.add_column("Enabled", justify="center")
    table.add_column("Description")
    for spec in load_metric_specs():
        enabled = enabled_metrics.get(spec.name, False)
        table.add_row(
            spec.name,
            spec.kind,
            spec.unit,
            "[green]yes[/green]" if enabled else "[dim]no[/dim]",
            spec.description,
        )
    for name, enabled in enabled_attributes.items():
        table.add_row(
            name,
            "resource attribute",
            "",
            "[green]yes[/green]" if enabled else "[dim]no[/dim]",
            "",
        )
    console.print(table)


if __name__ == "__main__":
    app()
