"""
Configuration management for gitprovider-scraper.

Loads scraper settings from (highest priority first):
1. An explicit config file passed by the caller
2. .gitprovider-scraper.toml (local config)
3. pyproject.toml (project-level config, [tool.gitprovider-scraper])

Environment variables override file values for the organization and endpoint.
"""

import os
import tomllib
from pathlib import Path
from typing import Any, NamedTuple

from gitprovider_scraper.metadata import MetricsBuilderConfig

# project_root is the current working directory by default
PROJECT_ROOT = Path.cwd()

LOCAL_CONFIG_NAME = ".gitprovider-scraper.toml"
TOOL_SECTION = "gitprovider-scraper"

DEFAULT_PAGE_SIZE = 100
DEFAULT_CONCURRENCY = 8
DEFAULT_CALL_TIMEOUT = 30.0

# Global configuration for SSL verification
# Default: True (verify SSL certificates)
# Can be set to False by CLI --insecure flag
VERIFY_SSL = True


class ScraperConfig(NamedTuple):
    """Settings for one scraper instance."""

    organization: str
    platform: str = "github"
    endpoint: str | None = None
    search_query: str = ""
    include_archived: bool = False
    page_size: int = DEFAULT_PAGE_SIZE
    concurrency: int = DEFAULT_CONCURRENCY
    call_timeout: float = DEFAULT_CALL_TIMEOUT
    scrape_timeout: float | None = None
    # None means the default enablement
    metrics: MetricsBuilderConfig | None = None


def load_config_file(config_path: Path) -> dict:
    """Load a TOML configuration file."""
    if not config_path.exists():
        return {}
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except Exception as e:
        raise ValueError(f"Failed to load config from {config_path}: {e}") from e


def _find_settings(config_path: Path | None) -> dict[str, Any]:
    if config_path is not None:
        if not config_path.exists():
            raise ValueError(f"Config file not found: {config_path}")
        config = load_config_file(config_path)
        if config_path.name == "pyproject.toml":
            return config.get("tool", {}).get(TOOL_SECTION, {})
        # Accept either a bare table or the [tool.gitprovider-scraper] layout
        return config.get("tool", {}).get(TOOL_SECTION, config)

    local_config_path = PROJECT_ROOT / LOCAL_CONFIG_NAME
    if local_config_path.exists():
        config = load_config_file(local_config_path)
        return config.get("tool", {}).get(TOOL_SECTION, config)

    pyproject_path = PROJECT_ROOT / "pyproject.toml"
    if pyproject_path.exists():
        config = load_config_file(pyproject_path)
        return config.get("tool", {}).get(TOOL_SECTION, {})

    return {}


# Expected TOML value types; bool is excluded from the numeric fields
_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "organization": (str,),
    "platform": (str,),
    "endpoint": (str,),
    "search_query": (str,),
    "include_archived": (bool,),
    "page_size": (int,),
    "concurrency": (int,),
    "call_timeout": (int, float),
    "scrape_timeout": (int, float),
}


def _check_types(settings: dict[str, Any]) -> None:
    for key, value in settings.items():
        expected = _FIELD_TYPES[key]
        if value is None and key in ("endpoint", "scrape_timeout"):
            continue
        wrong_bool = isinstance(value, bool) and bool not in expected
        if wrong_bool or not isinstance(value, expected):
            raise ValueError(f"{key} must be {expected[0].__name__}, got {value!r}")


def build_config(settings: dict[str, Any]) -> ScraperConfig:
    """
    Validate a settings mapping and turn it into a ScraperConfig.

    Raises:
        ValueError: If the organization is missing or a value has the wrong
            type or is out of range.
    """
    settings = dict(settings)
    metrics = MetricsBuilderConfig.from_dict(settings.pop("metrics_builder", None))

    known = set(ScraperConfig._fields) - {"metrics"}
    unknown = set(settings) - known
    if unknown:
        raise ValueError(f"Unknown config key(s): {sorted(unknown)}")

    organization = settings.get("organization")
    if not organization:
        raise ValueError(
            "An organization is required.\n"
            "Set 'organization' in .gitprovider-scraper.toml, "
            "export GITPROVIDER_SCRAPER_ORG, or pass --org."
        )

    _check_types(settings)
    config = ScraperConfig(**{**settings, "metrics": metrics})
    if config.page_size < 1 or config.page_size > 100:
        raise ValueError("page_size must be between 1 and 100")
    if config.concurrency < 1:
        raise ValueError("concurrency must be at least 1")
    if config.call_timeout <= 0:
        raise ValueError("call_timeout must be positive")
    if config.scrape_timeout is not None and config.scrape_timeout <= 0:
        raise ValueError("scrape_timeout must be positive")
    return config


def load_scraper_config(
    config_path: Path | None = None, **overrides: Any
) -> ScraperConfig:
    """
    Load the scraper configuration.

    Priority:
    1. Keyword overrides (CLI options); None values are ignored
    2. GITPROVIDER_SCRAPER_ORG / GITPROVIDER_SCRAPER_ENDPOINT
    3. Config files (see module docstring)

    Returns:
        Validated ScraperConfig.
    """
    settings = _find_settings(config_path)

    env_org = os.getenv("GITPROVIDER_SCRAPER_ORG")
    if env_org:
        settings["organization"] = env_org
    env_endpoint = os.getenv("GITPROVIDER_SCRAPER_ENDPOINT")
    if env_endpoint:
        settings["endpoint"] = env_endpoint

    settings.update({key: value for key, value in overrides.items() if value is not None})
    return build_config(settings)


def set_verify_ssl(verify: bool) -> None:
    """
    Set the SSL verification setting globally.

    Args:
        verify: Whether to verify SSL certificates.
    """
    global VERIFY_SSL
    VERIFY_SSL = verify


def get_verify_ssl() -> bool:
    """
    Get the current SSL verification setting.

    Returns:
        Whether SSL verification is enabled.
    """
    return VERIFY_SSL
