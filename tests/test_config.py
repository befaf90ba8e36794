"""
Tests for the configuration module.
"""

import tempfile
from pathlib import Path

import pytest

from gitprovider_scraper.config import (
    ScraperConfig,
    build_config,
    get_verify_ssl,
    load_scraper_config,
    set_verify_ssl,
)
from gitprovider_scraper.metadata import CVE_COUNT, default_metrics_builder_config


@pytest.fixture
def temp_project_root(monkeypatch):
    """Create a temporary project root for testing."""
    monkeypatch.delenv("GITPROVIDER_SCRAPER_ORG", raising=False)
    monkeypatch.delenv("GITPROVIDER_SCRAPER_ENDPOINT", raising=False)
    with tempfile.TemporaryDirectory() as tmpdir:
        tmpdir_path = Path(tmpdir)

        # Patch PROJECT_ROOT
        import gitprovider_scraper.config

        original_root = gitprovider_scraper.config.PROJECT_ROOT
        gitprovider_scraper.config.PROJECT_ROOT = tmpdir_path

        yield tmpdir_path

        # Restore
        gitprovider_scraper.config.PROJECT_ROOT = original_root


def test_load_from_local_config(temp_project_root):
    """Test loading settings from .gitprovider-scraper.toml."""
    config_file = temp_project_root / ".gitprovider-scraper.toml"
    config_file.write_text(
        """
[tool.gitprovider-scraper]
organization = "liatrio"
search_query = "topic:otel"
concurrency = 4
"""
    )

    config = load_scraper_config()
    assert config.organization == "liatrio"
    assert config.search_query == "topic:otel"
    assert config.concurrency == 4
    assert config.page_size == 100


def test_load_from_pyproject(temp_project_root):
    """Test loading settings from pyproject.toml."""
    config_file = temp_project_root / "pyproject.toml"
    config_file.write_text(
        """
[tool.gitprovider-scraper]
organization = "liatrio"
include_archived = true
"""
    )

    config = load_scraper_config()
    assert config.organization == "liatrio"
    assert config.include_archived is True


def test_local_config_takes_priority(temp_project_root):
    (temp_project_root / ".gitprovider-scraper.toml").write_text('organization = "local"\n')
    (temp_project_root / "pyproject.toml").write_text(
        '[tool.gitprovider-scraper]\norganization = "pyproject"\n'
    )

    assert load_scraper_config().organization == "local"


def test_explicit_config_path(temp_project_root):
    path = temp_project_root / "custom.toml"
    path.write_text(
        """
organization = "liatrio"

[metrics_builder.metrics."git.repository.cve.count"]
enabled = true
"""
    )

    config = load_scraper_config(path)
    assert config.metrics.is_metric_enabled(CVE_COUNT)


def test_missing_explicit_config_path(temp_project_root):
    with pytest.raises(ValueError, match="not found"):
        load_scraper_config(temp_project_root / "missing.toml")


def test_invalid_toml(temp_project_root):
    (temp_project_root / ".gitprovider-scraper.toml").write_text("organization = \n")
    with pytest.raises(ValueError, match="Failed to load config"):
        load_scraper_config()


def test_environment_overrides_file(temp_project_root, monkeypatch):
    (temp_project_root / ".gitprovider-scraper.toml").write_text('organization = "file"\n')
    monkeypatch.setenv("GITPROVIDER_SCRAPER_ORG", "env-org")
    monkeypatch.setenv("GITPROVIDER_SCRAPER_ENDPOINT", "https://ghe.example.com/api/graphql")

    config = load_scraper_config()
    assert config.organization == "env-org"
    assert config.endpoint == "https://ghe.example.com/api/graphql"


def test_overrides_win_and_none_is_ignored(temp_project_root, monkeypatch):
    (temp_project_root / ".gitprovider-scraper.toml").write_text(
        'organization = "file"\nconcurrency = 2\n'
    )
    monkeypatch.setenv("GITPROVIDER_SCRAPER_ORG", "env-org")

    config = load_scraper_config(organization="cli-org", concurrency=None)
    assert config.organization == "cli-org"
    assert config.concurrency == 2


def test_no_config_requires_organization(temp_project_root):
    with pytest.raises(ValueError, match="organization is required"):
        load_scraper_config()


class TestBuildConfig:
    def test_defaults(self):
        config = build_config({"organization": "liatrio"})
        assert config._replace(metrics=None) == ScraperConfig(organization="liatrio")
        assert config.metrics == default_metrics_builder_config()

    def test_default_metrics_are_not_shared(self):
        first = build_config({"organization": "a"})
        second = build_config({"organization": "b"})
        first.metrics.metrics[CVE_COUNT] = True
        assert not second.metrics.is_metric_enabled(CVE_COUNT)
        assert ScraperConfig(organization="a").metrics is None

    @pytest.mark.parametrize(
        "key,value",
        [
            ("page_size", "50"),
            ("page_size", 50.0),
            ("concurrency", True),
            ("call_timeout", "30"),
            ("scrape_timeout", [1]),
            ("include_archived", "yes"),
            ("search_query", 7),
        ],
    )
    def test_wrong_type(self, key, value):
        with pytest.raises(ValueError, match=f"{key} must be"):
            build_config({"organization": "liatrio", key: value})

    def test_float_and_int_timeouts(self):
        config = build_config(
            {"organization": "liatrio", "call_timeout": 5, "scrape_timeout": 60.5}
        )
        assert config.call_timeout == 5
        assert config.scrape_timeout == 60.5

    def test_unknown_key(self):
        with pytest.raises(ValueError, match="Unknown config key"):
            build_config({"organization": "liatrio", "orgnization": "typo"})

    @pytest.mark.parametrize(
        "key,value",
        [
            ("page_size", 0),
            ("page_size", 101),
            ("concurrency", 0),
            ("call_timeout", 0),
            ("scrape_timeout", -1),
        ],
    )
    def test_out_of_range(self, key, value):
        with pytest.raises(ValueError, match=key):
            build_config({"organization": "liatrio", key: value})

    def test_invalid_metrics_builder(self):
        with pytest.raises(ValueError, match="Unknown metric"):
            build_config(
                {
                    "organization": "liatrio",
                    "metrics_builder": {"metrics": {"git.repository.nope": {"enabled": True}}},
                }
            )


def test_verify_ssl_toggle():
    original = get_verify_ssl()
    try:
        set_verify_ssl(False)
        assert get_verify_ssl() is False
        set_verify_ssl(True)
        assert get_verify_ssl() is True
    finally:
        set_verify_ssl(original)
