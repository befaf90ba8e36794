"""
Tests for the branch count and branch staleness metrics.
"""

from datetime import datetime, timedelta, timezone

from gitprovider_scraper.errors import SubResourceFetchError
from gitprovider_scraper.metrics.base import MetricContext
from gitprovider_scraper.metrics.branch_count import record_branch_count
from gitprovider_scraper.metrics.branch_time import record_branch_time
from gitprovider_scraper.models import Branch, BranchHistory, Commit, Organization

from metric_helpers import REPOSITORY, repository_data, result

NOW = datetime(2024, 6, 1, tzinfo=timezone.utc)
CONTEXT = MetricContext(organization=Organization("liatrio"), now=NOW)


def _error() -> SubResourceFetchError:
    return SubResourceFetchError("repo1", "branches", None, RuntimeError("boom"))


def test_branch_count():
    branches = [Branch("main", REPOSITORY), Branch("dev", REPOSITORY, behind_by=2)]
    data = repository_data(branches=result("branches", branches))

    measurements = record_branch_count(data, CONTEXT)

    assert len(measurements) == 1
    assert measurements[0].value == 2
    assert measurements[0].attributes == {"repository.name": "repo1"}


def test_branch_count_zero_when_repository_has_no_branches():
    assert record_branch_count(repository_data(), CONTEXT)[0].value == 0


def test_branch_count_skipped_when_collection_failed_empty():
    data = repository_data(branches=result("branches", [], error=_error()))
    assert record_branch_count(data, CONTEXT) == []


def test_branch_count_reports_partial_items():
    data = repository_data(
        branches=result("branches", [Branch("main", REPOSITORY)], error=_error())
    )
    assert record_branch_count(data, CONTEXT)[0].value == 1


def test_branch_time_one_point_per_resolved_branch():
    stale = Branch("stale", REPOSITORY, ahead_by=2, behind_by=4)
    older = Branch("older", REPOSITORY, ahead_by=1, behind_by=1)
    histories = [
        BranchHistory(stale, [Commit(NOW - timedelta(hours=1)), Commit(NOW - timedelta(hours=5))]),
        BranchHistory(older, [Commit(NOW - timedelta(days=10))]),
    ]

    measurements = record_branch_time(repository_data(histories=histories), CONTEXT)

    assert [(m.attributes["branch.name"], m.value) for m in measurements] == [
        ("stale", 5 * 3600),
        ("older", 10 * 86400),
    ]
    assert all(m.attributes["repository.name"] == "repo1" for m in measurements)


def test_branch_time_skips_empty_history():
    history = BranchHistory(Branch("empty", REPOSITORY, behind_by=1), [])
    assert record_branch_time(repository_data(histories=[history]), CONTEXT) == []


def test_branch_time_never_negative():
    history = BranchHistory(
        Branch("future", REPOSITORY, behind_by=1), [Commit(NOW + timedelta(minutes=5))]
    )
    assert record_branch_time(repository_data(histories=[history]), CONTEXT)[0].value == 0
