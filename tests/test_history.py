"""
Tests for commit history resolution of stale branches.
"""

import asyncio
from datetime import timedelta

import pytest

from gitprovider_scraper.context import ScrapeContext
from gitprovider_scraper.errors import CancellationError, ProviderError, SubResourceFetchError
from gitprovider_scraper.history import resolve_branch_histories, resolve_branch_history
from gitprovider_scraper.models import Branch, BranchHistory, Commit, Connection


def test_behind_branch_is_resolved_and_current_branch_skipped(provider, repo1, now):
    stale = Branch("main", repo1, ahead_by=0, behind_by=1)
    current = Branch("fresh", repo1, ahead_by=3, behind_by=0)
    provider.add(Connection.COMMIT_HISTORY, "repo1:main", [Commit(now - timedelta(days=1))])

    histories, errors = asyncio.run(
        resolve_branch_histories(ScrapeContext(provider, now=now), [stale, current])
    )

    assert [h.branch for h in histories] == [stale]
    assert errors == []
    assert histories[0].staleness(now) == 86400
    assert not any(call[1] == "repo1:fresh" for call in provider.calls)


def test_window_is_ahead_by_commits(provider, repo1, now):
    branch = Branch("feature", repo1, ahead_by=3, behind_by=5)
    commits = [Commit(now - timedelta(days=day), 1, 2) for day in range(1, 8)]
    provider.add(Connection.COMMIT_HISTORY, "repo1:feature", commits, page_size=2)

    history = asyncio.run(
        resolve_branch_history(ScrapeContext(provider, page_size=100, now=now), branch)
    )

    assert len(history.commits) == 3
    assert history.oldest_commit == commits[2]
    assert history.staleness(now) == 3 * 86400
    assert history.additions == 3
    assert history.deletions == 6
    # Page size is narrowed to the window
    assert {call[3] for call in provider.calls} == {3}


def test_failure_is_isolated_per_branch(provider, repo1, now):
    broken = Branch("broken", repo1, behind_by=2)
    healthy = Branch("healthy", repo1, behind_by=1)
    provider.fail(Connection.COMMIT_HISTORY, "repo1:broken", ProviderError("gone"))
    provider.add(Connection.COMMIT_HISTORY, "repo1:healthy", [Commit(now)])

    histories, errors = asyncio.run(
        resolve_branch_histories(ScrapeContext(provider, now=now), [broken, healthy])
    )

    assert [h.branch.name for h in histories] == ["healthy"]
    assert len(errors) == 1
    assert isinstance(errors[0], SubResourceFetchError)
    assert errors[0].repository == "repo1:broken"
    assert errors[0].kind == "commit_history"


def test_timeout_raises_cancellation(provider, repo1, now):
    branch = Branch("slow", repo1, behind_by=1)
    provider.stall(Connection.COMMIT_HISTORY, "repo1:slow", 1.0)

    with pytest.raises(CancellationError):
        asyncio.run(
            resolve_branch_history(
                ScrapeContext(provider, call_timeout=0.05, now=now), branch
            )
        )


def test_empty_history_has_no_staleness(repo1, now):
    history = BranchHistory(Branch("empty", repo1, behind_by=1), [])
    assert history.staleness(now) is None
