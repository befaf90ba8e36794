"""
Commit history resolution for stale branches.

A branch is stale when the default branch has commits it lacks
(``behind_by > 0``). Its staleness is measured from the oldest commit in a
window of ``max(ahead_by, 1)`` commits on the branch: the commits unique to
the branch, or its tip when it has none.
"""

import asyncio
import logging

from gitprovider_scraper.context import ScrapeContext
from gitprovider_scraper.errors import SubResourceFetchError, wrap_fetch_error
from gitprovider_scraper.models import Branch, BranchHistory, Connection
from gitprovider_scraper.pagination import PaginationError, paginate

logger = logging.getLogger(__name__)

COMMIT_HISTORY = "commit_history"


async def resolve_branch_history(ctx: ScrapeContext, branch: Branch) -> BranchHistory:
    """
    Fetch the commit window used for a branch's staleness.

    Raises:
        SubResourceFetchError: If a page fails (CancellationError on timeout).
    """
    window = branch.history_window
    try:
        collector = await paginate(
            lambda cursor: ctx.fetch_page(
                Connection.COMMIT_HISTORY,
                branch,
                cursor,
                page_size=min(window, ctx.page_size),
            ),
            limit=window,
        )
    except PaginationError as e:
        raise wrap_fetch_error(
            f"{branch.repository.name}:{branch.name}", COMMIT_HISTORY, e.cursor, e.cause
        ) from e.cause
    return BranchHistory(branch=branch, commits=collector.items)


async def resolve_branch_histories(
    ctx: ScrapeContext, branches: list[Branch]
) -> tuple[list[BranchHistory], list[SubResourceFetchError]]:
    """
    Resolve every stale branch; failures are isolated per branch.

    Returns:
        Histories in branch discovery order, and the errors of branches that
        could not be resolved.
    """
    stale = [branch for branch in branches if branch.is_stale]
    results = await asyncio.gather(
        *(resolve_branch_history(ctx, branch) for branch in stale),
        return_exceptions=True,
    )

    histories: list[BranchHistory] = []
    errors: list[SubResourceFetchError] = []
    for branch, result in zip(stale, results):
        if isinstance(result, SubResourceFetchError):
            logger.warning(
                "Skipping staleness for %s:%s: %s",
                branch.repository.name,
                branch.name,
                result,
            )
            errors.append(result)
        elif isinstance(result, BaseException):
            raise result
        else:
            histories.append(result)
    return histories, errors
