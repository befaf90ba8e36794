"""
Organization validation, repository discovery and per-repository collectors.
"""

import asyncio
import logging

from gitprovider_scraper.context import ScrapeContext
from gitprovider_scraper.errors import (
    OrgNotFound,
    OrgValidationError,
    RepositoryListError,
    wrap_fetch_error,
)
from gitprovider_scraper.history import resolve_branch_histories
from gitprovider_scraper.models import (
    CollectorResult,
    Connection,
    Organization,
    Repository,
    RepositoryData,
)
from gitprovider_scraper.pagination import PaginationError, paginate

logger = logging.getLogger(__name__)

BRANCHES = "branches"
PULL_REQUESTS = "pull_requests"
CONTRIBUTORS = "contributors"
VULNERABILITY_ALERTS = "vulnerability_alerts"


async def validate_organization(ctx: ScrapeContext, login: str) -> Organization:
    """
    Confirm the login resolves before anything else is collected.

    Raises:
        OrgNotFound: Nothing resolves for the login.
        OrgValidationError: The lookup itself failed.
    """
    try:
        organization = await ctx.call(lambda: ctx.provider.resolve_owner(login))
    except OrgNotFound:
        raise
    except Exception as e:
        raise OrgValidationError(f"Failed to validate '{login}': {e}") from e
    logger.debug("Validated %s %s", organization.owner_type.lower(), organization.login)
    return organization


def build_search_query(
    organization: Organization, search_filter: str = "", include_archived: bool = False
) -> str:
    """Repository search expression scoped to the owner."""
    qualifier = "user" if organization.owner_type == "User" else "org"
    parts = [f"{qualifier}:{organization.login}"]
    if not include_archived:
        parts.append("archived:false")
    if search_filter:
        parts.append(search_filter.strip())
    return " ".join(parts)


async def list_repositories(
    ctx: ScrapeContext, organization: Organization, search_query: str
) -> list[Repository]:
    """
    Page through the repository search in API order.

    Raises:
        RepositoryListError: If any page fails; a partial list is never returned.
    """
    try:
        collector = await paginate(
            lambda cursor: ctx.fetch_page(
                Connection.REPOSITORIES,
                organization,
                cursor,
                search_query=search_query,
            )
        )
    except PaginationError as e:
        raise RepositoryListError(
            f"Repository search '{search_query}' failed at cursor {e.cursor!r} "
            f"after {len(e.items)} repositories: {e.cause}"
        ) from e.cause

    if collector.total_count is not None and collector.total_count != len(
        collector.items
    ):
        logger.info(
            "Search reported %d repositories, merged %d",
            collector.total_count,
            len(collector.items),
        )
    return collector.items


async def _collect(
    ctx: ScrapeContext, connection: Connection, repository: Repository, kind: str
) -> CollectorResult:
    try:
        collector = await paginate(
            lambda cursor: ctx.fetch_page(connection, repository, cursor)
        )
    except PaginationError as e:
        error = wrap_fetch_error(repository.name, kind, e.cursor, e.cause)
        logger.warning(
            "Partial %s for %s: stopped at cursor %r with %d item(s): %s",
            kind,
            repository.name,
            e.cursor,
            len(e.items),
            e.cause,
        )
        return CollectorResult(kind, repository.name, e.items, error)
    return CollectorResult(kind, repository.name, collector.items)


async def collect_branches(ctx: ScrapeContext, repository: Repository) -> CollectorResult:
    return await _collect(ctx, Connection.BRANCHES, repository, BRANCHES)


async def collect_pull_requests(
    ctx: ScrapeContext, repository: Repository
) -> CollectorResult:
    return await _collect(ctx, Connection.PULL_REQUESTS, repository, PULL_REQUESTS)


async def collect_contributors(
    ctx: ScrapeContext, repository: Repository
) -> CollectorResult:
    """Collect contributors and record them in the cycle's registry."""
    result = await _collect(ctx, Connection.CONTRIBUTORS, repository, CONTRIBUTORS)
    await ctx.contributors.add(result.items)
    return result


async def collect_vulnerability_alerts(
    ctx: ScrapeContext, repository: Repository
) -> CollectorResult:
    return await _collect(
        ctx, Connection.VULNERABILITY_ALERTS, repository, VULNERABILITY_ALERTS
    )


async def collect_repository(ctx: ScrapeContext, repository: Repository) -> RepositoryData:
    """Run the four collectors for a repository, then resolve stale branches."""
    branches, pull_requests, contributors, alerts = await asyncio.gather(
        collect_branches(ctx, repository),
        collect_pull_requests(ctx, repository),
        collect_contributors(ctx, repository),
        collect_vulnerability_alerts(ctx, repository),
    )
    histories, history_errors = await resolve_branch_histories(ctx, branches.items)

    errors = [
        result.error
        for result in (branches, pull_requests, contributors, alerts)
        if result.error is not None
    ]
    errors.extend(history_errors)
    return RepositoryData(
        repository=repository,
        branches=branches,
        pull_requests=pull_requests,
        contributors=contributors,
        alerts=alerts,
        histories=histories,
        errors=errors,
    )
