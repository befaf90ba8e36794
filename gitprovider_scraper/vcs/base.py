"""
Base query-provider interface.

A provider executes exactly one query per call: either an owner lookup or a
single page of one connection. Pagination, concurrency and error isolation
live in the scraper, not here.
"""

from abc import ABC, abstractmethod
from typing import Any

from gitprovider_scraper.models import Branch, Connection, Organization, Page, Repository

# Parent object for each connection:
#   REPOSITORIES         -> Organization
#   BRANCHES, PULL_REQUESTS, CONTRIBUTORS, VULNERABILITY_ALERTS -> Repository
#   COMMIT_HISTORY       -> Branch
Parent = Organization | Repository | Branch


class BaseQueryProvider(ABC):
    """Abstract base class for git-hosting query providers."""

    @abstractmethod
    def get_platform_name(self) -> str:
        """Platform identifier, reported as the vendor resource attribute."""

    @abstractmethod
    async def resolve_owner(self, login: str) -> Organization:
        """
        Look up the organization (or user) for ``login``.

        Raises:
            OrgNotFound: If nothing resolves for the login.
            ProviderError / httpx.HTTPError: On transport or decoding failures.
        """

    @abstractmethod
    async def fetch_page(
        self,
        connection: Connection,
        parent: Parent,
        cursor: str | None,
        page_size: int,
        **options: Any,
    ) -> Page:
        """
        Fetch one page of ``connection`` under ``parent``.

        A ``cursor`` of None requests the first page. ``options`` carries
        connection-specific inputs such as the repository search query.
        """

    async def aclose(self) -> None:
        """Release provider resources."""
