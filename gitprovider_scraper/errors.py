"""
Exception types raised by the scraper.

Fatal errors (``OrgNotFound``, ``OrgValidationError``, ``RepositoryListError``)
abort a scrape cycle and propagate to the caller. Isolated errors
(``SubResourceFetchError``, ``CancellationError``) are attached to collector
results and logged; sibling work continues.
"""


class ScraperError(Exception):
    """Base class for scraper errors."""


class ProviderError(ScraperError):
    """A provider returned an unusable response (GraphQL errors, bad payload)."""


class OrgValidationError(ScraperError):
    """The organization lookup could not be completed."""


class OrgNotFound(OrgValidationError):
    """The configured login resolves to neither an organization nor a user."""

    def __init__(self, login: str):
        super().__init__(f"Organization or user '{login}' not found.")
        self.login = login


class RepositoryListError(ScraperError):
    """Repository discovery failed part-way through pagination."""


class SubResourceFetchError(ScraperError):
    """A per-repository or per-branch collector failed to fetch a page."""

    def __init__(
        self,
        repository: str,
        kind: str,
        cursor: str | None,
        cause: BaseException | None = None,
    ):
        super().__init__(
            f"Failed to fetch {kind} for {repository} (cursor={cursor!r}): {cause}"
        )
        self.repository = repository
        self.kind = kind
        self.cursor = cursor
        self.cause = cause


class CancellationError(SubResourceFetchError):
    """A call timed out or the cycle deadline passed before it could run."""


def wrap_fetch_error(
    repository: str, kind: str, cursor: str | None, cause: BaseException
) -> SubResourceFetchError:
    """Map a failed call to the isolated error type for it."""
    if isinstance(cause, TimeoutError):
        return CancellationError(repository, kind, cursor, cause)
    return SubResourceFetchError(repository, kind, cursor, cause)
