"""
GitHub query provider for gitprovider-scraper.

Uses the GitHub GraphQL API for owner lookup, repository search, branches
(with an inline compare against the default branch), pull requests,
vulnerability alerts and commit history. Contributors are only exposed by the
REST API, so that connection is paged by page number instead of a cursor.
"""

import os
from datetime import datetime
from typing import Any

import httpx
from dotenv import load_dotenv

from gitprovider_scraper.errors import OrgNotFound, ProviderError
from gitprovider_scraper.http_client import _get_async_http_client, close_http_client
from gitprovider_scraper.models import (
    Branch,
    Commit,
    Connection,
    Contributor,
    Organization,
    Page,
    PullRequest,
    Repository,
    Severity,
    VulnerabilityAlert,
)
from gitprovider_scraper.vcs.base import BaseQueryProvider, Parent

# Load environment variables
load_dotenv()

# GitHub API endpoint
GITHUB_GRAPHQL_API = "https://api.github.com/graphql"

CHECK_LOGIN_QUERY = """
query checkLogin($login: String!) {
  organization(login: $login) {
    login
  }
  user(login: $login) {
    login
  }
}
"""

SEARCH_REPOSITORIES_QUERY = """
query getRepoDataBySearch($searchQuery: String!, $first: Int!, $after: String) {
  search(query: $searchQuery, type: REPOSITORY, first: $first, after: $after) {
    repositoryCount
    pageInfo {
      hasNextPage
      endCursor
    }
    nodes {
      ... on Repository {
        id
        name
        owner {
          login
        }
        defaultBranchRef {
          name
        }
      }
    }
  }
}
"""

BRANCHES_QUERY = """
query getBranchData(
  $owner: String!, $name: String!, $first: Int!, $after: String, $targetBranch: String!
) {
  repository(owner: $owner, name: $name) {
    refs(refPrefix: "refs/heads/", first: $first, after: $after) {
      totalCount
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        name
        compare(headRef: $targetBranch) {
          aheadBy
          behindBy
        }
      }
    }
  }
}
"""

PULL_REQUESTS_QUERY = """
query getPullRequestData($owner: String!, $name: String!, $first: Int!, $after: String) {
  repository(owner: $owner, name: $name) {
    pullRequests(first: $first, after: $after, states: [OPEN, MERGED]) {
      totalCount
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        headRefName
        createdAt
        mergedAt
        merged
      }
    }
  }
}
"""

VULNERABILITY_ALERTS_QUERY = """
query getRepoCVEs($owner: String!, $name: String!, $first: Int!, $after: String) {
  repository(owner: $owner, name: $name) {
    vulnerabilityAlerts(first: $first, after: $after, states: [OPEN]) {
      totalCount
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        id
        securityVulnerability {
          severity
        }
      }
    }
  }
}
"""

COMMIT_HISTORY_QUERY = """
query getCommitData(
  $owner: String!, $name: String!, $branch: String!, $first: Int!, $after: String
) {
  repository(owner: $owner, name: $name) {
    ref(qualifiedName: $branch) {
      target {
        ... on Commit {
          history(first: $first, after: $after) {
            pageInfo {
              hasNextPage
              endCursor
            }
            nodes {
              committedDate
              additions
              deletions
            }
          }
        }
      }
    }
  }
}
"""


def _parse_datetime(value: str | None) -> datetime | None:
    """Convert GitHub's ISO datetime string to a datetime."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _rest_base_url(graphql_url: str) -> str:
    """Derive the REST API base from the GraphQL endpoint."""
    base = graphql_url.rstrip("/")
    if base.endswith("/graphql"):
        base = base[: -len("/graphql")]
    # GitHub Enterprise Server serves REST under /api/v3
    if base.endswith("/api"):
        base = f"{base}/v3"
    return base


class GitHubProvider(BaseQueryProvider):
    """GitHub query provider using the GraphQL API."""

    def __init__(
        self,
        token: str | None = None,
        endpoint: str | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        """
        Initialize GitHub provider.

        Args:
            token: GitHub Personal Access Token. If not provided, reads from
                   GITHUB_TOKEN environment variable.
            endpoint: GraphQL endpoint (GitHub Enterprise). Defaults to
                   api.github.com.
            client: Optional httpx.AsyncClient; the shared client is used
                   otherwise.

        Raises:
            ValueError: If token is not provided and GITHUB_TOKEN env var is not set
        """
        self.token = token or os.getenv("GITHUB_TOKEN")
        if not self.token or len(self.token) == 0:
            raise ValueError(
                "GITHUB_TOKEN is required for GitHub provider.\n"
                "\n"
                "To get started:\n"
                "1. Create a GitHub Personal Access Token (classic):\n"
                "   → https://github.com/settings/tokens/new\n"
                "2. Select scopes: 'repo', 'read:org' and 'security_events'\n"
                "3. Set the token:\n"
                "   export GITHUB_TOKEN='your_token_here'  # Linux/macOS\n"
                "   or add to your .env file: GITHUB_TOKEN=your_token_here\n"
            )
        self.graphql_url = endpoint or GITHUB_GRAPHQL_API
        self.rest_url = _rest_base_url(self.graphql_url)
        self._client = client

    def get_platform_name(self) -> str:
        """Return 'github' as the platform identifier."""
        return "github"

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"bearer {self.token}",
            "Content-Type": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        return self._client or await _get_async_http_client()

    async def aclose(self) -> None:
        """Close the shared client; an injected client belongs to the caller."""
        if self._client is None:
            await close_http_client()

    async def _query_graphql(
        self, query: str, variables: dict[str, Any], allow_not_found: bool = False
    ) -> dict[str, Any]:
        """
        Execute GraphQL query against GitHub API.

        Args:
            query: GraphQL query string
            variables: Query variables
            allow_not_found: Tolerate NOT_FOUND errors (partial data is returned)

        Returns:
            Response data dictionary

        Raises:
            httpx.HTTPStatusError: If API returns an HTTP error
            ProviderError: If the response carries GraphQL errors
        """
        client = await self._get_client()
        response = await client.post(
            self.graphql_url,
            json={"query": query, "variables": variables},
            headers=self._headers,
        )
        response.raise_for_status()
        data = response.json()

        errors = data.get("errors") or []
        if allow_not_found:
            errors = [err for err in errors if err.get("type") != "NOT_FOUND"]
        if errors:
            raise ProviderError(f"GitHub API Errors: {errors}")

        return data.get("data") or {}

    async def resolve_owner(self, login: str) -> Organization:
        data = await self._query_graphql(
            CHECK_LOGIN_QUERY, {"login": login}, allow_not_found=True
        )
        if data.get("organization"):
            return Organization(login=data["organization"]["login"])
        if data.get("user"):
            return Organization(login=data["user"]["login"], owner_type="User")
        raise OrgNotFound(login)

    async def fetch_page(
        self,
        connection: Connection,
        parent: Parent,
        cursor: str | None,
        page_size: int,
        **options: Any,
    ) -> Page:
        if connection is Connection.REPOSITORIES:
            return await self._search_repositories(
                parent, cursor, page_size, options.get("search_query", "")
            )
        if connection is Connection.BRANCHES:
            return await self._branches(parent, cursor, page_size)
        if connection is Connection.PULL_REQUESTS:
            return await self._pull_requests(parent, cursor, page_size)
        if connection is Connection.CONTRIBUTORS:
            return await self._contributors(parent, cursor, page_size)
        if connection is Connection.VULNERABILITY_ALERTS:
            return await self._vulnerability_alerts(parent, cursor, page_size)
        if connection is Connection.COMMIT_HISTORY:
            return await self._commit_history(parent, cursor, page_size)
        raise ValueError(f"Unsupported connection: {connection}")

    async def _search_repositories(
        self, owner: Organization, cursor: str | None, page_size: int, search_query: str
    ) -> Page[Repository]:
        data = await self._query_graphql(
            SEARCH_REPOSITORIES_QUERY,
            {"searchQuery": search_query, "first": page_size, "after": cursor},
        )
        search = _require(data, "search")
        repositories = []
        for node in search.get("nodes") or []:
            # Search can return non-repository nodes as empty objects
            if not node or "name" not in node:
                continue
            default_ref = node.get("defaultBranchRef")
            repositories.append(
                Repository(
                    id=node.get("id", ""),
                    name=node["name"],
                    owner=(node.get("owner") or {}).get("login", owner.login),
                    default_branch=default_ref.get("name") if default_ref else None,
                )
            )
        return _page(repositories, search, search.get("repositoryCount"))

    def _repository_variables(self, repository: Repository) -> dict[str, Any]:
        return {"owner": repository.owner, "name": repository.name}

    async def _branches(
        self, repository: Repository, cursor: str | None, page_size: int
    ) -> Page[Branch]:
        variables = {
            **self._repository_variables(repository),
            "first": page_size,
            "after": cursor,
            "targetBranch": repository.default_branch or "HEAD",
        }
        data = await self._query_graphql(BRANCHES_QUERY, variables)
        refs = _require(_require(data, "repository"), "refs")
        branches = []
        for node in refs.get("nodes") or []:
            # behindBy: commits on the default branch missing from this branch
            compare = node.get("compare") or {}
            branches.append(
                Branch(
                    name=node["name"],
                    repository=repository,
                    ahead_by=compare.get("aheadBy") or 0,
                    behind_by=compare.get("behindBy") or 0,
                )
            )
        return _page(branches, refs, refs.get("totalCount"))

    async def _pull_requests(
        self, repository: Repository, cursor: str | None, page_size: int
    ) -> Page[PullRequest]:
        variables = {
            **self._repository_variables(repository),
            "first": page_size,
            "after": cursor,
        }
        data = await self._query_graphql(PULL_REQUESTS_QUERY, variables)
        connection = _require(_require(data, "repository"), "pullRequests")
        pull_requests = [
            PullRequest(
                merged=bool(node.get("merged")),
                created_at=_parse_datetime(node.get("createdAt")),
                merged_at=_parse_datetime(node.get("mergedAt")),
                head_ref=node.get("headRefName") or "",
            )
            for node in connection.get("nodes") or []
        ]
        return _page(pull_requests, connection, connection.get("totalCount"))

    async def _vulnerability_alerts(
        self, repository: Repository, cursor: str | None, page_size: int
    ) -> Page[VulnerabilityAlert]:
        variables = {
            **self._repository_variables(repository),
            "first": page_size,
            "after": cursor,
        }
        data = await self._query_graphql(VULNERABILITY_ALERTS_QUERY, variables)
        connection = _require(_require(data, "repository"), "vulnerabilityAlerts")
        alerts = [
            VulnerabilityAlert(
                id=node.get("id", ""),
                severity=Severity.parse(
                    (node.get("securityVulnerability") or {}).get("severity")
                ),
            )
            for node in connection.get("nodes") or []
        ]
        return _page(alerts, connection, connection.get("totalCount"))

    async def _commit_history(
        self, branch: Branch, cursor: str | None, page_size: int
    ) -> Page[Commit]:
        variables = {
            **self._repository_variables(branch.repository),
            "branch": branch.name,
            "first": page_size,
            "after": cursor,
        }
        data = await self._query_graphql(COMMIT_HISTORY_QUERY, variables)
        ref = _require(data, "repository").get("ref")
        if not ref:
            raise ProviderError(
                f"Branch {branch.name} not found in {branch.repository.name}"
            )
        history = _require(ref.get("target") or {}, "history")
        commits = []
        for node in history.get("nodes") or []:
            committed_date = _parse_datetime(node.get("committedDate"))
            if committed_date is None:
                continue
            commits.append(
                Commit(
                    committed_date=committed_date,
                    additions=node.get("additions") or 0,
                    deletions=node.get("deletions") or 0,
                )
            )
        return _page(commits, history)

    async def _contributors(
        self, repository: Repository, cursor: str | None, page_size: int
    ) -> Page[Contributor]:
        page_number = int(cursor) if cursor else 1
        client = await self._get_client()
        response = await client.get(
            f"{self.rest_url}/repos/{repository.owner}/{repository.name}/contributors",
            params={"per_page": page_size, "page": page_number},
            headers={
                **self._headers,
                "Accept": "application/vnd.github+json",
            },
        )
        response.raise_for_status()
        # Empty repositories answer 204 with no body
        if response.status_code == 204 or not response.content:
            return Page(nodes=[])

        payload = response.json()
        if not isinstance(payload, list):
            raise ProviderError(f"Unexpected contributors payload: {payload!r}")
        contributors = [
            Contributor(id=str(item["id"]), login=item.get("login"))
            for item in payload
            if item.get("id") is not None
        ]
        has_next = "next" in response.links
        return Page(
            nodes=contributors,
            end_cursor=str(page_number + 1) if has_next else None,
            has_next_page=has_next,
        )


def _require(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if not isinstance(value, dict):
        raise ProviderError(f"Missing '{key}' in GitHub response")
    return value


def _page(nodes: list, connection: dict[str, Any], total_count: int | None = None) -> Page:
    page_info = connection.get("pageInfo") or {}
    return Page(
        nodes=nodes,
        end_cursor=page_info.get("endCursor"),
        has_next_page=bool(page_info.get("hasNextPage")),
        total_count=total_count,
    )


PROVIDER = GitHubProvider
