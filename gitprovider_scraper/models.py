"""
Entities collected during a scrape cycle.

Field names are ours; provider adapters translate their payloads into these
types so nothing downstream depends on a provider's response shape.
"""

from datetime import datetime
from enum import Enum
from typing import Generic, NamedTuple, TypeVar

T = TypeVar("T")


class Connection(str, Enum):
    """Paginated connections a provider must be able to walk."""

    REPOSITORIES = "repositories"
    BRANCHES = "branches"
    PULL_REQUESTS = "pull_requests"
    CONTRIBUTORS = "contributors"
    VULNERABILITY_ALERTS = "vulnerability_alerts"
    COMMIT_HISTORY = "commit_history"


class Severity(str, Enum):
    """Vulnerability alert severity levels."""

    LOW = "LOW"
    MODERATE = "MODERATE"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> "Severity":
        try:
            return cls((value or "").upper())
        except ValueError:
            return cls.UNKNOWN


class Organization(NamedTuple):
    """The scrape target after validation."""

    login: str
    owner_type: str = "Organization"  # "Organization" or "User"


class Page(NamedTuple, Generic[T]):
    """One page of a paginated connection."""

    nodes: list[T]
    end_cursor: str | None = None
    has_next_page: bool = False
    total_count: int | None = None


class Repository(NamedTuple):
    id: str
    name: str
    owner: str = ""
    default_branch: str | None = None


class Branch(NamedTuple):
    """A branch with its divergence from the default branch."""

    name: str
    repository: Repository
    ahead_by: int = 0
    behind_by: int = 0

    @property
    def is_stale(self) -> bool:
        return self.behind_by > 0

    @property
    def history_window(self) -> int:
        """Number of commits inspected for staleness."""
        return max(self.ahead_by, 1)


class Commit(NamedTuple):
    committed_date: datetime
    additions: int = 0
    deletions: int = 0


class BranchHistory(NamedTuple):
    """The commit window resolved for one stale branch."""

    branch: Branch
    commits: list[Commit]

    @property
    def oldest_commit(self) -> Commit | None:
        if not self.commits:
            return None
        return min(self.commits, key=lambda commit: commit.committed_date)

    @property
    def additions(self) -> int:
        return sum(commit.additions for commit in self.commits)

    @property
    def deletions(self) -> int:
        return sum(commit.deletions for commit in self.commits)

    def staleness(self, now: datetime) -> int | None:
        """Seconds between the oldest commit in the window and ``now``."""
        oldest = self.oldest_commit
        if oldest is None:
            return None
        return max(int((now - oldest.committed_date).total_seconds()), 0)


class PullRequest(NamedTuple):
    merged: bool
    created_at: datetime | None = None
    merged_at: datetime | None = None
    head_ref: str = ""

    def time_to_merge(self) -> int | None:
        """Seconds from creation to merge, or None for unmerged PRs."""
        if not self.merged or self.created_at is None or self.merged_at is None:
            return None
        return max(int((self.merged_at - self.created_at).total_seconds()), 0)


class Contributor(NamedTuple):
    id: str
    login: str | None = None


class VulnerabilityAlert(NamedTuple):
    id: str
    severity: Severity = Severity.UNKNOWN


class CollectorResult(NamedTuple, Generic[T]):
    """Items merged by one collector, plus the error that stopped it (if any)."""

    kind: str
    repository: str
    items: list[T]
    error: Exception | None = None

    @property
    def partial(self) -> bool:
        return self.error is not None


class RepositoryData(NamedTuple):
    """Everything gathered for one repository during a cycle."""

    repository: Repository
    branches: CollectorResult[Branch]
    pull_requests: CollectorResult[PullRequest]
    contributors: CollectorResult[Contributor]
    alerts: CollectorResult[VulnerabilityAlert]
    histories: list[BranchHistory] = []
    errors: list[Exception] = []


class ScrapeData(NamedTuple):
    """All collected data for a cycle, handed to the aggregator."""

    organization: Organization
    repositories: list[RepositoryData]
    now: datetime
    unique_contributors: int = 0


class MetricDataPoint(NamedTuple):
    """One emitted measurement."""

    name: str
    kind: str  # "count" or "duration"
    unit: str
    value: int | float
    attributes: dict[str, str]
    resource: dict[str, str]
    timestamp: datetime
