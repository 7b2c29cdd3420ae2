"""Domain models for Azure DevOps pull request velocity and impact analytics.

``PullRequestRecord`` is the canonical unit produced by ingestion and by the
record codec. Aggregation structures are rebuilt from records on every request
and are never updated incrementally.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional

UNKNOWN_AUTHOR = "Unknown"


class AggregationMode(str, Enum):
    """How records contribute to day/author/project buckets."""

    VELOCITY = "velocity"
    IMPACT = "impact"


@dataclass(slots=True)
class Repository:
    """Represents a source repository returned by Azure DevOps APIs."""

    id: str
    name: str
    project: str


@dataclass(frozen=True, slots=True)
class ChangeStats:
    """Approximate lines added and deleted by a pull request."""

    added: int = 0
    deleted: int = 0


@dataclass(slots=True)
class ChangeCounts:
    """File-level change counts reported for a single commit."""

    add: int = 0
    edit: int = 0
    delete: int = 0


@dataclass(frozen=True, slots=True)
class PullRequestRecord:
    """One completed pull request, normalized for persistence and aggregation."""

    author: str
    author_email: str
    project: str
    repository: str
    closed_date: date
    pr_id: int
    title: str
    lines_added: int = 0
    lines_deleted: int = 0

    @property
    def total_lines(self) -> int:
        return self.lines_added + self.lines_deleted


@dataclass(slots=True)
class LineTally:
    """Running lines added/deleted for an author, project, or day."""

    added: int = 0
    deleted: int = 0

    @property
    def total(self) -> int:
        return self.added + self.deleted

    def add(self, record: PullRequestRecord) -> None:
        self.added += record.lines_added
        self.deleted += record.lines_deleted


@dataclass(slots=True)
class DayBucket:
    """Contributions closed on one calendar day.

    ``authors`` and ``total`` hold PR counts in velocity mode and lines touched
    (added + deleted) in impact mode. ``author_lines``, ``added`` and
    ``deleted`` are only populated in impact mode.
    """

    day: str
    authors: Dict[str, int] = field(default_factory=dict)
    total: int = 0
    author_lines: Dict[str, LineTally] = field(default_factory=dict)
    added: int = 0
    deleted: int = 0


@dataclass(slots=True)
class AggregateView:
    """Gap-filled day buckets plus author and project totals for one mode."""

    mode: AggregationMode
    by_day: Dict[str, DayBucket]
    days: List[str]
    by_author: Dict[str, int]
    by_project: Dict[str, int]
    authors: List[str]
    grand_total: int
    author_lines: Dict[str, LineTally] = field(default_factory=dict)
    project_lines: Dict[str, LineTally] = field(default_factory=dict)
    total_added: int = 0
    total_deleted: int = 0

    def series(self, author: Optional[str] = None) -> List[int]:
        """Return one value per day on the axis, for the team or one author."""
        if author is None:
            return [self.by_day[day].total for day in self.days]
        return [self.by_day[day].authors.get(author, 0) for day in self.days]


@dataclass(slots=True)
class Stats:
    """Summary statistics for velocity mode."""

    total: int
    avg_per_week: str
    top_contributor: str
    weeks: int


@dataclass(slots=True)
class ImpactStats:
    """Summary statistics for impact mode."""

    total_added: int
    total_deleted: int
    net_change: int
    avg_per_week: str
    top_contributor: str
    weeks: int


@dataclass(slots=True)
class IngestionResult:
    """Outcome of one ingestion run across every repository in an organization."""

    records: List[PullRequestRecord]
    skipped_repositories: List[str] = field(default_factory=list)
    repository_count: int = 0
