"""Summary statistics and formatting helpers for PR velocity reporting.

This module provides utilities for:
- Summarizing PR counts per week and the leading contributor (velocity mode).
- Summarizing net lines changed per week and the leading contributor (impact mode).
- Detecting whether a record set carries any lines-changed data.
- Building a human-readable report of PRs by author and by project.
"""

from __future__ import annotations

import math
from typing import Dict, List, Optional, Sequence, Tuple

from .models import ImpactStats, PullRequestRecord, Stats

NO_CONTRIBUTOR = "N/A"


def _select_author(
    records: Sequence[PullRequestRecord],
    author: Optional[str],
) -> List[PullRequestRecord]:
    if not author:
        return list(records)
    return [record for record in records if record.author == author]


def calculate_week_span(records: Sequence[PullRequestRecord]) -> int:
    """Return the number of weeks covered by ``records``, never less than ``1``.

    The span is ``ceil((last closed date - first closed date) / 7 days)``.

    Args:
        records: Non-empty record set.
    """
    dates = [record.closed_date for record in records]
    elapsed_days = (max(dates) - min(dates)).days
    return max(1, math.ceil(elapsed_days / 7))


def _leading_author(totals: Dict[str, int]) -> str:
    """Return the author with the highest total; the first one seen wins ties."""
    if not totals:
        return NO_CONTRIBUTOR
    return max(totals, key=lambda name: totals[name])


def summarize(records: Sequence[PullRequestRecord], author: Optional[str] = None) -> Stats:
    """Compute velocity statistics, optionally restricted to one author.

    ``avg_per_week`` is the PR count divided by the week span, formatted with
    one decimal. When ``author`` is given it is reported as the top
    contributor verbatim.

    Args:
        records: Records to summarize.
        author: Optional author display name to filter on.

    Returns:
        A ``Stats`` instance; empty input yields zero values and ``"N/A"``.
    """
    selected = _select_author(records, author)
    if not selected:
        return Stats(total=0, avg_per_week="0", top_contributor=NO_CONTRIBUTOR, weeks=0)

    weeks = calculate_week_span(selected)
    total = len(selected)

    top_contributor = author
    if not top_contributor:
        counts: Dict[str, int] = {}
        for record in selected:
            counts[record.author] = counts.get(record.author, 0) + 1
        top_contributor = _leading_author(counts)

    return Stats(
        total=total,
        avg_per_week=f"{total / weeks:.1f}",
        top_contributor=top_contributor,
        weeks=weeks,
    )


def summarize_impact(
    records: Sequence[PullRequestRecord],
    author: Optional[str] = None,
) -> ImpactStats:
    """Compute impact statistics, optionally restricted to one author.

    ``avg_per_week`` is the net change (added minus deleted) divided by the
    week span, rounded to a whole number. Without an author filter the top
    contributor is the author with the most lines touched (added + deleted).
    """
    selected = _select_author(records, author)
    if not selected:
        return ImpactStats(
            total_added=0,
            total_deleted=0,
            net_change=0,
            avg_per_week="0",
            top_contributor=NO_CONTRIBUTOR,
            weeks=0,
        )

    weeks = calculate_week_span(selected)
    total_added = sum(record.lines_added for record in selected)
    total_deleted = sum(record.lines_deleted for record in selected)
    net_change = total_added - total_deleted

    top_contributor = author
    if not top_contributor:
        touched: Dict[str, int] = {}
        for record in selected:
            touched[record.author] = touched.get(record.author, 0) + record.total_lines
        top_contributor = _leading_author(touched)

    return ImpactStats(
        total_added=total_added,
        total_deleted=total_deleted,
        net_change=net_change,
        avg_per_week=str(int(round(net_change / weeks))),
        top_contributor=top_contributor,
        weeks=weeks,
    )


def has_impact_data(records: Sequence[PullRequestRecord]) -> bool:
    """Return ``True`` when any record carries non-zero lines changed."""
    return any(record.lines_added > 0 or record.lines_deleted > 0 for record in records)


def _ranked_counts(records: Sequence[PullRequestRecord], key: str) -> List[Tuple[str, int]]:
    counts: Dict[str, int] = {}
    for record in records:
        name = getattr(record, key)
        counts[name] = counts.get(name, 0) + 1
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


def generate_report(records: Sequence[PullRequestRecord], organization: str) -> str:
    """Generate a human-readable PR count report for an ingestion run.

    The report lists the total number of completed PRs followed by PR counts
    per author and per project, each in descending order.

    Args:
        records: Records collected by the run.
        organization: Azure DevOps organization display name.

    Returns:
        Formatted multi-line text report.
    """
    lines = [
        f"Organization: {organization}",
        f"Total completed PRs found: {len(records)}",
        "",
        "PRs by Author:",
    ]
    lines.extend(f"  {name}: {count}" for name, count in _ranked_counts(records, "author"))
    lines.extend(["", "PRs by Project:"])
    lines.extend(f"  {name}: {count}" for name, count in _ranked_counts(records, "project"))

    return "\n".join(lines)
