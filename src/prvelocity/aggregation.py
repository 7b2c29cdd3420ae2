"""Time-series aggregation of pull request records.

``aggregate`` buckets records by day, author and project for one
:class:`AggregationMode`, then fills every calendar day between the first and
last closed date so windowed smoothing sees an evenly spaced series.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from .models import AggregateView, AggregationMode, DayBucket, LineTally, PullRequestRecord


@dataclass(frozen=True)
class RangePreset:
    """A named look-back window and the smoothing window that suits it."""

    label: str
    days: Optional[int]
    smoothing: int


RANGE_PRESETS: Mapping[str, RangePreset] = MappingProxyType(
    {
        "week": RangePreset(label="Past Week", days=7, smoothing=1),
        "month": RangePreset(label="Past Month", days=30, smoothing=3),
        "3months": RangePreset(label="Past 3 Months", days=90, smoothing=5),
        "year": RangePreset(label="Past Year", days=365, smoothing=7),
        "all": RangePreset(label="All Time", days=None, smoothing=30),
    }
)


def filter_by_range(
    records: Sequence[PullRequestRecord],
    range_days: Optional[int],
    today: Optional[date] = None,
) -> List[PullRequestRecord]:
    """Keep records closed within the last ``range_days`` days.

    ``None`` or ``0`` keeps every record. ``today`` defaults to the current UTC date.
    """
    if not range_days:
        return list(records)

    cutoff = (today or datetime.now(timezone.utc).date()) - timedelta(days=range_days)
    return [record for record in records if record.closed_date >= cutoff]


def _date_axis(first: date, last: date) -> List[str]:
    span = (last - first).days
    return [(first + timedelta(days=offset)).isoformat() for offset in range(span + 1)]


def aggregate(records: Iterable[PullRequestRecord], mode: AggregationMode) -> AggregateView:
    """Build a gap-filled :class:`AggregateView` for ``mode``.

    In velocity mode each record adds ``1``; in impact mode it adds its lines
    added plus lines deleted, with both parts also tallied separately. Authors
    are ordered by descending total, ties keeping first-encounter order.
    """
    mode = AggregationMode(mode)
    impact = mode is AggregationMode.IMPACT

    by_day: Dict[str, DayBucket] = {}
    by_author: Dict[str, int] = {}
    by_project: Dict[str, int] = {}
    author_lines: Dict[str, LineTally] = {}
    project_lines: Dict[str, LineTally] = {}
    grand_total = 0
    total_added = 0
    total_deleted = 0
    first_day: Optional[date] = None
    last_day: Optional[date] = None

    for record in records:
        day = record.closed_date.isoformat()
        bucket = by_day.get(day)
        if bucket is None:
            bucket = by_day[day] = DayBucket(day=day)

        contribution = record.total_lines if impact else 1
        bucket.authors[record.author] = bucket.authors.get(record.author, 0) + contribution
        bucket.total += contribution
        by_author[record.author] = by_author.get(record.author, 0) + contribution
        by_project[record.project] = by_project.get(record.project, 0) + contribution
        grand_total += contribution

        if impact:
            bucket.author_lines.setdefault(record.author, LineTally()).add(record)
            bucket.added += record.lines_added
            bucket.deleted += record.lines_deleted
            author_lines.setdefault(record.author, LineTally()).add(record)
            project_lines.setdefault(record.project, LineTally()).add(record)
            total_added += record.lines_added
            total_deleted += record.lines_deleted

        if first_day is None or record.closed_date < first_day:
            first_day = record.closed_date
        if last_day is None or record.closed_date > last_day:
            last_day = record.closed_date

    days: List[str] = []
    if first_day is not None and last_day is not None:
        days = _date_axis(first_day, last_day)
        for day in days:
            if day not in by_day:
                by_day[day] = DayBucket(day=day)

    authors = sorted(by_author, key=lambda author: by_author[author], reverse=True)

    return AggregateView(
        mode=mode,
        by_day=by_day,
        days=days,
        by_author=by_author,
        by_project=by_project,
        authors=authors,
        grand_total=grand_total,
        author_lines=author_lines,
        project_lines=project_lines,
        total_added=total_added,
        total_deleted=total_deleted,
    )


def moving_average(series: Sequence[float], window_size: int = 1) -> List[float]:
    """Smooth ``series`` with a centered window of ``window_size`` points.

    The half width is ``window_size // 2``. Near the edges the window shrinks to
    the indices that exist, so edge values average fewer points. A window of
    ``1`` or less returns the values unchanged.
    """
    if window_size <= 1:
        return list(series)

    half_width = window_size // 2
    length = len(series)
    smoothed: List[float] = []

    for index in range(length):
        start = max(0, index - half_width)
        end = min(length, index + half_width + 1)
        window = series[start:end]
        smoothed.append(sum(window) / len(window))

    return smoothed
