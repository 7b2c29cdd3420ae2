"""Reading and writing the record CSV and its JSON summary."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Sequence, Union

from .codec import decode_records, encode_records
from .errors import DecodeError
from .models import PullRequestRecord

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def summary_path_for(csv_path: PathLike) -> Path:
    """Return the summary JSON path that accompanies a record CSV file.

    A trailing ``.csv`` is replaced by ``-summary.json``; any other name gets
    ``-summary.json`` appended, so the summary never overwrites the records.
    """
    path = Path(csv_path)
    if path.suffix.lower() == ".csv":
        return path.with_name(f"{path.stem}-summary.json")
    return path.with_name(f"{path.name}-summary.json")


def build_summary(records: Sequence[PullRequestRecord]) -> Dict[str, Any]:
    """Tally records by author, project and month, plus lines changed per author.

    Keys follow the JSON document consumed by the dashboard: ``byAuthor``,
    ``byProject``, ``byMonth`` (``YYYY-MM``), ``totalPRs``, ``locByAuthor``,
    ``totalLinesAdded`` and ``totalLinesDeleted``.
    """
    by_author: Dict[str, int] = {}
    by_project: Dict[str, int] = {}
    by_month: Dict[str, int] = {}
    loc_by_author: Dict[str, Dict[str, int]] = {}
    total_added = 0
    total_deleted = 0

    for record in records:
        by_author[record.author] = by_author.get(record.author, 0) + 1
        by_project[record.project] = by_project.get(record.project, 0) + 1
        month = record.closed_date.strftime("%Y-%m")
        by_month[month] = by_month.get(month, 0) + 1

        loc = loc_by_author.setdefault(record.author, {"added": 0, "deleted": 0})
        loc["added"] += record.lines_added
        loc["deleted"] += record.lines_deleted
        total_added += record.lines_added
        total_deleted += record.lines_deleted

    return {
        "byAuthor": by_author,
        "byProject": by_project,
        "byMonth": by_month,
        "totalPRs": len(records),
        "locByAuthor": loc_by_author,
        "totalLinesAdded": total_added,
        "totalLinesDeleted": total_deleted,
    }


def write_records(path: PathLike, records: Sequence[PullRequestRecord]) -> str:
    """Encode ``records`` to ``path`` and return the encoded text."""
    content = encode_records(records)
    Path(path).write_text(content, encoding="utf-8")
    logger.info("Exported records", extra={"path": str(path), "records_total": len(records)})
    return content


def read_records(path: PathLike) -> List[PullRequestRecord]:
    """Load records previously written by :func:`write_records`.

    Raises:
        DecodeError: If the file cannot be read or holds no decodable records.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DecodeError(f"Could not read record file '{path}'.") from exc

    records = decode_records(text)
    if not records:
        raise DecodeError(f"No data found in record file '{path}'.")
    return records


def write_summary(path: PathLike, summary: Dict[str, Any]) -> None:
    """Write a summary document as indented JSON."""
    Path(path).write_text(json.dumps(summary, indent=2), encoding="utf-8")
    logger.info("Exported summary", extra={"path": str(path)})
