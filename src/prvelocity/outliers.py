"""Percentile trim of unusually large pull requests before impact aggregation."""

from __future__ import annotations

import logging
import math
from typing import List, Sequence

from .models import PullRequestRecord

logger = logging.getLogger(__name__)

DEFAULT_PERCENTILE = 99


def remove_outliers(
    records: Sequence[PullRequestRecord],
    percentile: float = DEFAULT_PERCENTILE,
) -> List[PullRequestRecord]:
    """Drop records whose total lines changed exceed a percentile threshold.

    The threshold is the ascending-sorted ``lines_added + lines_deleted`` value
    at index ``floor(n * percentile / 100)``, clamped to the last index. Every
    record at or below the threshold is kept in its original order, so ties at
    the threshold survive and fewer than ``100 - percentile`` percent of the
    records may be removed.
    """
    if not records:
        return []

    totals = sorted(record.total_lines for record in records)
    index = min(math.floor(len(totals) * percentile / 100), len(totals) - 1)
    threshold = totals[max(0, index)]

    kept = [record for record in records if record.total_lines <= threshold]

    if len(kept) < len(records):
        logger.debug(
            "Removed outlier records",
            extra={"threshold": threshold, "removed": len(records) - len(kept), "kept": len(kept)},
        )

    return kept
