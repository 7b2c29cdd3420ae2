"""Heuristic lines-changed estimate for a pull request.

Azure DevOps exposes per-commit *file* counts (Add/Edit/Delete) but no line
deltas on the commit endpoint, so the estimate converts file counts to lines:

- every added file counts as 50 added lines
- every edited file counts as 15 added and 5 deleted lines
- every deleted file counts as 30 deleted lines

The weights are a product calibration and are intentionally approximate.
Estimating a pull request costs one request for its commit list plus one
request per commit.
"""

from __future__ import annotations

import logging

from .ado_client import AdoClient
from .errors import EstimationError
from .models import ChangeCounts, ChangeStats

logger = logging.getLogger(__name__)

LINES_PER_ADDED_FILE = 50
LINES_ADDED_PER_EDITED_FILE = 15
LINES_DELETED_PER_EDITED_FILE = 5
LINES_PER_DELETED_FILE = 30


def lines_from_change_counts(counts: ChangeCounts) -> ChangeStats:
    """Convert one commit's file change counts into estimated line changes."""
    return ChangeStats(
        added=counts.add * LINES_PER_ADDED_FILE + counts.edit * LINES_ADDED_PER_EDITED_FILE,
        deleted=counts.delete * LINES_PER_DELETED_FILE + counts.edit * LINES_DELETED_PER_EDITED_FILE,
    )


def estimate_change_stats(
    ado_client: AdoClient,
    project: str,
    repo_id: str,
    pr_id: int,
) -> ChangeStats:
    """Estimate lines added/deleted by a pull request from its commits.

    A commit whose detail cannot be fetched contributes nothing; a pull request
    whose commit list cannot be fetched is estimated as ``(0, 0)``.
    """
    try:
        commit_ids = ado_client.list_pull_request_commit_ids(project, repo_id, pr_id)
    except EstimationError as exc:
        logger.warning(
            "Could not list pull request commits; estimating zero change",
            extra={"project": project, "repo_id": repo_id, "pr_id": pr_id, "error": str(exc)},
        )
        return ChangeStats()

    added = 0
    deleted = 0
    failed_commits = 0

    for commit_id in commit_ids:
        try:
            counts = ado_client.get_commit_change_counts(project, repo_id, commit_id)
        except EstimationError:
            failed_commits += 1
            continue
        if counts is None:
            continue

        commit_stats = lines_from_change_counts(counts)
        added += commit_stats.added
        deleted += commit_stats.deleted

    if failed_commits:
        logger.warning(
            "Skipped commits while estimating pull request change",
            extra={"project": project, "repo_id": repo_id, "pr_id": pr_id, "failed_commits": failed_commits},
        )

    return ChangeStats(added=added, deleted=deleted)
