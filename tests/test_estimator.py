"""Tests for the heuristic pull request change estimate."""

import sys
from pathlib import Path
from unittest.mock import Mock

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prvelocity.errors import EstimationError
from prvelocity.estimator import estimate_change_stats, lines_from_change_counts
from prvelocity.models import ChangeCounts, ChangeStats


def test_lines_from_change_counts_applies_file_weights():
    """Verify adds, edits, and deletes are weighted 50/15 added and 30/5 deleted."""
    stats = lines_from_change_counts(ChangeCounts(add=2, edit=3, delete=1))

    assert stats == ChangeStats(added=2 * 50 + 3 * 15, deleted=1 * 30 + 3 * 5)


def test_estimate_change_stats_sums_every_commit():
    """Verify the estimate accumulates weighted counts across all PR commits."""
    client = Mock()
    client.list_pull_request_commit_ids.return_value = ["c1", "c2"]
    client.get_commit_change_counts.side_effect = [
        ChangeCounts(add=1, edit=0, delete=0),
        ChangeCounts(add=0, edit=2, delete=1),
    ]

    stats = estimate_change_stats(client, project="p", repo_id="r", pr_id=9)

    assert stats == ChangeStats(added=50 + 30, deleted=30 + 10)
    client.list_pull_request_commit_ids.assert_called_once_with("p", "r", 9)
    assert client.get_commit_change_counts.call_count == 2


def test_estimate_change_stats_treats_failed_commit_as_zero():
    """Verify one failing commit detail does not abort the PR estimate."""
    client = Mock()
    client.list_pull_request_commit_ids.return_value = ["c1", "c2", "c3"]
    client.get_commit_change_counts.side_effect = [
        ChangeCounts(add=1),
        EstimationError("boom"),
        ChangeCounts(delete=1),
    ]

    stats = estimate_change_stats(client, project="p", repo_id="r", pr_id=1)

    assert stats == ChangeStats(added=50, deleted=30)


def test_estimate_change_stats_skips_commits_without_counts():
    """Verify commits lacking changeCounts contribute nothing."""
    client = Mock()
    client.list_pull_request_commit_ids.return_value = ["c1"]
    client.get_commit_change_counts.return_value = None

    assert estimate_change_stats(client, project="p", repo_id="r", pr_id=1) == ChangeStats(0, 0)


def test_estimate_change_stats_failed_commit_listing_returns_zero():
    """Verify a failing commit listing yields a zero estimate."""
    client = Mock()
    client.list_pull_request_commit_ids.side_effect = EstimationError("boom")

    stats = estimate_change_stats(client, project="p", repo_id="r", pr_id=1)

    assert stats == ChangeStats(added=0, deleted=0)
    client.get_commit_change_counts.assert_not_called()
