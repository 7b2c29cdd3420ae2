"""Tests for application orchestration in the main module."""

import sys
from datetime import date
from pathlib import Path
from unittest.mock import Mock, patch

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prvelocity.artifacts import write_records
from prvelocity.config import Config
from prvelocity.errors import AuthenticationError, ConfigurationError, UpstreamError
from prvelocity.main import orchestrate_velocity_pipeline
from prvelocity.models import IngestionResult, PullRequestRecord


def _record(author: str, closed: date, added: int = 0, deleted: int = 0) -> PullRequestRecord:
    return PullRequestRecord(
        author=author,
        author_email="",
        project="A",
        repository="repo",
        closed_date=closed,
        pr_id=1,
        title="t",
        lines_added=added,
        lines_deleted=deleted,
    )


def test_orchestrate_refresh_success_writes_artifacts(tmp_path, capsys):
    """Verify a refresh wires components, writes CSV and summary, and returns 0."""
    output = tmp_path / "pr-velocity.csv"
    config = Config(organization="org", pat="secret", years_back=2, include_impact=True, output_path=str(output))
    ado_client = Mock()
    result = IngestionResult(
        records=[_record("alice", date(2024, 1, 1))],
        skipped_repositories=["proj/broken"],
        repository_count=2,
    )

    with patch("prvelocity.main.load_config", return_value=config) as load_config_mock, patch(
        "prvelocity.main.AdoClient", return_value=ado_client
    ) as ado_client_ctor_mock, patch(
        "prvelocity.main.fetch_pull_request_records", return_value=result
    ) as fetch_mock:
        exit_code = orchestrate_velocity_pipeline(["--org", "org", "--with-loc", "--output", str(output)])

    assert exit_code == 0
    load_config_mock.assert_called_once_with(
        organization="org",
        years_back=2,
        include_impact=True,
        output_path=str(output),
    )
    ado_client_ctor_mock.assert_called_once_with(config=config)
    assert fetch_mock.call_args.kwargs["include_impact"] is True
    assert fetch_mock.call_args.kwargs["ado_client"] is ado_client
    assert output.exists()
    assert (tmp_path / "pr-velocity-summary.json").exists()
    out = capsys.readouterr().out
    assert "Found 2 repositories" in out
    assert "proj/broken" in out
    assert "Total completed PRs found: 1" in out


def test_orchestrate_refresh_reports_progress_per_repository(tmp_path, capsys):
    """Verify the progress callback prints each repository as it starts."""
    config = Config(organization="org", pat="secret", output_path=str(tmp_path / "out.csv"))

    def _fetch(ado_client, cutoff, include_impact, on_progress):
        on_progress("api")
        on_progress("web")
        return IngestionResult(records=[], repository_count=2)

    with patch("prvelocity.main.load_config", return_value=config), patch(
        "prvelocity.main.AdoClient"
    ), patch("prvelocity.main.fetch_pull_request_records", side_effect=_fetch):
        exit_code = orchestrate_velocity_pipeline([])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Processing: api" in out
    assert "Processing: web" in out


def test_orchestrate_missing_pat_returns_auth_error():
    """Verify a missing PAT returns the authentication exit code before any request."""
    with patch(
        "prvelocity.main.load_config",
        side_effect=AuthenticationError("Missing required Azure DevOps Personal Access Token."),
    ), patch("prvelocity.main.AdoClient") as ado_client_ctor_mock:
        exit_code = orchestrate_velocity_pipeline([])

    assert exit_code == 3
    ado_client_ctor_mock.assert_not_called()


def test_orchestrate_configuration_error_returns_configuration_exit_code():
    """Verify invalid configuration returns exit code 2."""
    with patch("prvelocity.main.load_config", side_effect=ConfigurationError("bad")):
        assert orchestrate_velocity_pipeline([]) == 2


def test_orchestrate_upstream_error_returns_api_exit_code(tmp_path):
    """Verify a failed repository listing returns the API error exit code."""
    config = Config(organization="org", pat="secret", output_path=str(tmp_path / "out.csv"))

    with patch("prvelocity.main.load_config", return_value=config), patch(
        "prvelocity.main.AdoClient"
    ), patch("prvelocity.main.fetch_pull_request_records", side_effect=UpstreamError("401")):
        exit_code = orchestrate_velocity_pipeline([])

    assert exit_code == 4
    assert not (tmp_path / "out.csv").exists()


def test_orchestrate_unexpected_error_returns_generic_exit_code():
    """Verify unexpected exceptions are mapped to the generic non-zero exit code."""
    with patch("prvelocity.main.parse_args", side_effect=RuntimeError("boom")):
        exit_code = orchestrate_velocity_pipeline()

    assert exit_code == 1


def test_orchestrate_from_csv_summarizes_velocity_and_impact(tmp_path, capsys):
    """Verify the offline summary reads a CSV and prints velocity and impact stats."""
    path = tmp_path / "pr.csv"
    write_records(
        path,
        [
            _record("alice", date(2024, 1, 1), added=50),
            _record("bob", date(2024, 1, 1), added=10, deleted=5),
            _record("alice", date(2024, 1, 3), added=15, deleted=5),
        ],
    )

    with patch("prvelocity.main.load_config") as load_config_mock:
        exit_code = orchestrate_velocity_pipeline(["--from-csv", str(path), "--author", "alice"])

    assert exit_code == 0
    load_config_mock.assert_not_called()
    out = capsys.readouterr().out
    assert "Days on axis: 3" in out
    assert "Total PRs: 2" in out
    assert "Avg PRs / week: 2.0 (over 1 weeks)" in out
    assert "Top contributor: alice" in out
    assert "Net change: 60" in out


def test_orchestrate_from_empty_csv_returns_no_data_exit_code(tmp_path):
    """Verify a record file without data returns exit code 5."""
    path = tmp_path / "pr.csv"
    write_records(path, [])

    assert orchestrate_velocity_pipeline(["--from-csv", str(path)]) == 5
