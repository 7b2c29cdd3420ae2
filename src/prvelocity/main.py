"""Entry point for the Azure DevOps PR velocity pipeline."""

from __future__ import annotations

import logging
import sys
from typing import List, Optional, Sequence

from .ado_client import AdoClient
from .aggregation import RANGE_PRESETS, aggregate, filter_by_range
from .artifacts import build_summary, read_records, summary_path_for, write_records, write_summary
from .cli import parse_args
from .config import load_config
from .errors import ApiError, AuthenticationError, ConfigurationError, DecodeError
from .ingest import fetch_pull_request_records
from .models import AggregationMode, PullRequestRecord
from .outliers import remove_outliers
from .stats import generate_report, has_impact_data, summarize, summarize_impact

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIGURATION = 2
EXIT_AUTHENTICATION = 3
EXIT_API = 4
EXIT_NO_DATA = 5


def _print_progress(repo_name: str) -> None:
    print(f"Processing: {repo_name}")


def run_refresh(
    organization: Optional[str],
    years_back: int,
    include_impact: bool,
    output_path: str,
) -> List[PullRequestRecord]:
    """Fetch records from Azure DevOps and write the CSV and summary artifacts."""
    config = load_config(
        organization=organization,
        years_back=years_back,
        include_impact=include_impact,
        output_path=output_path,
    )
    cutoff = config.cutoff_date()

    print(f"Querying Azure DevOps organization: {config.organization}")
    print(f"Cutoff date: {cutoff.isoformat()}")

    ado_client = AdoClient(config=config)
    result = fetch_pull_request_records(
        ado_client=ado_client,
        cutoff=cutoff,
        include_impact=config.include_impact,
        on_progress=_print_progress,
    )

    print(f"Found {result.repository_count} repositories")
    for repository in result.skipped_repositories:
        print(f"WARNING: Stopped early for repository '{repository}'; data may be incomplete.")

    write_records(config.output_path, result.records)
    summary_path = summary_path_for(config.output_path)
    write_summary(summary_path, build_summary(result.records))

    print(generate_report(result.records, organization=config.organization))
    print(f"\nExported to: {config.output_path}")
    print(f"Summary exported to: {summary_path}")
    return result.records


def summarize_file(path: str, range_key: str, author: Optional[str]) -> str:
    """Summarize a record CSV for one time range, optionally for one author."""
    preset = RANGE_PRESETS[range_key]
    records = filter_by_range(read_records(path), preset.days)

    velocity = aggregate(records, AggregationMode.VELOCITY)
    stats = summarize(records, author)
    lines = [
        f"Range: {preset.label}",
        f"Days on axis: {len(velocity.days)}",
        f"Total PRs: {stats.total}",
        f"Avg PRs / week: {stats.avg_per_week} (over {stats.weeks} weeks)",
        f"Top contributor: {stats.top_contributor}",
        "Authors: " + ", ".join(velocity.authors),
    ]

    if has_impact_data(records):
        trimmed = remove_outliers(records)
        impact = aggregate(trimmed, AggregationMode.IMPACT)
        impact_stats = summarize_impact(trimmed, author)
        lines.extend(
            [
                "",
                f"Lines added: {impact_stats.total_added}",
                f"Lines deleted: {impact_stats.total_deleted}",
                f"Net change: {impact_stats.net_change}",
                f"Avg net lines / week: {impact_stats.avg_per_week}",
                f"Most impact: {impact_stats.top_contributor}",
                "Authors by impact: " + ", ".join(impact.authors),
            ]
        )

    return "\n".join(lines)


def orchestrate_velocity_pipeline(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line flow and map failures to exit codes.

    Returns:
        ``0`` on success, ``2`` for configuration errors, ``3`` when the PAT is
        missing, ``4`` for fatal Azure DevOps API errors, ``5`` when a record
        file holds no data, and ``1`` for anything unexpected.
    """
    try:
        args = parse_args(argv)
        logging.basicConfig(
            level=getattr(logging, args.log_level),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        if args.from_csv:
            print(summarize_file(args.from_csv, range_key=args.range, author=args.author))
        else:
            run_refresh(
                organization=args.org,
                years_back=args.years,
                include_impact=args.with_loc,
                output_path=args.output,
            )
        return EXIT_OK
    except AuthenticationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_AUTHENTICATION
    except ConfigurationError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_CONFIGURATION
    except ApiError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_API
    except DecodeError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return EXIT_NO_DATA
    except Exception:
        logger.exception("Unexpected failure")
        return EXIT_UNEXPECTED


def main() -> None:
    raise SystemExit(orchestrate_velocity_pipeline())


if __name__ == "__main__":
    main()
