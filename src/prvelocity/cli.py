"""Command-line argument parsing for the ADO PR velocity pipeline."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

from .aggregation import RANGE_PRESETS
from .config import DEFAULT_OUTPUT_PATH, DEFAULT_YEARS_BACK


def _positive_int(value: str) -> int:
    """Parse and validate a positive integer CLI value.

    Args:
        value: Raw command-line argument value.

    Returns:
        The validated positive integer.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive integer.
    """
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError("must be an integer") from exc

    if parsed <= 0:
        raise argparse.ArgumentTypeError("must be greater than 0")

    return parsed


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for a refresh or an offline summary.

    Returns:
        Parsed CLI arguments containing organization, output path, years of
        history, impact tracking flag, and the optional offline summary inputs.
    """
    parser = argparse.ArgumentParser(
        prog="ado-pr-velocity",
        description=(
            "Fetch completed Azure DevOps pull requests for every repository in an "
            "organization and summarize contribution velocity and code impact."
        ),
    )

    parser.add_argument(
        "--org",
        default=None,
        help="Azure DevOps organization name (default: $AZURE_DEVOPS_ORG or itkennel).",
    )
    parser.add_argument(
        "--output",
        default=DEFAULT_OUTPUT_PATH,
        help=f"Record CSV output path (default: {DEFAULT_OUTPUT_PATH}).",
    )
    parser.add_argument(
        "--years",
        type=_positive_int,
        default=DEFAULT_YEARS_BACK,
        help=f"Number of years of PR history to fetch (default: {DEFAULT_YEARS_BACK}).",
    )
    parser.add_argument(
        "--with-loc",
        action="store_true",
        help="Estimate lines changed per PR (slower, one extra request per commit).",
    )
    parser.add_argument(
        "--from-csv",
        default=None,
        metavar="PATH",
        help="Summarize an existing record CSV instead of fetching from Azure DevOps.",
    )
    parser.add_argument(
        "--range",
        choices=sorted(RANGE_PRESETS),
        default="all",
        help="Time range used with --from-csv (default: all).",
    )
    parser.add_argument(
        "--author",
        default=None,
        help="Restrict the --from-csv summary to one author display name.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging verbosity (default: WARNING).",
    )

    return parser.parse_args(argv)
