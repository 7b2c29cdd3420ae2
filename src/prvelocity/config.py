"""Configuration parsing and validation for the ADO PR velocity pipeline."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from .errors import AuthenticationError, ConfigurationError

DEFAULT_ORGANIZATION = "itkennel"
DEFAULT_OUTPUT_PATH = "pr-velocity.csv"
DEFAULT_YEARS_BACK = 2


@dataclass(frozen=True)
class Config:
    """Validated runtime settings used by the velocity pipeline."""

    organization: str
    pat: str
    years_back: int = DEFAULT_YEARS_BACK
    include_impact: bool = False
    output_path: str = DEFAULT_OUTPUT_PATH

    def cutoff_date(self, today: Optional[date] = None) -> date:
        """Return the earliest closed date a record may have.

        The cutoff is ``today`` (the current UTC date by default) moved back
        ``years_back`` calendar years; a February 29th that does not exist in
        the target year becomes the 28th.
        """
        today = today or datetime.now(timezone.utc).date()
        year = today.year - self.years_back
        try:
            return today.replace(year=year)
        except ValueError:
            return today.replace(year=year, day=28)


def load_config(
    organization: Optional[str] = None,
    years_back: int = DEFAULT_YEARS_BACK,
    include_impact: bool = False,
    output_path: str = DEFAULT_OUTPUT_PATH,
) -> Config:
    """Build and validate application configuration.

    Args:
        organization: Azure DevOps organization name. Falls back to the
            ``AZURE_DEVOPS_ORG`` environment variable, then ``itkennel``.
        years_back: Positive number of years of history to query.
        include_impact: Whether to estimate lines changed per pull request.
        output_path: Destination of the record CSV file.

    Returns:
        A validated ``Config`` instance.

    Raises:
        ConfigurationError: If ``years_back`` is not greater than ``0``.
        AuthenticationError: If ``AZURE_DEVOPS_PAT`` is not configured.
    """
    if years_back <= 0:
        raise ConfigurationError("Invalid value for 'years': expected an integer greater than 0.")

    pat: str = os.getenv("AZURE_DEVOPS_PAT", "").strip()
    if not pat:
        raise AuthenticationError(
            "Missing required Azure DevOps Personal Access Token. "
            "Set the 'AZURE_DEVOPS_PAT' environment variable before running a refresh."
        )

    resolved_organization = (
        organization or os.getenv("AZURE_DEVOPS_ORG", "").strip() or DEFAULT_ORGANIZATION
    )

    return Config(
        organization=resolved_organization,
        pat=pat,
        years_back=years_back,
        include_impact=include_impact,
        output_path=output_path,
    )
