"""Tests for configuration loading and cutoff dates."""

import sys
from datetime import date, datetime, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from prvelocity.config import Config, load_config
from prvelocity.errors import AuthenticationError, ConfigurationError


def test_load_config_reads_pat_and_organization_from_environment(monkeypatch):
    """Verify the PAT and fallback organization come from the environment."""
    monkeypatch.setenv("AZURE_DEVOPS_PAT", " secret ")
    monkeypatch.setenv("AZURE_DEVOPS_ORG", "contoso")

    config = load_config(years_back=1, include_impact=True)

    assert config.pat == "secret"
    assert config.organization == "contoso"
    assert config.include_impact is True


def test_load_config_prefers_explicit_organization_and_defaults(monkeypatch):
    """Verify an explicit organization wins and itkennel is the final default."""
    monkeypatch.setenv("AZURE_DEVOPS_PAT", "secret")
    monkeypatch.delenv("AZURE_DEVOPS_ORG", raising=False)

    assert load_config(organization="fabrikam").organization == "fabrikam"
    assert load_config().organization == "itkennel"


def test_load_config_missing_pat_raises_authentication_error(monkeypatch):
    """Verify a missing PAT is a fatal configuration error."""
    monkeypatch.delenv("AZURE_DEVOPS_PAT", raising=False)

    with pytest.raises(AuthenticationError):
        load_config()


def test_load_config_non_positive_years_raises_configuration_error(monkeypatch):
    """Verify years must be greater than zero."""
    monkeypatch.setenv("AZURE_DEVOPS_PAT", "secret")

    with pytest.raises(ConfigurationError):
        load_config(years_back=0)


def test_cutoff_date_moves_back_whole_years():
    """Verify the cutoff is the same calendar day years earlier, clamping Feb 29."""
    config = Config(organization="org", pat="p", years_back=2)

    assert config.cutoff_date(date(2026, 10, 18)) == date(2024, 10, 18)
    assert Config(organization="org", pat="p", years_back=1).cutoff_date(date(2024, 2, 29)) == date(2023, 2, 28)


def test_cutoff_date_defaults_to_utc_date():
    """Verify the default cutoff is computed from the current UTC date."""
    with patch("prvelocity.config.datetime") as mock_datetime:
        mock_datetime.now.return_value = datetime(2026, 1, 1, 2, 0, tzinfo=timezone.utc)
        cutoff = Config(organization="org", pat="p", years_back=2).cutoff_date()

    mock_datetime.now.assert_called_once_with(timezone.utc)
    assert cutoff == date(2024, 1, 1)
