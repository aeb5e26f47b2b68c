"""Tests for infrastructure settings."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from finledger.infrastructure import settings as settings_module
from finledger.infrastructure.settings import LedgerSettings


@pytest.fixture
def fake_logger(monkeypatch):
    logger = MagicMock()
    monkeypatch.setattr(settings_module, "get_app_logger", lambda: logger)
    return logger


def test_from_env_defaults(monkeypatch, fake_logger) -> None:
    """Unset variables should keep the default thresholds."""
    monkeypatch.delenv("LEDGER_BUDGET_ALERT_THRESHOLD", raising=False)
    monkeypatch.delenv("LEDGER_BUDGET_WARNING_PERCENT", raising=False)

    settings = LedgerSettings.from_env()

    assert settings.budget_alert_threshold == Decimal("80")
    assert settings.budget_warning_percent == Decimal("80")
    fake_logger.warning.assert_not_called()


def test_from_env_reads_percentages(monkeypatch, fake_logger) -> None:
    """Numeric values between 0 and 100 should be used as-is."""
    monkeypatch.setenv("LEDGER_BUDGET_ALERT_THRESHOLD", "75.5")
    monkeypatch.setenv("LEDGER_BUDGET_WARNING_PERCENT", " 90 ")

    settings = LedgerSettings.from_env()

    assert settings.budget_alert_threshold == Decimal("75.5")
    assert settings.budget_warning_percent == Decimal("90")


@pytest.mark.parametrize("raw", ["abc", "150", "-1", "NaN"])
def test_from_env_ignores_invalid_values(monkeypatch, fake_logger, raw) -> None:
    """Invalid values should fall back to the default with a warning."""
    monkeypatch.setenv("LEDGER_BUDGET_ALERT_THRESHOLD", raw)
    monkeypatch.delenv("LEDGER_BUDGET_WARNING_PERCENT", raising=False)

    settings = LedgerSettings.from_env()

    assert settings.budget_alert_threshold == Decimal("80")
    fake_logger.warning.assert_called_once()
