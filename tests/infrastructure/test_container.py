"""Tests for the composition root."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest

from finledger.application.use_cases import (
    BudgetsUseCase,
    ReportsUseCase,
    TransactionsUseCase,
)
from finledger.infrastructure import container
from finledger.infrastructure import settings as settings_module
from finledger.infrastructure.category_suggester import HistoryCategorySuggester
from finledger.infrastructure.ledger_store import SqlAlchemyLedgerStore
from finledger.infrastructure.notifications import LoggingNotificationDispatcher


@pytest.fixture(autouse=True)
def fake_loggers(monkeypatch):
    logger = MagicMock()
    monkeypatch.setattr(container, "get_app_logger", lambda: logger)
    monkeypatch.setattr(settings_module, "get_app_logger", lambda: logger)
    monkeypatch.setattr(
        "finledger.infrastructure.notifications.get_usage_logger",
        lambda: logger,
    )
    return logger


def test_build_ledger_store_uses_given_port() -> None:
    """An explicit database port should be wired into the store."""
    db_port = MagicMock()

    store = container.build_ledger_store(db_port=db_port)

    assert isinstance(store, SqlAlchemyLedgerStore)
    assert store._db_port is db_port


def test_transactions_use_case_gets_history_suggester() -> None:
    """Transactions should be wired with the history-based suggester."""
    store = container.build_ledger_store(db_port=MagicMock())

    use_case = container.build_transactions_use_case(store)

    assert isinstance(use_case, TransactionsUseCase)
    assert isinstance(use_case._category_suggester, HistoryCategorySuggester)


def test_budgets_use_case_reads_thresholds(monkeypatch) -> None:
    """Budget thresholds should come from the environment."""
    monkeypatch.setenv("LEDGER_BUDGET_ALERT_THRESHOLD", "70")
    monkeypatch.setenv("LEDGER_BUDGET_WARNING_PERCENT", "95")
    store = container.build_ledger_store(db_port=MagicMock())

    use_case = container.build_budgets_use_case(store)

    assert isinstance(use_case, BudgetsUseCase)
    assert use_case._alert_threshold == Decimal("70")
    assert use_case._warning_percent == Decimal("95")
    assert isinstance(use_case._notifier, LoggingNotificationDispatcher)


def test_reports_use_case_uses_app_logger(fake_loggers) -> None:
    """Reports should share the store and log through the app logger."""
    store = container.build_ledger_store(db_port=MagicMock())

    use_case = container.build_reports_use_case(store)

    assert isinstance(use_case, ReportsUseCase)
    assert use_case._store is store
    assert use_case._logger is fake_loggers
