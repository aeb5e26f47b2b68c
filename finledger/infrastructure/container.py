"""Composition root for wiring infrastructure adapters."""

from finledger.application.ports.category_suggestion import (
    CategorySuggestionPort,
)
from finledger.application.ports.database import DatabaseEnginePort
from finledger.application.ports.ledger_store import LedgerStorePort
from finledger.application.ports.notifications import (
    NotificationDispatcherPort,
)
from finledger.application.use_cases import (
    AccountsUseCase,
    BudgetsUseCase,
    CategoriesUseCase,
    DebtsUseCase,
    GoalsUseCase,
    ReportsUseCase,
    TransactionsUseCase,
    TransfersUseCase,
)
from finledger.infrastructure.category_suggester import HistoryCategorySuggester
from finledger.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from finledger.infrastructure.ledger_store import SqlAlchemyLedgerStore
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.infrastructure.notifications import LoggingNotificationDispatcher
from finledger.infrastructure.settings import LedgerSettings


def build_database_adapter() -> DatabaseEnginePort:
    """Return the database adapter instance."""
    return SqlAlchemyDatabaseEngineAdapter()


def build_ledger_store(
    db_port: DatabaseEnginePort | None = None,
) -> LedgerStorePort:
    """Return the SQLAlchemy ledger store."""
    resolved_db = db_port or build_database_adapter()
    return SqlAlchemyLedgerStore(resolved_db, logger=get_app_logger())


def build_category_suggester(store: LedgerStorePort) -> CategorySuggestionPort:
    """Return the history-based category suggester."""
    return HistoryCategorySuggester(store, logger=get_app_logger())


def build_notification_dispatcher() -> NotificationDispatcherPort:
    """Return the notification dispatcher."""
    return LoggingNotificationDispatcher()


def build_accounts_use_case(store: LedgerStorePort) -> AccountsUseCase:
    return AccountsUseCase(store, logger=get_app_logger())


def build_transactions_use_case(store: LedgerStorePort) -> TransactionsUseCase:
    return TransactionsUseCase(
        store,
        category_suggester=build_category_suggester(store),
        logger=get_app_logger(),
    )


def build_transfers_use_case(store: LedgerStorePort) -> TransfersUseCase:
    return TransfersUseCase(store, logger=get_app_logger())


def build_debts_use_case(store: LedgerStorePort) -> DebtsUseCase:
    return DebtsUseCase(store, logger=get_app_logger())


def build_goals_use_case(store: LedgerStorePort) -> GoalsUseCase:
    return GoalsUseCase(
        store,
        notifier=build_notification_dispatcher(),
        logger=get_app_logger(),
    )


def build_budgets_use_case(store: LedgerStorePort) -> BudgetsUseCase:
    """Return the budgets use case configured from the environment."""
    settings = LedgerSettings.from_env()
    return BudgetsUseCase(
        store,
        notifier=build_notification_dispatcher(),
        alert_threshold=settings.budget_alert_threshold,
        warning_percent=settings.budget_warning_percent,
        logger=get_app_logger(),
    )


def build_categories_use_case(store: LedgerStorePort) -> CategoriesUseCase:
    return CategoriesUseCase(store, logger=get_app_logger())


def build_reports_use_case(store: LedgerStorePort) -> ReportsUseCase:
    return ReportsUseCase(store, logger=get_app_logger())


__all__ = [
    "build_database_adapter",
    "build_ledger_store",
    "build_category_suggester",
    "build_notification_dispatcher",
    "build_accounts_use_case",
    "build_transactions_use_case",
    "build_transfers_use_case",
    "build_debts_use_case",
    "build_goals_use_case",
    "build_budgets_use_case",
    "build_categories_use_case",
    "build_reports_use_case",
]
