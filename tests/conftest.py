"""Shared fixtures for ledger tests backed by an in-memory SQLite database."""

from datetime import date
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from finledger.application.requests import CreateAccountInput
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
from finledger.infrastructure.db import SqlAlchemyDatabaseEngineAdapter
from finledger.infrastructure.ledger_store import SqlAlchemyLedgerStore
from finledger.infrastructure.schema import create_schema

OWNER = "owner-1"
OTHER_OWNER = "owner-2"
TODAY = date(2024, 3, 15)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    create_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def fake_logger():
    return MagicMock()


@pytest.fixture
def store(engine, fake_logger):
    return SqlAlchemyLedgerStore(
        SqlAlchemyDatabaseEngineAdapter(engine),
        logger=fake_logger,
    )


@pytest.fixture
def accounts(store, fake_logger):
    return AccountsUseCase(store, logger=fake_logger)


@pytest.fixture
def transactions(store, fake_logger):
    return TransactionsUseCase(store, logger=fake_logger)


@pytest.fixture
def transfers(store, fake_logger):
    return TransfersUseCase(store, logger=fake_logger)


@pytest.fixture
def debts(store, fake_logger):
    return DebtsUseCase(store, logger=fake_logger)


@pytest.fixture
def notifier():
    return MagicMock()


@pytest.fixture
def goals(store, notifier, fake_logger):
    return GoalsUseCase(store, notifier=notifier, logger=fake_logger)


@pytest.fixture
def budgets(store, notifier, fake_logger):
    return BudgetsUseCase(store, notifier=notifier, logger=fake_logger)


@pytest.fixture
def categories(store, fake_logger):
    return CategoriesUseCase(store, logger=fake_logger)


@pytest.fixture
def reports(store, fake_logger):
    return ReportsUseCase(store, logger=fake_logger)


@pytest.fixture
def make_account(accounts):
    """Return a factory creating accounts for the default owner."""

    def _make(
        name: str = "Checking",
        opening_balance: str = "0",
        currency: str = "USD",
        owner_id: str = OWNER,
        account_type: str = "debit",
    ):
        return accounts.create(
            owner_id,
            CreateAccountInput(
                name=name,
                type=account_type,
                currency=currency,
                opening_balance=Decimal(opening_balance),
            ),
            today=TODAY,
        )

    return _make
