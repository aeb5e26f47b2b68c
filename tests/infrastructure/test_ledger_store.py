"""Tests for the SQLAlchemy ledger store."""

from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from finledger.domain.errors import ConflictError, StorageError, ValidationError
from finledger.domain.models import Account, Transaction
from finledger.infrastructure.ledger_store import SqlAlchemyLedgerStore

OWNER = "owner-1"


def _account(account_id="acc-1"):
    now = datetime(2024, 3, 15, tzinfo=timezone.utc)
    return Account(
        id=account_id,
        owner_id=OWNER,
        name="Checking",
        type="debit",
        currency="USD",
        balance_current=Decimal("0.00"),
        metadata={"bank": "ACME"},
        created_at=now,
        updated_at=now,
    )


def test_unit_of_work_commits_on_success(store):
    with store.unit_of_work() as session:
        session.insert_account(_account())
        session.apply_balance_delta("acc-1", Decimal("12.34"))

    with store.unit_of_work() as session:
        stored = session.get_account(OWNER, "acc-1")

    assert stored.balance_current == Decimal("12.34")
    assert stored.metadata == {"bank": "ACME"}


def test_unit_of_work_rolls_back_on_domain_error(store):
    with pytest.raises(ValidationError):
        with store.unit_of_work() as session:
            session.insert_account(_account())
            raise ValidationError("stop")

    with store.unit_of_work() as session:
        assert session.get_account(OWNER, "acc-1") is None


def test_integrity_error_becomes_conflict(store, fake_logger):
    with pytest.raises(ConflictError):
        with store.unit_of_work() as session:
            session.insert_account(_account())
            session.insert_account(_account())

    fake_logger.warning.assert_called_once()
    with store.unit_of_work() as session:
        assert session.list_accounts(OWNER) == []


def test_database_failure_becomes_storage_error_with_reference():
    logger = MagicMock()
    db_port = MagicMock()
    db_port.get_ledger_engine.side_effect = OperationalError(
        "connect",
        {},
        Exception("connection refused"),
    )
    store = SqlAlchemyLedgerStore(db_port, logger=logger)

    with pytest.raises(StorageError) as excinfo:
        with store.unit_of_work():
            pass

    error = excinfo.value
    assert error.to_dict()["kind"] == "INTERNAL_RETRYABLE"
    assert error.to_dict()["reference"] == error.reference
    assert "connection refused" not in error.message
    (message,) = logger.error.call_args.args
    assert f"ref={error.reference}" in message


def test_zero_delta_leaves_balance_untouched(store):
    with store.unit_of_work() as session:
        session.insert_account(_account())
        session.apply_balance_delta("acc-1", Decimal("0"))
        account = session.get_account(OWNER, "acc-1")

    assert account.balance_current == Decimal("0.00")


def test_rows_are_scoped_to_their_owner(store):
    with store.unit_of_work() as session:
        session.insert_account(_account())

    with store.unit_of_work() as session:
        assert session.get_account("owner-2", "acc-1") is None
        assert session.list_accounts("owner-2") == []
        assert session.count_account_transactions("acc-1") == 0


def test_check_constraints_reject_non_positive_amounts(store, fake_logger):
    with store.unit_of_work() as session:
        session.insert_account(_account())

    with pytest.raises(ConflictError):
        with store.unit_of_work() as session:
            session.insert_transaction(
                Transaction(
                    id="txn-1",
                    owner_id=OWNER,
                    account_id="acc-1",
                    type="expense",
                    direction="outflow",
                    amount=Decimal("0.00"),
                    currency="USD",
                    txn_date=date(2024, 3, 15),
                    created_at=datetime(2024, 3, 15, tzinfo=timezone.utc),
                    updated_at=datetime(2024, 3, 15, tzinfo=timezone.utc),
                )
            )

    fake_logger.warning.assert_called_once()
    with store.unit_of_work() as session:
        assert session.get_transaction(OWNER, "txn-1") is None
