from datetime import date
from decimal import Decimal

import pytest

from finledger.application.requests import (
    CreateAccountInput,
    CreateTransactionInput,
    UpdateAccountInput,
)
from finledger.domain.errors import NotFoundError, ValidationError

OWNER = "owner-1"


def test_create_posts_opening_balance_as_adjustment(
    make_account,
    transactions,
):
    account = make_account(opening_balance="250.00")

    assert account.balance_current == Decimal("250.00")
    history = transactions.list_transactions(OWNER)
    assert len(history) == 1
    opening = history[0]
    assert opening.type == "adjustment"
    assert opening.direction == "inflow"
    assert opening.description == "Opening balance"
    assert opening.txn_date == date(2024, 3, 15)


def test_negative_opening_balance_is_an_outflow(make_account, transactions):
    account = make_account(account_type="credit", opening_balance="-80.00")

    assert account.balance_current == Decimal("-80.00")
    (opening,) = transactions.list_transactions(OWNER)
    assert opening.direction == "outflow"
    assert opening.amount == Decimal("80.00")


def test_zero_opening_balance_records_nothing(make_account, transactions):
    account = make_account()

    assert account.balance_current == Decimal("0.00")
    assert transactions.list_transactions(OWNER) == []


def test_create_normalizes_currency_and_validates_type(accounts):
    account = accounts.create(
        OWNER,
        CreateAccountInput(name="Wallet", type="cash", currency="eur"),
    )
    assert account.currency == "EUR"

    with pytest.raises(ValidationError):
        accounts.create(
            OWNER,
            CreateAccountInput(name="Odd", type="crypto", currency="USD"),
        )
    with pytest.raises(ValidationError):
        accounts.create(
            OWNER,
            CreateAccountInput(name="  ", type="cash", currency="USD"),
        )


def test_accounts_are_scoped_to_their_owner(make_account, accounts):
    account = make_account()

    with pytest.raises(NotFoundError):
        accounts.get("owner-2", account.id)
    assert accounts.list_accounts("owner-2") == []


def test_update_and_archive(make_account, accounts):
    account = make_account()

    renamed = accounts.update(
        OWNER,
        account.id,
        UpdateAccountInput(name="Main", metadata={"bank": "ACME"}),
    )
    archived = accounts.archive(OWNER, account.id)

    assert renamed.name == "Main"
    assert renamed.metadata == {"bank": "ACME"}
    assert archived.archived is True
    assert accounts.list_accounts(OWNER, archived=False) == []
    assert [a.id for a in accounts.list_accounts(OWNER, archived=True)] == [
        account.id
    ]


def test_list_filters_by_type(make_account, accounts):
    make_account(name="Cash", account_type="cash")
    savings = make_account(name="Rainy day", account_type="savings")

    listed = accounts.list_accounts(OWNER, account_type="savings")

    assert [a.id for a in listed] == [savings.id]


def test_adjust_balance_records_correction(make_account, accounts):
    account = make_account(opening_balance="100.00")

    adjustment = accounts.adjust_balance(
        OWNER,
        account.id,
        Decimal("-30.00"),
        today=date(2024, 3, 20),
    )

    assert adjustment.type == "adjustment"
    assert adjustment.direction == "outflow"
    assert adjustment.description == "Balance adjustment"
    assert accounts.get(OWNER, account.id).balance_current == Decimal("70.00")


def test_adjust_balance_rejects_zero_and_fractions(make_account, accounts):
    account = make_account()

    with pytest.raises(ValidationError):
        accounts.adjust_balance(OWNER, account.id, "0")
    with pytest.raises(ValidationError):
        accounts.adjust_balance(OWNER, account.id, "1.005")


def test_delete_only_accounts_without_history(
    make_account,
    accounts,
    transactions,
):
    empty = make_account(name="Empty")
    used = make_account(name="Used")
    transactions.create(
        OWNER,
        CreateTransactionInput(
            account_id=used.id,
            type="income",
            amount=Decimal("10.00"),
            currency="USD",
            txn_date=date(2024, 3, 1),
        ),
    )

    accounts.delete(OWNER, empty.id)

    with pytest.raises(NotFoundError):
        accounts.get(OWNER, empty.id)
    with pytest.raises(ValidationError, match="archive it instead"):
        accounts.delete(OWNER, used.id)
