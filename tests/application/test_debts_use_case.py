from datetime import date
from decimal import Decimal

import pytest

from finledger.application.requests import (
    CreateDebtInput,
    CreateDebtPaymentInput,
    CreateTransactionInput,
    UpdateDebtInput,
)
from finledger.domain.errors import (
    ConflictError,
    DebtOverpaymentError,
    NotFoundError,
    ValidationError,
)

OWNER = "owner-1"
TODAY = date(2024, 3, 15)


@pytest.fixture
def checking(make_account):
    return make_account(opening_balance="20000.00")


@pytest.fixture
def pay_from(transactions, checking):
    """Return a factory recording the expense that funds a payment."""

    def _pay(amount):
        return transactions.create(
            OWNER,
            CreateTransactionInput(
                account_id=checking.id,
                type="expense",
                amount=Decimal(amount),
                currency="USD",
                txn_date=TODAY,
            ),
        )

    return _pay


def _debt(debts, name="Car loan", principal="5000.00", **kwargs):
    values = {
        "name": name,
        "kind": "loan",
        "principal": Decimal(principal),
        "start_date": date(2024, 1, 1),
    }
    values.update(kwargs)
    return debts.create(OWNER, CreateDebtInput(**values))


def _payment(debt_id, transaction_id, amount):
    return CreateDebtPaymentInput(
        debt_id=debt_id,
        transaction_id=transaction_id,
        amount=Decimal(amount),
        date=TODAY,
    )


def test_payment_reduces_remaining_balance_until_paid_off(debts, pay_from):
    view = _debt(debts)
    assert view.remaining_balance == Decimal("5000.00")

    txn = pay_from("5000.00")
    debts.create_payment(OWNER, _payment(view.debt.id, txn.id, "5000.00"))

    paid = debts.get(OWNER, view.debt.id)
    assert paid.total_paid == Decimal("5000.00")
    assert paid.remaining_balance == Decimal("0.00")

    extra = pay_from("0.01")
    with pytest.raises(DebtOverpaymentError):
        debts.create_payment(OWNER, _payment(view.debt.id, extra.id, "0.01"))


def test_overpayment_is_rejected_with_balance_in_message(debts, pay_from):
    view = _debt(debts, principal="100.00")
    txn = pay_from("150.00")

    with pytest.raises(DebtOverpaymentError, match=r"\(100.00\)"):
        debts.create_payment(OWNER, _payment(view.debt.id, txn.id, "150.00"))

    assert debts.list_payments(OWNER, view.debt.id) == []


def test_transaction_funds_at_most_one_payment(debts, pay_from):
    first = _debt(debts, name="First")
    second = _debt(debts, name="Second")
    txn = pay_from("100.00")
    debts.create_payment(OWNER, _payment(first.debt.id, txn.id, "100.00"))

    with pytest.raises(ConflictError):
        debts.create_payment(OWNER, _payment(second.debt.id, txn.id, "100.00"))


def test_payment_checks_debt_then_transaction(debts, pay_from):
    view = _debt(debts)
    txn = pay_from("10.00")

    with pytest.raises(NotFoundError, match="Debt"):
        debts.create_payment(OWNER, _payment("missing", "missing", "0"))
    with pytest.raises(NotFoundError, match="Transaction"):
        debts.create_payment(OWNER, _payment(view.debt.id, "missing", "0"))
    with pytest.raises(ValidationError):
        debts.create_payment(OWNER, _payment(view.debt.id, txn.id, "0"))


def test_create_validates_rate_dates_and_linked_account(debts, checking):
    with pytest.raises(ValidationError):
        _debt(debts, interest_rate_annual=Decimal("101"))
    with pytest.raises(ValidationError):
        _debt(debts, due_date=date(2023, 12, 31))
    with pytest.raises(ValidationError):
        _debt(debts, kind="gambling")
    with pytest.raises(NotFoundError):
        _debt(debts, linked_account_id="missing")

    linked = _debt(debts, linked_account_id=checking.id)
    assert linked.debt.linked_account_id == checking.id


def test_update_and_list_by_kind(debts):
    loan = _debt(debts)
    card = _debt(debts, name="Visa", kind="credit_card")

    updated = debts.update(
        OWNER,
        card.debt.id,
        UpdateDebtInput(interest_rate_annual=Decimal("24.99")),
    )

    assert updated.debt.interest_rate_annual == Decimal("24.99")
    assert [v.debt.id for v in debts.list_debts(OWNER, kind="loan")] == [
        loan.debt.id
    ]


def test_delete_only_debts_without_payments(debts, pay_from):
    unused = _debt(debts, name="Unused")
    used = _debt(debts, name="Used")
    txn = pay_from("10.00")
    debts.create_payment(OWNER, _payment(used.debt.id, txn.id, "10.00"))

    debts.delete(OWNER, unused.debt.id)

    with pytest.raises(NotFoundError):
        debts.get(OWNER, unused.debt.id)
    with pytest.raises(ValidationError):
        debts.delete(OWNER, used.debt.id)


def test_payoff_schedule_uses_minimum_or_override(debts):
    view = _debt(
        debts,
        interest_rate_annual=Decimal("18.5"),
        min_payment_amount=Decimal("150.00"),
    )

    schedule = debts.payoff_schedule(OWNER, view.debt.id, today=TODAY)
    starved = debts.payoff_schedule(
        OWNER,
        view.debt.id,
        monthly_payment=Decimal("50.00"),
        today=TODAY,
    )

    assert schedule.pays_off is True
    assert schedule.months_remaining > 0
    assert schedule.total_interest > 0
    assert starved.pays_off is False
    assert starved.months_remaining == Decimal("999")


def test_summary_totals_and_orders_projections(debts, pay_from):
    slow = _debt(
        debts,
        name="Slow",
        principal="1200.00",
        min_payment_amount=Decimal("100.00"),
    )
    _debt(
        debts,
        name="Fast",
        principal="300.00",
        min_payment_amount=Decimal("100.00"),
    )
    _debt(
        debts,
        name="Stuck",
        principal="5000.00",
        interest_rate_annual=Decimal("18.5"),
        min_payment_amount=Decimal("10.00"),
    )
    _debt(debts, name="No minimum", principal="50.00")
    txn = pay_from("200.00")
    debts.create_payment(OWNER, _payment(slow.debt.id, txn.id, "200.00"))

    summary = debts.summary(OWNER, today=TODAY)

    assert summary.total_debt == Decimal("6550.00")
    assert summary.total_paid == Decimal("200.00")
    assert summary.total_remaining == Decimal("6350.00")
    assert summary.total_monthly_payments == Decimal("210.00")
    assert [p.debt_name for p in summary.payoff_projections] == [
        "Fast",
        "Slow",
        "Stuck",
    ]


def test_payoff_strategy_over_selected_debts(debts):
    small = _debt(debts, name="Small", principal="600.00", min_payment_amount=Decimal("50.00"))
    large = _debt(debts, name="Large", principal="2400.00", min_payment_amount=Decimal("100.00"))

    plan = debts.payoff_strategy(
        OWNER,
        [large.debt.id, small.debt.id],
        extra_payment=Decimal("50.00"),
        strategy="snowball",
        today=TODAY,
    )

    assert [p.debt_id for p in plan] == [small.debt.id, large.debt.id]
    assert plan[1].schedule.monthly_payment == Decimal("200.00")
    with pytest.raises(NotFoundError):
        debts.payoff_strategy(OWNER, [small.debt.id, "missing"], today=TODAY)
    with pytest.raises(ValidationError):
        debts.payoff_strategy(OWNER, [small.debt.id], strategy="random", today=TODAY)


def test_tiny_minimum_payment_does_not_break_projections(debts):
    glacial = _debt(
        debts,
        name="Glacial",
        principal="1000000.00",
        min_payment_amount=Decimal("0.01"),
    )

    schedule = debts.payoff_schedule(OWNER, glacial.debt.id, today=TODAY)
    summary = debts.summary(OWNER, today=TODAY)
    plan = debts.payoff_strategy(OWNER, [glacial.debt.id], today=TODAY)

    assert schedule.pays_off is False
    assert schedule.payoff_date is None
    assert [p.schedule.pays_off for p in summary.payoff_projections] == [False]
    assert plan[0].schedule.months_remaining == Decimal("999")


def test_payoff_strategy_rejects_non_numeric_extra_payment(debts):
    view = _debt(debts, min_payment_amount=Decimal("100.00"))

    with pytest.raises(ValidationError):
        debts.payoff_strategy(OWNER, [view.debt.id], extra_payment="abc", today=TODAY)


def test_create_rejects_non_numeric_rate(debts):
    with pytest.raises(ValidationError):
        _debt(debts, interest_rate_annual="high")
