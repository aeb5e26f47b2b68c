"""Tests for debt amortization and payoff strategies."""

from datetime import date
from decimal import Decimal

import pytest

from finledger.domain.constants import NEVER_PAYS_OFF_MONTHS
from finledger.domain.errors import ValidationError
from finledger.domain.models import StrategyDebt
from finledger.domain.services.amortization import (
    calculate_months_to_payoff,
    calculate_payoff_schedule,
    calculate_payoff_strategy,
    monthly_rate,
    order_debts,
)

TODAY = date(2024, 1, 31)


def test_monthly_rate_converts_annual_percentage():
    assert monthly_rate(Decimal("12")) == Decimal("0.01")
    assert monthly_rate(None) == 0


def test_zero_interest_schedule_is_balance_over_payment():
    schedule = calculate_payoff_schedule(
        principal=Decimal("1200.00"),
        interest_rate_annual=None,
        total_paid=Decimal("0"),
        monthly_payment=Decimal("100.00"),
        today=TODAY,
    )

    assert schedule.pays_off is True
    assert schedule.months_remaining == Decimal("12.0000")
    assert schedule.total_interest == Decimal("0.00")
    assert schedule.payoff_date == date(2025, 1, 31)


def test_zero_interest_allows_fractional_months():
    months = calculate_months_to_payoff(
        Decimal("250"),
        Decimal("100"),
        Decimal("0"),
    )

    assert months == Decimal("2.5")


def test_paid_off_debt_has_no_remaining_term():
    schedule = calculate_payoff_schedule(
        principal=Decimal("500.00"),
        interest_rate_annual=Decimal("10"),
        total_paid=Decimal("500.00"),
        monthly_payment=Decimal("50.00"),
        today=TODAY,
    )

    assert schedule.current_balance == Decimal("0.00")
    assert schedule.months_remaining == 0
    assert schedule.payoff_date == TODAY
    assert schedule.total_interest == Decimal("0.00")


def test_interest_bearing_debt_projects_months_and_interest():
    schedule = calculate_payoff_schedule(
        principal=Decimal("5000.00"),
        interest_rate_annual=Decimal("18.5"),
        total_paid=Decimal("0"),
        monthly_payment=Decimal("150.00"),
        today=TODAY,
    )

    assert schedule.pays_off is True
    assert Decimal("47") < schedule.months_remaining < Decimal("48")
    assert schedule.total_interest > 0
    assert Decimal("2000") < schedule.total_interest < Decimal("2150")
    assert schedule.payoff_date == date(2028, 1, 31)


def test_payment_below_interest_never_pays_off():
    schedule = calculate_payoff_schedule(
        principal=Decimal("5000.00"),
        interest_rate_annual=Decimal("18.5"),
        total_paid=Decimal("0"),
        monthly_payment=Decimal("50.00"),
        today=TODAY,
    )

    assert schedule.pays_off is False
    assert schedule.months_remaining == NEVER_PAYS_OFF_MONTHS
    assert schedule.payoff_date is None
    assert schedule.total_interest is None


def test_missing_payment_never_pays_off():
    schedule = calculate_payoff_schedule(
        principal=Decimal("100.00"),
        interest_rate_annual=None,
        total_paid=Decimal("0"),
        monthly_payment=None,
        today=TODAY,
    )

    assert schedule.pays_off is False


def _debt(debt_id, name, remaining, minimum, rate=None):
    return StrategyDebt(
        debt_id=debt_id,
        debt_name=name,
        remaining_balance=Decimal(remaining),
        min_payment=Decimal(minimum),
        interest_rate_annual=None if rate is None else Decimal(rate),
    )


def test_avalanche_orders_by_highest_rate():
    debts = [
        _debt("d1", "Car", "8000", "200", "6"),
        _debt("d2", "Card", "3000", "90", "24"),
        _debt("d3", "Store", "500", "25", "12"),
    ]

    ordered = order_debts(debts, "avalanche")

    assert [d.debt_id for d in ordered] == ["d2", "d3", "d1"]


def test_snowball_orders_by_lowest_balance_with_name_tiebreak():
    debts = [
        _debt("d1", "Zeta", "500", "25", "6"),
        _debt("d2", "Alpha", "500", "25", "24"),
        _debt("d3", "Big", "9000", "300", "3"),
    ]

    ordered = order_debts(debts, "snowball")

    assert [d.debt_id for d in ordered] == ["d2", "d1", "d3"]


def test_unknown_strategy_is_rejected():
    with pytest.raises(ValidationError):
        order_debts([], "random")


def test_strategy_cascades_minimum_payments_into_extra():
    debts = [
        _debt("small", "Small", "600", "50"),
        _debt("large", "Large", "2400", "100"),
        _debt("done", "Done", "0", "30"),
    ]

    plan = calculate_payoff_strategy(debts, Decimal("50"), "snowball", TODAY)

    assert [p.debt_id for p in plan] == ["small", "large"]
    assert plan[0].schedule.monthly_payment == Decimal("100.00")
    assert plan[0].schedule.months_remaining == Decimal("6.0000")
    # 50 extra plus the 50 minimum freed by the first debt.
    assert plan[1].schedule.monthly_payment == Decimal("200.00")
    assert plan[1].schedule.months_remaining == Decimal("12.0000")


def test_strategy_rejects_negative_extra_payment():
    with pytest.raises(ValidationError):
        calculate_payoff_strategy([], Decimal("-1"), "avalanche", TODAY)


def test_payoff_beyond_projection_horizon_is_reported_open_ended():
    schedule = calculate_payoff_schedule(
        principal=Decimal("1000000.00"),
        interest_rate_annual=None,
        total_paid=Decimal("0"),
        monthly_payment=Decimal("0.01"),
        today=TODAY,
    )

    assert schedule.pays_off is False
    assert schedule.months_remaining == NEVER_PAYS_OFF_MONTHS
    assert schedule.payoff_date is None
    assert schedule.total_interest is None


def test_payoff_near_the_end_of_the_calendar_has_no_date():
    schedule = calculate_payoff_schedule(
        principal=Decimal("1200.00"),
        interest_rate_annual=None,
        total_paid=Decimal("0"),
        monthly_payment=Decimal("10.00"),
        today=date(9995, 6, 30),
    )

    assert schedule.pays_off is False
    assert schedule.payoff_date is None


@pytest.mark.parametrize("extra", ["abc", "NaN", Decimal("Infinity")])
def test_strategy_rejects_non_numeric_extra_payment(extra):
    debt = StrategyDebt(
        debt_id="d1",
        debt_name="Card",
        remaining_balance=Decimal("100"),
        min_payment=Decimal("10"),
        interest_rate_annual=None,
    )

    with pytest.raises(ValidationError):
        calculate_payoff_strategy([debt], extra, "avalanche", TODAY)
