"""Debt amortization and multi-debt payoff strategies.

All computations are pure functions over Decimals so identical inputs always
produce identical projections. The annuity payoff formula uses
``Decimal.ln`` to stay in exact decimal arithmetic.
"""

from collections.abc import Iterable
from datetime import date
from decimal import ROUND_CEILING, Decimal

from finledger.domain.constants import (
    NEVER_PAYS_OFF_MONTHS,
    PROJECTION_HORIZON_MONTHS,
    STRATEGY_AVALANCHE,
    STRATEGY_SNOWBALL,
)
from finledger.domain.errors import ValidationError
from finledger.domain.models import (
    DebtPayoffProjection,
    PayoffSchedule,
    StrategyDebt,
)
from finledger.domain.services.calendar_utils import add_months_within
from finledger.utils.decimal_utils import (
    coerce_decimal,
    parse_decimal,
    to_money,
)

MONTHS_QUANTUM = Decimal("0.0001")


def monthly_rate(interest_rate_annual: Decimal | None) -> Decimal:
    """Convert an annual percentage rate to a monthly fraction."""
    if not interest_rate_annual:
        return Decimal("0")
    return coerce_decimal(interest_rate_annual) / 100 / 12


def calculate_months_to_payoff(
    balance: Decimal,
    payment: Decimal,
    rate: Decimal,
) -> Decimal | None:
    """Return the fractional months needed to repay a balance.

    Args:
        balance: Outstanding balance, strictly positive.
        payment: Monthly payment.
        rate: Monthly interest rate as a fraction.

    Returns:
        Decimal | None: Months until payoff, or None when the payment never
        reduces the principal.
    """
    if payment <= 0:
        return None
    if rate == 0:
        return balance / payment
    if payment <= balance * rate:
        return None
    one = Decimal("1")
    return -(one - balance * rate / payment).ln() / (one + rate).ln()


def calculate_payoff_schedule(
    principal: Decimal,
    interest_rate_annual: Decimal | None,
    total_paid: Decimal,
    monthly_payment: Decimal | None,
    today: date,
) -> PayoffSchedule:
    """Project the payoff of a single debt.

    Args:
        principal: Original amount financed.
        interest_rate_annual: Annual rate in percent, None for no interest.
        total_paid: Sum of payments recorded so far.
        monthly_payment: Payment applied every month.
        today: Reference date for the payoff date.

    Returns:
        PayoffSchedule: Current balance, months remaining, total interest and
        payoff date. A payment that never covers the interest, or that
        needs more than ``PROJECTION_HORIZON_MONTHS`` months, yields
        ``pays_off=False`` with ``NEVER_PAYS_OFF_MONTHS``.
    """
    current_balance = max(
        Decimal("0"),
        coerce_decimal(principal) - coerce_decimal(total_paid),
    )
    payment = coerce_decimal(monthly_payment)
    if current_balance <= 0:
        return PayoffSchedule(
            current_balance=to_money(current_balance),
            monthly_payment=to_money(payment),
            total_interest=Decimal("0.00"),
            months_remaining=Decimal("0"),
            payoff_date=today,
        )

    months = calculate_months_to_payoff(
        current_balance,
        payment,
        monthly_rate(interest_rate_annual),
    )
    payoff_date = None
    if months is not None:
        whole_months = int(months.to_integral_value(rounding=ROUND_CEILING))
        payoff_date = add_months_within(
            today,
            whole_months,
            PROJECTION_HORIZON_MONTHS,
        )
    if payoff_date is None:
        return PayoffSchedule(
            current_balance=to_money(current_balance),
            monthly_payment=to_money(payment),
            total_interest=None,
            months_remaining=NEVER_PAYS_OFF_MONTHS,
            payoff_date=None,
            pays_off=False,
        )

    total_interest = max(Decimal("0"), payment * months - current_balance)
    return PayoffSchedule(
        current_balance=to_money(current_balance),
        monthly_payment=to_money(payment),
        total_interest=to_money(total_interest),
        months_remaining=months.quantize(MONTHS_QUANTUM),
        payoff_date=payoff_date,
    )


def order_debts(
    debts: Iterable[StrategyDebt],
    strategy: str,
) -> list[StrategyDebt]:
    """Order debts by payoff priority.

    Args:
        debts: Debts to order.
        strategy: ``avalanche`` (highest rate first) or ``snowball``
            (lowest remaining balance first).

    Returns:
        list[StrategyDebt]: Debts in payoff order; ties break on name, id.

    Raises:
        ValidationError: If the strategy is unknown.
    """
    if strategy == STRATEGY_AVALANCHE:
        return sorted(
            debts,
            key=lambda d: (
                -monthly_rate(d.interest_rate_annual),
                d.debt_name,
                d.debt_id,
            ),
        )
    if strategy == STRATEGY_SNOWBALL:
        return sorted(
            debts,
            key=lambda d: (d.remaining_balance, d.debt_name, d.debt_id),
        )
    raise ValidationError(f"Unknown payoff strategy: {strategy}")


def calculate_payoff_strategy(
    debts: Iterable[StrategyDebt],
    extra_payment: Decimal,
    strategy: str,
    today: date,
) -> list[DebtPayoffProjection]:
    """Project a cascading multi-debt payoff plan.

    The extra payment goes to the first debt in strategy order. Once a debt
    is projected as paid off, its minimum payment joins the extra payment
    applied to the next debt.

    Args:
        debts: Debts with their remaining balances and minimum payments.
        extra_payment: Monthly amount on top of the minimum payments.
        strategy: ``avalanche`` or ``snowball``.
        today: Reference date for payoff dates.

    Returns:
        list[DebtPayoffProjection]: One projection per unpaid debt, in
        payoff order.

    Raises:
        ValidationError: If the extra payment is not a non-negative number
            or the strategy is unknown.
    """
    extra = parse_decimal(extra_payment, "extra_payment")
    if extra < 0:
        raise ValidationError("Extra payment must not be negative")
    outstanding = [debt for debt in debts if debt.remaining_balance > 0]

    projections: list[DebtPayoffProjection] = []
    for debt in order_debts(outstanding, strategy):
        schedule = calculate_payoff_schedule(
            principal=debt.remaining_balance,
            interest_rate_annual=debt.interest_rate_annual,
            total_paid=Decimal("0"),
            monthly_payment=debt.min_payment + extra,
            today=today,
        )
        projections.append(
            DebtPayoffProjection(
                debt_id=debt.debt_id,
                debt_name=debt.debt_name,
                schedule=schedule,
            )
        )
        extra += debt.min_payment
    return projections


__all__ = [
    "monthly_rate",
    "calculate_months_to_payoff",
    "calculate_payoff_schedule",
    "order_debts",
    "calculate_payoff_strategy",
]
