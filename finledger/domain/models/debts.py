"""Domain models for debts and payoff projections."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class Debt:
    """Amount financed by a user, repaid through debt payments."""

    id: str
    owner_id: str
    name: str
    kind: str
    principal: Decimal
    start_date: date
    interest_rate_annual: Decimal | None = None
    min_payment_amount: Decimal | None = None
    due_date: date | None = None
    linked_account_id: str | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class DebtPayment:
    id: str
    debt_id: str
    transaction_id: str
    amount: Decimal
    date: date


@dataclass(frozen=True)
class DebtView:
    """Debt with its derived payment totals."""

    debt: Debt
    total_paid: Decimal
    remaining_balance: Decimal


@dataclass(frozen=True)
class PayoffSchedule:
    """Projection of how a single debt is paid off.

    Attributes:
        months_remaining: Fractional months until payoff. Equals
            ``NEVER_PAYS_OFF_MONTHS`` when ``pays_off`` is False.
        total_interest: Interest paid over the projection, None when the
            debt never pays off.
        payoff_date: Projected payoff date, None when the debt never pays off.
        pays_off: False when the payment never covers the monthly interest.
    """

    current_balance: Decimal
    monthly_payment: Decimal
    total_interest: Decimal | None
    months_remaining: Decimal
    payoff_date: date | None
    pays_off: bool = True


@dataclass(frozen=True)
class DebtPayoffProjection:
    """Payoff schedule attached to a named debt."""

    debt_id: str
    debt_name: str
    schedule: PayoffSchedule


@dataclass(frozen=True)
class StrategyDebt:
    """Inputs of a multi-debt strategy for one debt."""

    debt_id: str
    debt_name: str
    remaining_balance: Decimal
    min_payment: Decimal
    interest_rate_annual: Decimal | None = None


@dataclass(frozen=True)
class DebtSummary:
    total_debt: Decimal
    total_paid: Decimal
    total_remaining: Decimal
    total_monthly_payments: Decimal
    payoff_projections: list[DebtPayoffProjection]


__all__ = [
    "Debt",
    "DebtPayment",
    "DebtView",
    "PayoffSchedule",
    "DebtPayoffProjection",
    "StrategyDebt",
    "DebtSummary",
]
