"""Domain models for accounts, categories, transactions and transfers."""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class Account:
    """Account owned by a single user.

    Attributes:
        balance_current: Confirmed balance, the projection of every
            non-pending transaction posted to the account.
        metadata: Free-form key/value data attached by the caller.
    """

    id: str
    owner_id: str
    name: str
    type: str
    currency: str
    balance_current: Decimal
    archived: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class Category:
    """Transaction category; default categories have no owner."""

    id: str
    owner_id: str | None
    name: str
    parent_id: str | None = None
    is_default: bool = False


@dataclass(frozen=True)
class Transaction:
    """Ledger entry posted to an account.

    ``amount`` is always positive; ``direction`` carries the side of the
    entry (inflow or outflow) and therefore the sign of its balance effect.
    """

    id: str
    owner_id: str
    account_id: str
    type: str
    direction: str
    amount: Decimal
    currency: str
    txn_date: date
    category_id: str | None = None
    description: str | None = None
    merchant_name: str | None = None
    is_pending: bool = False
    source: str = "manual"
    external_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class TransactionLinks:
    """Rows referencing a transaction that prevent its deletion."""

    transfer_id: str | None = None
    debt_payment_id: str | None = None
    goal_contribution_count: int = 0


@dataclass(frozen=True)
class Transfer:
    """Matched pair of transfer legs."""

    id: str
    owner_id: str
    from_txn_id: str
    to_txn_id: str
    amount: Decimal
    created_at: datetime | None = None
    from_txn: Transaction | None = None
    to_txn: Transaction | None = None


@dataclass(frozen=True)
class TransactionSummary:
    """Confirmed cashflow totals for a date range."""

    total_income: Decimal
    total_expenses: Decimal
    transaction_count: int

    @property
    def net_cash_flow(self) -> Decimal:
        """Return total_income minus total_expenses."""
        return self.total_income - self.total_expenses


@dataclass(frozen=True)
class BalanceReconciliation:
    """Comparison of the stored balance against a full history replay."""

    account_id: str
    stored_balance: Decimal
    replayed_balance: Decimal

    @property
    def drift(self) -> Decimal:
        return self.stored_balance - self.replayed_balance

    @property
    def is_consistent(self) -> bool:
        return self.drift == 0


@dataclass(frozen=True)
class ImportResult:
    """Outcome of a bulk import."""

    created: list[Transaction]
    skipped_external_ids: list[str]


__all__ = [
    "Account",
    "Category",
    "Transaction",
    "TransactionLinks",
    "Transfer",
    "TransactionSummary",
    "BalanceReconciliation",
    "ImportResult",
]
