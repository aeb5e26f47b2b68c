"""Typed request payloads accepted by the use cases.

Fields left as None in update requests keep their stored value.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any


@dataclass(frozen=True)
class CreateAccountInput:
    name: str
    type: str
    currency: str
    opening_balance: Decimal = Decimal("0")
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class UpdateAccountInput:
    name: str | None = None
    metadata: dict[str, Any] | None = None
    archived: bool | None = None


@dataclass(frozen=True)
class CreateTransactionInput:
    account_id: str
    type: str
    amount: Decimal
    currency: str
    txn_date: date
    category_id: str | None = None
    description: str | None = None
    merchant_name: str | None = None
    is_pending: bool = False
    external_id: str | None = None


@dataclass(frozen=True)
class UpdateTransactionInput:
    amount: Decimal | None = None
    type: str | None = None
    category_id: str | None = None
    description: str | None = None
    merchant_name: str | None = None
    txn_date: date | None = None


@dataclass(frozen=True)
class TransactionFilters:
    """Filters for transaction listings; search matches description and
    merchant name case-insensitively."""

    account_id: str | None = None
    category_id: str | None = None
    type: str | None = None
    source: str | None = None
    is_pending: bool | None = None
    start_date: date | None = None
    end_date: date | None = None
    search: str | None = None


@dataclass(frozen=True)
class CreateTransferInput:
    from_account_id: str
    to_account_id: str
    amount: Decimal
    description: str | None = None
    txn_date: date | None = None


@dataclass(frozen=True)
class CreateDebtInput:
    name: str
    kind: str
    principal: Decimal
    start_date: date
    interest_rate_annual: Decimal | None = None
    min_payment_amount: Decimal | None = None
    due_date: date | None = None
    linked_account_id: str | None = None


@dataclass(frozen=True)
class UpdateDebtInput:
    name: str | None = None
    kind: str | None = None
    interest_rate_annual: Decimal | None = None
    min_payment_amount: Decimal | None = None
    due_date: date | None = None
    linked_account_id: str | None = None


@dataclass(frozen=True)
class CreateDebtPaymentInput:
    debt_id: str
    transaction_id: str
    amount: Decimal
    date: date


@dataclass(frozen=True)
class CreateGoalInput:
    name: str
    target_amount: Decimal
    currency: str
    due_date: date | None = None


@dataclass(frozen=True)
class UpdateGoalInput:
    name: str | None = None
    target_amount: Decimal | None = None
    due_date: date | None = None


@dataclass(frozen=True)
class CreateGoalContributionInput:
    goal_id: str
    amount: Decimal
    date: date
    transaction_id: str | None = None


@dataclass(frozen=True)
class BudgetCategoryInput:
    category_id: str
    cap_amount: Decimal


@dataclass(frozen=True)
class CreateBudgetInput:
    year: int
    month: int
    currency: str
    amount_total: Decimal | None = None
    categories: list[BudgetCategoryInput] = field(default_factory=list)


@dataclass(frozen=True)
class UpdateBudgetInput:
    """Budget changes; a given category list replaces every existing cap."""

    amount_total: Decimal | None = None
    categories: list[BudgetCategoryInput] | None = None


@dataclass(frozen=True)
class CreateCategoryInput:
    name: str
    parent_id: str | None = None


@dataclass(frozen=True)
class UpdateCategoryInput:
    """Category changes; ``detach_from_parent`` moves it to the top level."""

    name: str | None = None
    parent_id: str | None = None
    detach_from_parent: bool = False


@dataclass(frozen=True)
class WhatIfScenarioInput:
    scenario_name: str
    monthly_income: Decimal
    monthly_expenses: Decimal
    start_date: date
    months_to_project: int


__all__ = [
    "CreateAccountInput",
    "UpdateAccountInput",
    "CreateTransactionInput",
    "UpdateTransactionInput",
    "TransactionFilters",
    "CreateTransferInput",
    "CreateDebtInput",
    "UpdateDebtInput",
    "CreateDebtPaymentInput",
    "CreateGoalInput",
    "UpdateGoalInput",
    "CreateGoalContributionInput",
    "BudgetCategoryInput",
    "CreateBudgetInput",
    "UpdateBudgetInput",
    "CreateCategoryInput",
    "UpdateCategoryInput",
    "WhatIfScenarioInput",
]
