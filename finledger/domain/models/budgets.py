"""Domain models for monthly budgets and their usage."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass(frozen=True)
class BudgetCategoryCap:
    """Spending cap for one category within a budget."""

    category_id: str
    cap_amount: Decimal
    id: str | None = None
    category_name: str | None = None


@dataclass(frozen=True)
class Budget:
    """Monthly budget; one per owner and period."""

    id: str
    owner_id: str
    year: int
    month: int
    currency: str
    amount_total: Decimal | None = None
    categories: list[BudgetCategoryCap] = field(default_factory=list)
    created_at: datetime | None = None


@dataclass(frozen=True)
class CategoryUsage:
    category_id: str
    category_name: str | None
    budgeted: Decimal
    spent_amount: Decimal
    remaining_amount: Decimal
    utilization_percentage: Decimal
    is_over_budget: bool


@dataclass(frozen=True)
class BudgetUsage:
    """Spend against caps for a budget period.

    ``total_budget``, ``remaining_budget`` and ``utilization_percentage`` are
    None when the budget has no overall cap.
    """

    budget_id: str
    year: int
    month: int
    total_budget: Decimal | None
    total_spent: Decimal
    remaining_budget: Decimal | None
    utilization_percentage: Decimal | None
    categories: list[CategoryUsage]


@dataclass(frozen=True)
class BudgetSummary:
    usage: BudgetUsage
    category_count: int
    categories_over_budget: int
    categories_near_budget: int


@dataclass(frozen=True)
class BudgetAlert:
    """Threshold alert for a category or for the budget total.

    ``category_id`` is None for the total alert.
    """

    category_id: str | None
    category_name: str | None
    budgeted: Decimal
    spent: Decimal
    percentage: Decimal
    severity: str
    message: str


@dataclass(frozen=True)
class BudgetCheck:
    """Advisory answer to a pre-transaction budget check."""

    allowed: bool
    warning: str | None = None


__all__ = [
    "BudgetCategoryCap",
    "Budget",
    "CategoryUsage",
    "BudgetUsage",
    "BudgetSummary",
    "BudgetAlert",
    "BudgetCheck",
]
