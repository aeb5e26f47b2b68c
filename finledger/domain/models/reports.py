"""Domain models for monthly reports, projections and category activity."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal


@dataclass(frozen=True)
class CategoryExpense:
    """Share of a month's confirmed expenses spent in one category."""

    category_id: str
    category_name: str
    amount: Decimal
    percentage: Decimal


@dataclass(frozen=True)
class MonthlyReport:
    year: int
    month: int
    currency: str
    total_income: Decimal
    total_expenses: Decimal
    net_income: Decimal
    category_breakdown: list[CategoryExpense] = field(default_factory=list)


@dataclass(frozen=True)
class CashFlowPoint:
    """Projected combined balance at one month step."""

    date: date
    projected_balance: Decimal
    description: str


@dataclass(frozen=True)
class WhatIfResult:
    """Outcome of a hypothetical monthly income and expense scenario.

    ``total_savings`` is the final balance minus the starting balance and is
    negative when the scenario spends more than it earns.
    """

    scenario_name: str
    projections: list[CashFlowPoint]
    final_balance: Decimal
    total_savings: Decimal


@dataclass(frozen=True)
class CategoryTypeTotal:
    """Sum and count of one transaction type within one category."""

    category_id: str
    txn_type: str
    total: Decimal
    count: int


@dataclass(frozen=True)
class CategoryActivity:
    """Net activity of a category over a period.

    ``total_amount`` counts expenses as positive and every other
    non-transfer type as negative.
    """

    category_id: str
    category_name: str
    total_amount: Decimal
    transaction_count: int
    average_amount: Decimal


__all__ = [
    "CategoryExpense",
    "MonthlyReport",
    "CashFlowPoint",
    "WhatIfResult",
    "CategoryTypeTotal",
    "CategoryActivity",
]
