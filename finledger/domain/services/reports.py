"""Monthly reports, cash-flow projections and category activity."""

from collections.abc import Iterable, Mapping
from datetime import date
from decimal import Decimal

from finledger.domain.constants import (
    PROJECTION_HORIZON_MONTHS,
    TXN_EXPENSE,
    TXN_TRANSFER,
    UNKNOWN_CATEGORY_NAME,
)
from finledger.domain.errors import ValidationError
from finledger.domain.models import (
    CashFlowPoint,
    Category,
    CategoryActivity,
    CategoryExpense,
    CategoryTypeTotal,
    MonthlyReport,
    WhatIfResult,
)
from finledger.domain.services.calendar_utils import add_months_within
from finledger.utils.decimal_utils import round_percentage, to_money


def build_monthly_report(
    year: int,
    month: int,
    currency: str,
    total_income: Decimal,
    total_expenses: Decimal,
    expenses_by_category: Mapping[str, Decimal],
    category_names: Mapping[str, str],
) -> MonthlyReport:
    """Assemble a monthly report from period totals.

    Args:
        year: Report year.
        month: Report month, 1..12.
        currency: Currency label of the report.
        total_income: Confirmed income of the month.
        total_expenses: Confirmed expenses of the month, all categories.
        expenses_by_category: Confirmed expenses keyed by category id.
        category_names: Names of the categories visible to the owner.

    Returns:
        MonthlyReport: Totals and the category breakdown, largest first.
        Percentages are shares of ``total_expenses``.
    """
    income = to_money(total_income)
    expenses = to_money(total_expenses)
    breakdown = []
    for category_id, amount in expenses_by_category.items():
        spent = to_money(amount)
        share = spent * 100 / expenses if expenses > 0 else Decimal("0")
        breakdown.append(
            CategoryExpense(
                category_id=category_id,
                category_name=category_names.get(
                    category_id,
                    UNKNOWN_CATEGORY_NAME,
                ),
                amount=spent,
                percentage=round_percentage(share),
            )
        )
    breakdown.sort(key=lambda item: (-item.amount, item.category_name))
    return MonthlyReport(
        year=year,
        month=month,
        currency=currency,
        total_income=income,
        total_expenses=expenses,
        net_income=income - expenses,
        category_breakdown=breakdown,
    )


def average_monthly(total: Decimal, months: int) -> Decimal:
    """Return a period total spread evenly over its months."""
    return to_money(total / months)


def project_balance(
    starting_balance: Decimal,
    monthly_net: Decimal,
    start: date,
    months: int,
    scenario_name: str | None = None,
) -> list[CashFlowPoint]:
    """Step a balance forward one month at a time.

    Point ``i`` is dated ``i`` months after ``start`` and holds the starting
    balance plus ``i`` times the monthly net.

    Raises:
        ValidationError: If a step would fall past the supported calendar.
    """
    points = []
    balance = to_money(starting_balance)
    for step in range(1, months + 1):
        point_date = add_months_within(start, step, PROJECTION_HORIZON_MONTHS)
        if point_date is None:
            raise ValidationError("Projection extends past the supported calendar")
        balance += monthly_net
        description = (
            f"{scenario_name} - Month {step}"
            if scenario_name is not None
            else f"Month {step} projection"
        )
        points.append(
            CashFlowPoint(
                date=point_date,
                projected_balance=to_money(balance),
                description=description,
            )
        )
    return points


def run_what_if(
    scenario_name: str,
    starting_balance: Decimal,
    monthly_income: Decimal,
    monthly_expenses: Decimal,
    start: date,
    months: int,
) -> WhatIfResult:
    """Project a constant monthly income and expense from a balance."""
    start_balance = to_money(starting_balance)
    projections = project_balance(
        start_balance,
        to_money(monthly_income) - to_money(monthly_expenses),
        start,
        months,
        scenario_name=scenario_name,
    )
    final_balance = projections[-1].projected_balance if projections else start_balance
    return WhatIfResult(
        scenario_name=scenario_name,
        projections=projections,
        final_balance=final_balance,
        total_savings=final_balance - start_balance,
    )


def summarize_category_activity(
    categories: Iterable[Category],
    totals: Iterable[CategoryTypeTotal],
) -> list[CategoryActivity]:
    """Net each visible category's activity, transfers excluded.

    Expenses count as positive and other types as negative. Categories with
    no activity are dropped; the rest are ordered by absolute total, largest
    first, then by name.
    """
    names = {category.id: category.name for category in categories}
    sums: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for row in totals:
        if row.txn_type == TXN_TRANSFER or row.category_id not in names:
            continue
        signed = row.total if row.txn_type == TXN_EXPENSE else -row.total
        sums[row.category_id] = sums.get(row.category_id, Decimal("0")) + signed
        counts[row.category_id] = counts.get(row.category_id, 0) + row.count
    activity = [
        CategoryActivity(
            category_id=category_id,
            category_name=names[category_id],
            total_amount=to_money(total),
            transaction_count=counts[category_id],
            average_amount=to_money(total / counts[category_id]),
        )
        for category_id, total in sums.items()
        if counts[category_id] > 0
    ]
    activity.sort(key=lambda item: (-abs(item.total_amount), item.category_name))
    return activity


__all__ = [
    "build_monthly_report",
    "average_monthly",
    "project_balance",
    "run_what_if",
    "summarize_category_activity",
]
