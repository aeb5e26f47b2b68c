"""Budget usage, alerts and advisory pre-checks."""

from collections.abc import Mapping
from decimal import Decimal

from finledger.domain.constants import (
    FULL_PERCENT,
    MEDIUM_SEVERITY_PERCENT,
    NEAR_BUDGET_PERCENT,
)
from finledger.domain.models import (
    Budget,
    BudgetAlert,
    BudgetCategoryCap,
    BudgetCheck,
    BudgetSummary,
    BudgetUsage,
    CategoryUsage,
)
from finledger.utils.decimal_utils import round_percentage, to_money

SEVERITY_LOW = "low"
SEVERITY_MEDIUM = "medium"
SEVERITY_HIGH = "high"
SEVERITY_CRITICAL = "critical"


def utilization(spent: Decimal, budgeted: Decimal) -> Decimal:
    """Return 100 * spent / budgeted, or 0 for an empty budget."""
    if budgeted <= 0:
        return Decimal("0")
    return spent * 100 / budgeted


def compute_category_usage(
    cap: BudgetCategoryCap,
    spent: Decimal,
) -> CategoryUsage:
    budgeted = to_money(cap.cap_amount)
    spent_amount = to_money(spent)
    percentage = utilization(spent_amount, budgeted)
    return CategoryUsage(
        category_id=cap.category_id,
        category_name=cap.category_name,
        budgeted=budgeted,
        spent_amount=spent_amount,
        remaining_amount=budgeted - spent_amount,
        utilization_percentage=round_percentage(percentage),
        is_over_budget=percentage > FULL_PERCENT,
    )


def compute_budget_usage(
    budget: Budget,
    total_spent: Decimal,
    spent_by_category: Mapping[str, Decimal],
) -> BudgetUsage:
    """Compute spend versus caps for a budget period.

    Args:
        budget: Budget with its category caps.
        total_spent: Expenses of the owner in the period, all categories.
        spent_by_category: Expenses in the period keyed by category id.

    Returns:
        BudgetUsage: Totals and per-category usage. Totals relative to the
        overall cap are None when the budget has no ``amount_total``.
    """
    spent = to_money(total_spent)
    categories = [
        compute_category_usage(
            cap,
            spent_by_category.get(cap.category_id, Decimal("0")),
        )
        for cap in budget.categories
    ]
    total_budget = None
    remaining_budget = None
    percentage = None
    if budget.amount_total is not None:
        total_budget = to_money(budget.amount_total)
        remaining_budget = total_budget - spent
        percentage = round_percentage(utilization(spent, total_budget))
    return BudgetUsage(
        budget_id=budget.id,
        year=budget.year,
        month=budget.month,
        total_budget=total_budget,
        total_spent=spent,
        remaining_budget=remaining_budget,
        utilization_percentage=percentage,
        categories=categories,
    )


def summarize_usage(usage: BudgetUsage) -> BudgetSummary:
    over = [c for c in usage.categories if c.is_over_budget]
    near = [
        c
        for c in usage.categories
        if NEAR_BUDGET_PERCENT <= c.utilization_percentage <= FULL_PERCENT
    ]
    return BudgetSummary(
        usage=usage,
        category_count=len(usage.categories),
        categories_over_budget=len(over),
        categories_near_budget=len(near),
    )


def category_severity(percentage: Decimal) -> str:
    if percentage >= FULL_PERCENT:
        return SEVERITY_HIGH
    if percentage >= MEDIUM_SEVERITY_PERCENT:
        return SEVERITY_MEDIUM
    return SEVERITY_LOW


def total_severity(percentage: Decimal) -> str:
    if percentage >= FULL_PERCENT:
        return SEVERITY_CRITICAL
    return category_severity(percentage)


def _alert_message(
    spent: Decimal,
    budgeted: Decimal,
    percentage: Decimal,
    label: str,
) -> str:
    if percentage >= FULL_PERCENT:
        return f"{label} exceeded by {spent - budgeted}"
    remaining = round_percentage(FULL_PERCENT - percentage)
    return f"{remaining}% of {label} remaining"


def build_alerts(usage: BudgetUsage, threshold: Decimal) -> list[BudgetAlert]:
    """Return alerts for categories and total at or above the threshold.

    Args:
        usage: Computed budget usage.
        threshold: Minimum utilization percentage that raises an alert.

    Returns:
        list[BudgetAlert]: Alerts sorted by percentage, highest first.
    """
    alerts: list[BudgetAlert] = []
    for category in usage.categories:
        percentage = category.utilization_percentage
        if percentage < threshold:
            continue
        label = f"{category.category_name or 'Category'} budget"
        alerts.append(
            BudgetAlert(
                category_id=category.category_id,
                category_name=category.category_name,
                budgeted=category.budgeted,
                spent=category.spent_amount,
                percentage=percentage,
                severity=category_severity(percentage),
                message=_alert_message(
                    category.spent_amount,
                    category.budgeted,
                    percentage,
                    label,
                ),
            )
        )
    if (
        usage.total_budget is not None
        and usage.utilization_percentage is not None
        and usage.utilization_percentage >= threshold
    ):
        percentage = usage.utilization_percentage
        alerts.append(
            BudgetAlert(
                category_id=None,
                category_name=None,
                budgeted=usage.total_budget,
                spent=usage.total_spent,
                percentage=percentage,
                severity=total_severity(percentage),
                message=_alert_message(
                    usage.total_spent,
                    usage.total_budget,
                    percentage,
                    "Total budget",
                ),
            )
        )
    return sorted(alerts, key=lambda alert: alert.percentage, reverse=True)


def check_projected_spend(
    cap: BudgetCategoryCap | None,
    current_spent: Decimal,
    amount: Decimal,
    warning_percent: Decimal,
) -> BudgetCheck:
    """Advise whether an expense fits under a category cap.

    Args:
        cap: Cap for the category in the period, None when uncapped.
        current_spent: Expenses already recorded in the period.
        amount: Amount of the prospective expense.
        warning_percent: Projected utilization that triggers a soft warning.

    Returns:
        BudgetCheck: ``allowed=False`` only when the projected spend exceeds
        the cap. The answer is advisory.
    """
    if cap is None:
        return BudgetCheck(allowed=True)
    budgeted = to_money(cap.cap_amount)
    projected = to_money(current_spent) + to_money(amount)
    name = cap.category_name or "this category"
    if projected > budgeted:
        return BudgetCheck(
            allowed=False,
            warning=(
                f"This transaction would exceed the budget for {name} "
                f"by {projected - budgeted}"
            ),
        )
    percentage = utilization(projected, budgeted)
    if percentage >= warning_percent:
        return BudgetCheck(
            allowed=True,
            warning=(
                f"This transaction will use {round_percentage(percentage)}% "
                f"of your {name} budget"
            ),
        )
    return BudgetCheck(allowed=True)


__all__ = [
    "SEVERITY_LOW",
    "SEVERITY_MEDIUM",
    "SEVERITY_HIGH",
    "SEVERITY_CRITICAL",
    "utilization",
    "compute_category_usage",
    "compute_budget_usage",
    "summarize_usage",
    "category_severity",
    "total_severity",
    "build_alerts",
    "check_projected_spend",
]
