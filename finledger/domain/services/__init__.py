"""Domain services package."""

from .amortization import (
    calculate_months_to_payoff,
    calculate_payoff_schedule,
    calculate_payoff_strategy,
    monthly_rate,
    order_debts,
)
from .balance import (
    balance_delta,
    balance_effect,
    creation_delta,
    deletion_delta,
    direction_for,
    replay_balance,
    signed_amount,
)
from .budgeting import (
    build_alerts,
    check_projected_spend,
    compute_budget_usage,
    summarize_usage,
)
from .calendar_utils import add_months, add_months_within, month_window
from .goals import (
    applied_contribution,
    calculate_progress,
    calculate_projection,
    calculate_recommendations,
    crossed_milestones,
    released_contribution,
)
from .reports import (
    average_monthly,
    build_monthly_report,
    project_balance,
    run_what_if,
    summarize_category_activity,
)

__all__ = [
    "calculate_months_to_payoff",
    "calculate_payoff_schedule",
    "calculate_payoff_strategy",
    "monthly_rate",
    "order_debts",
    "balance_delta",
    "balance_effect",
    "creation_delta",
    "deletion_delta",
    "direction_for",
    "replay_balance",
    "signed_amount",
    "build_alerts",
    "check_projected_spend",
    "compute_budget_usage",
    "summarize_usage",
    "add_months",
    "add_months_within",
    "month_window",
    "applied_contribution",
    "calculate_progress",
    "calculate_projection",
    "calculate_recommendations",
    "crossed_milestones",
    "released_contribution",
    "average_monthly",
    "build_monthly_report",
    "project_balance",
    "run_what_if",
    "summarize_category_activity",
]
