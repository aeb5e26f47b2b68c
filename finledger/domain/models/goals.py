"""Domain models for savings goals."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal


@dataclass(frozen=True)
class Goal:
    """Savings goal whose current amount is fed by contributions."""

    id: str
    owner_id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal
    currency: str
    due_date: date | None = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class GoalContribution:
    """Contribution towards a goal.

    Attributes:
        amount: Nominal amount recorded as history.
        applied_amount: Portion of the amount that raised the goal's current
            amount; lower than ``amount`` when the contribution overshot the
            target.
    """

    id: str
    goal_id: str
    amount: Decimal
    applied_amount: Decimal
    date: date
    transaction_id: str | None = None


@dataclass(frozen=True)
class GoalProgress:
    goal_id: str
    percentage: Decimal
    remaining: Decimal
    days_remaining: int | None
    is_completed: bool
    projected_completion_date: date | None
    monthly_target_contribution: Decimal | None


@dataclass(frozen=True)
class GoalProjection:
    """Completion estimate for a fixed monthly contribution."""

    completion_date: date | None
    months_remaining: int | None


@dataclass(frozen=True)
class GoalRecommendations:
    total_goals_amount: Decimal
    total_saved_amount: Decimal
    average_progress: Decimal
    recommended_monthly_contribution: Decimal
    goals_due_soon: list[Goal]
    goals_at_risk: list[Goal]


__all__ = [
    "Goal",
    "GoalContribution",
    "GoalProgress",
    "GoalProjection",
    "GoalRecommendations",
]
