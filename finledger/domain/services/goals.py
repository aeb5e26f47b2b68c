"""Goal progress, projections and contribution capping."""

from collections.abc import Iterable
from datetime import date, timedelta
from decimal import ROUND_CEILING, Decimal

from finledger.domain.constants import (
    GOAL_AT_RISK_DAYS,
    GOAL_AT_RISK_PERCENT,
    GOAL_DUE_SOON_DAYS,
    GOAL_MILESTONES,
    GOAL_PACE_WINDOW_DAYS,
    GOAL_RECOMMENDATION_MONTHS,
    PROJECTION_HORIZON_MONTHS,
)
from finledger.domain.errors import GoalAlreadyReachedError, ValidationError
from finledger.domain.models import (
    Goal,
    GoalContribution,
    GoalProgress,
    GoalProjection,
    GoalRecommendations,
)
from finledger.domain.services.calendar_utils import (
    add_months_within,
    whole_months_between,
)
from finledger.utils.decimal_utils import round_percentage, to_money


def progress_percentage(current: Decimal, target: Decimal) -> Decimal:
    if target <= 0:
        return Decimal("0")
    return current * 100 / target


def applied_contribution(goal: Goal, amount: Decimal) -> Decimal:
    """Return the part of a contribution that counts toward the goal.

    The goal's current amount is capped at its target; the remainder of an
    overshooting contribution stays in the contribution history only.

    Raises:
        GoalAlreadyReachedError: If the goal is already reached.
    """
    if goal.current_amount >= goal.target_amount:
        raise GoalAlreadyReachedError()
    return min(amount, goal.target_amount - goal.current_amount)


def released_contribution(goal: Goal, contribution: GoalContribution) -> Decimal:
    """Return the goal's current amount after removing a contribution.

    Raises:
        ValidationError: If the removal would make the current amount
            negative.
    """
    new_amount = goal.current_amount - contribution.applied_amount
    if new_amount < 0:
        raise ValidationError(
            "Removing this contribution would make the goal amount negative"
        )
    return new_amount


def crossed_milestones(
    goal: Goal,
    before: Decimal,
    after: Decimal,
) -> list[Decimal]:
    """Return the milestone percentages crossed between two amounts."""
    start = progress_percentage(before, goal.target_amount)
    end = progress_percentage(after, goal.target_amount)
    return [m for m in GOAL_MILESTONES if start < m <= end]


def _monthly_pace(
    contributions: Iterable[GoalContribution],
    today: date,
) -> Decimal:
    window_start = today - timedelta(days=GOAL_PACE_WINDOW_DAYS)
    recent = sum(
        (
            c.applied_amount
            for c in contributions
            if window_start < c.date <= today
        ),
        Decimal("0"),
    )
    return recent * 30 / GOAL_PACE_WINDOW_DAYS


def calculate_progress(
    goal: Goal,
    contributions: Iterable[GoalContribution],
    today: date,
) -> GoalProgress:
    """Compute progress metrics for a goal.

    Args:
        goal: Goal to evaluate.
        contributions: Contribution history of the goal.
        today: Reference date.

    Returns:
        GoalProgress: Percentage, remaining amount, days to the due date,
        projected completion date from the trailing contribution pace, and
        the monthly contribution needed to meet the due date.
    """
    current = goal.current_amount
    target = goal.target_amount
    remaining = max(Decimal("0"), target - current)
    is_completed = current >= target

    days_remaining = None
    monthly_target = None
    if goal.due_date is not None:
        days_remaining = (goal.due_date - today).days
        if is_completed:
            monthly_target = Decimal("0.00")
        else:
            months_left = max(1, whole_months_between(today, goal.due_date))
            monthly_target = to_money(remaining / months_left)

    projected = None
    if not is_completed:
        pace = _monthly_pace(contributions, today)
        if pace > 0:
            months = int((remaining / pace).to_integral_value(ROUND_CEILING))
            projected = add_months_within(
                today,
                months,
                PROJECTION_HORIZON_MONTHS,
            )

    return GoalProgress(
        goal_id=goal.id,
        percentage=round_percentage(progress_percentage(current, target)),
        remaining=to_money(remaining),
        days_remaining=days_remaining,
        is_completed=is_completed,
        projected_completion_date=projected,
        monthly_target_contribution=monthly_target,
    )


def calculate_projection(
    goal: Goal,
    monthly_contribution: Decimal,
    today: date,
) -> GoalProjection:
    """Estimate completion for a fixed monthly contribution.

    The completion date is None when it lies beyond the projection horizon.
    """
    remaining = goal.target_amount - goal.current_amount
    if remaining <= 0:
        return GoalProjection(completion_date=None, months_remaining=0)
    if monthly_contribution <= 0:
        return GoalProjection(completion_date=None, months_remaining=None)
    months = int(
        (remaining / monthly_contribution).to_integral_value(ROUND_CEILING)
    )
    return GoalProjection(
        completion_date=add_months_within(
            today,
            months,
            PROJECTION_HORIZON_MONTHS,
        ),
        months_remaining=months,
    )


def calculate_recommendations(
    goals: list[Goal],
    today: date,
) -> GoalRecommendations:
    """Summarize saving needs across all goals of an owner."""
    if not goals:
        zero = Decimal("0.00")
        return GoalRecommendations(
            total_goals_amount=zero,
            total_saved_amount=zero,
            average_progress=zero,
            recommended_monthly_contribution=zero,
            goals_due_soon=[],
            goals_at_risk=[],
        )

    total_goals = Decimal("0")
    total_saved = Decimal("0")
    total_progress = Decimal("0")
    due_soon: list[Goal] = []
    at_risk: list[Goal] = []
    soon_limit = today + timedelta(days=GOAL_DUE_SOON_DAYS)
    for goal in goals:
        progress = progress_percentage(goal.current_amount, goal.target_amount)
        total_goals += goal.target_amount
        total_saved += goal.current_amount
        total_progress += progress
        if goal.due_date is None:
            continue
        if (
            goal.due_date <= soon_limit
            and goal.current_amount < goal.target_amount
        ):
            due_soon.append(goal)
        days_remaining = (goal.due_date - today).days
        if (
            progress < GOAL_AT_RISK_PERCENT
            and 0 < days_remaining <= GOAL_AT_RISK_DAYS
        ):
            at_risk.append(goal)

    recommended = (total_goals - total_saved) / GOAL_RECOMMENDATION_MONTHS
    return GoalRecommendations(
        total_goals_amount=to_money(total_goals),
        total_saved_amount=to_money(total_saved),
        average_progress=round_percentage(total_progress / len(goals)),
        recommended_monthly_contribution=to_money(max(Decimal("0"), recommended)),
        goals_due_soon=due_soon,
        goals_at_risk=at_risk,
    )


__all__ = [
    "progress_percentage",
    "applied_contribution",
    "released_contribution",
    "crossed_milestones",
    "calculate_progress",
    "calculate_projection",
    "calculate_recommendations",
]
