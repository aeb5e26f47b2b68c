"""Use case tracking savings goals and their contributions.

A goal's current amount is the sum of the applied amounts of its
contributions. Contributions are capped on write at the goal's target and
every change to the running total happens under a row lock on the goal.
"""

from datetime import date

from finledger.application.ports.ledger_store import LedgerStorePort
from finledger.application.ports.notifications import (
    NotificationDispatcherPort,
)
from finledger.application.requests import (
    CreateGoalContributionInput,
    CreateGoalInput,
    UpdateGoalInput,
)
from finledger.application.use_cases.validation import (
    normalize_currency,
    require_found,
    require_text,
)
from finledger.domain.errors import ValidationError
from finledger.domain.models import (
    Goal,
    GoalContribution,
    GoalProgress,
    GoalProjection,
    GoalRecommendations,
    LedgerNotification,
)
from finledger.domain.models.notifications import KIND_GOAL_MILESTONE
from finledger.domain.services.goals import (
    applied_contribution,
    calculate_progress,
    calculate_projection,
    calculate_recommendations,
    crossed_milestones,
    released_contribution,
)
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.decimal_utils import parse_amount, to_money
from finledger.utils.records import new_id, utc_now


class GoalsUseCase:
    """Manage savings goals, contributions and progress metrics."""

    def __init__(
        self,
        store: LedgerStorePort,
        notifier: NotificationDispatcherPort | None = None,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Ledger store opening units of work.
            notifier: Optional collaborator receiving milestone notifications.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._notifier = notifier
        self._logger = logger or get_app_logger()

    def create(self, owner_id: str, request: CreateGoalInput) -> Goal:
        goal = Goal(
            id=new_id(),
            owner_id=owner_id,
            name=require_text(request.name, "Goal name"),
            target_amount=parse_amount(request.target_amount, "target_amount"),
            current_amount=to_money(0),
            currency=normalize_currency(request.currency),
            due_date=request.due_date,
            created_at=utc_now(),
        )
        with self._store.unit_of_work() as session:
            session.insert_goal(goal)
        self._logger.info(f"Created goal {goal.id} for owner {owner_id}")
        return goal

    def update(
        self,
        owner_id: str,
        goal_id: str,
        request: UpdateGoalInput,
    ) -> Goal:
        """Update a goal's name, target or due date.

        Raises:
            ValidationError: If the new target is below the amount saved.
        """
        values: dict[str, object] = {}
        if request.name is not None:
            values["name"] = require_text(request.name, "Goal name")
        if request.target_amount is not None:
            values["target_amount"] = parse_amount(
                request.target_amount,
                "target_amount",
            )
        if request.due_date is not None:
            values["due_date"] = request.due_date
        with self._store.unit_of_work() as session:
            goal = require_found(
                session.get_goal(owner_id, goal_id, for_update=True),
                "Goal",
            )
            target = values.get("target_amount")
            if target is not None and target < goal.current_amount:
                raise ValidationError(
                    "target_amount must not be below the amount already saved"
                )
            if values:
                session.update_goal(goal_id, values)
            return session.get_goal(owner_id, goal_id)

    def delete(self, owner_id: str, goal_id: str) -> None:
        with self._store.unit_of_work() as session:
            require_found(
                session.get_goal(owner_id, goal_id, for_update=True),
                "Goal",
            )
            if session.list_goal_contributions(goal_id):
                raise ValidationError(
                    "Cannot delete a goal with existing contributions"
                )
            session.delete_goal(goal_id)
        self._logger.info(f"Deleted goal {goal_id}")

    def get(self, owner_id: str, goal_id: str) -> Goal:
        with self._store.unit_of_work() as session:
            return require_found(session.get_goal(owner_id, goal_id), "Goal")

    def list_goals(self, owner_id: str) -> list[Goal]:
        with self._store.unit_of_work() as session:
            return session.list_goals(owner_id)

    def list_contributions(
        self,
        owner_id: str,
        goal_id: str,
    ) -> list[GoalContribution]:
        with self._store.unit_of_work() as session:
            require_found(session.get_goal(owner_id, goal_id), "Goal")
            return session.list_goal_contributions(goal_id)

    def add_contribution(
        self,
        owner_id: str,
        request: CreateGoalContributionInput,
    ) -> GoalContribution:
        """Record a contribution and raise the goal's current amount.

        The full nominal amount is stored as history; only the part up to
        the target counts toward the goal.

        Args:
            owner_id: Owner of the goal.
            request: Goal, amount, date and optional funding transaction.

        Returns:
            GoalContribution: The recorded contribution.

        Raises:
            NotFoundError: If the goal or transaction is missing or not owned.
            ValidationError: If the amount is not positive whole cents.
            GoalAlreadyReachedError: If the goal is already reached.
        """
        amount = parse_amount(request.amount)
        with self._store.unit_of_work() as session:
            goal = require_found(
                session.get_goal(owner_id, request.goal_id, for_update=True),
                "Goal",
            )
            applied = applied_contribution(goal, amount)
            if request.transaction_id is not None:
                require_found(
                    session.get_transaction(owner_id, request.transaction_id),
                    "Transaction",
                )
            contribution = GoalContribution(
                id=new_id(),
                goal_id=goal.id,
                amount=amount,
                applied_amount=applied,
                date=request.date,
                transaction_id=request.transaction_id,
            )
            session.insert_goal_contribution(contribution)
            new_amount = goal.current_amount + applied
            session.update_goal(goal.id, {"current_amount": new_amount})

        self._logger.info(
            f"Contributed {amount} to goal {goal.id} ({applied} applied)"
        )
        for milestone in crossed_milestones(goal, goal.current_amount, new_amount):
            self._notify_milestone(goal, milestone)
        return contribution

    def remove_contribution(self, owner_id: str, contribution_id: str) -> Goal:
        """Delete a contribution and subtract its applied amount.

        Returns:
            Goal: The goal with its updated current amount.
        """
        with self._store.unit_of_work() as session:
            contribution = require_found(
                session.get_goal_contribution(owner_id, contribution_id),
                "Contribution",
            )
            goal = require_found(
                session.get_goal(owner_id, contribution.goal_id, for_update=True),
                "Goal",
            )
            new_amount = released_contribution(goal, contribution)
            session.delete_goal_contribution(contribution_id)
            session.update_goal(goal.id, {"current_amount": new_amount})
            updated = session.get_goal(owner_id, goal.id)
        self._logger.info(
            f"Removed contribution {contribution_id} from goal {goal.id}"
        )
        return updated

    def progress(
        self,
        owner_id: str,
        goal_id: str,
        today: date | None = None,
    ) -> GoalProgress:
        with self._store.unit_of_work() as session:
            goal = require_found(session.get_goal(owner_id, goal_id), "Goal")
            contributions = session.list_goal_contributions(goal_id)
        return calculate_progress(goal, contributions, today or date.today())

    def projection(
        self,
        owner_id: str,
        goal_id: str,
        monthly_contribution,
        today: date | None = None,
    ) -> GoalProjection:
        """Estimate completion for a fixed monthly contribution."""
        monthly = parse_amount(monthly_contribution, "monthly_contribution")
        goal = self.get(owner_id, goal_id)
        return calculate_projection(goal, monthly, today or date.today())

    def recommendations(
        self,
        owner_id: str,
        today: date | None = None,
    ) -> GoalRecommendations:
        goals = self.list_goals(owner_id)
        return calculate_recommendations(goals, today or date.today())

    def _notify_milestone(self, goal: Goal, milestone) -> None:
        if self._notifier is None:
            return
        percent = int(milestone)
        if percent >= 100:
            message = f"Goal '{goal.name}' has been reached"
        else:
            message = f"Goal '{goal.name}' is {percent}% complete"
        self._notifier.dispatch(
            LedgerNotification(
                owner_id=goal.owner_id,
                kind=KIND_GOAL_MILESTONE,
                title="Goal milestone reached",
                message=message,
                related_entity_id=goal.id,
                related_entity_type="goal",
                payload={"milestone": percent},
            )
        )


__all__ = ["GoalsUseCase"]
