"""Use case managing monthly budgets and their usage views.

Usage, alerts and pre-checks are read-only aggregations over the expenses of
the budget month, pending expenses included. Category caps are replaced as a
whole on update.
"""

from datetime import date
from decimal import Decimal

from finledger.application.ports.ledger_store import (
    LedgerSessionPort,
    LedgerStorePort,
)
from finledger.application.ports.notifications import (
    NotificationDispatcherPort,
)
from finledger.application.requests import (
    BudgetCategoryInput,
    CreateBudgetInput,
    UpdateBudgetInput,
)
from finledger.application.use_cases.validation import (
    normalize_currency,
    require_found,
    require_period,
)
from finledger.domain.constants import (
    DEFAULT_ALERT_THRESHOLD,
    DEFAULT_WARNING_PERCENT,
    TXN_EXPENSE,
)
from finledger.domain.errors import ConflictError, NotFoundError, ValidationError
from finledger.domain.models import (
    Budget,
    BudgetAlert,
    BudgetCategoryCap,
    BudgetCheck,
    BudgetSummary,
    BudgetUsage,
    LedgerNotification,
)
from finledger.domain.models.notifications import KIND_BUDGET_ALERT
from finledger.domain.services.budgeting import (
    build_alerts,
    check_projected_spend,
    compute_budget_usage,
    summarize_usage,
)
from finledger.domain.services.calendar_utils import month_window
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.decimal_utils import (
    coerce_decimal,
    parse_amount,
    parse_decimal,
    parse_non_negative_amount,
)
from finledger.utils.records import new_id, utc_now


class BudgetsUseCase:
    """Manage budgets and compute spend against their caps."""

    def __init__(
        self,
        store: LedgerStorePort,
        notifier: NotificationDispatcherPort | None = None,
        alert_threshold: Decimal = DEFAULT_ALERT_THRESHOLD,
        warning_percent: Decimal = DEFAULT_WARNING_PERCENT,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Ledger store opening units of work.
            notifier: Optional collaborator receiving budget alerts.
            alert_threshold: Default utilization percentage raising alerts.
            warning_percent: Projected utilization raising pre-check warnings.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._notifier = notifier
        self._alert_threshold = coerce_decimal(alert_threshold)
        self._warning_percent = coerce_decimal(warning_percent)
        self._logger = logger or get_app_logger()

    def create(self, owner_id: str, request: CreateBudgetInput) -> Budget:
        """Create the budget of a month.

        Raises:
            ConflictError: If the owner already has a budget for the month.
            NotFoundError: If a capped category is missing or not visible.
            ValidationError: If the period, amounts or caps are invalid.
        """
        require_period(request.year, request.month)
        currency = normalize_currency(request.currency)
        amount_total = self._parse_total(request.amount_total)
        caps = self._parse_caps(request.categories)
        budget = Budget(
            id=new_id(),
            owner_id=owner_id,
            year=request.year,
            month=request.month,
            currency=currency,
            amount_total=amount_total,
            categories=caps,
            created_at=utc_now(),
        )
        with self._store.unit_of_work() as session:
            self._check_free_period(session, owner_id, budget.year, budget.month)
            self._check_categories(session, owner_id, caps)
            session.insert_budget(budget)
            created = session.get_budget(owner_id, budget.id)
        self._logger.info(
            f"Created budget {budget.id} for {budget.year}-{budget.month:02d}"
        )
        return created

    def update(
        self,
        owner_id: str,
        budget_id: str,
        request: UpdateBudgetInput,
    ) -> Budget:
        """Update the total cap and, when given, replace every category cap."""
        caps = None
        if request.categories is not None:
            caps = self._parse_caps(request.categories)
        with self._store.unit_of_work() as session:
            require_found(session.get_budget(owner_id, budget_id), "Budget")
            if request.amount_total is not None:
                session.update_budget(
                    budget_id,
                    {"amount_total": self._parse_total(request.amount_total)},
                )
            if caps is not None:
                self._check_categories(session, owner_id, caps)
                session.replace_budget_categories(budget_id, caps)
            return session.get_budget(owner_id, budget_id)

    def delete(self, owner_id: str, budget_id: str) -> None:
        with self._store.unit_of_work() as session:
            require_found(session.get_budget(owner_id, budget_id), "Budget")
            session.delete_budget(budget_id)
        self._logger.info(f"Deleted budget {budget_id}")

    def get(self, owner_id: str, budget_id: str) -> Budget:
        with self._store.unit_of_work() as session:
            return require_found(session.get_budget(owner_id, budget_id), "Budget")

    def list_budgets(self, owner_id: str) -> list[Budget]:
        with self._store.unit_of_work() as session:
            return session.list_budgets(owner_id)

    def get_current(
        self,
        owner_id: str,
        today: date | None = None,
    ) -> Budget | None:
        reference = today or date.today()
        with self._store.unit_of_work() as session:
            return session.get_budget_for_period(
                owner_id,
                reference.year,
                reference.month,
            )

    def create_from_template(
        self,
        owner_id: str,
        template_budget_id: str,
        year: int,
        month: int,
    ) -> Budget:
        """Copy the total and category caps of a budget into a new month.

        Raises:
            ConflictError: If the target month already has a budget.
            NotFoundError: If the template budget is missing or not owned.
        """
        require_period(year, month)
        with self._store.unit_of_work() as session:
            self._check_free_period(session, owner_id, year, month)
            template = session.get_budget(owner_id, template_budget_id)
            if template is None:
                raise NotFoundError("Template budget not found")
            budget = Budget(
                id=new_id(),
                owner_id=owner_id,
                year=year,
                month=month,
                currency=template.currency,
                amount_total=template.amount_total,
                categories=[
                    BudgetCategoryCap(
                        id=new_id(),
                        category_id=cap.category_id,
                        cap_amount=cap.cap_amount,
                    )
                    for cap in template.categories
                ],
                created_at=utc_now(),
            )
            session.insert_budget(budget)
            created = session.get_budget(owner_id, budget.id)
        self._logger.info(
            f"Created budget {budget.id} for {year}-{month:02d} "
            f"from template {template_budget_id}"
        )
        return created

    def calculate_usage(self, owner_id: str, budget_id: str) -> BudgetUsage:
        """Return spend versus caps for a budget, per category and in total."""
        with self._store.unit_of_work() as session:
            budget = require_found(session.get_budget(owner_id, budget_id), "Budget")
            return self._usage(session, budget)

    def summary(self, owner_id: str, year: int, month: int) -> BudgetSummary:
        """Return usage plus counts of categories over and near their caps."""
        with self._store.unit_of_work() as session:
            budget = require_found(
                session.get_budget_for_period(owner_id, year, month),
                "Budget",
            )
            usage = self._usage(session, budget)
        return summarize_usage(usage)

    def get_alerts(
        self,
        owner_id: str,
        year: int,
        month: int,
        threshold=None,
    ) -> list[BudgetAlert]:
        """Return alerts for caps used at or above the threshold.

        Args:
            owner_id: Owner of the budget.
            year: Budget year.
            month: Budget month.
            threshold: Utilization percentage raising an alert; defaults to
                the configured alert threshold.

        Returns:
            list[BudgetAlert]: Alerts, highest utilization first; empty when
            the month has no budget.
        """
        limit = (
            self._alert_threshold
            if threshold is None
            else parse_decimal(threshold, "threshold")
        )
        with self._store.unit_of_work() as session:
            budget = session.get_budget_for_period(owner_id, year, month)
            if budget is None:
                return []
            usage = self._usage(session, budget)
        return build_alerts(usage, limit)

    def dispatch_alerts(
        self,
        owner_id: str,
        year: int,
        month: int,
        threshold=None,
    ) -> list[BudgetAlert]:
        """Compute alerts and hand each one to the notification collaborator."""
        alerts = self.get_alerts(owner_id, year, month, threshold)
        if self._notifier is None:
            return alerts
        for alert in alerts:
            self._notifier.dispatch(
                LedgerNotification(
                    owner_id=owner_id,
                    kind=KIND_BUDGET_ALERT,
                    title=f"Budget alert: {alert.category_name or 'Total'}",
                    message=alert.message,
                    related_entity_id=alert.category_id,
                    related_entity_type="category" if alert.category_id else "budget",
                    payload={
                        "year": year,
                        "month": month,
                        "severity": alert.severity,
                        "percentage": str(alert.percentage),
                    },
                )
            )
        self._logger.info(
            f"Dispatched {len(alerts)} budget alerts for owner {owner_id}"
        )
        return alerts

    def check_before_transaction(
        self,
        owner_id: str,
        category_id: str,
        amount,
        txn_date: date,
    ) -> BudgetCheck:
        """Advise whether an expense fits under its category cap.

        The answer is advisory; recording the expense is never blocked.
        """
        value = parse_amount(amount)
        start, end = month_window(txn_date.year, txn_date.month)
        with self._store.unit_of_work() as session:
            cap = session.get_budget_cap(
                owner_id,
                txn_date.year,
                txn_date.month,
                category_id,
            )
            if cap is None:
                return BudgetCheck(allowed=True)
            spent = session.sum_amounts(
                owner_id,
                TXN_EXPENSE,
                start,
                end,
                category_id=category_id,
            )
        return check_projected_spend(cap, spent, value, self._warning_percent)

    @staticmethod
    def _usage(session: LedgerSessionPort, budget: Budget) -> BudgetUsage:
        start, end = month_window(budget.year, budget.month)
        total_spent = session.sum_amounts(budget.owner_id, TXN_EXPENSE, start, end)
        by_category = session.sum_amounts_by_category(
            budget.owner_id,
            TXN_EXPENSE,
            start,
            end,
        )
        return compute_budget_usage(budget, total_spent, by_category)

    @staticmethod
    def _parse_total(value) -> Decimal | None:
        if value is None:
            return None
        return parse_non_negative_amount(value, "amount_total")

    @staticmethod
    def _parse_caps(
        categories: list[BudgetCategoryInput],
    ) -> list[BudgetCategoryCap]:
        seen: set[str] = set()
        caps = []
        for item in categories:
            if item.category_id in seen:
                raise ValidationError(
                    f"Category {item.category_id} is capped more than once"
                )
            seen.add(item.category_id)
            caps.append(
                BudgetCategoryCap(
                    id=new_id(),
                    category_id=item.category_id,
                    cap_amount=parse_non_negative_amount(
                        item.cap_amount,
                        "cap_amount",
                    ),
                )
            )
        return caps

    @staticmethod
    def _check_free_period(
        session: LedgerSessionPort,
        owner_id: str,
        year: int,
        month: int,
    ) -> None:
        if session.get_budget_for_period(owner_id, year, month) is not None:
            raise ConflictError("Budget already exists for this month")

    @staticmethod
    def _check_categories(
        session: LedgerSessionPort,
        owner_id: str,
        caps: list[BudgetCategoryCap],
    ) -> None:
        for cap in caps:
            require_found(session.get_category(owner_id, cap.category_id), "Category")


__all__ = ["BudgetsUseCase"]
