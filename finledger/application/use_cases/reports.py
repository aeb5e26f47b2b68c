"""Use case producing monthly reports and cash-flow projections."""

from datetime import date, timedelta
from decimal import Decimal

from finledger.application.ports.ledger_store import (
    LedgerSessionPort,
    LedgerStorePort,
)
from finledger.application.requests import WhatIfScenarioInput
from finledger.application.use_cases.validation import (
    require_period,
    require_text,
)
from finledger.domain.constants import (
    CASH_FLOW_HISTORY_MONTHS,
    DEFAULT_CASH_FLOW_MONTHS,
    DEFAULT_CURRENCY,
    MAX_CASH_FLOW_MONTHS,
    MAX_SCENARIO_MONTHS,
    TXN_EXPENSE,
    TXN_INCOME,
)
from finledger.domain.errors import ValidationError
from finledger.domain.models import CashFlowPoint, MonthlyReport, WhatIfResult
from finledger.domain.services.calendar_utils import add_months, month_window
from finledger.domain.services.reports import (
    average_monthly,
    build_monthly_report,
    project_balance,
    run_what_if,
)
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.decimal_utils import parse_non_negative_amount


def _check_months(value: int, upper: int, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{field} must be a whole number")
    if not 1 <= value <= upper:
        raise ValidationError(f"{field} must be between 1 and {upper}")
    return value


class ReportsUseCase:
    """Read-only reports over the owner's confirmed activity."""

    def __init__(self, store: LedgerStorePort, logger=None) -> None:
        """Initialize the use case.

        Args:
            store: Ledger store opening units of work.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._logger = logger or get_app_logger()

    def monthly_report(
        self,
        owner_id: str,
        year: int,
        month: int,
    ) -> MonthlyReport:
        """Summarize confirmed income and expenses of one calendar month.

        The report currency is the currency of the owner's oldest account,
        or USD when the owner has no account.

        Raises:
            ValidationError: If the period is out of range.
        """
        require_period(year, month)
        start, end = month_window(year, month)
        with self._store.unit_of_work() as session:
            income = session.sum_amounts(
                owner_id, TXN_INCOME, start, end, confirmed_only=True
            )
            expenses = session.sum_amounts(
                owner_id, TXN_EXPENSE, start, end, confirmed_only=True
            )
            by_category = session.sum_amounts_by_category(
                owner_id, TXN_EXPENSE, start, end, confirmed_only=True
            )
            names = {c.id: c.name for c in session.list_categories(owner_id)}
            currency = self._report_currency(session, owner_id)
        return build_monthly_report(
            year,
            month,
            currency,
            income,
            expenses,
            by_category,
            names,
        )

    def cash_flow_projection(
        self,
        owner_id: str,
        months_ahead: int = DEFAULT_CASH_FLOW_MONTHS,
        today: date | None = None,
    ) -> list[CashFlowPoint]:
        """Project the combined balance of active accounts month by month.

        The monthly net is the confirmed income minus confirmed expenses of
        the last six months, divided by six. Balances of accounts in
        different currencies are added as they are.

        Args:
            owner_id: Owner of the accounts.
            months_ahead: Number of monthly points, 1..120.
            today: Reference date, defaults to today.

        Returns:
            list[CashFlowPoint]: One point per month after ``today``.
        """
        _check_months(months_ahead, MAX_CASH_FLOW_MONTHS, "months_ahead")
        reference = today or date.today()
        history_start = add_months(reference, -CASH_FLOW_HISTORY_MONTHS)
        history_start += timedelta(days=1)
        with self._store.unit_of_work() as session:
            balance = self._active_balance(session, owner_id)
            income = session.sum_amounts(
                owner_id,
                TXN_INCOME,
                history_start,
                reference,
                confirmed_only=True,
            )
            expenses = session.sum_amounts(
                owner_id,
                TXN_EXPENSE,
                history_start,
                reference,
                confirmed_only=True,
            )
        monthly_net = average_monthly(
            income - expenses,
            CASH_FLOW_HISTORY_MONTHS,
        )
        self._logger.debug(
            f"Cash flow projection for {owner_id}: balance={balance}, "
            f"monthly_net={monthly_net}, months={months_ahead}"
        )
        return project_balance(balance, monthly_net, reference, months_ahead)

    def what_if(
        self,
        owner_id: str,
        request: WhatIfScenarioInput,
    ) -> WhatIfResult:
        """Project a hypothetical monthly income and expense.

        The scenario starts from the combined balance of active accounts and
        adds ``monthly_income - monthly_expenses`` once per month.

        Raises:
            ValidationError: If the name is blank, an amount is negative or
                not whole cents, or the month count is outside 1..600.
        """
        name = require_text(request.scenario_name, "Scenario name")
        income = parse_non_negative_amount(request.monthly_income, "monthly_income")
        expenses = parse_non_negative_amount(
            request.monthly_expenses,
            "monthly_expenses",
        )
        months = _check_months(
            request.months_to_project,
            MAX_SCENARIO_MONTHS,
            "months_to_project",
        )
        with self._store.unit_of_work() as session:
            balance = self._active_balance(session, owner_id)
        return run_what_if(
            name,
            balance,
            income,
            expenses,
            request.start_date,
            months,
        )

    @staticmethod
    def _active_balance(session: LedgerSessionPort, owner_id: str) -> Decimal:
        active = session.list_accounts(owner_id, archived=False)
        return sum((a.balance_current for a in active), Decimal("0"))

    @staticmethod
    def _report_currency(session: LedgerSessionPort, owner_id: str) -> str:
        owned = session.list_accounts(owner_id)
        # Newest first.
        return owned[-1].currency if owned else DEFAULT_CURRENCY


__all__ = ["ReportsUseCase"]
