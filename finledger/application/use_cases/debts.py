"""Use case tracking debts, their payments and payoff projections.

The remaining balance of a debt is always derived from its principal minus
the recorded payments; payments are serialized through a row lock on the
debt so two concurrent payments cannot both pass the overpayment check.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from finledger.application.ports.ledger_store import (
    LedgerSessionPort,
    LedgerStorePort,
)
from finledger.application.requests import (
    CreateDebtInput,
    CreateDebtPaymentInput,
    UpdateDebtInput,
)
from finledger.application.use_cases.validation import (
    require_choice,
    require_found,
    require_text,
)
from finledger.domain.constants import DEBT_KINDS, STRATEGY_AVALANCHE
from finledger.domain.errors import (
    ConflictError,
    DebtOverpaymentError,
    NotFoundError,
    ValidationError,
)
from finledger.domain.models import (
    Debt,
    DebtPayment,
    DebtPayoffProjection,
    DebtSummary,
    DebtView,
    PayoffSchedule,
    StrategyDebt,
)
from finledger.domain.services.amortization import (
    calculate_payoff_schedule,
    calculate_payoff_strategy,
)
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.decimal_utils import parse_amount, parse_decimal, to_money
from finledger.utils.records import new_id, utc_now

MAX_INTEREST_RATE = Decimal("100")


def _parse_rate(value) -> Decimal | None:
    if value is None:
        return None
    rate = parse_decimal(value, "interest_rate_annual")
    if rate < 0 or rate > MAX_INTEREST_RATE:
        raise ValidationError(
            f"Interest rate must be between 0 and {MAX_INTEREST_RATE}"
        )
    return rate


def _optional_amount(value, field: str) -> Decimal | None:
    return None if value is None else parse_amount(value, field)


class DebtsUseCase:
    """Manage debts and project their payoff."""

    def __init__(self, store: LedgerStorePort, logger=None) -> None:
        """Initialize the use case.

        Args:
            store: Ledger store opening units of work.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._logger = logger or get_app_logger()

    def create(self, owner_id: str, request: CreateDebtInput) -> DebtView:
        """Register a debt.

        Raises:
            NotFoundError: If the linked account is missing or not owned.
            ValidationError: If an amount, rate, kind or date is invalid.
        """
        debt = Debt(
            id=new_id(),
            owner_id=owner_id,
            name=require_text(request.name, "Debt name"),
            kind=require_choice(request.kind, DEBT_KINDS, "Debt kind"),
            principal=parse_amount(request.principal, "principal"),
            start_date=request.start_date,
            interest_rate_annual=_parse_rate(request.interest_rate_annual),
            min_payment_amount=_optional_amount(
                request.min_payment_amount,
                "min_payment_amount",
            ),
            due_date=request.due_date,
            linked_account_id=request.linked_account_id,
            created_at=utc_now(),
        )
        self._check_dates(debt.start_date, debt.due_date)
        with self._store.unit_of_work() as session:
            self._check_linked_account(session, owner_id, debt.linked_account_id)
            session.insert_debt(debt)
        self._logger.info(f"Registered debt {debt.id} for owner {owner_id}")
        return DebtView(
            debt=debt,
            total_paid=Decimal("0.00"),
            remaining_balance=debt.principal,
        )

    def update(
        self,
        owner_id: str,
        debt_id: str,
        request: UpdateDebtInput,
    ) -> DebtView:
        values: dict[str, object] = {}
        if request.name is not None:
            values["name"] = require_text(request.name, "Debt name")
        if request.kind is not None:
            values["kind"] = require_choice(request.kind, DEBT_KINDS, "Debt kind")
        if request.interest_rate_annual is not None:
            values["interest_rate_annual"] = _parse_rate(
                request.interest_rate_annual
            )
        if request.min_payment_amount is not None:
            values["min_payment_amount"] = parse_amount(
                request.min_payment_amount,
                "min_payment_amount",
            )
        if request.due_date is not None:
            values["due_date"] = request.due_date
        if request.linked_account_id is not None:
            values["linked_account_id"] = request.linked_account_id

        with self._store.unit_of_work() as session:
            debt = require_found(
                session.get_debt(owner_id, debt_id, for_update=True),
                "Debt",
            )
            self._check_dates(debt.start_date, values.get("due_date"))
            self._check_linked_account(
                session,
                owner_id,
                request.linked_account_id,
            )
            if values:
                session.update_debt(debt_id, values)
            return self._view(session, replace(debt, **values))

    def delete(self, owner_id: str, debt_id: str) -> None:
        """Delete a debt without payments.

        Raises:
            ValidationError: If payments were recorded against the debt.
        """
        with self._store.unit_of_work() as session:
            require_found(
                session.get_debt(owner_id, debt_id, for_update=True),
                "Debt",
            )
            if session.list_debt_payments(debt_id):
                raise ValidationError("Cannot delete a debt with existing payments")
            session.delete_debt(debt_id)
        self._logger.info(f"Deleted debt {debt_id}")

    def get(self, owner_id: str, debt_id: str) -> DebtView:
        with self._store.unit_of_work() as session:
            debt = require_found(session.get_debt(owner_id, debt_id), "Debt")
            return self._view(session, debt)

    def list_debts(self, owner_id: str, kind: str | None = None) -> list[DebtView]:
        with self._store.unit_of_work() as session:
            return [
                self._view(session, debt)
                for debt in session.list_debts(owner_id, kind=kind)
            ]

    def create_payment(
        self,
        owner_id: str,
        request: CreateDebtPaymentInput,
    ) -> DebtPayment:
        """Record a payment against a debt.

        Args:
            owner_id: Owner of the debt and the funding transaction.
            request: Debt, funding transaction, amount and date.

        Returns:
            DebtPayment: The recorded payment.

        Raises:
            NotFoundError: If the debt or the transaction is missing or not
                owned.
            ConflictError: If the transaction already funds a payment.
            ValidationError: If the amount is invalid.
            DebtOverpaymentError: If the amount exceeds the remaining balance.
        """
        with self._store.unit_of_work() as session:
            debt = require_found(
                session.get_debt(owner_id, request.debt_id, for_update=True),
                "Debt",
            )
            require_found(
                session.get_transaction(owner_id, request.transaction_id),
                "Transaction",
            )
            links = session.get_transaction_links(request.transaction_id)
            if links.debt_payment_id is not None:
                raise ConflictError(
                    "Transaction is already recorded as a debt payment"
                )
            amount = parse_amount(request.amount)
            remaining = debt.principal - session.total_debt_payments(debt.id)
            if amount > remaining:
                raise DebtOverpaymentError(
                    f"Payment amount ({amount}) exceeds remaining debt "
                    f"balance ({to_money(remaining)})"
                )
            payment = DebtPayment(
                id=new_id(),
                debt_id=debt.id,
                transaction_id=request.transaction_id,
                amount=amount,
                date=request.date,
            )
            session.insert_debt_payment(payment)
        self._logger.info(
            f"Recorded payment of {amount} on debt {debt.id}, "
            f"remaining {to_money(remaining - amount)}"
        )
        return payment

    def list_payments(self, owner_id: str, debt_id: str) -> list[DebtPayment]:
        with self._store.unit_of_work() as session:
            require_found(session.get_debt(owner_id, debt_id), "Debt")
            return session.list_debt_payments(debt_id)

    def payoff_schedule(
        self,
        owner_id: str,
        debt_id: str,
        monthly_payment=None,
        today: date | None = None,
    ) -> PayoffSchedule:
        """Project the payoff of a debt.

        Args:
            owner_id: Owner of the debt.
            debt_id: Debt to project.
            monthly_payment: Optional payment overriding the debt's minimum.
            today: Reference date, defaults to today.

        Returns:
            PayoffSchedule: Projection for the remaining balance.
        """
        override = _optional_amount(monthly_payment, "monthly_payment")
        with self._store.unit_of_work() as session:
            debt = require_found(session.get_debt(owner_id, debt_id), "Debt")
            total_paid = session.total_debt_payments(debt_id)
        return calculate_payoff_schedule(
            principal=debt.principal,
            interest_rate_annual=debt.interest_rate_annual,
            total_paid=total_paid,
            monthly_payment=override or debt.min_payment_amount,
            today=today or date.today(),
        )

    def summary(self, owner_id: str, today: date | None = None) -> DebtSummary:
        """Return totals across debts and their payoff projections.

        Projections cover debts with a remaining balance and a minimum
        payment, earliest payoff first; debts that never pay off come last.
        """
        reference = today or date.today()
        total_debt = Decimal("0")
        total_paid = Decimal("0")
        total_monthly = Decimal("0")
        projections: list[DebtPayoffProjection] = []
        with self._store.unit_of_work() as session:
            views = [
                self._view(session, debt)
                for debt in session.list_debts(owner_id)
            ]
        for view in views:
            debt = view.debt
            payment = debt.min_payment_amount or Decimal("0")
            total_debt += debt.principal
            total_paid += view.total_paid
            total_monthly += payment
            if view.remaining_balance > 0 and payment > 0:
                projections.append(
                    DebtPayoffProjection(
                        debt_id=debt.id,
                        debt_name=debt.name,
                        schedule=calculate_payoff_schedule(
                            principal=debt.principal,
                            interest_rate_annual=debt.interest_rate_annual,
                            total_paid=view.total_paid,
                            monthly_payment=payment,
                            today=reference,
                        ),
                    )
                )
        projections.sort(
            key=lambda p: (
                not p.schedule.pays_off,
                p.schedule.payoff_date or date.max,
                p.debt_name,
            )
        )
        return DebtSummary(
            total_debt=to_money(total_debt),
            total_paid=to_money(total_paid),
            total_remaining=to_money(total_debt - total_paid),
            total_monthly_payments=to_money(total_monthly),
            payoff_projections=projections,
        )

    def payoff_strategy(
        self,
        owner_id: str,
        debt_ids: list[str],
        extra_payment=Decimal("0"),
        strategy: str = STRATEGY_AVALANCHE,
        today: date | None = None,
    ) -> list[DebtPayoffProjection]:
        """Project a multi-debt payoff plan with a cascading extra payment.

        Raises:
            NotFoundError: If any debt is missing or not owned.
            ValidationError: If the strategy is unknown or the extra payment
                is negative.
        """
        requested = set(debt_ids)
        with self._store.unit_of_work() as session:
            debts = session.list_debts(owner_id, debt_ids=sorted(requested))
            if len(debts) != len(requested):
                raise NotFoundError("One or more debts not found")
            candidates = [
                StrategyDebt(
                    debt_id=debt.id,
                    debt_name=debt.name,
                    remaining_balance=debt.principal
                    - session.total_debt_payments(debt.id),
                    min_payment=debt.min_payment_amount or Decimal("0"),
                    interest_rate_annual=debt.interest_rate_annual,
                )
                for debt in debts
            ]
        return calculate_payoff_strategy(
            candidates,
            extra_payment,
            strategy,
            today or date.today(),
        )

    @staticmethod
    def _view(session: LedgerSessionPort, debt: Debt) -> DebtView:
        total_paid = session.total_debt_payments(debt.id)
        return DebtView(
            debt=debt,
            total_paid=to_money(total_paid),
            remaining_balance=to_money(
                max(Decimal("0"), debt.principal - total_paid)
            ),
        )

    @staticmethod
    def _check_dates(start_date: date, due_date: date | None) -> None:
        if due_date is not None and due_date < start_date:
            raise ValidationError("due_date must not be before start_date")

    @staticmethod
    def _check_linked_account(
        session: LedgerSessionPort,
        owner_id: str,
        account_id: str | None,
    ) -> None:
        if account_id is None:
            return
        if session.get_account(owner_id, account_id) is None:
            raise NotFoundError("Linked account not found")


__all__ = ["DebtsUseCase"]
