"""CLI adapter printing a multi-debt payoff plan for an owner.

Configuration comes from environment variables:

* ``LEDGER_OWNER_ID``: owner whose debts are projected (required);
* ``LEDGER_PAYOFF_STRATEGY``: ``avalanche`` (default) or ``snowball``;
* ``LEDGER_EXTRA_PAYMENT``: monthly amount on top of minimum payments.
"""

from decimal import Decimal
import os

from finledger.domain.constants import STRATEGY_AVALANCHE
from finledger.domain.errors import LedgerError, ValidationError
from finledger.infrastructure.container import (
    build_debts_use_case,
    build_ledger_store,
)
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.decimal_utils import parse_decimal


def _parse_extra_payment(value: str | None, logger) -> Decimal:
    """Parse the extra monthly payment.

    Args:
        value: Raw amount string.
        logger: Logger used for warnings.

    Returns:
        Decimal: Parsed amount, zero when missing or invalid.
    """
    if not value:
        return Decimal("0")
    try:
        return parse_decimal(value, "LEDGER_EXTRA_PAYMENT")
    except ValidationError:
        logger.warning(f"Invalid extra payment '{value}'. Using 0.")
        return Decimal("0")


def main() -> None:
    """Print the payoff order and projection of every debt of an owner."""
    logger = get_app_logger()
    owner_id = os.getenv("LEDGER_OWNER_ID")
    if not owner_id:
        logger.warning("LEDGER_OWNER_ID is required to project debt payoff.")
        return
    strategy = os.getenv("LEDGER_PAYOFF_STRATEGY", STRATEGY_AVALANCHE)
    strategy = strategy.strip().lower()
    extra_payment = _parse_extra_payment(os.getenv("LEDGER_EXTRA_PAYMENT"), logger)

    use_case = build_debts_use_case(build_ledger_store())
    try:
        debt_ids = [view.debt.id for view in use_case.list_debts(owner_id)]
        projections = use_case.payoff_strategy(
            owner_id,
            debt_ids,
            extra_payment=extra_payment,
            strategy=strategy,
        )
    except LedgerError as exc:
        logger.error(f"Payoff projection failed: {exc.message}")
        return

    print(
        f"Debt payoff plan (strategy={strategy}, extra={extra_payment}, "
        f"debts={len(projections)})"
    )
    for position, projection in enumerate(projections, start=1):
        schedule = projection.schedule
        if not schedule.pays_off:
            print(
                f"{position}. {projection.debt_name}: "
                f"balance={schedule.current_balance}, "
                f"payment={schedule.monthly_payment}, never pays off"
            )
            continue
        print(
            f"{position}. {projection.debt_name}: "
            f"balance={schedule.current_balance}, "
            f"payment={schedule.monthly_payment}, "
            f"months={schedule.months_remaining}, "
            f"interest={schedule.total_interest}, "
            f"payoff={schedule.payoff_date.isoformat()}"
        )


if __name__ == "__main__":  # pragma: no cover
    main()
