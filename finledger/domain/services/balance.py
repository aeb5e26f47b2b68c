"""Balance mutation rules.

A transaction's effect on its account is its signed amount while it is
confirmed and zero while it is pending. Every mutation (create, amend,
delete, pending toggle) is a transition between two states of the same
transaction, and the delta to apply to the account is the difference of the
effects of those two states.
"""

from collections.abc import Iterable
from decimal import Decimal

from finledger.domain.constants import (
    INFLOW,
    OUTFLOW,
    TXN_ADJUSTMENT,
    TXN_EXPENSE,
    TXN_INCOME,
    TXN_TRANSFER,
)
from finledger.domain.errors import ValidationError
from finledger.domain.models import Transaction


def direction_for(txn_type: str, inflow: bool | None = None) -> str:
    """Return the direction of a transaction from its type.

    Args:
        txn_type: Transaction type.
        inflow: Side of the entry for adjustments and transfer legs, which
            can move money either way.

    Returns:
        str: ``inflow`` or ``outflow``.

    Raises:
        ValidationError: If the type is unknown or the side is missing for a
            two-sided type.
    """
    if txn_type == TXN_INCOME:
        return INFLOW
    if txn_type == TXN_EXPENSE:
        return OUTFLOW
    if txn_type in (TXN_ADJUSTMENT, TXN_TRANSFER):
        if inflow is None:
            raise ValidationError(
                f"{txn_type} transactions require an explicit direction"
            )
        return INFLOW if inflow else OUTFLOW
    raise ValidationError(f"Unknown transaction type: {txn_type}")


def signed_amount(direction: str, amount: Decimal) -> Decimal:
    """Return the amount with the sign of its direction."""
    return amount if direction == INFLOW else -amount


def balance_effect(transaction: Transaction | None) -> Decimal:
    """Return the contribution of a transaction state to its account balance."""
    if transaction is None or transaction.is_pending:
        return Decimal("0")
    return signed_amount(transaction.direction, transaction.amount)


def balance_delta(
    before: Transaction | None,
    after: Transaction | None,
) -> Decimal:
    """Return the delta to apply when a transaction moves between states.

    Args:
        before: State already reflected in the balance, None on creation.
        after: State to reflect, None on deletion.

    Returns:
        Decimal: Signed amount to add to the account balance.
    """
    return balance_effect(after) - balance_effect(before)


def creation_delta(transaction: Transaction) -> Decimal:
    return balance_delta(None, transaction)


def deletion_delta(transaction: Transaction) -> Decimal:
    return balance_delta(transaction, None)


def replay_balance(transactions: Iterable[Transaction]) -> Decimal:
    """Recompute a balance from the full history of an account."""
    total = Decimal("0")
    for transaction in transactions:
        total += balance_effect(transaction)
    return total


__all__ = [
    "direction_for",
    "signed_amount",
    "balance_effect",
    "balance_delta",
    "creation_delta",
    "deletion_delta",
    "replay_balance",
]
