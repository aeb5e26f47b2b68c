"""Error taxonomy raised by the ledger engine.

Every error carries a stable ``kind`` so transports can map it without
inspecting messages. Storage failures are reported through ``StorageError``
with an opaque reference instead of the underlying driver detail.
"""

from uuid import uuid4


class LedgerError(Exception):
    """Base class for all ledger errors.

    Attributes:
        kind: Stable machine-readable error kind.
        message: Human-readable description safe to show to the caller.
        retryable: Whether the caller may retry the same request.
    """

    kind = "INTERNAL"
    default_message = "Internal ledger error"
    retryable = False

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict[str, object]:
        """Return a serializable payload for transports."""
        return {
            "kind": self.kind,
            "message": self.message,
            "retryable": self.retryable,
        }


class NotFoundError(LedgerError):
    """Entity is absent or not owned by the caller."""

    kind = "NOT_FOUND"
    default_message = "Resource not found"


class ValidationError(LedgerError):
    """A business precondition was violated."""

    kind = "VALIDATION_ERROR"
    default_message = "Invalid request"


class ConflictError(LedgerError):
    """A uniqueness rule was violated."""

    kind = "CONFLICT"
    default_message = "Conflicting resource already exists"


class InsufficientBalanceError(LedgerError):
    kind = "INSUFFICIENT_BALANCE"
    default_message = "Insufficient balance"


class TransferSameAccountError(LedgerError):
    kind = "TRANSFER_SAME_ACCOUNT"
    default_message = "Cannot transfer to the same account"


class BudgetExceededError(LedgerError):
    kind = "BUDGET_EXCEEDED"
    default_message = "Budget limit exceeded"


class GoalAlreadyReachedError(LedgerError):
    kind = "GOAL_ALREADY_REACHED"
    default_message = "Goal has already been reached"


class DebtOverpaymentError(LedgerError):
    kind = "DEBT_OVERPAYMENT"
    default_message = "Payment amount exceeds remaining debt"


class StorageError(LedgerError):
    """The storage layer failed; the request may be retried.

    Attributes:
        reference: Opaque identifier correlating the failure with logs.
    """

    kind = "INTERNAL_RETRYABLE"
    default_message = "Storage failure, please retry"
    retryable = True

    def __init__(
        self,
        message: str | None = None,
        reference: str | None = None,
    ) -> None:
        self.reference = reference or uuid4().hex
        super().__init__(message)

    def to_dict(self) -> dict[str, object]:
        payload = super().to_dict()
        payload["reference"] = self.reference
        return payload


__all__ = [
    "LedgerError",
    "NotFoundError",
    "ValidationError",
    "ConflictError",
    "InsufficientBalanceError",
    "TransferSameAccountError",
    "BudgetExceededError",
    "GoalAlreadyReachedError",
    "DebtOverpaymentError",
    "StorageError",
]
