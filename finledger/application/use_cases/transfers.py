"""Use case moving money between two accounts of the same owner.

A transfer is one unit of work: an outgoing leg on the source account, an
incoming leg on the destination account, the transfer record linking them and
both balance updates commit together or not at all.
"""

from datetime import date

from finledger.application.ports.ledger_store import LedgerStorePort
from finledger.application.requests import CreateTransferInput
from finledger.application.use_cases.validation import (
    optional_text,
    require_found,
)
from finledger.domain.constants import SOURCE_MANUAL, TXN_TRANSFER
from finledger.domain.errors import (
    InsufficientBalanceError,
    NotFoundError,
    TransferSameAccountError,
    ValidationError,
)
from finledger.domain.models import Account, Transaction, Transfer
from finledger.domain.services.balance import creation_delta, direction_for
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.decimal_utils import parse_amount
from finledger.utils.records import new_id, utc_now


class TransfersUseCase:
    """Create and read transfers between accounts."""

    def __init__(self, store: LedgerStorePort, logger=None) -> None:
        """Initialize the use case.

        Args:
            store: Ledger store opening units of work.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._logger = logger or get_app_logger()

    def create(
        self,
        owner_id: str,
        request: CreateTransferInput,
        today: date | None = None,
    ) -> Transfer:
        """Transfer an amount from one owned account to another.

        Checks run in this order: distinct accounts, ownership, matching
        currency, valid amount, sufficient source balance. Both account rows
        are locked in id order so opposite transfers cannot deadlock.

        Args:
            owner_id: Owner of both accounts.
            request: Source, destination, amount and optional description.
            today: Date used when the request has no date.

        Returns:
            Transfer: The transfer record with both legs.

        Raises:
            TransferSameAccountError: If both accounts are the same.
            NotFoundError: If either account is missing or not owned.
            ValidationError: If currencies differ or the amount is invalid.
            InsufficientBalanceError: If the source balance is too low.
        """
        if request.from_account_id == request.to_account_id:
            raise TransferSameAccountError()

        with self._store.unit_of_work() as session:
            locked: dict[str, Account | None] = {}
            for account_id in sorted(
                (request.from_account_id, request.to_account_id)
            ):
                locked[account_id] = session.get_account(
                    owner_id,
                    account_id,
                    for_update=True,
                )
            source = locked[request.from_account_id]
            destination = locked[request.to_account_id]
            if source is None:
                raise NotFoundError("Source account not found")
            if destination is None:
                raise NotFoundError("Destination account not found")
            if source.currency != destination.currency:
                raise ValidationError(
                    "Transfers between different currencies are not supported"
                )
            amount = parse_amount(request.amount)
            if source.balance_current < amount:
                raise InsufficientBalanceError(
                    "Insufficient balance in source account"
                )

            txn_date = request.txn_date or today or date.today()
            description = (
                optional_text(request.description, 480)
                or f"Transfer to {destination.name}"
            )
            outgoing = self._leg(
                source,
                amount,
                txn_date,
                f"{description} (outgoing)",
                inflow=False,
            )
            incoming = self._leg(
                destination,
                amount,
                txn_date,
                f"{description} (incoming)",
                inflow=True,
            )
            transfer = Transfer(
                id=new_id(),
                owner_id=owner_id,
                from_txn_id=outgoing.id,
                to_txn_id=incoming.id,
                amount=amount,
                created_at=utc_now(),
                from_txn=outgoing,
                to_txn=incoming,
            )
            for leg in (outgoing, incoming):
                session.insert_transaction(leg)
                session.apply_balance_delta(leg.account_id, creation_delta(leg))
            session.insert_transfer(transfer)

        self._logger.info(
            f"Transferred {amount} {source.currency} from account {source.id} "
            f"to account {destination.id}"
        )
        return transfer

    def get(self, owner_id: str, transfer_id: str) -> Transfer:
        with self._store.unit_of_work() as session:
            return require_found(
                session.get_transfer(owner_id, transfer_id),
                "Transfer",
            )

    def list_transfers(self, owner_id: str) -> list[Transfer]:
        with self._store.unit_of_work() as session:
            return session.list_transfers(owner_id)

    @staticmethod
    def _leg(
        account: Account,
        amount,
        txn_date: date,
        description: str,
        inflow: bool,
    ) -> Transaction:
        now = utc_now()
        return Transaction(
            id=new_id(),
            owner_id=account.owner_id,
            account_id=account.id,
            type=TXN_TRANSFER,
            direction=direction_for(TXN_TRANSFER, inflow=inflow),
            amount=amount,
            currency=account.currency,
            txn_date=txn_date,
            description=description,
            source=SOURCE_MANUAL,
            created_at=now,
            updated_at=now,
        )


__all__ = ["TransfersUseCase"]
