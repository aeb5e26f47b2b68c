"""Use case managing accounts and manual balance adjustments.

Accounts are never re-balanced by direct writes: an opening balance or a
manual correction is recorded as an ``adjustment`` transaction whose effect
flows through the same balance rules as any other entry.
"""

from datetime import date
from decimal import Decimal

from finledger.application.ports.ledger_store import (
    LedgerSessionPort,
    LedgerStorePort,
)
from finledger.application.requests import (
    CreateAccountInput,
    UpdateAccountInput,
)
from finledger.application.use_cases.validation import (
    normalize_currency,
    optional_text,
    require_choice,
    require_found,
    require_text,
)
from finledger.domain.constants import (
    ACCOUNT_TYPES,
    OPENING_BALANCE_DESCRIPTION,
    SOURCE_MANUAL,
    TXN_ADJUSTMENT,
)
from finledger.domain.errors import ValidationError
from finledger.domain.models import Account, Transaction
from finledger.domain.services.balance import creation_delta, direction_for
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.decimal_utils import parse_amount, parse_decimal
from finledger.utils.records import new_id, utc_now


def _signed_adjustment(value) -> Decimal:
    return parse_decimal(value, "Adjustment amount")


class AccountsUseCase:
    """Create, update, archive and adjust accounts."""

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
        request: CreateAccountInput,
        today: date | None = None,
    ) -> Account:
        """Create an account, posting a non-zero opening balance.

        Args:
            owner_id: Owner of the new account.
            request: Account attributes and optional opening balance.
            today: Date of the opening transaction, defaults to today.

        Returns:
            Account: The created account with its current balance.
        """
        name = require_text(request.name, "Account name")
        account_type = require_choice(request.type, ACCOUNT_TYPES, "Account type")
        currency = normalize_currency(request.currency)
        opening = _signed_adjustment(request.opening_balance)
        now = utc_now()
        account = Account(
            id=new_id(),
            owner_id=owner_id,
            name=name,
            type=account_type,
            currency=currency,
            balance_current=Decimal("0.00"),
            metadata=dict(request.metadata or {}),
            created_at=now,
            updated_at=now,
        )
        with self._store.unit_of_work() as session:
            session.insert_account(account)
            if opening != 0:
                self._post_adjustment(
                    session,
                    account,
                    opening,
                    OPENING_BALANCE_DESCRIPTION,
                    today or date.today(),
                )
            created = session.get_account(owner_id, account.id)
        self._logger.info(
            f"Created {account_type} account {account.id} for owner {owner_id}"
        )
        return created

    def get(self, owner_id: str, account_id: str) -> Account:
        with self._store.unit_of_work() as session:
            return require_found(
                session.get_account(owner_id, account_id),
                "Account",
            )

    def list_accounts(
        self,
        owner_id: str,
        account_type: str | None = None,
        archived: bool | None = None,
    ) -> list[Account]:
        with self._store.unit_of_work() as session:
            return session.list_accounts(owner_id, account_type, archived)

    def update(
        self,
        owner_id: str,
        account_id: str,
        request: UpdateAccountInput,
    ) -> Account:
        """Update the name, metadata or archived flag of an account.

        Args:
            owner_id: Owner of the account.
            account_id: Account to update.
            request: Fields to change; None keeps the stored value.

        Returns:
            Account: The updated account.
        """
        values: dict[str, object] = {}
        if request.name is not None:
            values["name"] = require_text(request.name, "Account name")
        if request.metadata is not None:
            values["metadata"] = dict(request.metadata)
        if request.archived is not None:
            values["archived"] = request.archived
        with self._store.unit_of_work() as session:
            require_found(
                session.get_account(owner_id, account_id, for_update=True),
                "Account",
            )
            if values:
                session.update_account(account_id, values)
            return session.get_account(owner_id, account_id)

    def archive(self, owner_id: str, account_id: str) -> Account:
        return self.update(owner_id, account_id, UpdateAccountInput(archived=True))

    def adjust_balance(
        self,
        owner_id: str,
        account_id: str,
        amount,
        description: str | None = None,
        today: date | None = None,
    ) -> Transaction:
        """Record a manual balance correction.

        Args:
            owner_id: Owner of the account.
            account_id: Account to correct.
            amount: Signed correction; positive raises the balance.
            description: Optional note stored on the adjustment.
            today: Date of the adjustment, defaults to today.

        Returns:
            Transaction: The adjustment transaction.

        Raises:
            ValidationError: If the amount is zero or not in whole cents.
        """
        signed = _signed_adjustment(amount)
        if signed == 0:
            raise ValidationError("Adjustment amount must not be zero")
        note = optional_text(description, 500) or "Balance adjustment"
        with self._store.unit_of_work() as session:
            account = require_found(
                session.get_account(owner_id, account_id, for_update=True),
                "Account",
            )
            transaction = self._post_adjustment(
                session,
                account,
                signed,
                note,
                today or date.today(),
            )
        self._logger.info(
            f"Adjusted account {account_id} by {signed} for owner {owner_id}"
        )
        return transaction

    def delete(self, owner_id: str, account_id: str) -> None:
        """Delete an account that has never had a transaction.

        Raises:
            NotFoundError: If the account is missing or not owned.
            ValidationError: If transactions reference the account.
        """
        with self._store.unit_of_work() as session:
            require_found(
                session.get_account(owner_id, account_id, for_update=True),
                "Account",
            )
            count = session.count_account_transactions(account_id)
            if count:
                raise ValidationError(
                    f"Cannot delete an account with {count} transactions; "
                    "archive it instead"
                )
            session.delete_account(account_id)
        self._logger.info(f"Deleted account {account_id} for owner {owner_id}")

    @staticmethod
    def _post_adjustment(
        session: LedgerSessionPort,
        account: Account,
        signed: Decimal,
        description: str,
        txn_date: date,
    ) -> Transaction:
        now = utc_now()
        transaction = Transaction(
            id=new_id(),
            owner_id=account.owner_id,
            account_id=account.id,
            type=TXN_ADJUSTMENT,
            direction=direction_for(TXN_ADJUSTMENT, inflow=signed > 0),
            amount=parse_amount(abs(signed)),
            currency=account.currency,
            txn_date=txn_date,
            description=description,
            source=SOURCE_MANUAL,
            created_at=now,
            updated_at=now,
        )
        session.insert_transaction(transaction)
        session.apply_balance_delta(account.id, creation_delta(transaction))
        return transaction


__all__ = ["AccountsUseCase"]
