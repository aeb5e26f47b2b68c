"""Use case recording transactions and keeping account balances consistent.

Every mutation loads the transaction and its account with row locks, checks
all preconditions, then writes the transaction together with the balance
delta computed by ``balance_delta`` in the same unit of work. Transfers and
adjustments are posted by their own use cases and only flow through here
for edits that keep their legs matched.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal

from finledger.application.ports.category_suggestion import (
    CategorySuggestionPort,
)
from finledger.application.ports.ledger_store import (
    LedgerSessionPort,
    LedgerStorePort,
)
from finledger.application.requests import (
    CreateTransactionInput,
    TransactionFilters,
    UpdateTransactionInput,
)
from finledger.application.use_cases.validation import (
    normalize_currency,
    optional_text,
    require_found,
)
from finledger.domain.constants import (
    SOURCE_IMPORTED,
    SOURCE_MANUAL,
    TXN_EXPENSE,
    TXN_INCOME,
    TXN_TRANSFER,
)
from finledger.domain.errors import NotFoundError, ValidationError
from finledger.domain.models import (
    Account,
    BalanceReconciliation,
    ImportResult,
    Transaction,
    TransactionSummary,
)
from finledger.domain.services.balance import (
    balance_delta,
    creation_delta,
    deletion_delta,
    direction_for,
    replay_balance,
)
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.utils.decimal_utils import parse_amount, to_money
from finledger.utils.records import new_id, utc_now

DEFAULT_LIST_LIMIT = 100
MAX_LIST_LIMIT = 500

_RECORDABLE_TYPES = (TXN_INCOME, TXN_EXPENSE)


def _recordable_type(txn_type: str | None) -> str:
    if txn_type not in _RECORDABLE_TYPES:
        raise ValidationError(
            "Only income and expense transactions can be recorded directly; "
            "use transfers or balance adjustments for other movements"
        )
    return txn_type


class TransactionsUseCase:
    """Create, amend, delete and query ledger transactions."""

    def __init__(
        self,
        store: LedgerStorePort,
        category_suggester: CategorySuggestionPort | None = None,
        logger=None,
    ) -> None:
        """Initialize the use case.

        Args:
            store: Ledger store opening units of work.
            category_suggester: Optional collaborator suggesting categories
                for uncategorized transactions with a merchant name.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._store = store
        self._category_suggester = category_suggester
        self._logger = logger or get_app_logger()

    def create(self, owner_id: str, request: CreateTransactionInput) -> Transaction:
        """Record an income or expense and update the account balance.

        A pending transaction is stored without touching the balance.

        Args:
            owner_id: Owner of the account.
            request: Transaction attributes.

        Returns:
            Transaction: The created transaction.

        Raises:
            NotFoundError: If the account or category is missing or not owned.
            ValidationError: If the currency, amount or type is invalid.
        """
        txn_type = _recordable_type(request.type)
        amount = parse_amount(request.amount)
        currency = normalize_currency(request.currency)
        merchant = optional_text(request.merchant_name, 200)
        suggested = None
        if request.category_id is None and merchant:
            suggested = self._suggest_category(owner_id, merchant)

        with self._store.unit_of_work() as session:
            account = self._locked_account(session, owner_id, request.account_id)
            self._check_currency(account, currency)
            category_id = request.category_id
            if category_id is not None:
                self._check_category(session, owner_id, category_id)
            elif suggested is not None:
                if session.get_category(owner_id, suggested) is not None:
                    category_id = suggested
            transaction = self._build(
                owner_id,
                account,
                txn_type,
                amount,
                request,
                category_id=category_id,
                merchant=merchant,
                source=SOURCE_MANUAL,
            )
            session.insert_transaction(transaction)
            session.apply_balance_delta(account.id, creation_delta(transaction))

        self._logger.info(
            f"Recorded {txn_type} {transaction.id} of {amount} {currency} "
            f"on account {account.id}"
        )
        return transaction

    def update(
        self,
        owner_id: str,
        transaction_id: str,
        request: UpdateTransactionInput,
    ) -> Transaction:
        """Amend a transaction and apply the resulting balance delta.

        Imported transactions accept category and description changes only.
        Transfer legs keep their amount and type so both legs stay matched;
        a new date is applied to both legs.

        Args:
            owner_id: Owner of the transaction.
            transaction_id: Transaction to amend.
            request: Fields to change; None keeps the stored value.

        Returns:
            Transaction: The amended transaction.
        """
        ledger_fields_changed = any(
            value is not None
            for value in (
                request.amount,
                request.type,
                request.txn_date,
                request.merchant_name,
            )
        )
        amount = None if request.amount is None else parse_amount(request.amount)

        with self._store.unit_of_work() as session:
            current = require_found(
                session.get_transaction(owner_id, transaction_id, for_update=True),
                "Transaction",
            )
            if current.source != SOURCE_MANUAL and ledger_fields_changed:
                raise ValidationError(
                    "Imported transactions only accept category and "
                    "description changes"
                )
            links = session.get_transaction_links(transaction_id)
            transfer_id = links.transfer_id
            if transfer_id is not None and (
                request.amount is not None or request.type is not None
            ):
                raise ValidationError(
                    "Cannot change the amount or type of a transfer leg"
                )
            direction = current.direction
            txn_type = current.type
            if request.type is not None and request.type != current.type:
                _recordable_type(current.type)
                txn_type = _recordable_type(request.type)
                direction = direction_for(txn_type)
            if request.category_id is not None:
                self._check_category(session, owner_id, request.category_id)

            updated = replace(
                current,
                type=txn_type,
                direction=direction,
                amount=amount if amount is not None else current.amount,
                category_id=(
                    request.category_id
                    if request.category_id is not None
                    else current.category_id
                ),
                description=(
                    optional_text(request.description, 500)
                    if request.description is not None
                    else current.description
                ),
                merchant_name=(
                    optional_text(request.merchant_name, 200)
                    if request.merchant_name is not None
                    else current.merchant_name
                ),
                txn_date=request.txn_date or current.txn_date,
            )
            delta = balance_delta(current, updated)
            if delta != 0:
                self._locked_account(session, owner_id, current.account_id)
                session.apply_balance_delta(current.account_id, delta)
            session.update_transaction(
                transaction_id,
                {
                    "type": updated.type,
                    "direction": updated.direction,
                    "amount": updated.amount,
                    "category_id": updated.category_id,
                    "description": updated.description,
                    "merchant_name": updated.merchant_name,
                    "txn_date": updated.txn_date,
                },
            )
            if transfer_id is not None and updated.txn_date != current.txn_date:
                self._move_sibling_leg(
                    session,
                    owner_id,
                    transfer_id,
                    transaction_id,
                    updated.txn_date,
                )
            result = session.get_transaction(owner_id, transaction_id)

        self._logger.info(
            f"Updated transaction {transaction_id} with balance delta {delta}"
        )
        return result

    def delete(self, owner_id: str, transaction_id: str) -> None:
        """Delete a manual transaction and reverse its balance effect.

        Raises:
            NotFoundError: If the transaction is missing or not owned.
            ValidationError: If the transaction is imported, is a transfer
                leg, a debt payment, or funds goal contributions.
        """
        with self._store.unit_of_work() as session:
            current = require_found(
                session.get_transaction(owner_id, transaction_id, for_update=True),
                "Transaction",
            )
            if current.source != SOURCE_MANUAL:
                raise ValidationError("Cannot delete imported transactions")
            links = session.get_transaction_links(transaction_id)
            if links.transfer_id is not None:
                raise ValidationError(
                    "Cannot delete a transaction that is part of a transfer"
                )
            if links.debt_payment_id is not None:
                raise ValidationError(
                    "Cannot delete a transaction that is a debt payment"
                )
            if links.goal_contribution_count:
                raise ValidationError(
                    "Cannot delete a transaction that has goal contributions"
                )
            self._locked_account(session, owner_id, current.account_id)
            session.apply_balance_delta(
                current.account_id,
                deletion_delta(current),
            )
            session.delete_transaction(transaction_id)
        self._logger.info(f"Deleted transaction {transaction_id}")

    def set_pending(
        self,
        owner_id: str,
        transaction_id: str,
        is_pending: bool,
    ) -> Transaction:
        """Move a transaction between pending and confirmed state.

        Confirming applies the transaction's signed effect to the balance;
        marking it pending again reverses it. Setting the current state is a
        no-op.

        Raises:
            ValidationError: If the transaction is a transfer leg.
        """
        with self._store.unit_of_work() as session:
            current = require_found(
                session.get_transaction(owner_id, transaction_id, for_update=True),
                "Transaction",
            )
            if current.is_pending == is_pending:
                return current
            if current.type == TXN_TRANSFER:
                raise ValidationError(
                    "Cannot change the pending state of a transfer leg"
                )
            updated = replace(current, is_pending=is_pending)
            self._locked_account(session, owner_id, current.account_id)
            session.apply_balance_delta(
                current.account_id,
                balance_delta(current, updated),
            )
            session.update_transaction(transaction_id, {"is_pending": is_pending})
            result = session.get_transaction(owner_id, transaction_id)
        state = "pending" if is_pending else "confirmed"
        self._logger.info(f"Marked transaction {transaction_id} as {state}")
        return result

    def recategorize(
        self,
        owner_id: str,
        transaction_id: str,
        category_id: str | None,
    ) -> Transaction:
        """Set or clear the category of any transaction, imported included."""
        with self._store.unit_of_work() as session:
            require_found(
                session.get_transaction(owner_id, transaction_id, for_update=True),
                "Transaction",
            )
            if category_id is not None:
                self._check_category(session, owner_id, category_id)
            session.update_transaction(
                transaction_id,
                {"category_id": category_id},
            )
            return session.get_transaction(owner_id, transaction_id)

    def bulk_import(
        self,
        owner_id: str,
        requests: list[CreateTransactionInput],
    ) -> ImportResult:
        """Record imported transactions in a single unit of work.

        Transactions whose external id was already imported on the same
        account, or repeats within the batch, are skipped and reported.

        Args:
            owner_id: Owner of the accounts.
            requests: Transactions handed over by the importer.

        Returns:
            ImportResult: Created transactions and skipped external ids.

        Raises:
            NotFoundError: If any referenced account is missing or not owned.
        """
        prepared = []
        for request in requests:
            merchant = optional_text(request.merchant_name, 200)
            suggested = None
            if request.category_id is None and merchant:
                suggested = self._suggest_category(owner_id, merchant)
            prepared.append(
                (
                    request,
                    _recordable_type(request.type),
                    parse_amount(request.amount),
                    normalize_currency(request.currency),
                    merchant,
                    suggested,
                )
            )

        created: list[Transaction] = []
        skipped: list[str] = []
        with self._store.unit_of_work() as session:
            accounts: dict[str, Account] = {}
            for account_id in sorted({item[0].account_id for item in prepared}):
                account = session.get_account(owner_id, account_id, for_update=True)
                if account is None:
                    raise NotFoundError("One or more accounts not found")
                accounts[account_id] = account

            seen: set[tuple[str, str]] = set()
            for request, txn_type, amount, currency, merchant, suggested in prepared:
                account = accounts[request.account_id]
                self._check_currency(account, currency)
                external_id = request.external_id
                if external_id is not None:
                    key = (account.id, external_id)
                    if key in seen or session.external_id_exists(*key):
                        skipped.append(external_id)
                        continue
                    seen.add(key)
                category_id = request.category_id
                if category_id is not None:
                    self._check_category(session, owner_id, category_id)
                elif suggested is not None:
                    if session.get_category(owner_id, suggested) is not None:
                        category_id = suggested
                transaction = self._build(
                    owner_id,
                    account,
                    txn_type,
                    amount,
                    request,
                    category_id=category_id,
                    merchant=merchant,
                    source=SOURCE_IMPORTED,
                )
                session.insert_transaction(transaction)
                session.apply_balance_delta(
                    account.id,
                    creation_delta(transaction),
                )
                created.append(transaction)

        self._logger.info(
            f"Imported {len(created)} transactions for owner {owner_id}, "
            f"skipped {len(skipped)} duplicates"
        )
        return ImportResult(created=created, skipped_external_ids=skipped)

    def get(self, owner_id: str, transaction_id: str) -> Transaction:
        with self._store.unit_of_work() as session:
            return require_found(
                session.get_transaction(owner_id, transaction_id),
                "Transaction",
            )

    def list_transactions(
        self,
        owner_id: str,
        filters: TransactionFilters | None = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> list[Transaction]:
        """Return filtered transactions, newest first.

        Raises:
            ValidationError: If the limit or date range is invalid.
        """
        if not 1 <= limit <= MAX_LIST_LIMIT:
            raise ValidationError(f"limit must be between 1 and {MAX_LIST_LIMIT}")
        filters = filters or TransactionFilters()
        if (
            filters.start_date is not None
            and filters.end_date is not None
            and filters.start_date > filters.end_date
        ):
            raise ValidationError("start_date must not be after end_date")
        with self._store.unit_of_work() as session:
            return session.list_transactions(owner_id, filters, limit)

    def summary(
        self,
        owner_id: str,
        start_date: date,
        end_date: date,
    ) -> TransactionSummary:
        """Return confirmed income, expenses and activity over a period."""
        if start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        with self._store.unit_of_work() as session:
            income = session.sum_amounts(
                owner_id,
                TXN_INCOME,
                start_date,
                end_date,
                confirmed_only=True,
            )
            expenses = session.sum_amounts(
                owner_id,
                TXN_EXPENSE,
                start_date,
                end_date,
                confirmed_only=True,
            )
            count = session.count_confirmed_transactions(
                owner_id,
                start_date,
                end_date,
                exclude_type=TXN_TRANSFER,
            )
        return TransactionSummary(
            total_income=to_money(income),
            total_expenses=to_money(expenses),
            transaction_count=count,
        )

    def replay_balance(self, owner_id: str, account_id: str) -> Decimal:
        """Recompute an account balance from its full transaction history."""
        with self._store.unit_of_work() as session:
            require_found(session.get_account(owner_id, account_id), "Account")
            history = session.list_account_transactions(account_id)
        return to_money(replay_balance(history))

    def reconcile(self, owner_id: str, account_id: str) -> BalanceReconciliation:
        """Compare the stored balance with a full replay of the history."""
        with self._store.unit_of_work() as session:
            account = require_found(
                session.get_account(owner_id, account_id),
                "Account",
            )
            history = session.list_account_transactions(account_id)
        reconciliation = BalanceReconciliation(
            account_id=account_id,
            stored_balance=account.balance_current,
            replayed_balance=to_money(replay_balance(history)),
        )
        if not reconciliation.is_consistent:
            self._logger.warning(
                f"Balance drift of {reconciliation.drift} on account "
                f"{account_id}"
            )
        return reconciliation

    def _suggest_category(self, owner_id: str, merchant: str) -> str | None:
        if self._category_suggester is None:
            return None
        return self._category_suggester.suggest_category(owner_id, merchant)

    @staticmethod
    def _locked_account(
        session: LedgerSessionPort,
        owner_id: str,
        account_id: str,
    ) -> Account:
        return require_found(
            session.get_account(owner_id, account_id, for_update=True),
            "Account",
        )

    @staticmethod
    def _move_sibling_leg(
        session: LedgerSessionPort,
        owner_id: str,
        transfer_id: str,
        transaction_id: str,
        txn_date: date,
    ) -> None:
        transfer = require_found(
            session.get_transfer(owner_id, transfer_id),
            "Transfer",
        )
        sibling_id = (
            transfer.to_txn_id
            if transfer.from_txn_id == transaction_id
            else transfer.from_txn_id
        )
        session.get_transaction(owner_id, sibling_id, for_update=True)
        session.update_transaction(sibling_id, {"txn_date": txn_date})

    @staticmethod
    def _check_currency(account: Account, currency: str) -> None:
        if currency != account.currency:
            raise ValidationError(
                f"Transaction currency {currency} does not match account "
                f"currency {account.currency}"
            )

    @staticmethod
    def _check_category(
        session: LedgerSessionPort,
        owner_id: str,
        category_id: str,
    ) -> None:
        require_found(session.get_category(owner_id, category_id), "Category")

    @staticmethod
    def _build(
        owner_id: str,
        account: Account,
        txn_type: str,
        amount: Decimal,
        request: CreateTransactionInput,
        category_id: str | None,
        merchant: str | None,
        source: str,
    ) -> Transaction:
        now = utc_now()
        return Transaction(
            id=new_id(),
            owner_id=owner_id,
            account_id=account.id,
            type=txn_type,
            direction=direction_for(txn_type),
            amount=amount,
            currency=account.currency,
            txn_date=request.txn_date,
            category_id=category_id,
            description=optional_text(request.description, 500),
            merchant_name=merchant,
            is_pending=request.is_pending,
            source=source,
            external_id=request.external_id,
            created_at=now,
            updated_at=now,
        )


__all__ = ["TransactionsUseCase", "DEFAULT_LIST_LIMIT", "MAX_LIST_LIMIT"]
