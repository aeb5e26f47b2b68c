"""SQLAlchemy-backed ledger store.

Each unit of work wraps one ``engine.begin()`` transaction: every statement
issued through the session commits together or not at all. Rows mutated by a
use case are read with ``SELECT ... FOR UPDATE`` so concurrent mutations on
the same account, debt or goal serialize instead of losing updates.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import and_, delete, func, insert, or_, select, update
from sqlalchemy.engine import Connection
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from finledger.application.ports.database import DatabaseEnginePort
from finledger.application.ports.ledger_store import (
    LedgerSessionPort,
    LedgerStorePort,
)
from finledger.application.requests import TransactionFilters
from finledger.domain.errors import ConflictError, StorageError
from finledger.domain.models import (
    Account,
    Budget,
    BudgetCategoryCap,
    Category,
    CategoryTypeTotal,
    Debt,
    DebtPayment,
    Goal,
    GoalContribution,
    Transaction,
    TransactionLinks,
    Transfer,
)
from finledger.infrastructure.logging.logger import get_app_logger
from finledger.infrastructure.schema import (
    accounts,
    budget_categories,
    budgets,
    categories,
    debt_payments,
    debts,
    goal_contributions,
    goals,
    transactions,
    transfers,
)
from finledger.utils.decimal_utils import coerce_decimal, to_money
from finledger.utils.records import utc_now


def _money(value) -> Decimal | None:
    return None if value is None else to_money(value)


def _account_from_row(row) -> Account:
    return Account(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        type=row.type,
        currency=row.currency,
        balance_current=to_money(row.balance_current),
        archived=bool(row.archived),
        metadata=dict(row.metadata_json or {}),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _category_from_row(row) -> Category:
    return Category(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        parent_id=row.parent_id,
        is_default=bool(row.is_default),
    )


def _transaction_from_row(row) -> Transaction:
    return Transaction(
        id=row.id,
        owner_id=row.owner_id,
        account_id=row.account_id,
        type=row.type,
        direction=row.direction,
        amount=to_money(row.amount),
        currency=row.currency,
        txn_date=row.txn_date,
        category_id=row.category_id,
        description=row.description,
        merchant_name=row.merchant_name,
        is_pending=bool(row.is_pending),
        source=row.source,
        external_id=row.external_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _debt_from_row(row) -> Debt:
    rate = row.interest_rate_annual
    return Debt(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        kind=row.kind,
        principal=to_money(row.principal),
        start_date=row.start_date,
        interest_rate_annual=None if rate is None else coerce_decimal(rate),
        min_payment_amount=_money(row.min_payment_amount),
        due_date=row.due_date,
        linked_account_id=row.linked_account_id,
        created_at=row.created_at,
    )


def _goal_from_row(row) -> Goal:
    return Goal(
        id=row.id,
        owner_id=row.owner_id,
        name=row.name,
        target_amount=to_money(row.target_amount),
        current_amount=to_money(row.current_amount),
        currency=row.currency,
        due_date=row.due_date,
        created_at=row.created_at,
    )


def _contribution_from_row(row) -> GoalContribution:
    return GoalContribution(
        id=row.id,
        goal_id=row.goal_id,
        amount=to_money(row.amount),
        applied_amount=to_money(row.applied_amount),
        date=row.date,
        transaction_id=row.transaction_id,
    )


class SqlAlchemyLedgerSession(LedgerSessionPort):
    """Ledger reads and writes bound to one open connection."""

    def __init__(self, conn: Connection) -> None:
        """Initialize the session.

        Args:
            conn: Connection with an open transaction.
        """
        self._conn = conn

    def _first(self, stmt, for_update: bool = False):
        if for_update:
            stmt = stmt.with_for_update()
        return self._conn.execute(stmt).first()

    def _count(self, table, *criteria) -> int:
        stmt = select(func.count()).select_from(table).where(*criteria)
        return int(self._conn.execute(stmt).scalar_one())

    # Accounts

    def get_account(
        self,
        owner_id: str,
        account_id: str,
        for_update: bool = False,
    ) -> Account | None:
        row = self._first(
            select(accounts).where(
                accounts.c.id == account_id,
                accounts.c.owner_id == owner_id,
            ),
            for_update=for_update,
        )
        return _account_from_row(row) if row else None

    def list_accounts(
        self,
        owner_id: str,
        account_type: str | None = None,
        archived: bool | None = None,
    ) -> list[Account]:
        stmt = select(accounts).where(accounts.c.owner_id == owner_id)
        if account_type is not None:
            stmt = stmt.where(accounts.c.type == account_type)
        if archived is not None:
            stmt = stmt.where(accounts.c.archived == archived)
        stmt = stmt.order_by(accounts.c.created_at.desc(), accounts.c.id)
        return [_account_from_row(row) for row in self._conn.execute(stmt)]

    def insert_account(self, account: Account) -> None:
        self._conn.execute(
            insert(accounts).values(
                id=account.id,
                owner_id=account.owner_id,
                name=account.name,
                type=account.type,
                currency=account.currency,
                balance_current=account.balance_current,
                archived=account.archived,
                metadata_json=account.metadata,
                created_at=account.created_at,
                updated_at=account.updated_at,
            )
        )

    def update_account(self, account_id: str, values: dict[str, Any]) -> None:
        payload = dict(values)
        if "metadata" in payload:
            payload["metadata_json"] = payload.pop("metadata")
        payload["updated_at"] = utc_now()
        self._conn.execute(
            update(accounts).where(accounts.c.id == account_id).values(**payload)
        )

    def apply_balance_delta(self, account_id: str, delta: Decimal) -> None:
        if delta == 0:
            return
        self._conn.execute(
            update(accounts)
            .where(accounts.c.id == account_id)
            .values(
                balance_current=accounts.c.balance_current + delta,
                updated_at=utc_now(),
            )
        )

    def delete_account(self, account_id: str) -> None:
        self._conn.execute(delete(accounts).where(accounts.c.id == account_id))

    def count_account_transactions(self, account_id: str) -> int:
        return self._count(transactions, transactions.c.account_id == account_id)

    # Categories

    @staticmethod
    def _visible_categories(owner_id: str):
        return or_(
            categories.c.owner_id == owner_id,
            and_(
                categories.c.owner_id.is_(None),
                categories.c.is_default.is_(True),
            ),
        )

    def get_category(self, owner_id: str, category_id: str) -> Category | None:
        row = self._first(
            select(categories).where(
                categories.c.id == category_id,
                self._visible_categories(owner_id),
            )
        )
        return _category_from_row(row) if row else None

    def list_categories(self, owner_id: str) -> list[Category]:
        stmt = (
            select(categories)
            .where(self._visible_categories(owner_id))
            .order_by(categories.c.name, categories.c.id)
        )
        return [_category_from_row(row) for row in self._conn.execute(stmt)]

    def get_parent_id(self, category_id: str) -> str | None:
        stmt = select(categories.c.parent_id).where(categories.c.id == category_id)
        return self._conn.execute(stmt).scalar_one_or_none()

    def find_category_by_name(
        self,
        owner_id: str,
        name: str,
        parent_id: str | None,
    ) -> Category | None:
        parent_clause = (
            categories.c.parent_id.is_(None)
            if parent_id is None
            else categories.c.parent_id == parent_id
        )
        row = self._first(
            select(categories).where(
                categories.c.owner_id == owner_id,
                categories.c.name == name,
                parent_clause,
            )
        )
        return _category_from_row(row) if row else None

    def insert_category(self, category: Category) -> None:
        self._conn.execute(
            insert(categories).values(
                id=category.id,
                owner_id=category.owner_id,
                name=category.name,
                parent_id=category.parent_id,
                is_default=category.is_default,
            )
        )

    def update_category(self, category_id: str, values: dict[str, Any]) -> None:
        self._conn.execute(
            update(categories)
            .where(categories.c.id == category_id)
            .values(**values)
        )

    def delete_category(self, category_id: str) -> None:
        self._conn.execute(
            delete(categories).where(categories.c.id == category_id)
        )

    def count_child_categories(self, category_id: str) -> int:
        return self._count(categories, categories.c.parent_id == category_id)

    def count_category_references(self, category_id: str) -> int:
        used_by_transactions = self._count(
            transactions,
            transactions.c.category_id == category_id,
        )
        used_by_budgets = self._count(
            budget_categories,
            budget_categories.c.category_id == category_id,
        )
        return used_by_transactions + used_by_budgets

    # Transactions

    def get_transaction(
        self,
        owner_id: str,
        transaction_id: str,
        for_update: bool = False,
    ) -> Transaction | None:
        row = self._first(
            select(transactions).where(
                transactions.c.id == transaction_id,
                transactions.c.owner_id == owner_id,
            ),
            for_update=for_update,
        )
        return _transaction_from_row(row) if row else None

    def list_transactions(
        self,
        owner_id: str,
        filters: TransactionFilters,
        limit: int,
    ) -> list[Transaction]:
        t = transactions.c
        stmt = select(transactions).where(t.owner_id == owner_id)
        if filters.account_id is not None:
            stmt = stmt.where(t.account_id == filters.account_id)
        if filters.category_id is not None:
            stmt = stmt.where(t.category_id == filters.category_id)
        if filters.type is not None:
            stmt = stmt.where(t.type == filters.type)
        if filters.source is not None:
            stmt = stmt.where(t.source == filters.source)
        if filters.is_pending is not None:
            stmt = stmt.where(t.is_pending == filters.is_pending)
        if filters.start_date is not None:
            stmt = stmt.where(t.txn_date >= filters.start_date)
        if filters.end_date is not None:
            stmt = stmt.where(t.txn_date <= filters.end_date)
        if filters.search:
            term = filters.search.lower()
            stmt = stmt.where(
                or_(
                    func.lower(t.description).contains(term, autoescape=True),
                    func.lower(t.merchant_name).contains(term, autoescape=True),
                )
            )
        stmt = stmt.order_by(
            t.txn_date.desc(),
            t.created_at.desc(),
            t.id,
        ).limit(limit)
        return [_transaction_from_row(row) for row in self._conn.execute(stmt)]

    def list_account_transactions(self, account_id: str) -> list[Transaction]:
        stmt = (
            select(transactions)
            .where(transactions.c.account_id == account_id)
            .order_by(transactions.c.txn_date, transactions.c.created_at)
        )
        return [_transaction_from_row(row) for row in self._conn.execute(stmt)]

    def insert_transaction(self, transaction: Transaction) -> None:
        self._conn.execute(
            insert(transactions).values(
                id=transaction.id,
                owner_id=transaction.owner_id,
                account_id=transaction.account_id,
                category_id=transaction.category_id,
                type=transaction.type,
                direction=transaction.direction,
                amount=transaction.amount,
                currency=transaction.currency,
                txn_date=transaction.txn_date,
                description=transaction.description,
                merchant_name=transaction.merchant_name,
                is_pending=transaction.is_pending,
                source=transaction.source,
                external_id=transaction.external_id,
                created_at=transaction.created_at,
                updated_at=transaction.updated_at,
            )
        )

    def update_transaction(
        self,
        transaction_id: str,
        values: dict[str, Any],
    ) -> None:
        self._conn.execute(
            update(transactions)
            .where(transactions.c.id == transaction_id)
            .values(**values, updated_at=utc_now())
        )

    def delete_transaction(self, transaction_id: str) -> None:
        self._conn.execute(
            delete(transactions).where(transactions.c.id == transaction_id)
        )

    def get_transaction_links(self, transaction_id: str) -> TransactionLinks:
        transfer_id = self._conn.execute(
            select(transfers.c.id).where(
                or_(
                    transfers.c.from_txn_id == transaction_id,
                    transfers.c.to_txn_id == transaction_id,
                )
            )
        ).scalar()
        payment_id = self._conn.execute(
            select(debt_payments.c.id).where(
                debt_payments.c.transaction_id == transaction_id
            )
        ).scalar()
        contribution_count = self._count(
            goal_contributions,
            goal_contributions.c.transaction_id == transaction_id,
        )
        return TransactionLinks(
            transfer_id=transfer_id,
            debt_payment_id=payment_id,
            goal_contribution_count=contribution_count,
        )

    def external_id_exists(self, account_id: str, external_id: str) -> bool:
        return (
            self._count(
                transactions,
                transactions.c.account_id == account_id,
                transactions.c.external_id == external_id,
            )
            > 0
        )

    def sum_amounts(
        self,
        owner_id: str,
        txn_type: str,
        start_date: date,
        end_date: date,
        category_id: str | None = None,
        confirmed_only: bool = False,
    ) -> Decimal:
        t = transactions.c
        stmt = select(func.coalesce(func.sum(t.amount), 0)).where(
            t.owner_id == owner_id,
            t.type == txn_type,
            t.txn_date >= start_date,
            t.txn_date <= end_date,
        )
        if category_id is not None:
            stmt = stmt.where(t.category_id == category_id)
        if confirmed_only:
            stmt = stmt.where(t.is_pending.is_(False))
        return to_money(self._conn.execute(stmt).scalar_one())

    def sum_amounts_by_category(
        self,
        owner_id: str,
        txn_type: str,
        start_date: date,
        end_date: date,
        confirmed_only: bool = False,
    ) -> dict[str, Decimal]:
        t = transactions.c
        stmt = (
            select(t.category_id, func.sum(t.amount).label("total"))
            .where(
                t.owner_id == owner_id,
                t.type == txn_type,
                t.txn_date >= start_date,
                t.txn_date <= end_date,
                t.category_id.is_not(None),
            )
            .group_by(t.category_id)
        )
        if confirmed_only:
            stmt = stmt.where(t.is_pending.is_(False))
        return {
            row.category_id: to_money(row.total)
            for row in self._conn.execute(stmt)
        }

    def category_type_totals(
        self,
        owner_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[CategoryTypeTotal]:
        t = transactions.c
        stmt = select(
            t.category_id,
            t.type,
            func.sum(t.amount).label("total"),
            func.count().label("count"),
        ).where(t.owner_id == owner_id, t.category_id.is_not(None))
        if start_date is not None:
            stmt = stmt.where(t.txn_date >= start_date)
        if end_date is not None:
            stmt = stmt.where(t.txn_date <= end_date)
        stmt = stmt.group_by(t.category_id, t.type)
        return [
            CategoryTypeTotal(
                category_id=row.category_id,
                txn_type=row.type,
                total=to_money(row.total),
                count=row.count,
            )
            for row in self._conn.execute(stmt)
        ]

    def count_confirmed_transactions(
        self,
        owner_id: str,
        start_date: date,
        end_date: date,
        exclude_type: str | None = None,
    ) -> int:
        t = transactions.c
        criteria = [
            t.owner_id == owner_id,
            t.is_pending.is_(False),
            t.txn_date >= start_date,
            t.txn_date <= end_date,
        ]
        if exclude_type is not None:
            criteria.append(t.type != exclude_type)
        return self._count(transactions, *criteria)

    def recent_merchant_categories(
        self,
        owner_id: str,
        keyword: str,
        limit: int,
    ) -> list[str]:
        t = transactions.c
        stmt = (
            select(t.category_id)
            .where(
                t.owner_id == owner_id,
                t.category_id.is_not(None),
                func.lower(t.merchant_name).contains(
                    keyword.lower(),
                    autoescape=True,
                ),
            )
            .order_by(t.txn_date.desc(), t.created_at.desc())
            .limit(limit)
        )
        return list(self._conn.execute(stmt).scalars())

    # Transfers

    def insert_transfer(self, transfer: Transfer) -> None:
        self._conn.execute(
            insert(transfers).values(
                id=transfer.id,
                owner_id=transfer.owner_id,
                from_txn_id=transfer.from_txn_id,
                to_txn_id=transfer.to_txn_id,
                amount=transfer.amount,
                created_at=transfer.created_at,
            )
        )

    def _transfers_with_legs(self, rows) -> list[Transfer]:
        rows = list(rows)
        leg_ids = [row.from_txn_id for row in rows] + [
            row.to_txn_id for row in rows
        ]
        legs: dict[str, Transaction] = {}
        if leg_ids:
            stmt = select(transactions).where(transactions.c.id.in_(leg_ids))
            legs = {
                row.id: _transaction_from_row(row)
                for row in self._conn.execute(stmt)
            }
        return [
            Transfer(
                id=row.id,
                owner_id=row.owner_id,
                from_txn_id=row.from_txn_id,
                to_txn_id=row.to_txn_id,
                amount=to_money(row.amount),
                created_at=row.created_at,
                from_txn=legs.get(row.from_txn_id),
                to_txn=legs.get(row.to_txn_id),
            )
            for row in rows
        ]

    def get_transfer(self, owner_id: str, transfer_id: str) -> Transfer | None:
        row = self._first(
            select(transfers).where(
                transfers.c.id == transfer_id,
                transfers.c.owner_id == owner_id,
            )
        )
        if row is None:
            return None
        return self._transfers_with_legs([row])[0]

    def list_transfers(self, owner_id: str) -> list[Transfer]:
        stmt = (
            select(transfers)
            .where(transfers.c.owner_id == owner_id)
            .order_by(transfers.c.created_at.desc(), transfers.c.id)
        )
        return self._transfers_with_legs(self._conn.execute(stmt))

    # Debts

    def get_debt(
        self,
        owner_id: str,
        debt_id: str,
        for_update: bool = False,
    ) -> Debt | None:
        row = self._first(
            select(debts).where(
                debts.c.id == debt_id,
                debts.c.owner_id == owner_id,
            ),
            for_update=for_update,
        )
        return _debt_from_row(row) if row else None

    def list_debts(
        self,
        owner_id: str,
        kind: str | None = None,
        debt_ids: list[str] | None = None,
    ) -> list[Debt]:
        stmt = select(debts).where(debts.c.owner_id == owner_id)
        if kind is not None:
            stmt = stmt.where(debts.c.kind == kind)
        if debt_ids is not None:
            stmt = stmt.where(debts.c.id.in_(debt_ids))
        stmt = stmt.order_by(debts.c.created_at.desc(), debts.c.id)
        return [_debt_from_row(row) for row in self._conn.execute(stmt)]

    def insert_debt(self, debt: Debt) -> None:
        self._conn.execute(
            insert(debts).values(
                id=debt.id,
                owner_id=debt.owner_id,
                name=debt.name,
                kind=debt.kind,
                principal=debt.principal,
                interest_rate_annual=debt.interest_rate_annual,
                min_payment_amount=debt.min_payment_amount,
                start_date=debt.start_date,
                due_date=debt.due_date,
                linked_account_id=debt.linked_account_id,
                created_at=debt.created_at,
            )
        )

    def update_debt(self, debt_id: str, values: dict[str, Any]) -> None:
        self._conn.execute(
            update(debts).where(debts.c.id == debt_id).values(**values)
        )

    def delete_debt(self, debt_id: str) -> None:
        self._conn.execute(delete(debts).where(debts.c.id == debt_id))

    def list_debt_payments(self, debt_id: str) -> list[DebtPayment]:
        stmt = (
            select(debt_payments)
            .where(debt_payments.c.debt_id == debt_id)
            .order_by(debt_payments.c.date.desc(), debt_payments.c.id)
        )
        return [
            DebtPayment(
                id=row.id,
                debt_id=row.debt_id,
                transaction_id=row.transaction_id,
                amount=to_money(row.amount),
                date=row.date,
            )
            for row in self._conn.execute(stmt)
        ]

    def total_debt_payments(self, debt_id: str) -> Decimal:
        stmt = select(func.coalesce(func.sum(debt_payments.c.amount), 0)).where(
            debt_payments.c.debt_id == debt_id
        )
        return to_money(self._conn.execute(stmt).scalar_one())

    def insert_debt_payment(self, payment: DebtPayment) -> None:
        self._conn.execute(
            insert(debt_payments).values(
                id=payment.id,
                debt_id=payment.debt_id,
                transaction_id=payment.transaction_id,
                amount=payment.amount,
                date=payment.date,
            )
        )

    # Goals

    def get_goal(
        self,
        owner_id: str,
        goal_id: str,
        for_update: bool = False,
    ) -> Goal | None:
        row = self._first(
            select(goals).where(
                goals.c.id == goal_id,
                goals.c.owner_id == owner_id,
            ),
            for_update=for_update,
        )
        return _goal_from_row(row) if row else None

    def list_goals(self, owner_id: str) -> list[Goal]:
        stmt = (
            select(goals)
            .where(goals.c.owner_id == owner_id)
            .order_by(goals.c.created_at.desc(), goals.c.id)
        )
        return [_goal_from_row(row) for row in self._conn.execute(stmt)]

    def insert_goal(self, goal: Goal) -> None:
        self._conn.execute(
            insert(goals).values(
                id=goal.id,
                owner_id=goal.owner_id,
                name=goal.name,
                target_amount=goal.target_amount,
                current_amount=goal.current_amount,
                currency=goal.currency,
                due_date=goal.due_date,
                created_at=goal.created_at,
            )
        )

    def update_goal(self, goal_id: str, values: dict[str, Any]) -> None:
        self._conn.execute(
            update(goals).where(goals.c.id == goal_id).values(**values)
        )

    def delete_goal(self, goal_id: str) -> None:
        self._conn.execute(delete(goals).where(goals.c.id == goal_id))

    def list_goal_contributions(self, goal_id: str) -> list[GoalContribution]:
        stmt = (
            select(goal_contributions)
            .where(goal_contributions.c.goal_id == goal_id)
            .order_by(goal_contributions.c.date.desc(), goal_contributions.c.id)
        )
        return [_contribution_from_row(row) for row in self._conn.execute(stmt)]

    def get_goal_contribution(
        self,
        owner_id: str,
        contribution_id: str,
    ) -> GoalContribution | None:
        stmt = (
            select(goal_contributions)
            .join(goals, goals.c.id == goal_contributions.c.goal_id)
            .where(
                goal_contributions.c.id == contribution_id,
                goals.c.owner_id == owner_id,
            )
        )
        row = self._first(stmt)
        return _contribution_from_row(row) if row else None

    def insert_goal_contribution(self, contribution: GoalContribution) -> None:
        self._conn.execute(
            insert(goal_contributions).values(
                id=contribution.id,
                goal_id=contribution.goal_id,
                transaction_id=contribution.transaction_id,
                amount=contribution.amount,
                applied_amount=contribution.applied_amount,
                date=contribution.date,
            )
        )

    def delete_goal_contribution(self, contribution_id: str) -> None:
        self._conn.execute(
            delete(goal_contributions).where(
                goal_contributions.c.id == contribution_id
            )
        )

    # Budgets

    def _load_caps(self, budget_id: str) -> list[BudgetCategoryCap]:
        stmt = (
            select(
                budget_categories.c.id,
                budget_categories.c.category_id,
                budget_categories.c.cap_amount,
                categories.c.name.label("category_name"),
            )
            .select_from(
                budget_categories.outerjoin(
                    categories,
                    categories.c.id == budget_categories.c.category_id,
                )
            )
            .where(budget_categories.c.budget_id == budget_id)
            .order_by(categories.c.name, budget_categories.c.category_id)
        )
        return [
            BudgetCategoryCap(
                id=row.id,
                category_id=row.category_id,
                cap_amount=to_money(row.cap_amount),
                category_name=row.category_name,
            )
            for row in self._conn.execute(stmt)
        ]

    def _budget_from_row(self, row) -> Budget:
        return Budget(
            id=row.id,
            owner_id=row.owner_id,
            year=row.year,
            month=row.month,
            currency=row.currency,
            amount_total=_money(row.amount_total),
            categories=self._load_caps(row.id),
            created_at=row.created_at,
        )

    def get_budget(self, owner_id: str, budget_id: str) -> Budget | None:
        row = self._first(
            select(budgets).where(
                budgets.c.id == budget_id,
                budgets.c.owner_id == owner_id,
            )
        )
        return self._budget_from_row(row) if row else None

    def get_budget_for_period(
        self,
        owner_id: str,
        year: int,
        month: int,
    ) -> Budget | None:
        row = self._first(
            select(budgets).where(
                budgets.c.owner_id == owner_id,
                budgets.c.year == year,
                budgets.c.month == month,
            )
        )
        return self._budget_from_row(row) if row else None

    def list_budgets(self, owner_id: str) -> list[Budget]:
        stmt = (
            select(budgets)
            .where(budgets.c.owner_id == owner_id)
            .order_by(budgets.c.year.desc(), budgets.c.month.desc())
        )
        rows = self._conn.execute(stmt).all()
        return [self._budget_from_row(row) for row in rows]

    def insert_budget(self, budget: Budget) -> None:
        self._conn.execute(
            insert(budgets).values(
                id=budget.id,
                owner_id=budget.owner_id,
                year=budget.year,
                month=budget.month,
                currency=budget.currency,
                amount_total=budget.amount_total,
                created_at=budget.created_at,
            )
        )
        self._insert_caps(budget.id, budget.categories)

    def _insert_caps(
        self,
        budget_id: str,
        caps: list[BudgetCategoryCap],
    ) -> None:
        if not caps:
            return
        self._conn.execute(
            insert(budget_categories),
            [
                {
                    "id": cap.id,
                    "budget_id": budget_id,
                    "category_id": cap.category_id,
                    "cap_amount": cap.cap_amount,
                }
                for cap in caps
            ],
        )

    def update_budget(self, budget_id: str, values: dict[str, Any]) -> None:
        self._conn.execute(
            update(budgets).where(budgets.c.id == budget_id).values(**values)
        )

    def replace_budget_categories(
        self,
        budget_id: str,
        caps: list[BudgetCategoryCap],
    ) -> None:
        self._conn.execute(
            delete(budget_categories).where(
                budget_categories.c.budget_id == budget_id
            )
        )
        self._insert_caps(budget_id, caps)

    def delete_budget(self, budget_id: str) -> None:
        self._conn.execute(
            delete(budget_categories).where(
                budget_categories.c.budget_id == budget_id
            )
        )
        self._conn.execute(delete(budgets).where(budgets.c.id == budget_id))

    def get_budget_cap(
        self,
        owner_id: str,
        year: int,
        month: int,
        category_id: str,
    ) -> BudgetCategoryCap | None:
        stmt = (
            select(
                budget_categories.c.id,
                budget_categories.c.category_id,
                budget_categories.c.cap_amount,
                categories.c.name.label("category_name"),
            )
            .select_from(
                budget_categories.join(
                    budgets,
                    budgets.c.id == budget_categories.c.budget_id,
                ).outerjoin(
                    categories,
                    categories.c.id == budget_categories.c.category_id,
                )
            )
            .where(
                budgets.c.owner_id == owner_id,
                budgets.c.year == year,
                budgets.c.month == month,
                budget_categories.c.category_id == category_id,
            )
        )
        row = self._first(stmt)
        if row is None:
            return None
        return BudgetCategoryCap(
            id=row.id,
            category_id=row.category_id,
            cap_amount=to_money(row.cap_amount),
            category_name=row.category_name,
        )


class SqlAlchemyLedgerStore(LedgerStorePort):
    """Ledger store opening units of work on a SQLAlchemy engine."""

    def __init__(self, db_port: DatabaseEnginePort, logger=None) -> None:
        """Initialize the store.

        Args:
            db_port: Port providing access to the ledger engine.
            logger: Optional logger compatible with logging.Logger-like API.
        """
        self._db_port = db_port
        self._logger = logger or get_app_logger()

    @contextmanager
    def unit_of_work(self) -> Iterator[SqlAlchemyLedgerSession]:
        """Open one database transaction for a ledger operation.

        Yields:
            SqlAlchemyLedgerSession: Session bound to the transaction.

        Raises:
            ConflictError: If a uniqueness constraint fails.
            StorageError: If the database fails for any other reason.
        """
        try:
            engine = self._db_port.get_ledger_engine()
            with engine.begin() as conn:
                yield SqlAlchemyLedgerSession(conn)
        except IntegrityError as exc:
            self._logger.warning(f"Ledger integrity violation: {exc.orig}")
            raise ConflictError(
                "Conflicting ledger record already exists"
            ) from None
        except SQLAlchemyError as exc:
            error = StorageError()
            self._logger.error(
                f"Ledger storage failure [ref={error.reference}]: {exc}"
            )
            raise error from None


__all__ = ["SqlAlchemyLedgerSession", "SqlAlchemyLedgerStore"]
