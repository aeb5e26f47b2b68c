"""Ports for the ledger store and its unit of work.

A use case opens one unit of work per operation. Every read and write made
through the yielded session belongs to the same database transaction, which
commits when the block exits normally and rolls back when it raises.
"""

from contextlib import AbstractContextManager
from datetime import date
from decimal import Decimal
from typing import Any, Protocol

from finledger.application.requests import TransactionFilters
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


class LedgerSessionPort(Protocol):
    """Reads and writes available inside a unit of work.

    Lookups taking an ``owner_id`` return None for rows owned by someone
    else. ``for_update=True`` locks the returned row until the unit of work
    ends.
    """

    # Accounts
    def get_account(
        self,
        owner_id: str,
        account_id: str,
        for_update: bool = False,
    ) -> Account | None:
        """Return an owned account."""

    def list_accounts(
        self,
        owner_id: str,
        account_type: str | None = None,
        archived: bool | None = None,
    ) -> list[Account]:
        """Return the owner's accounts, newest first."""

    def insert_account(self, account: Account) -> None:
        """Persist a new account."""

    def update_account(self, account_id: str, values: dict[str, Any]) -> None:
        """Update account columns."""

    def apply_balance_delta(self, account_id: str, delta: Decimal) -> None:
        """Add a signed delta to the account's current balance."""

    def delete_account(self, account_id: str) -> None:
        """Delete an account row."""

    def count_account_transactions(self, account_id: str) -> int:
        """Return the number of transactions posted to an account."""

    # Categories
    def get_category(self, owner_id: str, category_id: str) -> Category | None:
        """Return a category owned by the owner or shared as a default."""

    def list_categories(self, owner_id: str) -> list[Category]:
        """Return the owner's and default categories."""

    def get_parent_id(self, category_id: str) -> str | None:
        """Return the parent id of any category."""

    def find_category_by_name(
        self,
        owner_id: str,
        name: str,
        parent_id: str | None,
    ) -> Category | None:
        """Return the owner's category with a name under a parent."""

    def insert_category(self, category: Category) -> None:
        """Persist a new category."""

    def update_category(self, category_id: str, values: dict[str, Any]) -> None:
        """Update category columns."""

    def delete_category(self, category_id: str) -> None:
        """Delete a category row."""

    def count_child_categories(self, category_id: str) -> int:
        """Return the number of direct children of a category."""

    def count_category_references(self, category_id: str) -> int:
        """Return the number of transactions and caps using a category."""

    # Transactions
    def get_transaction(
        self,
        owner_id: str,
        transaction_id: str,
        for_update: bool = False,
    ) -> Transaction | None:
        """Return an owned transaction."""

    def list_transactions(
        self,
        owner_id: str,
        filters: TransactionFilters,
        limit: int,
    ) -> list[Transaction]:
        """Return filtered transactions, newest first."""

    def list_account_transactions(self, account_id: str) -> list[Transaction]:
        """Return the full history of an account."""

    def insert_transaction(self, transaction: Transaction) -> None:
        """Persist a new transaction."""

    def update_transaction(
        self,
        transaction_id: str,
        values: dict[str, Any],
    ) -> None:
        """Update transaction columns."""

    def delete_transaction(self, transaction_id: str) -> None:
        """Delete a transaction row."""

    def get_transaction_links(self, transaction_id: str) -> TransactionLinks:
        """Return the rows referencing a transaction."""

    def external_id_exists(self, account_id: str, external_id: str) -> bool:
        """Return True if an import already used the external id."""

    def sum_amounts(
        self,
        owner_id: str,
        txn_type: str,
        start_date: date,
        end_date: date,
        category_id: str | None = None,
        confirmed_only: bool = False,
    ) -> Decimal:
        """Return the sum of transaction amounts in a date window."""

    def sum_amounts_by_category(
        self,
        owner_id: str,
        txn_type: str,
        start_date: date,
        end_date: date,
        confirmed_only: bool = False,
    ) -> dict[str, Decimal]:
        """Return amounts in a date window grouped by category id."""

    def category_type_totals(
        self,
        owner_id: str,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> list[CategoryTypeTotal]:
        """Return sums and counts of categorized rows by category and type."""

    def count_confirmed_transactions(
        self,
        owner_id: str,
        start_date: date,
        end_date: date,
        exclude_type: str | None = None,
    ) -> int:
        """Return the number of non-pending transactions in a window."""

    def recent_merchant_categories(
        self,
        owner_id: str,
        keyword: str,
        limit: int,
    ) -> list[str]:
        """Return category ids of recent categorized matching merchants."""

    # Transfers
    def insert_transfer(self, transfer: Transfer) -> None:
        """Persist a transfer record."""

    def get_transfer(self, owner_id: str, transfer_id: str) -> Transfer | None:
        """Return an owned transfer with both legs."""

    def list_transfers(self, owner_id: str) -> list[Transfer]:
        """Return the owner's transfers with both legs, newest first."""

    # Debts
    def get_debt(
        self,
        owner_id: str,
        debt_id: str,
        for_update: bool = False,
    ) -> Debt | None:
        """Return an owned debt."""

    def list_debts(
        self,
        owner_id: str,
        kind: str | None = None,
        debt_ids: list[str] | None = None,
    ) -> list[Debt]:
        """Return the owner's debts, newest first."""

    def insert_debt(self, debt: Debt) -> None:
        """Persist a new debt."""

    def update_debt(self, debt_id: str, values: dict[str, Any]) -> None:
        """Update debt columns."""

    def delete_debt(self, debt_id: str) -> None:
        """Delete a debt row."""

    def list_debt_payments(self, debt_id: str) -> list[DebtPayment]:
        """Return payments of a debt, newest first."""

    def total_debt_payments(self, debt_id: str) -> Decimal:
        """Return the sum of payments recorded against a debt."""

    def insert_debt_payment(self, payment: DebtPayment) -> None:
        """Persist a debt payment."""

    # Goals
    def get_goal(
        self,
        owner_id: str,
        goal_id: str,
        for_update: bool = False,
    ) -> Goal | None:
        """Return an owned goal."""

    def list_goals(self, owner_id: str) -> list[Goal]:
        """Return the owner's goals, newest first."""

    def insert_goal(self, goal: Goal) -> None:
        """Persist a new goal."""

    def update_goal(self, goal_id: str, values: dict[str, Any]) -> None:
        """Update goal columns."""

    def delete_goal(self, goal_id: str) -> None:
        """Delete a goal row."""

    def list_goal_contributions(self, goal_id: str) -> list[GoalContribution]:
        """Return contributions of a goal, newest first."""

    def get_goal_contribution(
        self,
        owner_id: str,
        contribution_id: str,
    ) -> GoalContribution | None:
        """Return a contribution whose goal is owned by the owner."""

    def insert_goal_contribution(self, contribution: GoalContribution) -> None:
        """Persist a goal contribution."""

    def delete_goal_contribution(self, contribution_id: str) -> None:
        """Delete a goal contribution."""

    # Budgets
    def get_budget(self, owner_id: str, budget_id: str) -> Budget | None:
        """Return an owned budget with its category caps."""

    def get_budget_for_period(
        self,
        owner_id: str,
        year: int,
        month: int,
    ) -> Budget | None:
        """Return the owner's budget for a period."""

    def list_budgets(self, owner_id: str) -> list[Budget]:
        """Return the owner's budgets, latest period first."""

    def insert_budget(self, budget: Budget) -> None:
        """Persist a budget and its category caps."""

    def update_budget(self, budget_id: str, values: dict[str, Any]) -> None:
        """Update budget columns."""

    def replace_budget_categories(
        self,
        budget_id: str,
        caps: list[BudgetCategoryCap],
    ) -> None:
        """Delete every cap of a budget and insert the given ones."""

    def delete_budget(self, budget_id: str) -> None:
        """Delete a budget and its caps."""

    def get_budget_cap(
        self,
        owner_id: str,
        year: int,
        month: int,
        category_id: str,
    ) -> BudgetCategoryCap | None:
        """Return the cap of a category in the owner's budget for a period."""


class LedgerStorePort(Protocol):
    """Port opening units of work on the ledger store."""

    def unit_of_work(self) -> AbstractContextManager[LedgerSessionPort]:
        """Open a unit of work.

        Raises:
            ConflictError: If a uniqueness constraint fails on commit.
            StorageError: If the storage layer fails.
        """


__all__ = ["LedgerSessionPort", "LedgerStorePort"]
