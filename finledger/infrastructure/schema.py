"""SQLAlchemy Core schema of the ledger database.

Money columns are NUMERIC(18, 2) and read back as Decimal; identifiers are
UUID strings. Every owned table carries an ``owner_id`` column and an index
on it together with the date used for range scans. CHECK constraints keep
amounts positive and rates within 0..100 for writers that bypass the use
cases.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)
from sqlalchemy.engine import Engine

metadata = MetaData()


def _id(name: str = "id") -> Column:
    return Column(name, String(36), primary_key=True)


def MONEY() -> Numeric:
    return Numeric(18, 2, asdecimal=True)


def RATE() -> Numeric:
    return Numeric(7, 4, asdecimal=True)


accounts = Table(
    "accounts",
    metadata,
    _id(),
    Column("owner_id", String(36), nullable=False),
    Column("name", String(120), nullable=False),
    Column("type", String(20), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("balance_current", MONEY(), nullable=False),
    Column("archived", Boolean, nullable=False, default=False),
    Column("metadata_json", JSON, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_accounts_owner_created", "owner_id", "created_at"),
)

categories = Table(
    "categories",
    metadata,
    _id(),
    Column("owner_id", String(36), nullable=True),
    Column("name", String(120), nullable=False),
    Column("parent_id", String(36), ForeignKey("categories.id"), nullable=True),
    Column("is_default", Boolean, nullable=False, default=False),
    Index("ix_categories_owner", "owner_id"),
)

transactions = Table(
    "transactions",
    metadata,
    _id(),
    Column("owner_id", String(36), nullable=False),
    Column("account_id", String(36), ForeignKey("accounts.id"), nullable=False),
    Column(
        "category_id",
        String(36),
        ForeignKey("categories.id"),
        nullable=True,
    ),
    Column("type", String(20), nullable=False),
    Column("direction", String(10), nullable=False),
    Column("amount", MONEY(), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("txn_date", Date, nullable=False),
    Column("description", String(500), nullable=True),
    Column("merchant_name", String(200), nullable=True),
    Column("is_pending", Boolean, nullable=False, default=False),
    Column("source", String(20), nullable=False),
    Column("external_id", String(120), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
    Index("ix_transactions_owner_date", "owner_id", "txn_date"),
    Index("ix_transactions_account", "account_id"),
    Index("ix_transactions_account_external", "account_id", "external_id"),
    CheckConstraint("amount > 0", name="ck_transactions_amount"),
)

transfers = Table(
    "transfers",
    metadata,
    _id(),
    Column("owner_id", String(36), nullable=False),
    Column(
        "from_txn_id",
        String(36),
        ForeignKey("transactions.id"),
        nullable=False,
        unique=True,
    ),
    Column(
        "to_txn_id",
        String(36),
        ForeignKey("transactions.id"),
        nullable=False,
        unique=True,
    ),
    Column("amount", MONEY(), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_transfers_owner_created", "owner_id", "created_at"),
    CheckConstraint("amount > 0", name="ck_transfers_amount"),
)

debts = Table(
    "debts",
    metadata,
    _id(),
    Column("owner_id", String(36), nullable=False),
    Column("name", String(120), nullable=False),
    Column("kind", String(20), nullable=False),
    Column("principal", MONEY(), nullable=False),
    Column("interest_rate_annual", RATE(), nullable=True),
    Column("min_payment_amount", MONEY(), nullable=True),
    Column("start_date", Date, nullable=False),
    Column("due_date", Date, nullable=True),
    Column(
        "linked_account_id",
        String(36),
        ForeignKey("accounts.id"),
        nullable=True,
    ),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_debts_owner_created", "owner_id", "created_at"),
    CheckConstraint("principal > 0", name="ck_debts_principal"),
    CheckConstraint(
        "interest_rate_annual IS NULL"
        " OR (interest_rate_annual >= 0 AND interest_rate_annual <= 100)",
        name="ck_debts_interest_rate",
    ),
    CheckConstraint(
        "min_payment_amount IS NULL OR min_payment_amount > 0",
        name="ck_debts_min_payment",
    ),
)

debt_payments = Table(
    "debt_payments",
    metadata,
    _id(),
    Column("debt_id", String(36), ForeignKey("debts.id"), nullable=False),
    Column(
        "transaction_id",
        String(36),
        ForeignKey("transactions.id"),
        nullable=False,
        unique=True,
    ),
    Column("amount", MONEY(), nullable=False),
    Column("date", Date, nullable=False),
    Index("ix_debt_payments_debt_date", "debt_id", "date"),
    CheckConstraint("amount > 0", name="ck_debt_payments_amount"),
)

goals = Table(
    "goals",
    metadata,
    _id(),
    Column("owner_id", String(36), nullable=False),
    Column("name", String(120), nullable=False),
    Column("target_amount", MONEY(), nullable=False),
    Column("current_amount", MONEY(), nullable=False),
    Column("currency", String(3), nullable=False),
    Column("due_date", Date, nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Index("ix_goals_owner_created", "owner_id", "created_at"),
    CheckConstraint("target_amount > 0", name="ck_goals_target"),
    CheckConstraint("current_amount >= 0", name="ck_goals_current"),
)

goal_contributions = Table(
    "goal_contributions",
    metadata,
    _id(),
    Column("goal_id", String(36), ForeignKey("goals.id"), nullable=False),
    Column(
        "transaction_id",
        String(36),
        ForeignKey("transactions.id"),
        nullable=True,
    ),
    Column("amount", MONEY(), nullable=False),
    Column("applied_amount", MONEY(), nullable=False),
    Column("date", Date, nullable=False),
    Index("ix_goal_contributions_goal_date", "goal_id", "date"),
    Index("ix_goal_contributions_transaction", "transaction_id"),
    CheckConstraint("amount > 0", name="ck_goal_contributions_amount"),
    CheckConstraint(
        "applied_amount >= 0",
        name="ck_goal_contributions_applied",
    ),
)

budgets = Table(
    "budgets",
    metadata,
    _id(),
    Column("owner_id", String(36), nullable=False),
    Column("year", Integer, nullable=False),
    Column("month", Integer, nullable=False),
    Column("currency", String(3), nullable=False),
    Column("amount_total", MONEY(), nullable=True),
    Column("created_at", DateTime(timezone=True), nullable=False),
    UniqueConstraint("owner_id", "year", "month", name="uq_budgets_period"),
    CheckConstraint("month >= 1 AND month <= 12", name="ck_budgets_month"),
    CheckConstraint(
        "amount_total IS NULL OR amount_total >= 0",
        name="ck_budgets_total",
    ),
)

budget_categories = Table(
    "budget_categories",
    metadata,
    _id(),
    Column("budget_id", String(36), ForeignKey("budgets.id"), nullable=False),
    Column(
        "category_id",
        String(36),
        ForeignKey("categories.id"),
        nullable=False,
    ),
    Column("cap_amount", MONEY(), nullable=False),
    UniqueConstraint("budget_id", "category_id", name="uq_budget_category"),
    CheckConstraint("cap_amount >= 0", name="ck_budget_categories_cap"),
)


def create_schema(engine: Engine) -> None:
    """Create every ledger table that does not exist yet."""
    metadata.create_all(engine)


__all__ = [
    "metadata",
    "accounts",
    "categories",
    "transactions",
    "transfers",
    "debts",
    "debt_payments",
    "goals",
    "goal_contributions",
    "budgets",
    "budget_categories",
    "create_schema",
]
