"""Domain constants for the ledger engine."""

from decimal import Decimal

ACCOUNT_TYPES = ("cash", "debit", "credit", "savings", "ewallet")

TXN_INCOME = "income"
TXN_EXPENSE = "expense"
TXN_TRANSFER = "transfer"
TXN_ADJUSTMENT = "adjustment"
TRANSACTION_TYPES = (TXN_INCOME, TXN_EXPENSE, TXN_TRANSFER, TXN_ADJUSTMENT)

INFLOW = "inflow"
OUTFLOW = "outflow"

SOURCE_MANUAL = "manual"
SOURCE_IMPORTED = "imported"
TRANSACTION_SOURCES = (SOURCE_MANUAL, SOURCE_IMPORTED)

DEBT_KINDS = ("loan", "credit_card", "mortgage", "personal", "other")

STRATEGY_AVALANCHE = "avalanche"
STRATEGY_SNOWBALL = "snowball"
PAYOFF_STRATEGIES = (STRATEGY_AVALANCHE, STRATEGY_SNOWBALL)

# Months reported when a payment never covers the accruing interest.
NEVER_PAYS_OFF_MONTHS = Decimal("999")
# Projections further out than this are reported without a date.
PROJECTION_HORIZON_MONTHS = 999

DEFAULT_ALERT_THRESHOLD = Decimal("80")
DEFAULT_WARNING_PERCENT = Decimal("80")
NEAR_BUDGET_PERCENT = Decimal("80")
MEDIUM_SEVERITY_PERCENT = Decimal("90")
FULL_PERCENT = Decimal("100")

GOAL_MILESTONES = (Decimal("25"), Decimal("50"), Decimal("75"), Decimal("100"))
GOAL_PACE_WINDOW_DAYS = 90
GOAL_DUE_SOON_DAYS = 30
GOAL_AT_RISK_DAYS = 60
GOAL_AT_RISK_PERCENT = Decimal("50")
GOAL_RECOMMENDATION_MONTHS = 12

OPENING_BALANCE_DESCRIPTION = "Opening balance"

DEFAULT_CURRENCY = "USD"
UNKNOWN_CATEGORY_NAME = "Unknown"
CASH_FLOW_HISTORY_MONTHS = 6
DEFAULT_CASH_FLOW_MONTHS = 6
MAX_CASH_FLOW_MONTHS = 120
MAX_SCENARIO_MONTHS = 600

# Starter tree created on request; "Insurance", "Books" and "Clothing" occur
# under several parents.
DEFAULT_CATEGORY_TREE = (
    ("Food & Dining", ("Groceries", "Restaurants", "Coffee & Snacks")),
    (
        "Transportation",
        ("Gas", "Public Transit", "Parking", "Car Maintenance"),
    ),
    ("Shopping", ("Clothing", "Electronics", "Books", "General")),
    (
        "Bills & Utilities",
        ("Electricity", "Water", "Internet", "Phone", "Insurance"),
    ),
    ("Entertainment", ("Movies", "Sports", "Hobbies", "Subscriptions")),
    ("Health & Medical", ("Doctor", "Pharmacy", "Fitness", "Insurance")),
    ("Education", ("Tuition", "Books", "Supplies")),
    ("Personal Care", ("Hair", "Beauty", "Clothing")),
    ("Income", ("Salary", "Freelance", "Investments", "Other Income")),
    ("Uncategorized", ()),
)


__all__ = [
    "ACCOUNT_TYPES",
    "TXN_INCOME",
    "TXN_EXPENSE",
    "TXN_TRANSFER",
    "TXN_ADJUSTMENT",
    "TRANSACTION_TYPES",
    "INFLOW",
    "OUTFLOW",
    "SOURCE_MANUAL",
    "SOURCE_IMPORTED",
    "TRANSACTION_SOURCES",
    "DEBT_KINDS",
    "STRATEGY_AVALANCHE",
    "STRATEGY_SNOWBALL",
    "PAYOFF_STRATEGIES",
    "NEVER_PAYS_OFF_MONTHS",
    "PROJECTION_HORIZON_MONTHS",
    "DEFAULT_ALERT_THRESHOLD",
    "DEFAULT_WARNING_PERCENT",
    "NEAR_BUDGET_PERCENT",
    "MEDIUM_SEVERITY_PERCENT",
    "FULL_PERCENT",
    "GOAL_MILESTONES",
    "GOAL_PACE_WINDOW_DAYS",
    "GOAL_DUE_SOON_DAYS",
    "GOAL_AT_RISK_DAYS",
    "GOAL_AT_RISK_PERCENT",
    "GOAL_RECOMMENDATION_MONTHS",
    "OPENING_BALANCE_DESCRIPTION",
    "DEFAULT_CURRENCY",
    "UNKNOWN_CATEGORY_NAME",
    "CASH_FLOW_HISTORY_MONTHS",
    "DEFAULT_CASH_FLOW_MONTHS",
    "MAX_CASH_FLOW_MONTHS",
    "MAX_SCENARIO_MONTHS",
    "DEFAULT_CATEGORY_TREE",
]
