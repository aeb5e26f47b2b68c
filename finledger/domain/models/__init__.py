"""Domain models package."""

from .budgets import (
    Budget,
    BudgetAlert,
    BudgetCategoryCap,
    BudgetCheck,
    BudgetSummary,
    BudgetUsage,
    CategoryUsage,
)
from .debts import (
    Debt,
    DebtPayment,
    DebtPayoffProjection,
    DebtSummary,
    DebtView,
    PayoffSchedule,
    StrategyDebt,
)
from .goals import (
    Goal,
    GoalContribution,
    GoalProgress,
    GoalProjection,
    GoalRecommendations,
)
from .ledger import (
    Account,
    BalanceReconciliation,
    Category,
    ImportResult,
    Transaction,
    TransactionLinks,
    TransactionSummary,
    Transfer,
)
from .notifications import LedgerNotification
from .reports import (
    CashFlowPoint,
    CategoryActivity,
    CategoryExpense,
    CategoryTypeTotal,
    MonthlyReport,
    WhatIfResult,
)

__all__ = [
    "Account",
    "BalanceReconciliation",
    "Category",
    "ImportResult",
    "Transaction",
    "TransactionLinks",
    "TransactionSummary",
    "Transfer",
    "Debt",
    "DebtPayment",
    "DebtPayoffProjection",
    "DebtSummary",
    "DebtView",
    "PayoffSchedule",
    "StrategyDebt",
    "Goal",
    "GoalContribution",
    "GoalProgress",
    "GoalProjection",
    "GoalRecommendations",
    "Budget",
    "BudgetAlert",
    "BudgetCategoryCap",
    "BudgetCheck",
    "BudgetSummary",
    "BudgetUsage",
    "CategoryUsage",
    "LedgerNotification",
    "CashFlowPoint",
    "CategoryActivity",
    "CategoryExpense",
    "CategoryTypeTotal",
    "MonthlyReport",
    "WhatIfResult",
]
