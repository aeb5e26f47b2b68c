"""Application use cases package."""

from .accounts import AccountsUseCase
from .budgets import BudgetsUseCase
from .categories import CategoriesUseCase
from .debts import DebtsUseCase
from .goals import GoalsUseCase
from .reports import ReportsUseCase
from .transactions import TransactionsUseCase
from .transfers import TransfersUseCase

__all__ = [
    "AccountsUseCase",
    "BudgetsUseCase",
    "CategoriesUseCase",
    "DebtsUseCase",
    "GoalsUseCase",
    "ReportsUseCase",
    "TransactionsUseCase",
    "TransfersUseCase",
]
