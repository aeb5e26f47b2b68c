"""Application ports package."""

from .category_suggestion import CategorySuggestionPort
from .database import DatabaseEnginePort
from .ledger_store import LedgerSessionPort, LedgerStorePort
from .notifications import NotificationDispatcherPort

__all__ = [
    "CategorySuggestionPort",
    "DatabaseEnginePort",
    "LedgerSessionPort",
    "LedgerStorePort",
    "NotificationDispatcherPort",
]
