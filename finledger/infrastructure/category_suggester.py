"""Category suggestions learned from the owner's transaction history."""

from collections import Counter

from finledger.application.ports.category_suggestion import (
    CategorySuggestionPort,
)
from finledger.application.ports.ledger_store import LedgerStorePort
from finledger.domain.errors import StorageError
from finledger.infrastructure.logging.logger import get_app_logger

RECENT_MATCHES_LIMIT = 5


class HistoryCategorySuggester(CategorySuggestionPort):
    """Suggest the category most used with similar merchant names.

    The first word of the merchant name is matched case-insensitively
    against the owner's most recent categorized transactions.
    """

    def __init__(self, store: LedgerStorePort, logger=None) -> None:
        self._store = store
        self._logger = logger or get_app_logger()

    def suggest_category(self, owner_id: str, merchant_name: str) -> str | None:
        """Return the most common recent category for the merchant.

        Args:
            owner_id: Owner whose history is searched.
            merchant_name: Merchant name of the new transaction.

        Returns:
            str | None: Category id, or None when nothing matches or the
            history cannot be read.
        """
        words = (merchant_name or "").split()
        if not words:
            return None
        keyword = words[0].lower()
        try:
            with self._store.unit_of_work() as session:
                matches = session.recent_merchant_categories(
                    owner_id,
                    keyword,
                    RECENT_MATCHES_LIMIT,
                )
        except StorageError as exc:
            self._logger.warning(
                f"Category suggestion unavailable [ref={exc.reference}]"
            )
            return None
        if not matches:
            return None
        category_id, _ = Counter(matches).most_common(1)[0]
        return category_id


__all__ = ["HistoryCategorySuggester", "RECENT_MATCHES_LIMIT"]
