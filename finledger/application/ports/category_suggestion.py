"""Port for suggesting a category from a merchant name."""

from typing import Protocol


class CategorySuggestionPort(Protocol):
    """Port suggesting categories from an owner's transaction history."""

    def suggest_category(self, owner_id: str, merchant_name: str) -> str | None:
        """Return a category id for the merchant, or None."""


__all__ = ["CategorySuggestionPort"]
