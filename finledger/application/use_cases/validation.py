"""Input checks shared by the ledger use cases."""

from collections.abc import Iterable

from finledger.domain.errors import NotFoundError, ValidationError


def require_text(value: str | None, field: str, max_length: int = 120) -> str:
    """Return a stripped, non-empty string.

    Args:
        value: Raw value supplied by the caller.
        field: Field name used in error messages.
        max_length: Maximum accepted length after stripping.

    Returns:
        str: The stripped value.

    Raises:
        ValidationError: If the value is empty or too long.
    """
    text = (value or "").strip()
    if not text:
        raise ValidationError(f"{field} must not be empty")
    if len(text) > max_length:
        raise ValidationError(
            f"{field} must be at most {max_length} characters"
        )
    return text


def optional_text(value: str | None, max_length: int) -> str | None:
    """Return a stripped string, or None for blank values."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if len(text) > max_length:
        raise ValidationError(f"Text must be at most {max_length} characters")
    return text


def normalize_currency(code: str | None) -> str:
    """Return a three-letter upper-case currency code.

    Raises:
        ValidationError: If the code is not three letters.
    """
    normalized = (code or "").strip().upper()
    if len(normalized) != 3 or not normalized.isalpha():
        raise ValidationError(f"Invalid currency code: {code!r}")
    return normalized


def require_choice(value: str, choices: Iterable[str], field: str) -> str:
    """Return the value when it is one of the accepted choices."""
    allowed = tuple(choices)
    if value not in allowed:
        raise ValidationError(
            f"{field} must be one of: {', '.join(allowed)}"
        )
    return value


def require_period(year: int, month: int) -> None:
    """Reject months outside 1..12 and years outside 1900..9999."""
    if not 1 <= month <= 12:
        raise ValidationError("month must be between 1 and 12")
    if not 1900 <= year <= 9999:
        raise ValidationError("year must be between 1900 and 9999")


def require_found(entity, label: str):
    """Return the entity or raise NotFoundError for a missing one."""
    if entity is None:
        raise NotFoundError(f"{label} not found")
    return entity


__all__ = [
    "require_text",
    "optional_text",
    "normalize_currency",
    "require_choice",
    "require_period",
    "require_found",
]
