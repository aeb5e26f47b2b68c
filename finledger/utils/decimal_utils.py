"""Helpers for Decimal normalization."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from finledger.domain.errors import ValidationError

CENT = Decimal("0.01")


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from SQL, adapters or callers.

    Returns:
        Decimal: Normalized numeric value.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value) -> Decimal:
    """Normalize a value to a Decimal quantized to cents.

    Args:
        value: Raw numeric value.

    Returns:
        Decimal: Value rounded half-up to two decimal places.
    """
    return coerce_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def round_percentage(value: Decimal) -> Decimal:
    """Round a percentage to two decimal places."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def parse_decimal(value, field: str) -> Decimal:
    """Convert caller input to a finite Decimal.

    Raises:
        ValidationError: If the value is not a finite number.
    """
    try:
        number = coerce_decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field} must be a number") from exc
    if not number.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return number


def parse_amount(value, field: str = "amount") -> Decimal:
    """Validate a strictly positive amount expressed in whole cents.

    Args:
        value: Raw amount supplied by a caller.
        field: Field name used in error messages.

    Returns:
        Decimal: The amount quantized to cents.

    Raises:
        ValidationError: If the amount is not a finite number, is not
            positive, or carries fractions of a cent.
    """
    try:
        amount = coerce_decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field} must be a number") from exc
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    if amount != amount.quantize(CENT):
        raise ValidationError(f"{field} must not have more than 2 decimal places")
    return amount.quantize(CENT)


def parse_non_negative_amount(value, field: str = "amount") -> Decimal:
    """Validate an amount that may be zero, in whole cents.

    Args:
        value: Raw amount supplied by a caller.
        field: Field name used in error messages.

    Returns:
        Decimal: The amount quantized to cents.

    Raises:
        ValidationError: If the amount is negative or not in whole cents.
    """
    try:
        amount = coerce_decimal(value)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError(f"{field} must be a number") from exc
    if amount.is_finite() and amount < 0:
        raise ValidationError(f"{field} must not be negative")
    if amount == 0:
        return Decimal("0.00")
    return parse_amount(amount, field)


__all__ = [
    "CENT",
    "coerce_decimal",
    "to_money",
    "round_percentage",
    "parse_decimal",
    "parse_amount",
    "parse_non_negative_amount",
]
