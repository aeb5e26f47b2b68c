"""Calendar arithmetic shared by projections and budget windows."""

from calendar import monthrange
from datetime import date


def add_months(base: date, months: int) -> date:
    """Shift a date by whole calendar months, clamping the day.

    Args:
        base: Starting date.
        months: Number of months to add (may be negative).

    Returns:
        date: Shifted date; the day is clamped to the target month length.
    """
    total_month = (base.month - 1) + months
    year = base.year + total_month // 12
    month = (total_month % 12) + 1
    day = min(base.day, monthrange(year, month)[1])
    return base.replace(year=year, month=month, day=day)


def add_months_within(base: date, months: int, limit: int) -> date | None:
    """Shift a date by whole months unless the result is out of reach.

    Args:
        base: Starting date.
        months: Number of months to add.
        limit: Largest shift still projected.

    Returns:
        date | None: Shifted date, or None when the shift exceeds the limit
        or the calendar.
    """
    if months > limit:
        return None
    if base.year + ((base.month - 1) + months) // 12 > date.max.year:
        return None
    return add_months(base, months)


def month_window(year: int, month: int) -> tuple[date, date]:
    """Return the first and last calendar day of a month."""
    return date(year, month, 1), date(year, month, monthrange(year, month)[1])


def whole_months_between(start: date, end: date) -> int:
    """Return the number of complete months from start to end."""
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if end.day < start.day:
        months -= 1
    return months


__all__ = [
    "add_months",
    "add_months_within",
    "month_window",
    "whole_months_between",
]
