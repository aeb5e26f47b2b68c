"""Identifier and timestamp helpers for new ledger rows."""

from datetime import datetime, timezone
from uuid import uuid4


def new_id() -> str:
    """Return a new random row identifier."""
    return str(uuid4())


def utc_now() -> datetime:
    """Return the current UTC time, timezone-aware."""
    return datetime.now(timezone.utc)


__all__ = ["new_id", "utc_now"]
