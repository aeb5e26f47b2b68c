"""Notification payloads handed off to external dispatchers."""

from dataclasses import dataclass, field
from typing import Any

KIND_BUDGET_ALERT = "budget_alert"
KIND_GOAL_MILESTONE = "goal_milestone"


@dataclass(frozen=True)
class LedgerNotification:
    """Data describing a notification; delivery is not the engine's job."""

    owner_id: str
    kind: str
    title: str
    message: str
    related_entity_id: str | None = None
    related_entity_type: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)


__all__ = ["LedgerNotification", "KIND_BUDGET_ALERT", "KIND_GOAL_MILESTONE"]
