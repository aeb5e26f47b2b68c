"""Port for handing notifications off to a delivery collaborator."""

from typing import Protocol

from finledger.domain.models import LedgerNotification


class NotificationDispatcherPort(Protocol):
    """Port receiving budget alerts and goal milestones as data."""

    def dispatch(self, notification: LedgerNotification) -> None:
        """Hand a notification off for delivery."""


__all__ = ["NotificationDispatcherPort"]
