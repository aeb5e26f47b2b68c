"""Notification dispatcher writing notifications to the usage log."""

from finledger.application.ports.notifications import (
    NotificationDispatcherPort,
)
from finledger.domain.models import LedgerNotification
from finledger.infrastructure.logging.logger import get_usage_logger


class LoggingNotificationDispatcher(NotificationDispatcherPort):
    """Record notifications in the usage log for a delivery service to pick up."""

    def __init__(self, logger=None) -> None:
        self._logger = logger or get_usage_logger()

    def dispatch(self, notification: LedgerNotification) -> None:
        self._logger.info(
            f"[{notification.kind}] owner={notification.owner_id} "
            f"entity={notification.related_entity_type}:"
            f"{notification.related_entity_id} "
            f"{notification.title}: {notification.message}"
        )


__all__ = ["LoggingNotificationDispatcher"]
