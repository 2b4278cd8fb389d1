"""Notifier that writes events to the application log."""
import logging

from ..models import Notification, NotificationLevel

logger = logging.getLogger(__name__)

_LEVELS = {
    NotificationLevel.INFO: logging.INFO,
    NotificationLevel.WARNING: logging.WARNING,
    NotificationLevel.ERROR: logging.ERROR,
}


class LogNotifier:
    async def notify(self, notification: Notification) -> bool:
        logger.log(
            _LEVELS[notification.level],
            "%s: %s",
            notification.title,
            notification.description,
        )
        return True
