"""Notifier protocol: notification channel abstraction."""
from typing import Protocol

from ..models import Notification


class Notifier(Protocol):
    """Abstract interface for delivering engine notifications."""

    async def notify(self, notification: Notification) -> bool: ...
