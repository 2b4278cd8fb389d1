"""In-memory notification feed read by the dashboard."""
from __future__ import annotations

from ..models import Notification


class NotificationFeed:
    """Newest-first list of the most recent notifications; oldest entries drop off."""

    def __init__(self, max_items: int = 100) -> None:
        self._items: list[Notification] = []
        self._max_items = max_items

    def add(self, notification: Notification) -> None:
        self._items.insert(0, notification)
        del self._items[self._max_items:]

    @property
    def items(self) -> tuple[Notification, ...]:
        return tuple(self._items)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)
