"""Notification channels."""
from .email import EmailNotifier
from .feed import NotificationFeed
from .log import LogNotifier
from .telegram import TelegramNotifier

__all__ = ["NotificationFeed", "LogNotifier", "TelegramNotifier", "EmailNotifier"]
