"""Telegram notification service."""
import html
import logging
import ssl

import aiohttp
import certifi

from ..config import TelegramConfig
from ..models import Notification, NotificationLevel

logger = logging.getLogger(__name__)

_ICONS = {
    NotificationLevel.INFO: "ℹ️",
    NotificationLevel.WARNING: "⚠️",
    NotificationLevel.ERROR: "🚨",
}


class TelegramNotifier:
    """Send notifications via a Telegram bot.

    Info events are delivered silently; warnings and errors ring.
    """

    def __init__(self, config: TelegramConfig) -> None:
        self.bot_token = config.bot_token
        self.chat_id = config.chat_id

    @staticmethod
    def format_message(notification: Notification) -> str:
        return (
            f"{_ICONS[notification.level]} <b>{html.escape(notification.title)}</b>\n"
            f"\n"
            f"{html.escape(notification.description)}\n"
            f"\n"
            f"{notification.timestamp.strftime('%Y-%m-%d %H:%M:%S')} UTC"
        )

    async def notify(self, notification: Notification) -> bool:
        """Send the notification; returns False when not delivered."""
        if not self.bot_token or not self.chat_id:
            logger.warning("Telegram credentials not configured")
            return False

        url = f"https://api.telegram.org/bot{self.bot_token}/sendMessage"
        payload = {
            "chat_id": self.chat_id,
            "text": self.format_message(notification),
            "parse_mode": "HTML",
            "disable_notification": notification.level is NotificationLevel.INFO,
        }

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.post(url, json=payload) as response:
                if response.status == 200:
                    logger.info("Telegram notification sent: %s", notification.title)
                    return True
                logger.error("Failed to send Telegram message: %s", response.status)
                return False
