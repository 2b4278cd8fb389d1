"""Email notification service: warnings and errors only."""
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from ..config import EmailConfig
from ..models import Notification, NotificationLevel

logger = logging.getLogger(__name__)


class EmailNotifier:
    """Send actionable notifications via email."""

    def __init__(self, config: EmailConfig) -> None:
        self.recipient = config.recipient
        self.smtp_server = config.smtp_server
        self.smtp_port = config.smtp_port
        self.sender_email = config.sender_email
        self.sender_password = config.sender_password

    async def notify(self, notification: Notification) -> bool:
        if notification.level is NotificationLevel.INFO:
            return False

        if not self.recipient:
            logger.debug("No recipient configured, skipping email")
            return False

        if not self.sender_email or not self.sender_password:
            logger.warning("Email credentials not configured")
            return False

        msg = MIMEMultipart()
        msg["From"] = self.sender_email
        msg["To"] = self.recipient
        msg["Subject"] = notification.title
        msg.attach(
            MIMEText(
                f"{notification.description}\n\n"
                f"{notification.timestamp.strftime('%Y-%m-%d %H:%M:%S')} UTC",
                "plain",
            )
        )

        try:
            server = smtplib.SMTP(self.smtp_server, self.smtp_port)
            server.starttls()
            server.login(self.sender_email, self.sender_password)
            server.send_message(msg)
            server.quit()
            logger.info("Notification email sent to %s", self.recipient)
            return True
        except Exception as e:
            logger.error("Failed to send email: %s", e)
            return False
