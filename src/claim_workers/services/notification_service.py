"""Customer notifications.

Notifications are best effort: a failed delivery is reported as ``False``
and never raised to the caller.
"""

from beartype import beartype

from ..clients.notification import NotificationClient
from ..core.logging_utils import get_logger

logger = get_logger(__name__)


class NotificationService:
    """Sends formatted messages to customers."""

    def __init__(self, client: NotificationClient | None = None) -> None:
        """Deliver through ``client``, or only log the message when it is ``None``."""
        self._client = client

    @beartype
    async def send_notification_to_customer(self, email: str, message: str) -> bool:
        """Send ``message`` to ``email``; returns whether delivery succeeded."""
        if not email.strip():
            raise ValueError("Email address cannot be null or empty")
        if not message.strip():
            raise ValueError("Message cannot be null or empty")

        if self._client is None:
            logger.info("Notification to %s:\n%s", email, message)
            return True

        try:
            await self._client.send(email, message)
        except Exception as e:
            logger.warning("Failed to send notification to %s: %s", email, e)
            return False

        logger.info("Notification sent to %s", email)
        return True
