"""Delivery channel for customer notifications."""

from beartype import beartype

from .base import ApiClient


class NotificationClient(ApiClient):
    """Posts customer messages to a notification webhook."""

    service_name = "Notification webhook"

    @beartype
    async def send(self, email: str, message: str) -> None:
        """Deliver ``message`` to ``email``; raises RemoteServiceError on failure."""
        await self._request("POST", "", json={"email": email, "message": message})
