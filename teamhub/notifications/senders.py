"""
Notification senders.

The core only depends on the NotificationSender protocol; delivery results
are never consumed.
"""

from typing import Optional, Protocol

import httpx

from teamhub.logging_config import get_logger

logger = get_logger(__name__)


class NotificationSender(Protocol):
    async def send(self, recipient: str, subject: str, body: str) -> None:
        ...


class LogNotificationSender:
    """Sender used when no email API is configured; only logs."""

    async def send(self, recipient: str, subject: str, body: str) -> None:
        logger.info("Notification (not delivered)", extra={"recipient": recipient, "subject": subject})


class HttpEmailSender:
    """Send email through a transactional email HTTP API."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        sender_email: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.sender_email = sender_email
        self.timeout = timeout
        self._client = client

    async def send(self, recipient: str, subject: str, body: str) -> None:
        payload = {
            "sender": {"email": self.sender_email},
            "to": [{"email": recipient}],
            "subject": subject,
            "htmlContent": body,
        }
        headers = {
            "accept": "application/json",
            "api-key": self.api_key,
            "content-type": "application/json",
        }

        if self._client is not None:
            response = await self._client.post(self.api_url, json=payload, headers=headers, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, json=payload, headers=headers)
        response.raise_for_status()
        logger.debug("Notification sent", extra={"recipient": recipient, "status_code": response.status_code})
