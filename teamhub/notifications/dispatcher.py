"""
Post-commit notification dispatch.

dispatch() schedules one task per notification and returns immediately.
Delivery failures are logged and dropped; they never reach the cascade
that produced the notification.
"""

import asyncio
from functools import lru_cache
from typing import Iterable, Set

from teamhub.config import get_settings
from teamhub.logging_config import get_logger
from teamhub.notifications.messages import Notification
from teamhub.notifications.senders import HttpEmailSender, LogNotificationSender, NotificationSender

logger = get_logger(__name__)


class NotificationDispatcher:
    """Fire-and-forget delivery of cascade notifications."""

    def __init__(self, sender: NotificationSender):
        self.sender = sender
        # Strong references so pending tasks are not garbage collected
        self._pending: Set[asyncio.Task] = set()

    def dispatch(self, notifications: Iterable[Notification]) -> int:
        """Schedule delivery. Returns the number of tasks scheduled."""
        scheduled = 0
        for notification in notifications:
            task = asyncio.create_task(self._deliver(notification))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)
            scheduled += 1
        return scheduled

    async def _deliver(self, notification: Notification) -> None:
        try:
            await self.sender.send(notification.recipient, notification.subject, notification.body)
        except Exception as exc:
            logger.warning(
                "Notification delivery failed: %s",
                exc,
                extra={
                    "recipient": notification.recipient,
                    "user_id": str(notification.user_id) if notification.user_id else None,
                },
            )

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every scheduled delivery to finish (shutdown and tests)."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


@lru_cache
def get_dispatcher() -> NotificationDispatcher:
    """Dispatcher configured from settings."""
    settings = get_settings()
    if settings.notifications_enabled and settings.email_api_url:
        sender: NotificationSender = HttpEmailSender(
            api_url=settings.email_api_url,
            api_key=settings.email_api_key,
            sender_email=settings.email_from,
            timeout=settings.email_timeout_seconds,
        )
    else:
        sender = LogNotificationSender()
    return NotificationDispatcher(sender)
