"""
Notification Dispatch Hook - post-commit, fire-and-forget delivery.
"""

from teamhub.notifications.messages import Notification, project_added_notification, org_added_notification
from teamhub.notifications.senders import (
    NotificationSender,
    HttpEmailSender,
    LogNotificationSender,
)
from teamhub.notifications.dispatcher import NotificationDispatcher, get_dispatcher

__all__ = [
    "Notification",
    "project_added_notification",
    "org_added_notification",
    "NotificationSender",
    "HttpEmailSender",
    "LogNotificationSender",
    "NotificationDispatcher",
    "get_dispatcher",
]
