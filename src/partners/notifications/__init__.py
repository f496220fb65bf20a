"""Notification channel collaborators and the best-effort notifier."""

from partners.notifications.channels import (
    InMemoryNotificationChannel,
    NotificationChannel,
    SlackNotificationChannel,
    StoreNotificationChannel,
    build_event_blocks,
)
from partners.notifications.notifier import Notifier

__all__ = [
    "InMemoryNotificationChannel",
    "NotificationChannel",
    "Notifier",
    "SlackNotificationChannel",
    "StoreNotificationChannel",
    "build_event_blocks",
]
