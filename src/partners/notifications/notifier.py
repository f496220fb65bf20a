"""Best-effort fan-out of notification events to every configured channel."""

from __future__ import annotations

from typing import Any

import structlog

from partners.domain.types import NotificationKind
from partners.notifications.channels import NotificationChannel

logger = structlog.get_logger()


class Notifier:
    """Deliver events to all channels, logging and absorbing failures.

    Called only after the transition it reports has been committed, so a
    delivery failure can never roll it back.
    """

    def __init__(self, channels: list[NotificationChannel] | None = None) -> None:
        self._channels: list[NotificationChannel] = list(channels or [])

    def add_channel(self, channel: NotificationChannel) -> None:
        self._channels.append(channel)

    def notify(
        self,
        user_id: str,
        event_kind: NotificationKind,
        payload: dict[str, Any] | None = None,
    ) -> int:
        """Send one event to every channel.

        Returns:
            The number of channels that accepted the event.
        """
        delivered = 0
        for channel in self._channels:
            try:
                channel.notify(user_id, event_kind, payload or {})
            except Exception:
                logger.exception(
                    "notification_failed",
                    channel=type(channel).__name__,
                    user_id=user_id,
                    event_kind=event_kind.value,
                )
            else:
                delivered += 1
        return delivered
