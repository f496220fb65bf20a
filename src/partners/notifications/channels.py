"""Notification channels that tell the messaging subsystem "notify user X".

A channel only delivers; it carries no business logic.  The store channel
writes the ``notifications`` table the messaging subsystem reads, the Slack
channel mirrors events to an operations channel, and the in-memory channel
records calls for tests.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from typing import Any, Protocol

from slack_sdk import WebClient

from partners.domain.types import NotificationKind
from partners.store import PartnersStore, serialize_payload


class NotificationChannel(Protocol):
    """One-way delivery of an event to a user."""

    def notify(self, user_id: str, event_kind: NotificationKind, payload: dict[str, Any]) -> None:
        ...


class StoreNotificationChannel:
    """Writes one ``notifications`` row per event, keyed by user id."""

    def __init__(self, store: PartnersStore) -> None:
        self._store = store

    def notify(self, user_id: str, event_kind: NotificationKind, payload: dict[str, Any]) -> None:
        self._store.execute(
            "INSERT INTO notifications (user_id, event_kind, payload, created_at) "
            "VALUES (?, ?, ?, ?)",
            (
                user_id,
                event_kind.value,
                serialize_payload(payload),
                datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ"),
            ),
        )

    def list_for_user(self, user_id: str, unread_only: bool = False) -> list[dict[str, Any]]:
        """Return a user's notifications, newest first.

        Args:
            user_id: The recipient.
            unread_only: Exclude notifications already marked read.
        """
        query = "SELECT * FROM notifications WHERE user_id = ?"
        if unread_only:
            query += " AND read_at IS NULL"
        query += " ORDER BY id DESC"

        results: list[dict[str, Any]] = []
        for row in self._store.fetch_all(query, (user_id,)):
            row_dict = dict(row)
            row_dict["payload"] = json.loads(row_dict["payload"])
            results.append(row_dict)
        return results

    def mark_read(self, user_id: str, notification_id: int) -> bool:
        """Mark one of *user_id*'s notifications read.  Returns True if it was unread."""
        cursor = self._store.execute(
            "UPDATE notifications SET read_at = ? "
            "WHERE id = ? AND user_id = ? AND read_at IS NULL",
            (datetime.now(tz=UTC).strftime("%Y-%m-%dT%H:%M:%SZ"), notification_id, user_id),
        )
        return cursor.rowcount == 1


class SlackNotificationChannel:
    """Posts each event to a Slack channel as a Block Kit message.

    Wraps slack_sdk.WebClient.  Raises ``SlackApiError`` on API failure; the
    ``Notifier`` treats that as a best-effort delivery miss.
    """

    def __init__(self, channel: str, bot_token: str, client: WebClient | None = None) -> None:
        """Initialize the channel.

        Args:
            channel: Slack channel ID to post to.
            bot_token: Slack bot token.
            client: Pre-built WebClient (tests inject a mock).
        """
        self._client = client or WebClient(token=bot_token)
        self._channel = channel

    def notify(self, user_id: str, event_kind: NotificationKind, payload: dict[str, Any]) -> None:
        self._client.chat_postMessage(
            channel=self._channel,
            blocks=build_event_blocks(user_id, event_kind, payload),
            text=f"{event_kind.value} for {user_id}",
        )


class InMemoryNotificationChannel:
    """Records every notification in a list."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, NotificationKind, dict[str, Any]]] = []

    def notify(self, user_id: str, event_kind: NotificationKind, payload: dict[str, Any]) -> None:
        self.sent.append((user_id, event_kind, dict(payload)))

    def kinds_for(self, user_id: str) -> list[NotificationKind]:
        return [kind for recipient, kind, _ in self.sent if recipient == user_id]


def build_event_blocks(
    user_id: str, event_kind: NotificationKind, payload: dict[str, Any]
) -> list[dict[str, Any]]:
    """Build Block Kit blocks describing one notification event.

    Args:
        user_id: The notified user.
        event_kind: What happened.
        payload: Event details; rendered as a field list.

    Returns:
        A header section followed by one fields section (if any details).
    """
    title = event_kind.value.replace("_", " ").title()
    blocks: list[dict[str, Any]] = [
        {
            "type": "section",
            "text": {"type": "mrkdwn", "text": f"*{title}*\nUser: `{user_id}`"},
        }
    ]
    fields = [
        {"type": "mrkdwn", "text": f"*{key}:*\n{value}"}
        for key, value in json.loads(serialize_payload(payload)).items()
    ]
    if fields:
        # Block Kit allows at most 10 fields per section
        blocks.append({"type": "section", "fields": fields[:10]})
    return blocks
