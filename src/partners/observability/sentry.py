"""Sentry SDK initialization with structlog-sentry bridge.

Provides:
- ``init_sentry(dsn, environment)``: Initialize Sentry SDK.  No-op when *dsn* is empty.
- ``scrub_event(event, hint)``: ``before_send`` hook removing payment identifiers.
- ``get_sentry_processor()``: structlog processor forwarding ERROR events to Sentry.
"""

from __future__ import annotations

import logging
from typing import Any

import sentry_sdk
import structlog
from sentry_sdk.integrations.logging import LoggingIntegration
from structlog_sentry import SentryProcessor

# Influencer payout and contact details never leave the service.
SENSITIVE_KEYS = frozenset({"upi_id", "upi_transaction_id", "transaction_ref", "phone_number"})


def _scrub(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: "[Filtered]" if key in SENSITIVE_KEYS else _scrub(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [_scrub(item) for item in value]
    return value


def scrub_event(event: dict[str, Any], hint: dict[str, Any]) -> dict[str, Any]:
    """Replace sensitive payment fields in a Sentry event before it is sent.

    Args:
        event: The Sentry event payload.
        hint: Sentry hint dict (unused).

    Returns:
        The event with every ``SENSITIVE_KEYS`` value filtered.
    """
    for section in ("extra", "contexts", "request"):
        if section in event:
            event[section] = _scrub(event[section])
    return event


def init_sentry(dsn: str, environment: str = "development") -> None:
    """Initialize Sentry SDK with the given *dsn*.

    When *dsn* is empty the function returns immediately -- no network calls,
    no SDK initialization.  Safe to call unconditionally at startup.

    Args:
        dsn: Sentry DSN string.  Empty string disables Sentry.
        environment: Deployment environment tag (``production``/``development``).
    """
    if not dsn:
        return

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        traces_sample_rate=0.1,
        send_default_pii=False,
        before_send=scrub_event,
        integrations=[
            # structlog-sentry reports errors; disable the SDK's own capture.
            LoggingIntegration(event_level=None, level=None),
        ],
    )


def get_sentry_processor() -> structlog.types.Processor:
    """Return a structlog processor that forwards ERROR events to Sentry.

    Insert this into the structlog processor chain **after** ``add_log_level``
    and **before** the renderer.
    """
    return SentryProcessor(event_level=logging.ERROR)
