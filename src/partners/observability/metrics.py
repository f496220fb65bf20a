"""Prometheus metrics instrumentation for the partners service.

Provides:
- ``setup_metrics(app)``: Attach prometheus-fastapi-instrumentator to a FastAPI app,
  exposing ``/metrics`` with HTTP request duration/count plus business counters.
- ``SUBMISSIONS_REVIEWED``: Counter of video reviews by outcome.
- ``PAYMENTS_CREATED``: Counter of payments created by type.
- ``PAYMENTS_PAID``: Counter of payments marked paid by type.
- ``PENDING_SUBMISSIONS``: Gauge of submissions awaiting review.

Business metrics are updated at state transitions (not by polling the database).
"""

from __future__ import annotations

from fastapi import FastAPI
from prometheus_client import Counter, Gauge
from prometheus_fastapi_instrumentator import Instrumentator

SUBMISSIONS_REVIEWED: Counter = Counter(
    "partners_submissions_reviewed_total",
    "Total number of video submissions reviewed",
    ["outcome"],
)

PAYMENTS_CREATED: Counter = Counter(
    "partners_payments_created_total",
    "Total number of payments created",
    ["payment_type"],
)

PAYMENTS_PAID: Counter = Counter(
    "partners_payments_paid_total",
    "Total number of payments marked paid",
    ["payment_type"],
)

PENDING_SUBMISSIONS: Gauge = Gauge(
    "partners_pending_submissions",
    "Number of video submissions awaiting review",
)


def setup_metrics(app: FastAPI) -> None:
    """Instrument *app* with Prometheus HTTP metrics and expose ``/metrics``.

    Excludes health/ready/metrics endpoints from instrumentation to avoid
    noise in dashboards.

    Args:
        app: The FastAPI application to instrument.
    """
    Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        excluded_handlers=["/health", "/ready", "/metrics"],
    ).instrument(app).expose(app, include_in_schema=False, should_gzip=True)
