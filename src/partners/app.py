"""Application entry point for the partners HTTP service.

Configures:
- **structlog** with JSON rendering (production) or colored console (development)
- **Sentry** error reporting when ``SENTRY_DSN`` is set
- **Services** sharing one SQLite store: registry, catalog, ledger, reviewer
  and settlement, all writing the audit trail in their own transactions
- **Notifications** to the in-app inbox table, plus Slack when a bot token is set
- **FastAPI** with request-id middleware, Prometheus metrics and health probes
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from partners.api import register_api
from partners.audit import AuditLogger
from partners.catalog import Catalog
from partners.config import Settings, get_settings, validate_settings
from partners.health import register_health_routes
from partners.ledger import ApplicationLedger
from partners.notifications import Notifier, SlackNotificationChannel, StoreNotificationChannel
from partners.observability.metrics import PENDING_SUBMISSIONS, setup_metrics
from partners.observability.middleware import RequestIdMiddleware
from partners.observability.sentry import get_sentry_processor, init_sentry
from partners.registry import InfluencerRegistry
from partners.review import SubmissionReviewer
from partners.settlement import SettlementEngine
from partners.store import open_store

logger = structlog.get_logger()


def configure_logging(production: bool = False, sentry_enabled: bool = False) -> None:
    """Configure structlog for production (JSON) or development (console).

    Production mode (*production=True*): JSON rendering at INFO level.
    Development mode: colored console rendering at DEBUG level.

    Args:
        production: Enable production mode if ``True``.
        sentry_enabled: Forward ERROR events to Sentry.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    if sentry_enabled:
        shared_processors.append(get_sentry_processor())

    if production:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        log_level = logging.INFO
    else:
        renderer = structlog.dev.ConsoleRenderer()
        log_level = logging.DEBUG

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service="partners")


def initialize_services(settings: Settings | None = None) -> dict[str, Any]:
    """Set up all shared services for the application.

    Opens the partners database, creates the AuditLogger and Notifier (store
    inbox always, Slack when ``SLACK_BOT_TOKEN`` is set) and the five domain
    services on top of them.

    Args:
        settings: Application settings.  If ``None``, ``get_settings()`` is used.

    Returns:
        A dict of initialized service instances keyed by name.
    """
    if settings is None:
        settings = get_settings()

    services: dict[str, Any] = {"_settings": settings}

    store = open_store(settings.database_path, timeout=settings.store_timeout_seconds)
    services["store"] = store

    audit = AuditLogger(store)
    services["audit"] = audit

    inbox = StoreNotificationChannel(store)
    services["inbox"] = inbox
    notifier = Notifier([inbox])

    slack_bot_token = settings.slack_bot_token.get_secret_value() or None
    if slack_bot_token:
        notifier.add_channel(
            SlackNotificationChannel(
                channel=settings.slack_notification_channel,
                bot_token=slack_bot_token,
            )
        )
        logger.info("slack_notifications_enabled", channel=settings.slack_notification_channel)
    else:
        logger.info("slack_notifications_disabled")
    services["notifier"] = notifier

    registry = InfluencerRegistry(store, audit, notifier)
    ledger = ApplicationLedger(store, audit, notifier, registry)
    reviewer = SubmissionReviewer(store, audit, notifier, registry, ledger)
    services["registry"] = registry
    services["catalog"] = Catalog(store, audit)
    services["ledger"] = ledger
    services["reviewer"] = reviewer
    services["settlement"] = SettlementEngine(
        store, audit, notifier, registry, revenue_share_rate=settings.revenue_share_rate
    )

    PENDING_SUBMISSIONS.set(reviewer.count_pending())
    logger.info("services_initialized", database=str(settings.database_path))
    return services


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Close the partners database on shutdown."""
    logger.info("application_starting")
    yield
    store = app.state.services.get("store")
    if store is not None:
        store.close()
        logger.info("database_closed")


def create_app(services: dict[str, Any]) -> FastAPI:
    """Create the FastAPI app with middleware, metrics, health probes and API routers.

    Args:
        services: The initialized services dict from ``initialize_services``.

    Returns:
        The configured FastAPI application.
    """
    fastapi_app = FastAPI(title="Partners Engagement & Settlement", lifespan=lifespan)
    fastapi_app.state.services = services
    fastapi_app.state.settings = services.get("_settings") or get_settings()
    fastapi_app.add_middleware(RequestIdMiddleware)
    setup_metrics(fastapi_app)
    register_health_routes(fastapi_app)
    register_api(fastapi_app)
    return fastapi_app


def run() -> None:
    """Console entry point: configure, initialize and serve with uvicorn."""
    settings = get_settings()
    init_sentry(settings.sentry_dsn, "production" if settings.production else "development")
    configure_logging(production=settings.production, sentry_enabled=bool(settings.sentry_dsn))
    logger.info("application_starting", port=settings.port)

    validate_settings(settings)

    services = initialize_services(settings)
    fastapi_app = create_app(services)

    uvicorn.run(fastapi_app, host="0.0.0.0", port=settings.port, log_level="info")


if __name__ == "__main__":
    run()
