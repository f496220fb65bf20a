"""Centralized, typed configuration using pydantic-settings.

Provides a single ``Settings`` class backed by ``.env`` file and environment
variables, a cached ``get_settings()`` accessor, and a ``validate_settings()``
startup gate that enforces production requirements.

IMPORTANT: This module has ZERO imports from the ``partners`` package to
prevent circular imports.  Only stdlib, pydantic, pydantic_settings, and
structlog are used.
"""

from __future__ import annotations

import sys
from decimal import Decimal
from functools import lru_cache
from pathlib import Path

import structlog
from pydantic import SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = structlog.get_logger()


class Settings(BaseSettings):
    """Application settings loaded from environment variables and ``.env`` file.

    ``SecretStr`` fields prevent accidental leaks in logs or error output.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # -- General ---------------------------------------------------------------
    production: bool = False
    port: int = 8000

    # -- Store -----------------------------------------------------------------
    database_path: Path = Path("data/partners.db")
    store_timeout_seconds: float = 30.0
    store_retry_attempts: int = 3

    # -- Settlement ------------------------------------------------------------
    revenue_share_rate: Decimal = Decimal("0.05")

    # -- Notifications ---------------------------------------------------------
    slack_bot_token: SecretStr = SecretStr("")
    slack_notification_channel: str = ""

    # -- Observability ---------------------------------------------------------
    sentry_dsn: str = ""


@lru_cache
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance.

    The ``@lru_cache`` decorator ensures environment variables are parsed
    exactly once.  Call ``get_settings.cache_clear()`` in tests to reset.

    Returns:
        The application ``Settings``.
    """
    try:
        return Settings()
    except ValidationError as exc:
        # Log only the structured errors list -- never the full exception
        # which may contain raw SecretStr values.
        logger.error("settings_validation_failed", errors=exc.errors())
        sys.exit(1)


def validate_settings(settings: Settings) -> None:
    """Enforce configuration sanity at startup.

    In **production** mode the application exits with a clear error block if
    any problem is found.  In **development** mode each problem is logged as
    a warning and startup continues.

    Args:
        settings: The loaded application settings.
    """
    errors: list[str] = []

    if not Decimal("0") < settings.revenue_share_rate < Decimal("1"):
        errors.append(
            f"REVENUE_SHARE_RATE must be between 0 and 1, got {settings.revenue_share_rate}"
        )

    if settings.store_timeout_seconds <= 0:
        errors.append("STORE_TIMEOUT_SECONDS must be positive")

    if settings.store_retry_attempts < 1:
        errors.append("STORE_RETRY_ATTEMPTS must be at least 1")

    if settings.slack_bot_token.get_secret_value() and not settings.slack_notification_channel:
        errors.append("SLACK_NOTIFICATION_CHANNEL is required when SLACK_BOT_TOKEN is set")

    if not errors:
        logger.info("settings_validation_passed")
        return

    if settings.production:
        for err in errors:
            logger.error("settings_invalid", detail=err)
        print("\n=== STARTUP FAILED ===", file=sys.stderr)
        print("Invalid configuration for production mode:", file=sys.stderr)
        for err in errors:
            print(f"  - {err}", file=sys.stderr)
        print("======================\n", file=sys.stderr)
        sys.exit(1)
    else:
        for err in errors:
            logger.warning("settings_invalid_dev", detail=err)
