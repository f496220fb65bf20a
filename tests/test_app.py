"""Tests for application entry point: structlog config, service initialization, app creation."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient

from partners.app import configure_logging, create_app, initialize_services
from partners.config import Settings
from partners.notifications import SlackNotificationChannel, StoreNotificationChannel
from partners.settlement import SettlementEngine


def _settings(tmp_path: Path, **overrides) -> Settings:
    values = {"database_path": tmp_path / "data" / "partners.db"}
    values.update(overrides)
    return Settings(_env_file=None, **values)  # type: ignore[call-arg]


class TestConfigureLogging:
    """Tests for structlog configuration in dev and production modes."""

    def test_development_mode_uses_console_renderer(self) -> None:
        structlog.reset_defaults()
        configure_logging(production=False)
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, structlog.dev.ConsoleRenderer) for p in processors)

    def test_production_mode_uses_json_renderer(self) -> None:
        structlog.reset_defaults()
        configure_logging(production=True)
        processors = structlog.get_config()["processors"]
        assert any(isinstance(p, structlog.processors.JSONRenderer) for p in processors)

    def test_sentry_processor_added_when_enabled(self) -> None:
        structlog.reset_defaults()
        configure_logging(production=True, sentry_enabled=True)
        names = [type(p).__name__ for p in structlog.get_config()["processors"]]
        assert "SentryProcessor" in names
        structlog.reset_defaults()


class TestInitializeServices:
    """initialize_services wires every domain service onto one store."""

    def test_creates_database_and_services(self, tmp_path: Path) -> None:
        services = initialize_services(_settings(tmp_path))

        assert (tmp_path / "data" / "partners.db").exists()
        for key in ("store", "audit", "inbox", "notifier", "registry", "catalog", "ledger",
                    "reviewer", "settlement"):
            assert services[key] is not None, key
        assert isinstance(services["inbox"], StoreNotificationChannel)
        assert isinstance(services["settlement"], SettlementEngine)
        services["store"].close()

    def test_slack_channel_added_with_token(self, tmp_path: Path) -> None:
        settings = _settings(
            tmp_path,
            slack_bot_token="xoxb-test",
            slack_notification_channel="C123",
        )
        with patch("partners.notifications.channels.WebClient") as mock_client:
            services = initialize_services(settings)

        mock_client.assert_called_once_with(token="xoxb-test")
        channels = services["notifier"]._channels
        assert any(isinstance(c, SlackNotificationChannel) for c in channels)
        services["store"].close()


class TestCreateApp:
    def test_app_serves_health_and_api(self, tmp_path: Path) -> None:
        services = initialize_services(_settings(tmp_path))
        app = create_app(services)
        assert isinstance(app, FastAPI)

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
            assert client.get("/ready").json()["checks"]["database"] == "ok"
            response = client.get("/influencers")
            assert response.status_code == 200
            assert response.json() == []
            assert response.headers["X-Request-ID"]
