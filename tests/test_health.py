"""Tests for the /health and /ready probes."""

from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI
from fastapi.testclient import TestClient

from partners.health import REQUIRED_TABLES, missing_tables, register_health_routes
from partners.store import PartnersStore, connect, open_store


def _make_app(services: dict | None = None) -> FastAPI:
    app = FastAPI()
    app.state.services = services or {}
    register_health_routes(app)
    return app


class TestHealthEndpoint:
    """GET /health liveness probe."""

    def test_health_returns_200(self) -> None:
        response = TestClient(_make_app()).get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestReadyEndpoint:
    """GET /ready readiness probe."""

    def test_ready_with_initialized_database(self, tmp_path: Path) -> None:
        store = open_store(tmp_path / "partners.db")
        response = TestClient(_make_app({"store": store})).get("/ready")

        assert response.status_code == 200
        assert response.json() == {
            "status": "ready",
            "checks": {"database": "ok", "schema": "ok"},
        }
        store.close()

    def test_not_ready_without_store(self) -> None:
        response = TestClient(_make_app({})).get("/ready")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "not_ready"
        assert body["checks"]["database"] == "fail"

    def test_not_ready_when_connection_closed(self, tmp_path: Path) -> None:
        store = open_store(tmp_path / "partners.db")
        store.close()
        response = TestClient(_make_app({"store": store})).get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["database"] == "fail"

    def test_not_ready_when_schema_missing(self, tmp_path: Path) -> None:
        store = PartnersStore(connect(tmp_path / "empty.db"))

        assert missing_tables(store) == set(REQUIRED_TABLES)
        response = TestClient(_make_app({"store": store})).get("/ready")

        assert response.status_code == 503
        assert response.json()["checks"]["schema"].startswith("missing: audit_log")
        store.close()
