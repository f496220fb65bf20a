"""Tests for Request ID middleware."""

from __future__ import annotations

import re

import structlog
from fastapi import FastAPI
from fastapi.testclient import TestClient

from partners.observability.middleware import RequestIdMiddleware

UUID4_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def _make_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestIdMiddleware)

    @app.get("/test")
    async def test_endpoint():
        return structlog.contextvars.get_contextvars()

    return app


def test_response_has_auto_generated_request_id() -> None:
    resp = TestClient(_make_app()).get("/test")
    assert resp.status_code == 200
    request_id = resp.headers.get("X-Request-ID", "")
    assert UUID4_PATTERN.match(request_id), f"Expected UUID4 format, got: {request_id}"


def test_response_echoes_client_request_id() -> None:
    resp = TestClient(_make_app()).get("/test", headers={"X-Request-ID": "test-123"})
    assert resp.headers["X-Request-ID"] == "test-123"


def test_request_context_is_bound_for_logging() -> None:
    resp = TestClient(_make_app()).get(
        "/test",
        headers={"X-Request-ID": "req-9", "X-Actor-Id": "admin-1", "X-Actor-Role": "admin"},
    )
    context = resp.json()
    assert context["request_id"] == "req-9"
    assert context["service"] == "partners"
    assert context["actor_id"] == "admin-1"
    assert context["actor_role"] == "admin"


def test_absent_identity_is_not_bound() -> None:
    context = TestClient(_make_app()).get("/test").json()
    assert "actor_id" not in context
    assert "actor_role" not in context
