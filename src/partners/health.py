"""Liveness and readiness probes.

``/ready`` reports two checks against the partners database: ``database``
(the connection answers a query) and ``schema`` (every entity table, the
audit log and the notification inbox exist).  Any failing check turns the
response into a 503.
"""

from __future__ import annotations

import asyncio
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from partners.store import TABLE_COLUMNS, PartnersStore

REQUIRED_TABLES = frozenset(TABLE_COLUMNS) | {"audit_log", "notifications"}


def missing_tables(store: PartnersStore) -> set[str]:
    """Return the required tables that the database does not have."""
    rows = store.fetch_all("SELECT name FROM sqlite_master WHERE type = 'table'")
    return set(REQUIRED_TABLES) - {row[0] for row in rows}


def readiness_checks(store: PartnersStore | None) -> dict[str, str]:
    if store is None or not store.ping():
        return {"database": "fail", "schema": "unknown"}
    missing = missing_tables(store)
    schema = "ok" if not missing else "missing: " + ", ".join(sorted(missing))
    return {"database": "ok", "schema": schema}


def register_health_routes(app: FastAPI) -> None:
    """Register ``/health`` and ``/ready`` on *app*."""

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "healthy"}

    @app.get("/ready")
    async def ready(request: Request) -> JSONResponse:
        services: dict[str, Any] = request.app.state.services
        checks = await asyncio.to_thread(readiness_checks, services.get("store"))
        ok = all(value == "ok" for value in checks.values())
        return JSONResponse(
            content={"status": "ready" if ok else "not_ready", "checks": checks},
            status_code=200 if ok else 503,
        )
