"""FastAPI surface over the partners services."""

from fastapi import FastAPI

from partners.api.errors import register_error_handlers
from partners.api.routers import ROUTERS


def register_api(app: FastAPI) -> None:
    """Mount every router and the domain error handler on *app*."""
    register_error_handlers(app)
    for router in ROUTERS:
        app.include_router(router)


__all__ = ["register_api", "register_error_handlers"]
