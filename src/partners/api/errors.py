"""Map domain errors onto HTTP responses.

Every handler answers ``{"error": <class name>, "detail": <message>}`` so
clients can branch on the error class without parsing messages.
"""

from __future__ import annotations

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from partners.domain.errors import (
    ConflictError,
    NotFoundError,
    PartnersError,
    TransientError,
    UnauthorizedError,
    ValidationError,
)

logger = structlog.get_logger()

# Checked in order; subclasses resolve through their base class.
ERROR_STATUS_CODES: tuple[tuple[type[PartnersError], int], ...] = (
    (ValidationError, 422),
    (UnauthorizedError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (TransientError, 503),
)


def status_for(exc: PartnersError) -> int:
    for error_cls, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, error_cls):
            return status_code
    return 500


def register_error_handlers(app: FastAPI) -> None:
    """Install the domain error handler on *app*."""

    @app.exception_handler(PartnersError)
    async def handle_domain_error(request: Request, exc: PartnersError) -> JSONResponse:
        status_code = status_for(exc)
        log = logger.error if status_code >= 500 else logger.info
        log(
            "request_failed",
            path=request.url.path,
            error=type(exc).__name__,
            status_code=status_code,
            detail=str(exc),
        )
        return JSONResponse(
            status_code=status_code,
            content={"error": type(exc).__name__, "detail": str(exc)},
        )
