"""Per-request logging context.

Every response carries an ``X-Request-ID`` header, echoed from the client or
generated.  The request ID, the acting user from the identity headers, and
the route are bound into structlog contextvars for the request, and one
``http_request`` event is logged when the response is ready.
"""

from __future__ import annotations

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = structlog.get_logger()

REQUEST_ID_HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind request and actor identity to the logging context."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        context = {
            "request_id": request_id,
            "service": "partners",
            "actor_id": request.headers.get("X-Actor-Id"),
            "actor_role": request.headers.get("X-Actor-Role"),
        }
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            **{key: value for key, value in context.items() if value}
        )

        started = time.perf_counter()
        response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response
