"""
Request context management for request and correlation ID tracking.

A single middleware assigns both identifiers so that the structlog
context is cleared exactly once per request:
    - X-Request-ID: per-request tracing within this service
    - X-Correlation-ID: business transaction tracing across services
"""

import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
import structlog


REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_ID_HEADER = "X-Correlation-ID"

# Max accepted length of caller-supplied identifiers (header injection guard)
MAX_ID_LENGTH = 128


def _incoming_id(request: Request, header: str) -> str:
    value = request.headers.get(header)
    if value and len(value) <= MAX_ID_LENGTH:
        return value
    return str(uuid.uuid4())


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Bind request/correlation IDs to structlog context and response headers.

    Caller-supplied IDs are reused when present and reasonably short,
    otherwise a new UUID-4 is generated.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = _incoming_id(request, REQUEST_ID_HEADER)
        correlation_id = _incoming_id(request, CORRELATION_ID_HEADER)

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            correlation_id=correlation_id,
            request_path=request.url.path,
            request_method=request.method,
            client_ip=request.client.host if request.client else None,
        )

        response = await call_next(request)

        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response
