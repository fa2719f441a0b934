"""Logging middleware for request tracking."""
import re
import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.rate_limit import get_client_ip

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Upstream ids are echoed back, so only plain tokens are accepted
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._-]{8,64}$")


def resolve_request_id(request: Request) -> str:
    """Reuse a well-formed request id from a proxy, otherwise mint one."""
    incoming = request.headers.get(REQUEST_ID_HEADER)
    if incoming and _REQUEST_ID_PATTERN.match(incoming):
        return incoming
    return str(uuid.uuid4())


class LoggingMiddleware(BaseHTTPMiddleware):
    """Bind a request id to every log line of a request and log its outcome."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request)

        # Endpoint handlers can read it from request.state
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
            client_ip=get_client_ip(request),
        )

        start_time = time.perf_counter()
        logger.info(
            "request_started",
            query_params=str(request.query_params) if request.query_params else None,
        )

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(
                "request_failed",
                exception=str(exc),
                exception_type=type(exc).__name__,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        response.headers[REQUEST_ID_HEADER] = request_id

        log = logger.warning if response.status_code >= 500 else logger.info
        log("request_completed", status_code=response.status_code, duration_ms=duration_ms)

        return response
