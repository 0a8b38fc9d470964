"""
FastAPI middleware for observability.

Correlation ID and request logging middleware.

Dependencies: fastapi, starlette, kbcopilot.observability.correlation
System role: Request/response observability injection
"""

import logging
import time

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from kbcopilot.observability.correlation import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# Polled by load balancers every few seconds
QUIET_PATH_SUFFIXES = ("/health", "/health/vector-store")


def _elapsed_ms(start: float) -> float:
    return round((time.perf_counter() - start) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log one line per request with status and timing.

    For streamed responses (SSE) the timing covers the time to the first
    byte, not the whole stream; the orchestrator logs exchange duration.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        path = request.url.path
        level = logging.DEBUG if path.endswith(QUIET_PATH_SUFFIXES) else logging.INFO

        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"{request.method} {path} - Unhandled exception",
                extra={
                    "method": request.method,
                    "path": path,
                    "process_time_ms": _elapsed_ms(start),
                    "error_type": type(e).__name__,
                },
            )
            raise

        logger.log(
            level,
            f"{request.method} {path} - {response.status_code}",
            extra={
                "method": request.method,
                "path": path,
                "status_code": response.status_code,
                "process_time_ms": _elapsed_ms(start),
                "client_host": request.client.host if request.client else None,
            },
        )
        return response


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Bind a correlation ID to the request context and echo it in the response."""

    async def dispatch(self, request: Request, call_next):
        """
        Reuse the caller's X-Correlation-ID or generate one.

        Args:
            request: FastAPI request
            call_next: Next middleware in chain

        Returns:
            Response: Response with correlation ID header
        """
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response: Response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
