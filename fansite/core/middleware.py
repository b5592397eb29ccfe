"""
Middleware configuration for the application.
Includes Correlation ID setup and request logging middleware.
"""

import time
from typing import Callable, Optional

import structlog
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def request_user_id(request: Request) -> Optional[str]:
    """Id of the user the bearer dependency authenticated, if any."""
    return getattr(request.state, "user_id", None)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with timing and the authenticated user.

    Method and path are bound into the structlog context so every event
    logged while serving the request (uploads, deletes)
    carries them too.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(method=request.method, path=request.url.path)
        start_time = time.perf_counter()

        logger.info(
            "Request started",
            client_ip=client_ip(request),
            user_agent=request.headers.get("user-agent"),
        )

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed",
                user_id=request_user_id(request),
                process_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            raise

        logger.info(
            "Request completed",
            status_code=response.status_code,
            user_id=request_user_id(request),
            process_time_ms=round((time.perf_counter() - start_time) * 1000, 2),
        )
        return response


def setup_middleware(app):
    """Setup all middleware for the application."""

    # Starlette runs middleware LIFO: the correlation id is added last so it
    # wraps the request logger and the id is bound before logging starts.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        update_request_header=True,
    )
