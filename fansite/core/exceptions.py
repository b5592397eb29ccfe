"""
Global exception handling for the application.
Every domain failure is an AppError subclass; the handlers below render
them (and framework errors) into one JSON error envelope.
"""

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Optional

import structlog
from asgi_correlation_id import correlation_id
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from fansite.config import get_settings
from fansite.core.middleware import client_ip

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"
    code: Optional[str] = None

    def __init__(self, message: Optional[str] = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    @property
    def error_code(self) -> str:
        return self.code or self.__class__.__name__


# Taxonomy


class ValidationError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Validation failed"


class AuthenticationError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class AuthorizationError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Access denied"


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource conflict"


class PayloadTooLargeError(AppError):
    # Oversize uploads are reported as 400 with their own code, not 413.
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "File too large. Maximum size is 500MB."
    code = "FILE_TOO_LARGE"


class UnsupportedMediaError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Unsupported media type"


class RangeNotSatisfiableError(AppError):
    # starlette renamed its 416 constant and warns on the old name
    status_code = HTTPStatus.REQUESTED_RANGE_NOT_SATISFIABLE.value
    default_message = "Requested range not satisfiable"

    def __init__(self, file_size: int, message: Optional[str] = None):
        super().__init__(message)
        self.file_size = file_size


class UpstreamError(AppError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream service failed"


class InternalError(AppError):
    default_message = "Internal server error"


# Token service


class TokenError(AuthenticationError):
    default_message = "Invalid token"


class ExpiredTokenError(TokenError):
    default_message = "Token expired"


class InvalidSignatureError(TokenError):
    default_message = "Invalid token"


class RefreshTokenError(AuthorizationError):
    default_message = "Invalid refresh token"


class NotAllowListedError(RefreshTokenError):
    pass


class InvalidTokenError(RefreshTokenError):
    pass


class UserInactiveError(RefreshTokenError):
    default_message = "User not found or inactive"


# Auth gateway


class InvalidCredentialsError(AuthenticationError):
    default_message = "Invalid credentials"


class MissingTokenError(AuthenticationError):
    default_message = "Refresh token not provided"


class InvalidRefreshError(AuthorizationError):
    default_message = "Invalid refresh token"


class ForbiddenError(AuthorizationError):
    pass


# Video pipeline


class InvalidFileTypeError(UnsupportedMediaError):
    default_message = "Invalid file type. Only MP4, AVI, and MOV files are allowed."


class CorruptFileError(ValidationError):
    default_message = "Invalid video file format"


class InvalidSourceError(ValidationError):
    default_message = "Invalid YouTube URL"


class MetadataFetchError(UpstreamError):
    default_message = "Failed to process YouTube URL"


# Rendering


def _envelope(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: Any = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body: dict[str, Any] = {
        "code": code,
        "message": message,
        "path": request.url.path,
        "method": request.method,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if details:
        body["details"] = details
    request_id = correlation_id.get()
    if request_id:
        body["requestId"] = request_id
    return JSONResponse(status_code=status_code, content={"error": body}, headers=headers)


def error_response(request: Request, exc: AppError) -> JSONResponse:
    """Render an AppError; routes that must touch cookies on failure call this directly."""
    headers = None
    if isinstance(exc, RangeNotSatisfiableError):
        headers = {"Content-Range": f"bytes */{exc.file_size}"}
    return _envelope(request, exc.status_code, exc.error_code, exc.message, exc.details, headers)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            "Request failed with server error",
            error_code=exc.error_code,
            error=exc.message,
            method=request.method,
            path=request.url.path,
            client_ip=client_ip(request),
        )
    return error_response(request, exc)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """FastAPI body/query validation is reported as a 400 ValidationError."""
    details = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return _envelope(request, ValidationError.status_code, "ValidationError", ValidationError.default_message, details)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
    if exc.status_code == status.HTTP_404_NOT_FOUND and message == "Not Found":
        message = "Route not found"
    return _envelope(request, exc.status_code, "HTTPError", message, headers=getattr(exc, "headers", None))


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions globally."""
    logger.error(
        "Unhandled exception",
        method=request.method,
        path=request.url.path,
        client_ip=client_ip(request),
        user_agent=request.headers.get("user-agent"),
        exc_info=exc,
    )

    if get_settings().is_production:
        message = "Something went wrong"
    else:
        message = f"{InternalError.default_message}: {exc}"
    return _envelope(request, status.HTTP_500_INTERNAL_SERVER_ERROR, "InternalError", message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)
