"""
Error Handling Middleware

Provides consistent, informative error responses across the API.

Features:
- Standardized error response format
- Correlation IDs for log tracking
- Sanitized responses (hides internal details unless debug)
- One exception class per domain error kind

Usage:
    from studytimer.middleware.error_handling import raise_for_failure, setup_error_handling

    setup_error_handling(app, debug=settings.DEBUG)

    # In a route: unwrap a Result or raise the matching ServiceError
    task = raise_for_failure(await container.tasks.get_by_id(task_id))

Exception flow:
    ServiceError raised in a route is turned into JSON by the exception
    handler registered in setup_error_handling(). Anything else that
    escapes a route is caught by ErrorHandlingMiddleware and becomes a
    sanitized 500 response with an error_id to find it in the logs.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Optional, TypeVar
from uuid import uuid4

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.middleware.base import BaseHTTPMiddleware

from studytimer.enums.study import ErrorKind
from studytimer.models.result import DomainError, Result

logger = logging.getLogger(__name__)

T = TypeVar("T")


# =============================================================================
# Error Response Schema
# =============================================================================


class ErrorResponse(BaseModel):
    """Standardized error response."""

    error: str  # Error code (e.g., "not_found")
    message: str  # Human-readable message
    error_id: str  # For log correlation
    details: Optional[dict] = None
    timestamp: datetime


# =============================================================================
# Custom Exceptions
# =============================================================================


class ServiceError(Exception):
    """
    Base exception for service errors.

    Provides consistent error handling with:
    - HTTP status code
    - Error code for categorization
    - Optional details for debugging

    Example:
        raise ServiceError("Database connection failed", status_code=503)
    """

    status_code: int = 500
    error_code: str = "service_error"

    def __init__(
        self,
        message: str,
        status_code: int = None,
        error_code: str = None,
        details: dict = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code:
            self.status_code = status_code
        if error_code:
            self.error_code = error_code
        self.details = details


class DatabaseServiceError(ServiceError):
    """Raised when a storage operation fails."""

    status_code = 503
    error_code = "database_error"


class ValidationError(ServiceError):
    """Raised when input violates a domain invariant."""

    status_code = 422
    error_code = "validation_error"


class NotFoundError(ServiceError):
    """Raised when a requested resource doesn't exist."""

    status_code = 404
    error_code = "not_found"


class PremiumRequiredError(ServiceError):
    """Raised when a feature needs a premium subscription."""

    status_code = 402
    error_code = "premium_required"


class UnauthorizedError(ServiceError):
    """Raised when the API key is missing."""

    status_code = 401
    error_code = "unauthorized"


class AuthorizationError(ServiceError):
    """Raised when the API key is wrong."""

    status_code = 403
    error_code = "forbidden"


class NetworkError(ServiceError):
    """Raised when a remote collaborator cannot be reached."""

    status_code = 502
    error_code = "network_error"


_ERRORS_BY_KIND: dict[ErrorKind, type[ServiceError]] = {
    ErrorKind.DATABASE: DatabaseServiceError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.NETWORK: NetworkError,
    ErrorKind.PREMIUM_REQUIRED: PremiumRequiredError,
    ErrorKind.UNAUTHORIZED: UnauthorizedError,
    ErrorKind.UNKNOWN: ServiceError,
}


def service_error_for(error: DomainError) -> ServiceError:
    """Map a DomainError onto the matching ServiceError."""
    error_class = _ERRORS_BY_KIND.get(error.kind, ServiceError)
    # Causes stay in the logs
    details = {key: value for key, value in error.to_dict().items() if key != "cause"}
    return error_class(error.message, details=details)


def raise_for_failure(result: Result[T]) -> T:
    """Return the value of a Success, raise the mapped ServiceError for a Failure."""
    if result.is_failure:
        raise service_error_for(result.error)
    return result.value


# =============================================================================
# Error Handling Middleware
# =============================================================================


def _error_content(error_code: str, message: str, error_id: str, details: Optional[dict]) -> dict:
    return {
        "error": error_code,
        "message": message,
        "error_id": error_id,
        "details": details,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Global error handling middleware.

    - Catches unhandled exceptions
    - Logs with correlation ID
    - Returns consistent error format
    - Hides internal details unless debug
    """

    def __init__(self, app, debug: bool = False):
        super().__init__(app)
        self.debug = debug

    async def dispatch(self, request: Request, call_next):
        error_id = str(uuid4())[:8]

        try:
            return await call_next(request)

        except HTTPException:
            raise

        except Exception as e:
            logger.error(
                f"[{error_id}] Unhandled error: {type(e).__name__}: {e}",
                extra={
                    "error_id": error_id,
                    "path": request.url.path,
                    "method": request.method,
                    "traceback": traceback.format_exc(),
                },
            )

            details = None
            if self.debug:
                details = {
                    "exception": type(e).__name__,
                    "message": str(e),
                    "traceback": traceback.format_exc(),
                }
            return JSONResponse(
                status_code=500,
                content=_error_content(
                    "internal_server_error", "An unexpected error occurred", error_id, details
                ),
            )


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Turn a ServiceError raised in a route into the standard error body."""
    error_id = str(uuid4())[:8]
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"[{error_id}] {exc.error_code}: {exc.message}",
        extra={
            "error_id": error_id,
            "error_code": exc.error_code,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_content(exc.error_code, exc.message, error_id, exc.details),
    )


# =============================================================================
# Setup Function
# =============================================================================


def setup_error_handling(app: FastAPI, debug: bool = False) -> None:
    """
    Configure error handling on the FastAPI app.

    Args:
        app: FastAPI application instance
        debug: Whether to include stack traces in 500 responses
    """
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_middleware(ErrorHandlingMiddleware, debug=debug)
    logger.info(f"Error handling middleware enabled (debug={debug})")
