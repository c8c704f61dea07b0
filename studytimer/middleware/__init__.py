"""
Middleware Package

Provides FastAPI error handling: the ServiceError hierarchy, the mapping
from domain failures to HTTP errors and the catch-all middleware.
"""

from studytimer.middleware.error_handling import (
    AuthorizationError,
    ErrorHandlingMiddleware,
    NotFoundError,
    ServiceError,
    UnauthorizedError,
    ValidationError,
    raise_for_failure,
    setup_error_handling,
)

__all__ = [
    "AuthorizationError",
    "ErrorHandlingMiddleware",
    "NotFoundError",
    "ServiceError",
    "UnauthorizedError",
    "ValidationError",
    "raise_for_failure",
    "setup_error_handling",
]
