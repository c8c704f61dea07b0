"""
FastAPI Dependencies

Common dependencies for authentication and access to the application
container.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader

from studytimer.config import settings
from studytimer.container import Container
from studytimer.middleware.error_handling import AuthorizationError, UnauthorizedError

# API Key header scheme
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_container(request: Request) -> Container:
    """The container built by the app's lifespan."""
    return request.app.state.container


async def verify_api_key(
    api_key: Optional[str] = Depends(api_key_header),
) -> str:
    """
    Verify the API key from the X-API-Key header.

    If API_KEY is not configured in settings (empty string), authentication
    is disabled (development mode).

    Returns:
        str: The validated API key

    Raises:
        UnauthorizedError: 401 if the key is missing
        AuthorizationError: 403 if the key is wrong
    """
    if not settings.API_KEY:
        return "dev-mode"

    if not api_key:
        raise UnauthorizedError("Missing API key. Provide X-API-Key header.")

    if api_key != settings.API_KEY:
        raise AuthorizationError("Invalid API key")

    return api_key


# Dependency that can be used in routers
RequireAPIKey = Depends(verify_api_key)
