"""
Base Models for API and Domain Validation

Request bodies reject unknown fields so client typos fail with 422 instead of
being silently dropped. Responses and domain records are lenient about extra
attributes so they can be built straight from ORM rows.

Usage:
    class TaskCreate(StrictRequest):
        name: str

    class TaskResponse(StrictResponse):
        id: int
        name: str

Architecture:
    API Request → StrictRequest (extra="forbid") → Router → Service / Store
    ORM row → DomainModel (from_attributes) → StrictResponse → API Response
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class StrictRequest(BaseModel):
    """
    Base model for API request bodies.

    Features:
        - extra="forbid": Unknown fields raise 422 Unprocessable Entity
        - validate_default=True: Validates default values
        - str_strip_whitespace=True: Trims whitespace from strings
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
        from_attributes=True,
    )


class StrictResponse(BaseModel):
    """Base model for API response bodies (extra fields ignored)."""

    model_config = ConfigDict(
        extra="ignore",
        validate_default=True,
        from_attributes=True,
    )


class DomainModel(BaseModel):
    """
    Base model for records passed between stores and services.

    Records are built from ORM rows with ``model_validate(row)`` and copied
    with ``model_copy(update=...)`` rather than mutated in place.
    """

    model_config = ConfigDict(
        extra="ignore",
        from_attributes=True,
    )


class SuccessResponse(StrictResponse):
    """Generic success response for mutations without a body."""

    success: bool = True
    message: Optional[str] = None
