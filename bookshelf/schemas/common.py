"""Shared response envelopes."""

from pydantic import BaseModel, Field


class FieldError(BaseModel):
    """One field-level validation failure."""

    field: str
    message: str


class ErrorResponse(BaseModel):
    """Body of every non-2xx JSON response."""

    success: bool = False
    message: str
    error: str | None = None
    errors: list[FieldError] | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str = Field(..., description="Human-readable outcome")
