"""Pydantic request/response schemas."""

from bookshelf.schemas.auth import (
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    RoleUpdateRequest,
    UserOut,
)
from bookshelf.schemas.books import (
    BookCreate,
    BookOut,
    BookStats,
    BookUpdate,
)
from bookshelf.schemas.common import ErrorResponse, FieldError, MessageResponse
from bookshelf.schemas.health import DatabaseStatusResponse, HealthResponse

__all__ = [
    "BookCreate",
    "BookOut",
    "BookStats",
    "BookUpdate",
    "CurrentUser",
    "DatabaseStatusResponse",
    "ErrorResponse",
    "FieldError",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "RoleUpdateRequest",
    "UserOut",
]
