"""Request/response schemas for auth endpoints."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from bookshelf.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)

Role = Literal["user", "admin"]


class RegisterRequest(BaseModel):
    """New account details."""

    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        pattern=r"^[A-Za-z0-9_]+$",
        description="Letters, digits and underscores",
    )
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    role: Role | None = None

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr
    password: str = Field(..., min_length=1, description="Password")

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class CurrentUser(BaseModel):
    """Authenticated identity decoded from the bearer token."""

    id: int
    username: str
    email: str
    role: Role


class UserOut(BaseModel):
    """User entry returned by the API (no password hash)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: str
    role: Role
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    data: UserOut


class LoginResponse(BaseModel):
    success: bool = True
    message: str
    user: UserOut
    token: str


class MeResponse(BaseModel):
    success: bool = True
    data: UserOut


class UsersListResponse(BaseModel):
    """Response for GET /users (admin only)."""

    success: bool = True
    data: list[UserOut]


class RoleUpdateRequest(BaseModel):
    role: Role
