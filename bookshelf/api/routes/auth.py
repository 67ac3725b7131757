"""Registration, login, identity and admin user management."""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.orm import Session

from bookshelf.api.deps import authenticate_token, require_admin, require_database
from bookshelf.core.database import get_db
from bookshelf.core.errors import Forbidden, NotFound, Unauthorized, ValidationFailed
from bookshelf.schemas.auth import (
    CurrentUser,
    LoginRequest,
    LoginResponse,
    MeResponse,
    RegisterRequest,
    RegisterResponse,
    RoleUpdateRequest,
    UserOut,
    UsersListResponse,
)
from bookshelf.schemas.common import MessageResponse
from bookshelf.services import users as user_service
from bookshelf.services.auth import (
    DuplicateEmailError,
    DuplicateUsernameError,
    InvalidCredentialsError,
    login_user,
    register_user,
)

router = APIRouter()

Database = Annotated[Session, Depends(get_db)]
UserId = Annotated[int, Path(ge=1, le=2**31 - 1)]

USER_NOT_FOUND = "User not found"


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_database)],
)
def register(body: RegisterRequest, db: Database) -> RegisterResponse:
    try:
        user = register_user(db, body.username, body.email, body.password, body.role)
    except (DuplicateEmailError, DuplicateUsernameError) as e:
        raise ValidationFailed(e.message, code="CONFLICT") from None
    return RegisterResponse(message="User registered successfully", data=UserOut.model_validate(user))


@router.post("/login", response_model=LoginResponse, dependencies=[Depends(require_database)])
def login(body: LoginRequest, db: Database) -> LoginResponse:
    """
    Authenticate with email and password; returns a JWT access token.
    Include the token in the Authorization header as: Bearer <token>
    """
    try:
        token, user = login_user(db, body.email, body.password)
    except InvalidCredentialsError as e:
        raise Unauthorized(e.message) from None
    return LoginResponse(message="Login successful", user=UserOut.model_validate(user), token=token)


@router.get("/me", response_model=MeResponse, dependencies=[Depends(require_database)])
def me(current_user: Annotated[CurrentUser, Depends(authenticate_token)], db: Database) -> MeResponse:
    """Stored profile of the token holder; 404 once the account has been deleted."""
    user = user_service.get_user(db, current_user.id)
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    return MeResponse(data=UserOut.model_validate(user))


@router.post("/logout", response_model=MessageResponse)
def logout() -> MessageResponse:
    """Tokens are stateless; the client discards its copy."""
    return MessageResponse(message="Logout successful")


@router.get("/users", response_model=UsersListResponse, dependencies=[Depends(require_database)])
def list_users(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Database,
) -> UsersListResponse:
    """List all users (admin only)."""
    return UsersListResponse(data=[UserOut.model_validate(u) for u in user_service.list_users(db)])


@router.put("/users/{user_id}/role", response_model=MessageResponse, dependencies=[Depends(require_database)])
def update_user_role(
    user_id: UserId,
    body: RoleUpdateRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Database,
) -> MessageResponse:
    try:
        user = user_service.update_user_role(db, admin, user_id, body.role)
    except user_service.SelfModificationError as e:
        raise ValidationFailed(e.message) from None
    except user_service.PermissionDeniedError as e:
        raise Forbidden(e.message) from None
    if user is None:
        raise NotFound(USER_NOT_FOUND)
    return MessageResponse(message="User role updated successfully")


@router.delete("/users/{user_id}", response_model=MessageResponse, dependencies=[Depends(require_database)])
def delete_user(
    user_id: UserId,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Database,
) -> MessageResponse:
    try:
        deleted = user_service.delete_user(db, admin, user_id)
    except user_service.SelfModificationError as e:
        raise ValidationFailed(e.message) from None
    except user_service.PermissionDeniedError as e:
        raise Forbidden(e.message) from None
    if not deleted:
        raise NotFound(USER_NOT_FOUND)
    return MessageResponse(message="User deleted successfully")
