"""Request dependencies: database availability, bearer auth, and repositories."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bookshelf.core.database import get_db
from bookshelf.core.errors import Forbidden, ServiceUnavailable, Unauthorized
from bookshelf.models.user import ROLE_ADMIN
from bookshelf.repositories.books import BookRepository
from bookshelf.schemas.auth import CurrentUser
from bookshelf.services.auth import InvalidTokenError, verify_token

security = HTTPBearer(auto_error=False)

DATABASE_UNAVAILABLE_MESSAGE = "Database not connected. Please check your database configuration."


def require_database(request: Request) -> None:
    """Dependency: 503 while the monitor reports the store unreachable."""
    if not request.app.state.db_monitor.is_connected:
        raise ServiceUnavailable(DATABASE_UNAVAILABLE_MESSAGE)


def authenticate_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUser:
    """Dependency: 401 when no bearer token is sent, 403 when the token does not verify."""
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Access token is required", headers={"WWW-Authenticate": "Bearer"})
    try:
        return verify_token(credentials.credentials)
    except InvalidTokenError as e:
        raise Forbidden(e.message) from None


def optional_auth(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> CurrentUser | None:
    """Dependency: the caller's identity when a valid token is present, otherwise None."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return verify_token(credentials.credentials)
    except InvalidTokenError:
        return None


def require_admin(
    current_user: Annotated[CurrentUser, Depends(authenticate_token)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != ROLE_ADMIN:
        raise Forbidden("Admin access required")
    return current_user


def get_book_repository(
    request: Request,
    db: Annotated[Session, Depends(get_db)],
) -> BookRepository:
    return BookRepository(db, request.app.state.query_dialect, request.app.state.stats_cache)
