"""Registration, login and token verification."""

import logging

import jwt
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookshelf.core.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from bookshelf.models.user import ROLE_USER, User
from bookshelf.schemas.auth import CurrentUser

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base for auth failures; message is safe to show to the client."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class DuplicateEmailError(AuthError):
    def __init__(self, message: str = "User with this email already exists"):
        super().__init__(message)


class DuplicateUsernameError(AuthError):
    def __init__(self, message: str = "Username is already taken"):
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """Unknown email and wrong password share this one error."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class InvalidTokenError(AuthError):
    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


def _find_conflict(db: Session, username: str, email: str) -> AuthError | None:
    # Email is checked first so a request clashing on both reports the email.
    if db.query(User.id).filter(User.email == email).first() is not None:
        return DuplicateEmailError()
    if db.query(User.id).filter(User.username == username).first() is not None:
        return DuplicateUsernameError()
    return None


def register_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: str | None = None,
) -> User:
    """
    Create a user account.

    Uniqueness is checked before the (slow) password hash. A concurrent registration
    that slips past the check is caught by the unique constraints and re-reported as
    the matching duplicate error.
    """
    username = username.strip()
    email = email.strip().lower()
    conflict = _find_conflict(db, username, email)
    if conflict is not None:
        raise conflict

    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role or ROLE_USER,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        conflict = _find_conflict(db, username, email)
        if conflict is not None:
            raise conflict from None
        raise
    db.refresh(user)
    logger.info("User registered", extra={"user_id": user.id, "role": user.role})
    return user


def login_user(db: Session, email: str, password: str) -> tuple[str, User]:
    """Return (token, user). Raises InvalidCredentialsError for unknown email or wrong password."""
    user = db.query(User).filter(User.email == email.strip().lower()).first()
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Login failed")
        raise InvalidCredentialsError()
    token = create_access_token(
        user_id=user.id,
        username=user.username,
        email=user.email,
        role=user.role,
    )
    logger.info("User logged in", extra={"user_id": user.id})
    return token, user


def verify_token(token: str) -> CurrentUser:
    """Decode a bearer token into the identity it carries. Any defect raises InvalidTokenError."""
    try:
        payload = decode_access_token(token)
        return CurrentUser(
            id=int(payload["sub"]),
            username=payload["username"],
            email=payload["email"],
            role=payload["role"],
        )
    except (jwt.PyJWTError, KeyError, TypeError, ValueError, ValidationError):
        raise InvalidTokenError() from None
