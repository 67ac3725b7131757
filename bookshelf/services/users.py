"""Admin-only user management."""

import logging

from sqlalchemy.orm import Session

from bookshelf.models.user import ROLE_ADMIN, ROLES, User
from bookshelf.schemas.auth import CurrentUser

logger = logging.getLogger(__name__)


class UserManagementError(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class PermissionDeniedError(UserManagementError):
    def __init__(self, message: str = "Admin access required"):
        super().__init__(message)


class SelfModificationError(UserManagementError):
    """An admin tried to change their own role or delete their own account."""


def _require_admin(actor: CurrentUser) -> None:
    if actor.role != ROLE_ADMIN:
        raise PermissionDeniedError()


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.created_at.desc(), User.id.desc()).all()


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def update_user_role(db: Session, actor: CurrentUser, user_id: int, role: str) -> User | None:
    """Set another user's role. Returns None when the user does not exist."""
    _require_admin(actor)
    if actor.id == user_id:
        raise SelfModificationError("You cannot change your own role")
    if role not in ROLES:
        raise ValueError(f"role must be one of {ROLES}")
    user = db.get(User, user_id)
    if user is None:
        return None
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info("User role changed", extra={"user_id": user_id, "role": role, "actor_id": actor.id})
    return user


def delete_user(db: Session, actor: CurrentUser, user_id: int) -> bool:
    """Delete another user's account. Returns False when the user does not exist."""
    _require_admin(actor)
    if actor.id == user_id:
        raise SelfModificationError("You cannot delete your own account")
    deleted = db.query(User).filter(User.id == user_id).delete(synchronize_session=False)
    db.commit()
    if deleted:
        logger.info("User deleted", extra={"user_id": user_id, "actor_id": actor.id})
    return deleted > 0
