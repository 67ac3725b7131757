"""SQLAlchemy ORM models."""

from bookshelf.models.base import Base
from bookshelf.models.book import Book
from bookshelf.models.user import ROLE_ADMIN, ROLE_USER, ROLES, User

__all__ = ["Base", "Book", "User", "ROLE_ADMIN", "ROLE_USER", "ROLES"]
