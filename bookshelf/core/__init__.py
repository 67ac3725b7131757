"""Core app configuration and database."""

from bookshelf.core.config import get_settings, settings
from bookshelf.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]
