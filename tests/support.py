"""Shared helpers for database-backed tests."""

import sqlite3
import unittest

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from bookshelf.core.cache import TTLCache
from bookshelf.core.database import make_session_factory
from bookshelf.core.security import create_access_token
from bookshelf.models import Base

# RETURNING (used by the PostgreSQL-style dialect) needs SQLite 3.35+.
SQLITE_HAS_RETURNING = sqlite3.sqlite_version_info >= (3, 35)


def make_engine() -> Engine:
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )


def bearer(user_id: int, username: str, email: str, role: str = "user") -> dict[str, str]:
    token = create_access_token(user_id=user_id, username=username, email=email, role=role)
    return {"Authorization": f"Bearer {token}"}


class DatabaseTestCase(unittest.TestCase):
    """Fresh in-memory schema per test."""

    def setUp(self) -> None:
        self.engine = make_engine()
        Base.metadata.create_all(self.engine)
        self.session = make_session_factory(self.engine)()
        self.stats_cache = TTLCache(30)

    def tearDown(self) -> None:
        self.session.close()
        self.engine.dispose()
