"""Database engine, session management and connection health monitoring."""

import asyncio
import logging
import threading
import time
from collections.abc import Callable, Generator

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from starlette.concurrency import run_in_threadpool

from bookshelf.core.config import Settings, settings

logger = logging.getLogger(__name__)


def build_engine(config: Settings) -> Engine:
    """
    Create the SQLAlchemy engine for DATABASE_URL.

    Server backends get a bounded pool, and every backend a statement timeout, so a slow query
    cannot pin a pooled connection indefinitely.
    """
    url = make_url(config.DATABASE_URL)
    backend = url.get_backend_name()
    kwargs: dict = {"pool_pre_ping": True, "echo": config.DEBUG}

    if backend == "postgresql":
        kwargs["connect_args"] = {
            "connect_timeout": config.DB_CONNECT_TIMEOUT_SEC,
            "options": f"-c statement_timeout={config.DB_STATEMENT_TIMEOUT_MS}",
        }
    elif backend in ("mysql", "mariadb"):
        # MariaDB has no max_execution_time; its max_statement_time is in seconds.
        if backend == "mariadb":
            limit = f"max_statement_time={config.DB_STATEMENT_TIMEOUT_MS / 1000}"
        else:
            limit = f"max_execution_time={config.DB_STATEMENT_TIMEOUT_MS}"
        kwargs["connect_args"] = {
            "connect_timeout": config.DB_CONNECT_TIMEOUT_SEC,
            # The statement limit only bounds SELECTs; the socket timeout covers writes.
            "read_timeout": max(1, config.DB_STATEMENT_TIMEOUT_MS // 1000),
            # DATETIME columns are naive; NOW() must write UTC to match the UTC cutoffs we bind.
            "init_command": f"SET SESSION time_zone = '+00:00', SESSION {limit}",
        }
    elif backend == "sqlite":
        kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": config.DB_STATEMENT_TIMEOUT_MS / 1000,
        }
        if url.database in (None, "", ":memory:"):
            # One shared connection, otherwise each pooled connection sees its own empty database.
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    kwargs.update(
        pool_size=config.DB_POOL_SIZE,
        max_overflow=0,
        pool_timeout=config.DB_POOL_TIMEOUT_SEC,
        pool_recycle=1800,
    )
    return create_engine(url, **kwargs)


def make_session_factory(bind: Engine) -> sessionmaker[Session]:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind)


engine = build_engine(settings)

SessionLocal = make_session_factory(engine)


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency that yields a DB session and closes it when done."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine) -> None:
    """Create any missing tables. Alembic migrations remain the source of truth for changes."""
    from bookshelf.models import Base

    Base.metadata.create_all(bind=bind)
    logger.info("Database tables initialized (backend=%s)", bind.dialect.name)


class DatabaseMonitor:
    """
    Tracks whether the backing store is reachable.

    The flag is what require_database consults, so the API can answer 503 while the
    rest of the app (dashboard, status endpoints) keeps serving a degraded view.
    """

    def __init__(
        self,
        bind: Engine,
        *,
        max_retries: int = 3,
        base_delay: float = 0.5,
        max_delay: float = 5.0,
        on_connect: Callable[[Engine], None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.engine = bind
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.max_delay = max_delay
        self._on_connect = on_connect
        self._sleep = sleep
        self._connected = False
        self._lock = threading.Lock()

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def backend(self) -> str:
        return self.engine.dialect.name

    def _set_connected(self, value: bool) -> None:
        with self._lock:
            changed = self._connected != value
            self._connected = value
        if changed:
            if value:
                logger.info("Database connection established (backend=%s)", self.backend)
            else:
                logger.error("Database connection lost (backend=%s)", self.backend)

    def check(self) -> bool:
        """Run SELECT 1 on a fresh pooled connection and record the outcome."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            logger.warning("Database health check failed: %s", e.__class__.__name__)
            self._set_connected(False)
            return False
        self._set_connected(True)
        return True

    def mark_disconnected(self) -> None:
        self._set_connected(False)

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number attempt + 1: base * 2**attempt, capped at max_delay."""
        return min(self.max_delay, self.base_delay * (2 ** attempt))

    def reconnect(self) -> bool:
        """
        Drop pooled connections and retry with capped exponential backoff.

        Runs the on_connect hook (table creation) after a successful attempt. Blocking;
        call through run_in_threadpool from async code.
        """
        for attempt in range(self.max_retries):
            self.engine.dispose()
            logger.info(
                "Database reconnect attempt %s/%s (backend=%s)",
                attempt + 1,
                self.max_retries,
                self.backend,
            )
            if self.check():
                if self._on_connect is not None:
                    try:
                        self._on_connect(self.engine)
                    except SQLAlchemyError:
                        logger.exception("Database initialization after connect failed")
                        self._set_connected(False)
                        return False
                return True
            if attempt < self.max_retries - 1:
                self._sleep(self.backoff_delay(attempt))
        logger.error("Database reconnect gave up after %s attempts", self.max_retries)
        return False

    async def watch(self, interval: float) -> None:
        """Periodic health check; reconnects when the check fails. Runs until cancelled."""
        while True:
            await asyncio.sleep(interval)
            if not await run_in_threadpool(self.check):
                await run_in_threadpool(self.reconnect)
