"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

from dotenv import load_dotenv

load_dotenv()

import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine
from starlette.concurrency import run_in_threadpool

from bookshelf.api.routes import router as api_router
from bookshelf.core.cache import TTLCache
from bookshelf.core.config import Settings, settings
from bookshelf.core.database import DatabaseMonitor, init_db, make_session_factory
from bookshelf.core.database import engine as default_engine
from bookshelf.core.errors import register_exception_handlers
from bookshelf.core.logging_setup import configure_logging
from bookshelf.repositories.dialects import get_query_dialect
from bookshelf.schemas.health import HealthResponse
from bookshelf.views.dashboard import router as dashboard_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Connect (with backoff) and start the periodic health check; an unreachable store is not fatal."""
    monitor: DatabaseMonitor = app.state.db_monitor
    config: Settings = app.state.settings
    logger.info("Starting Bookshelf API (backend=%s)", monitor.backend)
    if not await run_in_threadpool(monitor.reconnect):
        logger.warning("Starting without a database; API routes answer 503 until it is reachable")
    watcher = asyncio.create_task(monitor.watch(config.DB_HEALTH_CHECK_INTERVAL_SEC))
    yield
    watcher.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await watcher
    monitor.engine.dispose()
    logger.info("Bookshelf API stopped")


def create_app(bind: Engine | None = None, config: Settings = settings) -> FastAPI:
    """Build the app around an engine; tests pass their own."""
    bind = bind if bind is not None else default_engine

    app = FastAPI(
        title="Bookshelf API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = config
    app.state.session_factory = make_session_factory(bind)
    # Chosen once here; repositories never re-detect the backend.
    app.state.query_dialect = get_query_dialect(bind.dialect.name)
    app.state.stats_cache = TTLCache(config.STATS_CACHE_TTL_SEC)
    app.state.db_monitor = DatabaseMonitor(
        bind,
        max_retries=config.DB_RECONNECT_MAX_RETRIES,
        base_delay=config.DB_RECONNECT_BASE_DELAY_SEC,
        max_delay=config.DB_RECONNECT_MAX_DELAY_SEC,
        on_connect=init_db if config.DB_AUTO_CREATE_TABLES else None,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if config.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    app.include_router(api_router, prefix=config.API_PREFIX)
    app.include_router(dashboard_router)

    @app.get("/health", response_model=HealthResponse, tags=["health"])
    def health(request: Request) -> HealthResponse:
        """Liveness plus the last observed database state. Used by load balancers and monitoring."""
        connected = request.app.state.db_monitor.is_connected
        return HealthResponse(
            timestamp=datetime.now(UTC),
            database="connected" if connected else "disconnected",
        )

    return app


configure_logging(settings.LOG_LEVEL)

app = create_app()
