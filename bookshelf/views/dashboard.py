"""Server-rendered dashboard page."""

import logging
from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import SQLAlchemyError

from bookshelf.repositories.books import BookRepository
from bookshelf.schemas.books import BookStats

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

router = APIRouter()


def _load_stats(request: Request) -> BookStats | None:
    state = request.app.state
    if not state.db_monitor.is_connected:
        return None
    db = state.session_factory()
    try:
        return BookRepository(db, state.query_dialect, state.stats_cache).stats()
    except SQLAlchemyError:
        logger.warning("Dashboard stats unavailable; rendering offline view", exc_info=True)
        return None
    finally:
        db.close()


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def dashboard(request: Request) -> HTMLResponse:
    """Render the dashboard; an unreachable database yields zero stats instead of an error."""
    stats = _load_stats(request)
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "title": "Book Management",
            "stats": stats or BookStats(),
            "db_connected": stats is not None,
        },
    )
