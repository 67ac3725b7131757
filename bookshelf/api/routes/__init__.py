"""API routes."""

from fastapi import APIRouter

from bookshelf.api.routes import auth, books, db_status
from bookshelf.schemas.common import ErrorResponse

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Validation failed"},
    401: {"model": ErrorResponse, "description": "Missing access token"},
    403: {"model": ErrorResponse, "description": "Invalid token or insufficient role"},
    404: {"model": ErrorResponse, "description": "Not found"},
    503: {"model": ErrorResponse, "description": "Database not connected"},
}

router = APIRouter(responses=ERROR_RESPONSES)
router.include_router(books.router, prefix="/books", tags=["books"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(db_status.router, prefix="/db", tags=["database"])
