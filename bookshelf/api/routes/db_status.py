"""Database status and manual reconnect."""

from fastapi import APIRouter, Request
from bookshelf.schemas.health import DatabaseStatusResponse

router = APIRouter()


@router.get("/status", response_model=DatabaseStatusResponse)
def get_status(request: Request) -> DatabaseStatusResponse:
    monitor = request.app.state.db_monitor
    connected = monitor.check()
    return DatabaseStatusResponse(
        success=True,
        connected=connected,
        message="Database is connected" if connected else "Database is not connected",
    )


@router.post("/reconnect", response_model=DatabaseStatusResponse)
def reconnect(request: Request) -> DatabaseStatusResponse:
    """Retry the connection with backoff and create missing tables on success."""
    monitor = request.app.state.db_monitor
    if monitor.reconnect():
        return DatabaseStatusResponse(
            success=True,
            connected=True,
            message="Database reconnected successfully",
        )
    return DatabaseStatusResponse(
        success=False,
        connected=False,
        message="Failed to reconnect to database",
    )
