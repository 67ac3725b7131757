"""Pydantic schemas for health check responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class HealthResponse(BaseModel):
    """Response body for the health check endpoint."""

    status: Literal["OK"] = Field(default="OK", description="Service status")
    timestamp: datetime
    database: Literal["connected", "disconnected"] = Field(
        description="Database connectivity as last observed by the monitor",
    )


class DatabaseStatusResponse(BaseModel):
    success: bool
    connected: bool
    message: str
