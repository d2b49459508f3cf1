"""Pydantic models for health check endpoints."""

from typing import Literal

from pydantic import BaseModel, Field

HealthStatus = Literal["healthy", "degraded"]
DatabaseStatus = Literal["ok", "unavailable", "not_configured"]


class HealthResponse(BaseModel):
    """Liveness of the API process plus its database and schedule checker."""

    status: HealthStatus = Field(..., description="'degraded' when the database ping fails")
    version: str = Field(..., description="Application version")
    database: DatabaseStatus = Field(..., description="Result of the database ping")
    scheduler_running: bool = Field(..., description="Whether the schedule check task is alive")
