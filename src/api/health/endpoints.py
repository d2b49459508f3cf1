"""Health check endpoints."""

import logging

from fastapi import APIRouter, Request
from sqlalchemy.exc import SQLAlchemyError

from src.api.health.models import HealthResponse
from src.services import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])

APP_VERSION = "0.1.0"


@router.get(
    "",
    response_model=HealthResponse,
    summary="Check service health",
    description="Returns the health status of the API service and its database.",
)
def health_check(request: Request) -> HealthResponse:
    """Check if the API service is healthy.

    :returns: Health status response.
    """
    logger.debug("Health check requested")
    services: Services | None = getattr(request.app.state, "services", None)
    if services is None:
        return HealthResponse(
            status="healthy",
            version=APP_VERSION,
            database="not_configured",
            scheduler_running=False,
        )

    try:
        services.database.ping()
        database_status = "ok"
    except SQLAlchemyError as e:
        logger.warning(f"Health check database ping failed: {e}")
        database_status = "unavailable"

    return HealthResponse(
        status="healthy" if database_status == "ok" else "degraded",
        version=APP_VERSION,
        database=database_status,
        scheduler_running=services.scheduler.schedule_task.is_running,
    )
