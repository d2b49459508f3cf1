"""FastAPI application configuration."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI

from src.api.auth import router as auth_router
from src.api.dependencies import require_api_key
from src.api.health import router as health_router
from src.api.health.endpoints import APP_VERSION
from src.api.errors import ErrorResponse
from src.api.newsletters import router as newsletters_router
from src.api.preferences import router as preferences_router
from src.api.processing import router as processing_router
from src.api.schedules import router as schedules_router
from src.observability.sentry import init_sentry
from src.services import build_services
from src.utils.logging import configure_logging

load_dotenv()
configure_logging()
init_sentry()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Build services on startup and release them on shutdown.

    The schedule and mailbox timers run in the API process unless disabled
    with SCHEDULER_ENABLED=false.
    """
    services = build_services()
    application.state.services = services

    if services.scheduler_settings.enabled:
        services.scheduler.start()
    else:
        logger.info("Scheduler disabled, timers not started")

    try:
        yield
    finally:
        services.close()
        application.state.services = None


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    :returns: Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Newsletter Digest API",
        version=APP_VERSION,
        lifespan=lifespan,
        responses={
            401: {"model": ErrorResponse, "description": "Unauthorised"},
            500: {"model": ErrorResponse, "description": "Internal server error"},
        },
    )

    # Register routers
    protected = [Depends(require_api_key)]
    application.include_router(health_router)
    application.include_router(auth_router)
    application.include_router(newsletters_router, dependencies=protected)
    application.include_router(processing_router, dependencies=protected)
    application.include_router(schedules_router, dependencies=protected)
    application.include_router(preferences_router, dependencies=protected)

    logger.info("FastAPI application created")

    return application


# Application instance for uvicorn
app = create_app()
