"""Shared dependencies for API endpoints."""

import logging
from collections.abc import Iterator

from fastapi import Depends, HTTPException, Request, Security, status
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from src.database.api_keys import verify_api_key
from src.database.connection import Database
from src.digest.orchestrator import DigestOrchestrator
from src.services import Services

logger = logging.getLogger(__name__)

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)


def get_services(request: Request) -> Services:
    """Get the services built by the application lifespan.

    :param request: The incoming request.
    :returns: The application's services.
    :raises HTTPException: If the services are not available.
    """
    services: Services | None = getattr(request.app.state, "services", None)
    if services is None:
        logger.error("Request received before services were initialised")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service not ready",
        )
    return services


def get_database(services: Services = Depends(get_services)) -> Database:
    """Get the database handle.

    :param services: The application's services.
    :returns: The database handle.
    """
    return services.database


def get_session(database: Database = Depends(get_database)) -> Iterator[Session]:
    """Yield a database session that commits when the request succeeds.

    :param database: The database handle.
    :yields: A database session.
    """
    with database.session() as session:
        yield session


def get_orchestrator(services: Services = Depends(get_services)) -> DigestOrchestrator:
    """Get the digest orchestrator.

    :param services: The application's services.
    :returns: The orchestrator.
    """
    return services.orchestrator


def require_api_key(
    api_key: str | None = Security(api_key_header),
    session: Session = Depends(get_session),
) -> str:
    """Verify the X-API-Key header.

    :param api_key: The key presented by the client.
    :param session: Database session.
    :returns: The validated key.
    :raises HTTPException: If the key is missing or unknown.
    """
    if not api_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key",
        )

    if verify_api_key(session, api_key) is None:
        logger.warning("Invalid API key provided")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )

    return api_key
