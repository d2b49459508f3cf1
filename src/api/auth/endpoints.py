"""API endpoint for generating API keys."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Security, status
from sqlalchemy.orm import Session

from src.api.auth.models import GenerateKeyRequest, GenerateKeyResponse
from src.api.dependencies import api_key_header, get_session
from src.database.api_keys import count_api_keys, create_api_key, verify_api_key

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post(
    "/generate-key",
    response_model=GenerateKeyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Generate API key",
)
def generate_key(
    request: GenerateKeyRequest | None = None,
    api_key: str | None = Security(api_key_header),
    session: Session = Depends(get_session),
) -> GenerateKeyResponse:
    """Generate a new API key.

    The first key can be generated without authentication. After that a valid
    X-API-Key header is required.
    """
    request = request or GenerateKeyRequest()

    if count_api_keys(session) > 0:
        if not api_key or verify_api_key(session, api_key) is None:
            logger.warning("API key generation rejected: missing or invalid key")
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="A valid API key is required to generate further keys",
            )
    else:
        logger.info("Generating bootstrap API key")

    row, plaintext = create_api_key(session, request.name)
    return GenerateKeyResponse(
        id=row.id,
        api_key=plaintext,
        name=row.name,
        created_at=row.created_at,
    )
