"""Pydantic models for API key endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class GenerateKeyRequest(BaseModel):
    """Request model for generating an API key."""

    name: str | None = Field(None, max_length=255, description="Label for the key")


class GenerateKeyResponse(BaseModel):
    """Response model for a generated API key.

    The plaintext key is only ever returned here.
    """

    id: UUID = Field(..., description="Key ID")
    api_key: str = Field(..., description="Plaintext key, shown once")
    name: str | None = Field(None, description="Label for the key")
    created_at: datetime = Field(..., description="When the key was created")
