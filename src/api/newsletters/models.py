"""Pydantic models for newsletter API endpoints."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field


class NewsletterSummaryResponse(BaseModel):
    """A newsletter in a listing."""

    id: UUID = Field(..., description="Newsletter ID")
    sender_address: str = Field(..., description="Sender e-mail address")
    sender_name: str | None = Field(None, description="Sender display name")
    subject: str = Field(..., description="Subject line")
    received_at: datetime = Field(..., description="When the message was received")
    topics: list[str] = Field(default_factory=list, description="Extracted topics")
    is_processed: bool = Field(..., description="Whether the newsletter has been processed")


class NewsletterDetailResponse(NewsletterSummaryResponse):
    """A newsletter with its body and extracted content."""

    body_text: str | None = Field(None, description="Plaintext body")
    body_html: str | None = Field(None, description="HTML body")
    extracted_content: dict[str, Any] | None = Field(None, description="Extracted content")
    created_at: datetime = Field(..., description="When the newsletter was stored")


class NewsletterListResponse(BaseModel):
    """A page of newsletters."""

    newsletters: list[NewsletterSummaryResponse] = Field(..., description="Newsletters on page")
    total: int = Field(..., description="Total matching newsletters")
    page: int = Field(..., description="Current page")
    limit: int = Field(..., description="Page size")


class SyncRequest(BaseModel):
    """Request model for a mailbox sync."""

    force: bool = Field(False, description="Refresh bodies of already stored messages")


class SyncResponse(BaseModel):
    """Response model for a mailbox sync."""

    synced: int = Field(..., description="New newsletters stored")
    updated: int = Field(..., description="Existing newsletters refreshed")
    skipped: int = Field(..., description="Messages skipped")
    errors: list[str] = Field(default_factory=list, description="Per-message errors")
