"""Pydantic models for preferences API endpoints."""

from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.enums import FormatPreference, SummaryLength


class PreferencesResponse(BaseModel):
    """Response model for the saved preferences."""

    delivery_email: str = Field(..., description="Default delivery address")
    interests: list[str] = Field(..., description="Default topics of interest")
    format_preference: FormatPreference = Field(..., description="Preferred digest format")
    summary_length: SummaryLength = Field(..., description="Default summary length")
    include_links: bool = Field(..., description="Include links by default")
    custom_prompt: str | None = Field(None, description="Default extra instructions")
    updated_at: datetime | None = Field(None, description="When preferences were last saved")


class PreferencesRequest(BaseModel):
    """Request model for saving preferences."""

    delivery_email: EmailStr
    interests: list[str] = Field(default_factory=list)
    format_preference: FormatPreference = FormatPreference.DIGEST
    summary_length: SummaryLength = SummaryLength.MEDIUM
    include_links: bool = True
    custom_prompt: str | None = Field(None, max_length=2000)

    @field_validator("interests")
    @classmethod
    def strip_interests(cls, v: list[str]) -> list[str]:
        """Drop blank interests."""
        return [interest.strip() for interest in v if interest.strip()]
