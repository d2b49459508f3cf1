"""Pydantic models for schedule API endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from src.api.processing.models import RunSummaryResponse
from src.digest.cron import validate_cron_expression
from src.digest.exceptions import InvalidCronExpressionError
from src.enums import SummaryLength


def _clean_topics(topics: list[str]) -> list[str]:
    cleaned = [topic.strip() for topic in topics if topic.strip()]
    if not cleaned:
        raise ValueError("At least one non-empty topic is required")
    return cleaned


def _check_cron(cron_schedule: str) -> str:
    try:
        return validate_cron_expression(cron_schedule)
    except InvalidCronExpressionError as e:
        raise ValueError(e.message) from e


class ScheduleResponse(BaseModel):
    """Response model for a digest schedule."""

    id: UUID = Field(..., description="Schedule ID")
    name: str = Field(..., description="Schedule name")
    topics: list[str] = Field(..., description="Topic filter")
    cron_schedule: str = Field(..., description="Cron expression")
    delivery_email: str = Field(..., description="Delivery address")
    summary_length: SummaryLength = Field(..., description="Summary length")
    include_links: bool = Field(..., description="Whether digests include links")
    custom_prompt: str | None = Field(None, description="Extra generator instructions")
    is_active: bool = Field(..., description="Whether the schedule fires automatically")
    last_run_at: datetime | None = Field(None, description="Last firing")
    next_run_at: datetime = Field(..., description="Next automatic firing")
    created_at: datetime = Field(..., description="When the schedule was created")


class CreateScheduleRequest(BaseModel):
    """Request model for creating a schedule."""

    name: str = Field(..., min_length=1, max_length=255, description="Schedule name")
    topics: list[str] = Field(..., min_length=1, description="Topic filter")
    cron_schedule: str = Field(..., description="Five-field cron expression")
    delivery_email: EmailStr = Field(..., description="Delivery address")
    summary_length: SummaryLength = Field(SummaryLength.MEDIUM, description="Summary length")
    include_links: bool = Field(True, description="Include links in digests")
    custom_prompt: str | None = Field(None, max_length=2000, description="Extra instructions")
    is_active: bool = Field(True, description="Fire automatically")

    @field_validator("topics")
    @classmethod
    def validate_topics(cls, v: list[str]) -> list[str]:
        """Strip topics and require at least one."""
        return _clean_topics(v)

    @field_validator("cron_schedule")
    @classmethod
    def validate_cron(cls, v: str) -> str:
        """Reject invalid cron expressions."""
        return _check_cron(v)


class UpdateScheduleRequest(BaseModel):
    """Request model for a partial schedule update.

    Only fields present in the request body are changed.
    """

    name: str | None = Field(None, min_length=1, max_length=255)
    topics: list[str] | None = Field(None, min_length=1)
    cron_schedule: str | None = None
    delivery_email: EmailStr | None = None
    summary_length: SummaryLength | None = None
    include_links: bool | None = None
    custom_prompt: str | None = Field(None, max_length=2000)
    is_active: bool | None = None

    @field_validator("topics")
    @classmethod
    def validate_topics(cls, v: list[str] | None) -> list[str] | None:
        """Strip topics and require at least one."""
        return _clean_topics(v) if v is not None else None

    @field_validator("cron_schedule")
    @classmethod
    def validate_cron(cls, v: str | None) -> str | None:
        """Reject invalid cron expressions."""
        return _check_cron(v) if v is not None else None


class CronPreset(BaseModel):
    """A suggested cron expression."""

    name: str
    cron: str
    description: str


class PresetsResponse(BaseModel):
    """Response model for cron presets."""

    presets: list[CronPreset]


class ScheduleDefaultsResponse(BaseModel):
    """Defaults for a new schedule, taken from preferences."""

    delivery_email: str = Field("", description="Default delivery address")
    summary_length: SummaryLength = Field(SummaryLength.MEDIUM, description="Default length")
    include_links: bool = Field(True, description="Default links option")
    interests: list[str] = Field(default_factory=list, description="Default topics")
    custom_prompt: str | None = Field(None, description="Default extra instructions")


class TriggerResponse(BaseModel):
    """Response model for a manual trigger."""

    run_id: UUID = Field(..., description="Processing run ID")
    newsletter_count: int = Field(..., description="Newsletters in the digest")
    message: str = Field(..., description="Human-readable status")


class ScheduleHistoryResponse(BaseModel):
    """Runs that originated from one schedule."""

    schedule_id: UUID
    schedule_name: str
    runs: list[RunSummaryResponse]
