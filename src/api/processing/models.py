"""Pydantic models for processing API endpoints."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from src.database.processing_runs import ProcessingRun
from src.enums import RunStatus, RunType


class GenerateRequest(BaseModel):
    """Request model for ad-hoc processing."""

    newsletter_ids: list[UUID] | None = Field(
        None,
        description="Newsletters to process. Defaults to all unprocessed newsletters.",
    )
    force_all: bool = Field(False, description="Include already processed newsletters")
    force_reprocess: bool = Field(False, description="Re-extract newsletters that have content")


class GenerateResponse(BaseModel):
    """Response model for an accepted processing request."""

    run_id: UUID = Field(..., description="Processing run ID to poll")
    newsletter_count: int = Field(..., description="Newsletters accepted")
    message: str = Field(..., description="Human-readable status")


class RunSummaryResponse(BaseModel):
    """A processing run without its renderings."""

    id: UUID = Field(..., description="Run ID")
    run_type: RunType = Field(..., description="Kind of run")
    status: RunStatus = Field(..., description="Run status")
    triggered_at: datetime = Field(..., description="When the run was accepted")
    completed_at: datetime | None = Field(None, description="When the run finished")
    newsletter_count: int = Field(..., description="Newsletters involved")
    sent_to_email: str | None = Field(None, description="Delivery address")
    error_message: str | None = Field(None, description="Failure reason")
    schedule_id: UUID | None = Field(None, description="Originating schedule")
    schedule_name: str | None = Field(None, description="Name of the originating schedule")

    @classmethod
    def from_run(cls, run: ProcessingRun, schedule_name: str | None = None) -> "RunSummaryResponse":
        """Build a response from a run.

        :param run: The processing run.
        :param schedule_name: Name of its schedule, if known.
        :returns: The response model.
        """
        return cls(
            id=run.id,
            run_type=RunType(run.run_type),
            status=RunStatus(run.status),
            triggered_at=run.triggered_at,
            completed_at=run.completed_at,
            newsletter_count=run.newsletter_count,
            sent_to_email=run.sent_to_email,
            error_message=run.error_message,
            schedule_id=run.schedule_id,
            schedule_name=schedule_name,
        )


class RunDetailResponse(RunSummaryResponse):
    """A processing run with its newsletters and renderings."""

    newsletter_ids: list[UUID] = Field(default_factory=list, description="Newsletters involved")
    summary_html: str | None = Field(None, description="HTML digest")
    summary_text: str | None = Field(None, description="Plaintext digest")
    provider_message_id: str | None = Field(None, description="Mail provider message ID")

    @classmethod
    def from_run(cls, run: ProcessingRun, schedule_name: str | None = None) -> "RunDetailResponse":
        """Build a detailed response from a run.

        :param run: The processing run.
        :param schedule_name: Name of its schedule, if known.
        :returns: The response model.
        """
        summary = RunSummaryResponse.from_run(run, schedule_name)
        return cls(
            **summary.model_dump(),
            newsletter_ids=[UUID(newsletter_id) for newsletter_id in run.newsletter_ids or []],
            summary_html=run.summary_html,
            summary_text=run.summary_text,
            provider_message_id=run.provider_message_id,
        )


class StatusResponse(BaseModel):
    """Response model for the processing status poll."""

    in_progress: bool = Field(..., description="Whether an ad-hoc run is in flight")
    run: RunSummaryResponse | None = Field(None, description="The in-flight or latest run")


class HistoryResponse(BaseModel):
    """Response model for processing history."""

    runs: list[RunSummaryResponse] = Field(..., description="Runs, newest first")
