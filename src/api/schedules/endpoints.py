"""API endpoints for managing digest schedules."""

import logging
import time
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_orchestrator, get_session
from src.api.errors import to_http_exception
from src.api.processing.models import RunSummaryResponse
from src.api.schedules.models import (
    CreateScheduleRequest,
    CronPreset,
    PresetsResponse,
    ScheduleDefaultsResponse,
    ScheduleHistoryResponse,
    ScheduleResponse,
    TriggerResponse,
    UpdateScheduleRequest,
)
from src.database.preferences import get_preferences
from src.database.processing_runs import list_runs_for_schedule
from src.database.schedules import (
    DigestSchedule,
    create_schedule,
    delete_schedule,
    get_schedule_by_id,
    list_schedules,
    update_schedule,
)
from src.digest.cron import CRON_PRESETS, calculate_next_cron_trigger
from src.digest.exceptions import DigestError
from src.digest.orchestrator import DigestOrchestrator
from src.enums import SummaryLength

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedules", tags=["Schedules"])


def _schedule_to_response(schedule: DigestSchedule) -> ScheduleResponse:
    """Convert a schedule model to response.

    :param schedule: The database model.
    :returns: API response model.
    """
    return ScheduleResponse(
        id=schedule.id,
        name=schedule.name,
        topics=schedule.topics,
        cron_schedule=schedule.cron_schedule,
        delivery_email=schedule.delivery_email,
        summary_length=SummaryLength(schedule.summary_length),
        include_links=schedule.include_links,
        custom_prompt=schedule.custom_prompt,
        is_active=schedule.is_active,
        last_run_at=schedule.last_run_at,
        next_run_at=schedule.next_run_at,
        created_at=schedule.created_at,
    )


def _not_found(schedule_id: UUID) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Schedule not found: {schedule_id}",
    )


@router.get("", response_model=list[ScheduleResponse], summary="List schedules")
def get_schedules(session: Session = Depends(get_session)) -> list[ScheduleResponse]:
    """List all schedules, newest first."""
    return [_schedule_to_response(schedule) for schedule in list_schedules(session)]


@router.get("/presets", response_model=PresetsResponse, summary="Cron presets")
def get_presets() -> PresetsResponse:
    """List suggested cron expressions."""
    return PresetsResponse(presets=[CronPreset(**preset) for preset in CRON_PRESETS])


@router.get("/defaults", response_model=ScheduleDefaultsResponse, summary="Schedule defaults")
def get_defaults(session: Session = Depends(get_session)) -> ScheduleDefaultsResponse:
    """Defaults for a new schedule, taken from the saved preferences."""
    preferences = get_preferences(session)
    if preferences is None:
        return ScheduleDefaultsResponse()

    return ScheduleDefaultsResponse(
        delivery_email=preferences.delivery_email,
        summary_length=SummaryLength(preferences.summary_length),
        include_links=preferences.include_links,
        interests=preferences.interests or [],
        custom_prompt=preferences.custom_prompt,
    )


@router.post(
    "",
    response_model=ScheduleResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create schedule",
)
def create(
    request: CreateScheduleRequest,
    session: Session = Depends(get_session),
) -> ScheduleResponse:
    """Create a schedule. Its first run is the next cron occurrence after now."""
    start = time.perf_counter()
    logger.info(f"Create schedule: name={request.name!r}, cron={request.cron_schedule}")

    schedule = create_schedule(
        session,
        name=request.name,
        topics=request.topics,
        cron_schedule=request.cron_schedule,
        delivery_email=str(request.delivery_email),
        next_run_at=calculate_next_cron_trigger(request.cron_schedule),
        summary_length=request.summary_length,
        include_links=request.include_links,
        custom_prompt=request.custom_prompt,
        is_active=request.is_active,
    )
    response = _schedule_to_response(schedule)

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Create schedule complete: id={response.id}, elapsed={elapsed_ms:.0f}ms")
    return response


@router.get("/{schedule_id}", response_model=ScheduleResponse, summary="Get schedule")
def get_schedule(
    schedule_id: UUID,
    session: Session = Depends(get_session),
) -> ScheduleResponse:
    """Get a schedule by ID."""
    schedule = get_schedule_by_id(session, schedule_id)
    if schedule is None:
        raise _not_found(schedule_id)
    return _schedule_to_response(schedule)


@router.patch("/{schedule_id}", response_model=ScheduleResponse, summary="Update schedule")
def update(
    schedule_id: UUID,
    request: UpdateScheduleRequest,
    session: Session = Depends(get_session),
) -> ScheduleResponse:
    """Update a schedule. A new cron expression moves the next run to its next occurrence."""
    fields = request.model_dump(exclude_unset=True)
    if "delivery_email" in fields and fields["delivery_email"] is not None:
        fields["delivery_email"] = str(fields["delivery_email"])

    nullable = {"custom_prompt"}
    for field_name in [name for name, value in fields.items() if value is None]:
        if field_name not in nullable:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=f"Field cannot be null: {field_name}",
            )

    if "cron_schedule" in fields:
        fields["next_run_at"] = calculate_next_cron_trigger(fields["cron_schedule"])

    logger.info(f"Update schedule: id={schedule_id}, fields={sorted(fields)}")
    schedule = update_schedule(session, schedule_id, **fields)
    if schedule is None:
        raise _not_found(schedule_id)
    return _schedule_to_response(schedule)


@router.delete(
    "/{schedule_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete schedule",
)
def remove(
    schedule_id: UUID,
    session: Session = Depends(get_session),
) -> None:
    """Delete a schedule. Its run history is kept."""
    if not delete_schedule(session, schedule_id):
        raise _not_found(schedule_id)


@router.post("/{schedule_id}/trigger", response_model=TriggerResponse, summary="Run schedule now")
def trigger(
    schedule_id: UUID,
    orchestrator: DigestOrchestrator = Depends(get_orchestrator),
) -> TriggerResponse:
    """Build and send the schedule's digest now.

    Records the trigger as the last run without moving the next automatic run.
    """
    start = time.perf_counter()
    try:
        result = orchestrator.trigger_schedule(schedule_id)
    except DigestError as e:
        logger.warning(f"Manual trigger of {schedule_id} failed: {e.message}")
        raise to_http_exception(e) from e

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(
        f"Manual trigger complete: schedule_id={schedule_id}, run_id={result.run_id}, "
        f"elapsed={elapsed_ms:.0f}ms"
    )
    return TriggerResponse(
        run_id=result.run_id,
        newsletter_count=result.newsletter_count,
        message="Digest sent",
    )


@router.get(
    "/{schedule_id}/history",
    response_model=ScheduleHistoryResponse,
    summary="Schedule run history",
)
def get_schedule_history(
    schedule_id: UUID,
    limit: int = Query(10, ge=1, le=100),
    session: Session = Depends(get_session),
) -> ScheduleHistoryResponse:
    """List the runs that originated from a schedule, newest first."""
    schedule = get_schedule_by_id(session, schedule_id)
    if schedule is None:
        raise _not_found(schedule_id)

    runs = list_runs_for_schedule(session, schedule_id, limit=limit)
    return ScheduleHistoryResponse(
        schedule_id=schedule.id,
        schedule_name=schedule.name,
        runs=[RunSummaryResponse.from_run(run, schedule.name) for run in runs],
    )
