"""API endpoints for ad-hoc processing and the run ledger."""

import logging
import time
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_orchestrator, get_session
from src.api.errors import to_http_exception
from src.api.processing.models import (
    GenerateRequest,
    GenerateResponse,
    HistoryResponse,
    RunDetailResponse,
    RunSummaryResponse,
    StatusResponse,
)
from src.database.processing_runs import (
    get_in_progress_extraction_run,
    get_latest_run,
    get_run_by_id,
    list_runs,
)
from src.database.schedules import get_schedule_by_id
from src.digest.exceptions import DigestError
from src.digest.orchestrator import DigestOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/processing", tags=["Processing"])


@router.post(
    "/generate",
    response_model=GenerateResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Process newsletters",
)
def generate(
    request: GenerateRequest | None = None,
    orchestrator: DigestOrchestrator = Depends(get_orchestrator),
) -> GenerateResponse:
    """Start extracting newsletters in the background.

    Returns immediately with the run ID; poll /processing/status for progress.
    """
    start = time.perf_counter()
    request = request or GenerateRequest()

    try:
        result = orchestrator.process_newsletters(
            request.newsletter_ids,
            force_all=request.force_all,
            force_reprocess=request.force_reprocess,
        )
    except DigestError as e:
        logger.info(f"Processing request rejected: {e.message}")
        raise to_http_exception(e) from e

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Processing accepted: run_id={result.run_id}, elapsed={elapsed_ms:.0f}ms")
    return GenerateResponse(
        run_id=result.run_id,
        newsletter_count=result.newsletter_count,
        message=f"Processing {result.newsletter_count} newsletters",
    )


@router.get("/status", response_model=StatusResponse, summary="Processing status")
def get_status(
    run_id: UUID | None = Query(None, description="Run to report on"),
    session: Session = Depends(get_session),
    orchestrator: DigestOrchestrator = Depends(get_orchestrator),
) -> StatusResponse:
    """Report on a specific run, the in-flight ad-hoc run, or the latest run."""
    if run_id is not None:
        run = get_run_by_id(session, run_id)
        if run is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Processing run not found: {run_id}",
            )
        return StatusResponse(
            in_progress=not run.is_terminal,
            run=RunSummaryResponse.from_run(run),
        )

    in_flight = get_in_progress_extraction_run(session, orchestrator.stale_run_cutoff())
    if in_flight is not None:
        return StatusResponse(in_progress=True, run=RunSummaryResponse.from_run(in_flight))

    latest = get_latest_run(session)
    return StatusResponse(
        in_progress=False,
        run=RunSummaryResponse.from_run(latest) if latest is not None else None,
    )


@router.get("/history", response_model=HistoryResponse, summary="Processing history")
def get_history(
    limit: int = Query(20, ge=1, le=100),
    session: Session = Depends(get_session),
) -> HistoryResponse:
    """List recent runs with the names of their schedules."""
    rows = list_runs(session, limit=limit)
    return HistoryResponse(
        runs=[RunSummaryResponse.from_run(run, schedule_name) for run, schedule_name in rows]
    )


@router.get("/{run_id}", response_model=RunDetailResponse, summary="Get processing run")
def get_run(
    run_id: UUID,
    session: Session = Depends(get_session),
) -> RunDetailResponse:
    """Get a run with its newsletter IDs and digest renderings."""
    run = get_run_by_id(session, run_id)
    if run is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Processing run not found: {run_id}",
        )

    schedule_name = None
    if run.schedule_id is not None:
        schedule = get_schedule_by_id(session, run.schedule_id)
        schedule_name = schedule.name if schedule is not None else None

    return RunDetailResponse.from_run(run, schedule_name)
