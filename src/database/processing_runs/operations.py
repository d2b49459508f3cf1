"""Database operations for the processing run ledger."""

from __future__ import annotations

import logging
import uuid as uuid_module
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from src.database.processing_runs.models import ProcessingRun
from src.database.schedules.models import DigestSchedule
from src.enums import RunStatus, RunType

logger = logging.getLogger(__name__)

# Maximum length of error message stored on a run
MAX_ERROR_MESSAGE_LENGTH = 2000


class InvalidRunTransitionError(Exception):
    """Raised when a run is moved out of a terminal state."""

    def __init__(self, run_id: uuid_module.UUID, status: str) -> None:
        """Initialise the error.

        :param run_id: The run that was being updated.
        :param status: The run's current status.
        """
        super().__init__(f"Run {run_id} is {status}, expected {RunStatus.PROCESSING.value}")
        self.run_id = run_id
        self.status = status


def create_processing_run(
    session: Session,
    run_type: RunType,
    *,
    newsletter_ids: list[uuid_module.UUID] | None = None,
    schedule_id: uuid_module.UUID | None = None,
    sent_to_email: str | None = None,
    triggered_at: datetime | None = None,
) -> ProcessingRun:
    """Create a run in PROCESSING state at the moment work is accepted.

    :param session: Database session.
    :param run_type: What kind of work this run records.
    :param newsletter_ids: Newsletters known to be involved up front.
    :param schedule_id: Originating schedule, if any.
    :param sent_to_email: Intended delivery address, if any.
    :param triggered_at: When the work was accepted (defaults to now).
    :returns: The created run.
    """
    ids = [str(newsletter_id) for newsletter_id in newsletter_ids or []]
    run = ProcessingRun(
        run_type=RunType(run_type).value,
        status=RunStatus.PROCESSING.value,
        triggered_at=triggered_at or datetime.now(UTC),
        newsletter_ids=ids,
        newsletter_count=len(ids),
        schedule_id=schedule_id,
        sent_to_email=sent_to_email,
    )
    session.add(run)
    session.flush()
    logger.info(
        f"Created processing run: id={run.id}, type={run.run_type}, "
        f"schedule_id={schedule_id}, newsletters={len(ids)}"
    )
    return run


def _require_processing(session: Session, run_id: uuid_module.UUID) -> ProcessingRun:
    run = session.query(ProcessingRun).filter(ProcessingRun.id == run_id).one()
    if run.status != RunStatus.PROCESSING.value:
        raise InvalidRunTransitionError(run_id, run.status)
    return run


def complete_processing_run(
    session: Session,
    run_id: uuid_module.UUID,
    *,
    newsletter_ids: list[uuid_module.UUID] | None = None,
    summary_html: str | None = None,
    summary_text: str | None = None,
    sent_to_email: str | None = None,
    provider_message_id: str | None = None,
    now: datetime | None = None,
) -> ProcessingRun:
    """Move a run to COMPLETED and attach its outcome.

    :param session: Database session.
    :param run_id: The run to complete.
    :param newsletter_ids: Newsletters the run consumed; replaces any earlier list.
    :param summary_html: HTML rendering of the digest.
    :param summary_text: Plaintext rendering of the digest.
    :param sent_to_email: Address the digest was sent to.
    :param provider_message_id: Send confirmation from the mail provider.
    :param now: Completion time (defaults to now).
    :returns: The completed run.
    :raises NoResultFound: If the run does not exist.
    :raises InvalidRunTransitionError: If the run is not PROCESSING.
    """
    run = _require_processing(session, run_id)

    if newsletter_ids is not None:
        run.newsletter_ids = [str(newsletter_id) for newsletter_id in newsletter_ids]
        run.newsletter_count = len(newsletter_ids)
    run.summary_html = summary_html
    run.summary_text = summary_text
    if sent_to_email is not None:
        run.sent_to_email = sent_to_email
    run.provider_message_id = provider_message_id
    run.status = RunStatus.COMPLETED.value
    run.completed_at = now or datetime.now(UTC)
    session.flush()
    logger.info(f"Completed processing run: id={run_id}, newsletters={run.newsletter_count}")
    return run


def fail_processing_run(
    session: Session,
    run_id: uuid_module.UUID,
    error_message: str,
    *,
    now: datetime | None = None,
) -> ProcessingRun:
    """Move a run to FAILED and record why.

    :param session: Database session.
    :param run_id: The run to fail.
    :param error_message: Human-readable failure reason.
    :param now: Completion time (defaults to now).
    :returns: The failed run.
    :raises NoResultFound: If the run does not exist.
    :raises InvalidRunTransitionError: If the run is not PROCESSING.
    """
    run = _require_processing(session, run_id)

    run.status = RunStatus.FAILED.value
    run.error_message = error_message[:MAX_ERROR_MESSAGE_LENGTH]
    run.completed_at = now or datetime.now(UTC)
    session.flush()
    logger.warning(f"Failed processing run: id={run_id}, error={error_message}")
    return run


def get_run_by_id(session: Session, run_id: uuid_module.UUID) -> ProcessingRun | None:
    """Get a processing run by ID.

    :param session: Database session.
    :param run_id: Run ID.
    :returns: The run or None if not found.
    """
    return session.query(ProcessingRun).filter(ProcessingRun.id == run_id).first()


def get_in_progress_extraction_run(
    session: Session,
    since: datetime,
) -> ProcessingRun | None:
    """Get an ad-hoc extraction run that is still PROCESSING.

    Runs triggered before the cutoff are treated as abandoned and ignored.

    :param session: Database session.
    :param since: Only consider runs triggered at or after this time.
    :returns: The most recent in-flight extraction run, or None.
    """
    return (
        session.query(ProcessingRun)
        .filter(
            ProcessingRun.run_type == RunType.EXTRACTION.value,
            ProcessingRun.status == RunStatus.PROCESSING.value,
            ProcessingRun.triggered_at >= since,
        )
        .order_by(ProcessingRun.triggered_at.desc())
        .first()
    )


def get_latest_run(session: Session) -> ProcessingRun | None:
    """Get the most recently triggered run of any type.

    :param session: Database session.
    :returns: The latest run, or None if the ledger is empty.
    """
    return session.query(ProcessingRun).order_by(ProcessingRun.triggered_at.desc()).first()


def list_runs(session: Session, limit: int = 20) -> list[tuple[ProcessingRun, str | None]]:
    """List recent runs with the name of their originating schedule.

    :param session: Database session.
    :param limit: Maximum number of runs to return.
    :returns: List of (run, schedule name or None), newest first.
    """
    rows = (
        session.query(ProcessingRun, DigestSchedule.name)
        .outerjoin(DigestSchedule, ProcessingRun.schedule_id == DigestSchedule.id)
        .order_by(ProcessingRun.triggered_at.desc())
        .limit(limit)
        .all()
    )
    return [(run, schedule_name) for run, schedule_name in rows]


def list_runs_for_schedule(
    session: Session,
    schedule_id: uuid_module.UUID,
    limit: int = 20,
) -> list[ProcessingRun]:
    """List runs that originated from one schedule, newest first.

    :param session: Database session.
    :param schedule_id: Schedule ID.
    :param limit: Maximum number of runs to return.
    :returns: List of runs.
    """
    return (
        session.query(ProcessingRun)
        .filter(ProcessingRun.schedule_id == schedule_id)
        .order_by(ProcessingRun.triggered_at.desc())
        .limit(limit)
        .all()
    )
