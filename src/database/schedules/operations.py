"""Database operations for digest schedules."""

from __future__ import annotations

import logging
import uuid as uuid_module
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.orm import Session

from src.database.schedules.models import DigestSchedule
from src.enums import SummaryLength

logger = logging.getLogger(__name__)

# Fields a caller may change through update_schedule
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "topics",
        "cron_schedule",
        "delivery_email",
        "summary_length",
        "include_links",
        "custom_prompt",
        "is_active",
        "last_run_at",
        "next_run_at",
    }
)


def create_schedule(
    session: Session,
    *,
    name: str,
    topics: list[str],
    cron_schedule: str,
    delivery_email: str,
    next_run_at: datetime,
    summary_length: SummaryLength = SummaryLength.MEDIUM,
    include_links: bool = True,
    custom_prompt: str | None = None,
    is_active: bool = True,
) -> DigestSchedule:
    """Create a new digest schedule.

    :param session: Database session.
    :param name: Display name of the schedule.
    :param topics: Topic filter.
    :param cron_schedule: Five-field cron expression.
    :param delivery_email: Address the digest is sent to.
    :param next_run_at: First occurrence of the cron expression after now.
    :param summary_length: Summary length option.
    :param include_links: Whether digests include links.
    :param custom_prompt: Optional extra instructions for the generator.
    :param is_active: Whether the schedule fires automatically.
    :returns: The created schedule.
    """
    schedule = DigestSchedule(
        name=name,
        topics=list(topics),
        cron_schedule=cron_schedule,
        delivery_email=delivery_email,
        summary_length=SummaryLength(summary_length).value,
        include_links=include_links,
        custom_prompt=custom_prompt,
        is_active=is_active,
        next_run_at=next_run_at,
    )
    session.add(schedule)
    session.flush()
    logger.info(
        f"Created digest schedule: id={schedule.id}, name={name!r}, "
        f"cron={cron_schedule}, next_run_at={next_run_at}"
    )
    return schedule


def get_schedule_by_id(
    session: Session,
    schedule_id: uuid_module.UUID,
) -> DigestSchedule | None:
    """Get a digest schedule by ID.

    :param session: Database session.
    :param schedule_id: Schedule ID.
    :returns: The schedule or None if not found.
    """
    return session.query(DigestSchedule).filter(DigestSchedule.id == schedule_id).first()


def list_schedules(session: Session) -> list[DigestSchedule]:
    """List all digest schedules, newest first.

    :param session: Database session.
    :returns: List of schedules.
    """
    return session.query(DigestSchedule).order_by(DigestSchedule.created_at.desc()).all()


def get_due_schedules(
    session: Session,
    now: datetime | None = None,
) -> list[DigestSchedule]:
    """Get active schedules whose next run has arrived.

    :param session: Database session.
    :param now: Current time (defaults to now).
    :returns: List of due schedules.
    """
    if now is None:
        now = datetime.now(UTC)

    return (
        session.query(DigestSchedule)
        .filter(
            DigestSchedule.is_active.is_(True),
            DigestSchedule.next_run_at <= now,
        )
        .all()
    )


def update_schedule(
    session: Session,
    schedule_id: uuid_module.UUID,
    **fields: Any,
) -> DigestSchedule | None:
    """Apply a partial update to a schedule.

    :param session: Database session.
    :param schedule_id: Schedule ID.
    :param fields: Column values to set. Unknown names are rejected.
    :returns: The updated schedule, or None if not found.
    :raises ValueError: If a field is not updatable.
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update schedule fields: {sorted(unknown)}")

    schedule = get_schedule_by_id(session, schedule_id)
    if schedule is None:
        return None

    for field_name, value in fields.items():
        if field_name == "summary_length":
            value = SummaryLength(value).value
        elif field_name == "topics":
            value = list(value)
        setattr(schedule, field_name, value)

    session.flush()
    logger.info(f"Updated digest schedule: id={schedule_id}, fields={sorted(fields)}")
    return schedule


def record_schedule_run(
    session: Session,
    schedule_id: uuid_module.UUID,
    last_run_at: datetime,
    next_run_at: datetime,
) -> DigestSchedule | None:
    """Record an automatic firing and advance the schedule.

    :param session: Database session.
    :param schedule_id: Schedule ID.
    :param last_run_at: The fire time of this attempt.
    :param next_run_at: The next occurrence of the schedule's cron.
    :returns: The updated schedule, or None if it was deleted meanwhile.
    """
    schedule = get_schedule_by_id(session, schedule_id)
    if schedule is None:
        logger.warning(f"Schedule {schedule_id} disappeared before bookkeeping")
        return None

    schedule.last_run_at = last_run_at
    schedule.next_run_at = next_run_at
    session.flush()
    logger.info(f"Advanced schedule {schedule_id}: last_run_at={last_run_at}, next={next_run_at}")
    return schedule


def mark_schedule_triggered(
    session: Session,
    schedule_id: uuid_module.UUID,
    triggered_at: datetime,
) -> DigestSchedule | None:
    """Record a manual firing. next_run_at is left unchanged.

    :param session: Database session.
    :param schedule_id: Schedule ID.
    :param triggered_at: When the manual run was requested.
    :returns: The updated schedule, or None if not found.
    """
    schedule = get_schedule_by_id(session, schedule_id)
    if schedule is None:
        return None

    schedule.last_run_at = triggered_at
    session.flush()
    logger.info(f"Schedule {schedule_id} triggered manually at {triggered_at}")
    return schedule


def delete_schedule(session: Session, schedule_id: uuid_module.UUID) -> bool:
    """Delete a schedule permanently.

    Processing runs that reference it keep their rows with schedule_id cleared.

    :param session: Database session.
    :param schedule_id: Schedule ID.
    :returns: True if deleted, False if not found.
    """
    schedule = get_schedule_by_id(session, schedule_id)
    if schedule is None:
        return False

    session.delete(schedule)
    session.flush()
    logger.info(f"Deleted digest schedule: id={schedule_id}")
    return True
