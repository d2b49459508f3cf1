"""Database models and operations for digest schedules."""

from src.database.schedules.models import DigestSchedule
from src.database.schedules.operations import (
    create_schedule,
    delete_schedule,
    get_due_schedules,
    get_schedule_by_id,
    list_schedules,
    mark_schedule_triggered,
    record_schedule_run,
    update_schedule,
)

__all__ = [
    # Models
    "DigestSchedule",
    # Operations
    "create_schedule",
    "delete_schedule",
    "get_due_schedules",
    "get_schedule_by_id",
    "list_schedules",
    "mark_schedule_triggered",
    "record_schedule_run",
    "update_schedule",
]
