"""Database models and operations for the processing run ledger."""

from src.database.processing_runs.models import ProcessingRun
from src.database.processing_runs.operations import (
    InvalidRunTransitionError,
    complete_processing_run,
    create_processing_run,
    fail_processing_run,
    get_in_progress_extraction_run,
    get_latest_run,
    get_run_by_id,
    list_runs,
    list_runs_for_schedule,
)

__all__ = [
    # Models
    "ProcessingRun",
    # Operations
    "InvalidRunTransitionError",
    "complete_processing_run",
    "create_processing_run",
    "fail_processing_run",
    "get_in_progress_extraction_run",
    "get_latest_run",
    "get_run_by_id",
    "list_runs",
    "list_runs_for_schedule",
]
