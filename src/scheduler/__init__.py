"""Background timer loop for schedule checks and mailbox syncs."""

from src.scheduler.config import SchedulerConfig, get_scheduler_settings
from src.scheduler.runner import PeriodicTask, SchedulerRunner

__all__ = [
    "PeriodicTask",
    "SchedulerConfig",
    "SchedulerRunner",
    "get_scheduler_settings",
]
