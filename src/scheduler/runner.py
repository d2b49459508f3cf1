"""Background timer loop driving schedule checks and mailbox syncs."""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Callable
from types import FrameType
from typing import Any

from src.digest.orchestrator import DigestOrchestrator
from src.scheduler.config import SchedulerConfig

logger = logging.getLogger(__name__)

# Seconds to wait for a task thread to finish when stopping
DEFAULT_JOIN_TIMEOUT = 30


class PeriodicTask:
    """Calls a function on a fixed interval in a daemon thread.

    Each task can be started, stopped and ticked independently; run_once()
    performs a single tick synchronously.
    """

    def __init__(
        self,
        name: str,
        func: Callable[[], Any],
        interval_seconds: float,
        *,
        initial_delay_seconds: float = 0.0,
    ) -> None:
        """Initialise the task.

        :param name: Name used for the thread and in logs.
        :param func: The function to call each tick.
        :param interval_seconds: Seconds between ticks.
        :param initial_delay_seconds: Seconds before the first tick.
        """
        self.name = name
        self._func = func
        self._interval_seconds = interval_seconds
        self._initial_delay_seconds = initial_delay_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Check if the task thread is alive."""
        return self._thread is not None and self._thread.is_alive()

    def run_once(self) -> bool:
        """Run a single tick, logging any exception.

        :returns: True if the tick completed without raising.
        """
        try:
            self._func()
            return True
        except Exception as e:
            logger.exception(f"Periodic task {self.name} failed: {e}")
            return False

    def start(self) -> None:
        """Start the task thread. Does nothing if already running."""
        if self.is_running:
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        logger.info(
            f"Started periodic task {self.name}: interval={self._interval_seconds}s, "
            f"initial_delay={self._initial_delay_seconds}s"
        )

    def stop(self, timeout: float = DEFAULT_JOIN_TIMEOUT) -> None:
        """Signal the task to stop and wait for its thread.

        :param timeout: Seconds to wait for an in-flight tick to finish.
        """
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning(f"Periodic task {self.name} did not stop within {timeout}s")
            self._thread = None
        logger.info(f"Stopped periodic task {self.name}")

    def _loop(self) -> None:
        if self._stop_event.wait(self._initial_delay_seconds):
            return

        while not self._stop_event.is_set():
            self.run_once()
            if self._stop_event.wait(self._interval_seconds):
                break


class SchedulerRunner:
    """Runs the schedule check and mailbox sync on their own cadences.

    The schedule check runs immediately on start and then every
    schedule_check_interval_seconds; the mailbox sync runs shortly after start
    and then every mailbox_sync_interval_seconds.
    """

    def __init__(self, orchestrator: DigestOrchestrator, settings: SchedulerConfig) -> None:
        """Initialise the runner.

        :param orchestrator: The digest orchestrator the tasks drive.
        :param settings: Scheduler cadences.
        """
        self._orchestrator = orchestrator
        self._settings = settings
        self.schedule_task = PeriodicTask(
            "schedule-check",
            orchestrator.evaluate_due_schedules,
            settings.schedule_check_interval_seconds,
        )
        self.sync_task = PeriodicTask(
            "mailbox-sync",
            orchestrator.sync_mailbox,
            settings.mailbox_sync_interval_seconds,
            initial_delay_seconds=settings.initial_sync_delay_seconds,
        )
        self._stopped = threading.Event()

    def start(self) -> None:
        """Start both periodic tasks in the background."""
        self._stopped.clear()
        self.schedule_task.start()
        self.sync_task.start()
        logger.info("Scheduler started")

    def stop(self) -> None:
        """Stop both periodic tasks."""
        logger.info("Stopping scheduler...")
        self.schedule_task.stop()
        self.sync_task.stop()
        self._stopped.set()

    def run(self) -> None:
        """Start the tasks and block until a shutdown signal is received."""
        self._setup_signal_handlers()
        self.start()

        try:
            self._stopped.wait()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
            self.stop()
        finally:
            logger.info("Scheduler stopped")

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""

        def signal_handler(signum: int, frame: FrameType | None) -> None:
            logger.info(f"Received signal {signum}, initiating shutdown")
            self.stop()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)
