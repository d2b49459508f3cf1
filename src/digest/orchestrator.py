"""Digest orchestration: scheduled digests, manual triggers and ad-hoc extraction."""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from concurrent.futures import Executor, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING

from pydantic import ValidationError

from src.database.newsletters import (
    Newsletter,
    get_newsletter_by_id,
    get_newsletters_for_processing,
    get_recent_newsletters,
    has_unprocessed_newsletters,
    mark_newsletters_processed,
    save_extraction,
)
from src.database.processing_runs import (
    complete_processing_run,
    create_processing_run,
    fail_processing_run,
    get_in_progress_extraction_run,
)
from src.database.schedules import (
    DigestSchedule,
    get_due_schedules,
    get_schedule_by_id,
    mark_schedule_triggered,
    record_schedule_run,
    update_schedule,
)
from src.digest.config import DigestConfig
from src.digest.cron import calculate_next_cron_trigger
from src.digest.exceptions import (
    DigestDeliveryError,
    DigestError,
    ExtractionError,
    InvalidCronExpressionError,
    NoCandidatesError,
    NoMatchesError,
    NothingToProcessError,
    ProcessingInProgressError,
    ScheduleNotFoundError,
)
from src.digest.extractor import ContentExtractor
from src.digest.formatters import render_digest
from src.digest.generator import DigestGenerator
from src.digest.matching import matches_any_topic
from src.digest.models import DigestInput, ExtractedContent
from src.digest.text import prepare_body
from src.enums import RunType, SummaryLength
from src.mail.client import AgentMailClient, MailClientError

if TYPE_CHECKING:
    from src.database.connection import Database
    from src.mail.sync import MailboxSyncService, SyncResult

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class DigestRunResult:
    """Outcome of a successful digest run."""

    run_id: uuid.UUID
    schedule_id: uuid.UUID
    newsletter_count: int
    provider_message_id: str | None = None


@dataclass
class ProcessingRequestResult:
    """An accepted ad-hoc processing request."""

    run_id: uuid.UUID
    newsletter_count: int


@dataclass
class ScheduleTickStats:
    """Stats for one evaluation of due schedules."""

    schedules_due: int = 0
    digests_sent: int = 0
    digests_failed: int = 0
    errors: list[str] = field(default_factory=list)


@dataclass
class ExtractionBatchStats:
    """Stats for one ad-hoc extraction batch."""

    extracted: int = 0
    reused: int = 0
    skipped: int = 0


class DigestOrchestrator:
    """Decides when digests run, which newsletters they include and records the outcome.

    Every digest attempt gets a processing run row created in PROCESSING and
    finished exactly once: COMPLETED after the digest was sent, FAILED with the
    reason otherwise. Automatic runs always advance their schedule, whatever
    the outcome.
    """

    def __init__(
        self,
        database: Database,
        mail_client: AgentMailClient,
        extractor: ContentExtractor,
        generator: DigestGenerator,
        *,
        settings: DigestConfig,
        sync_service: MailboxSyncService | None = None,
        executor: Executor | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialise the orchestrator.

        :param database: Database handle used to open sessions.
        :param mail_client: Client used to send digests.
        :param extractor: Content extractor adapter.
        :param generator: Digest generator adapter.
        :param settings: Digest tunables.
        :param sync_service: Mailbox sync service, required for sync_mailbox().
        :param executor: Executor for ad-hoc extraction batches. One
            single-worker pool is created when omitted.
        :param clock: Source of the current time.
        """
        self._database = database
        self._mail_client = mail_client
        self._extractor = extractor
        self._generator = generator
        self._settings = settings
        self._sync_service = sync_service
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="adhoc-processing",
        )
        self._clock = clock
        self._adhoc_lock = threading.Lock()

    def evaluate_due_schedules(self, now: datetime | None = None) -> ScheduleTickStats:
        """Run every active schedule whose next run has arrived.

        Due schedules run concurrently and independently. Failures are logged
        and counted, never raised, and each schedule is advanced to its next
        occurrence regardless of outcome.

        :param now: Fire time of this tick (defaults to the clock).
        :returns: Stats for the tick.
        """
        fire_time = now or self._clock()
        stats = ScheduleTickStats()

        with self._database.session() as session:
            schedule_ids = [schedule.id for schedule in get_due_schedules(session, fire_time)]

        stats.schedules_due = len(schedule_ids)
        if not schedule_ids:
            logger.debug("No digest schedules due")
            return stats

        logger.info(f"Evaluating {len(schedule_ids)} due digest schedules")
        max_workers = min(len(schedule_ids), self._settings.max_parallel_schedules)

        with ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix="digest-schedule",
        ) as pool:
            futures = {
                pool.submit(self._run_due_schedule, schedule_id, fire_time): schedule_id
                for schedule_id in schedule_ids
            }
            for future in as_completed(futures):
                error = future.result()
                if error is None:
                    stats.digests_sent += 1
                else:
                    stats.digests_failed += 1
                    stats.errors.append(f"Schedule {futures[future]}: {error}")

        logger.info(
            f"Schedule tick complete: due={stats.schedules_due}, sent={stats.digests_sent}, "
            f"failed={stats.digests_failed}"
        )
        return stats

    def _run_due_schedule(self, schedule_id: uuid.UUID, fire_time: datetime) -> str | None:
        """Run one due schedule and advance it.

        :param schedule_id: The due schedule.
        :param fire_time: Fire time of the tick.
        :returns: None on success, otherwise the failure message.
        """
        error: str | None = None
        try:
            self.run_digest_for_schedule(
                schedule_id,
                run_type=RunType.SCHEDULED_DIGEST,
                triggered_at=fire_time,
            )
        except ScheduleNotFoundError as e:
            error = e.message
            logger.warning(f"Scheduled digest for {schedule_id} skipped: {e.message}")
        except DigestError as e:
            error = e.message
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.exception(f"Scheduled digest for {schedule_id} failed: {e}")

        try:
            self._advance_schedule(schedule_id, fire_time)
        except Exception as e:
            logger.exception(f"Failed to advance schedule {schedule_id}: {e}")
            error = error or f"Failed to advance schedule: {e}"

        return error

    def _advance_schedule(self, schedule_id: uuid.UUID, fire_time: datetime) -> None:
        """Record the firing and move next_run_at to the next occurrence.

        The next occurrence is computed after the later of the fire time and
        the current time.

        :param schedule_id: The schedule that fired.
        :param fire_time: Fire time of the tick.
        """
        with self._database.session() as session:
            schedule = get_schedule_by_id(session, schedule_id)
            if schedule is None:
                logger.warning(f"Schedule {schedule_id} was deleted during its run")
                return

            base_time = max(fire_time, self._clock())
            try:
                next_run_at = calculate_next_cron_trigger(schedule.cron_schedule, base_time)
            except InvalidCronExpressionError as e:
                logger.error(f"Deactivating schedule {schedule_id}: {e.message}")
                update_schedule(session, schedule_id, is_active=False, last_run_at=fire_time)
                return

            record_schedule_run(session, schedule_id, fire_time, next_run_at)

    def trigger_schedule(self, schedule_id: uuid.UUID) -> DigestRunResult:
        """Run a schedule's digest now, on request.

        last_run_at is updated whatever the outcome; next_run_at is not touched.
        Inactive schedules may be triggered.

        :param schedule_id: The schedule to run.
        :returns: The run result.
        :raises ScheduleNotFoundError: If the schedule does not exist.
        :raises DigestError: If the digest could not be produced or sent.
        """
        triggered_at = self._clock()
        try:
            return self.run_digest_for_schedule(
                schedule_id,
                run_type=RunType.MANUAL_DIGEST,
                triggered_at=triggered_at,
            )
        finally:
            self._mark_triggered(schedule_id, triggered_at)

    def _mark_triggered(self, schedule_id: uuid.UUID, triggered_at: datetime) -> None:
        try:
            with self._database.session() as session:
                mark_schedule_triggered(session, schedule_id, triggered_at)
        except Exception as e:
            logger.exception(f"Failed to record manual trigger of schedule {schedule_id}: {e}")

    def run_digest_for_schedule(
        self,
        schedule_id: uuid.UUID,
        *,
        run_type: RunType = RunType.SCHEDULED_DIGEST,
        triggered_at: datetime | None = None,
    ) -> DigestRunResult:
        """Build and send one digest for a schedule.

        :param schedule_id: The schedule to run.
        :param run_type: Whether this is a scheduled or manual run.
        :param triggered_at: When the run was accepted (defaults to the clock).
        :returns: The run result.
        :raises ScheduleNotFoundError: If the schedule does not exist.
        :raises NoCandidatesError: If no newsletters are inside the window.
        :raises NoMatchesError: If no extracted newsletter matches the topics.
        :raises DigestGenerationError: If the generator fails.
        :raises DigestDeliveryError: If sending fails.
        """
        triggered_at = triggered_at or self._clock()

        with self._database.session() as session:
            schedule = get_schedule_by_id(session, schedule_id)
            if schedule is None:
                raise ScheduleNotFoundError(f"Schedule {schedule_id} not found")

            run = create_processing_run(
                session,
                run_type,
                schedule_id=schedule.id,
                sent_to_email=schedule.delivery_email,
                triggered_at=triggered_at,
            )
            run_id = run.id

        logger.info(f"Running digest {schedule.name!r}: run_id={run_id}, type={run_type}")

        try:
            return self._build_and_send(schedule, run_id)
        except (NoCandidatesError, NoMatchesError) as e:
            logger.warning(f"Digest {schedule.name!r} not sent: run_id={run_id}, {e.message}")
            self._fail_run(run_id, e)
            raise
        except DigestError as e:
            logger.error(f"Digest {schedule.name!r} failed: run_id={run_id}, {e.message}")
            self._fail_run(run_id, e)
            raise
        except Exception as e:
            self._fail_run(run_id, e)
            raise

    def _build_and_send(self, schedule: DigestSchedule, run_id: uuid.UUID) -> DigestRunResult:
        """Run the digest pipeline for a schedule.

        :param schedule: The schedule, detached from its session.
        :param run_id: The run recording this attempt.
        :returns: The run result.
        """
        since = self._clock() - timedelta(days=self._settings.candidate_window_days)
        with self._database.session() as session:
            candidates = get_recent_newsletters(session, since)

        if not candidates:
            raise NoCandidatesError(
                f"No newsletters received in the last "
                f"{self._settings.candidate_window_days} days"
            )

        matched: list[tuple[Newsletter, ExtractedContent]] = []
        for newsletter in candidates:
            content = self._get_or_extract(newsletter)
            if content is not None and matches_any_topic(schedule.topics, content.topics):
                matched.append((newsletter, content))

        if not matched:
            raise NoMatchesError(
                f"None of {len(candidates)} recent newsletters match topics "
                f"{', '.join(schedule.topics)}"
            )

        logger.info(f"Digest {schedule.name!r}: {len(matched)}/{len(candidates)} newsletters match")

        digest = self._generator.generate(
            [
                DigestInput(
                    id=str(newsletter.id),
                    sender=newsletter.sender_name or newsletter.sender_address,
                    subject=newsletter.subject,
                    content=content,
                )
                for newsletter, content in matched
            ],
            topics=list(schedule.topics),
            summary_length=SummaryLength(schedule.summary_length),
            include_links=schedule.include_links,
            custom_instructions=schedule.custom_prompt,
        )
        rendered = render_digest(digest, schedule.name)

        try:
            sent = self._mail_client.send_message(
                schedule.delivery_email,
                rendered.subject,
                rendered.html,
                rendered.text,
            )
        except MailClientError as e:
            raise DigestDeliveryError(f"Failed to send digest: {e}") from e

        newsletter_ids = [newsletter.id for newsletter, _ in matched]
        with self._database.session() as session:
            complete_processing_run(
                session,
                run_id,
                newsletter_ids=newsletter_ids,
                summary_html=rendered.html,
                summary_text=rendered.text,
                sent_to_email=schedule.delivery_email,
                provider_message_id=sent.message_id,
                now=self._clock(),
            )
            mark_newsletters_processed(session, newsletter_ids)

        logger.info(
            f"Digest {schedule.name!r} sent to {schedule.delivery_email}: "
            f"run_id={run_id}, newsletters={len(newsletter_ids)}"
        )
        return DigestRunResult(
            run_id=run_id,
            schedule_id=schedule.id,
            newsletter_count=len(newsletter_ids),
            provider_message_id=sent.message_id,
        )

    def _get_or_extract(self, newsletter: Newsletter) -> ExtractedContent | None:
        """Return cached content, extracting and caching it when missing.

        :param newsletter: The newsletter, detached from its session.
        :returns: The content, or None if the newsletter was skipped.
        """
        if newsletter.extracted_content is not None:
            try:
                return ExtractedContent.model_validate(newsletter.extracted_content)
            except ValidationError as e:
                logger.warning(f"Stored content of {newsletter.id} is invalid, re-extracting: {e}")

        return self._extract_and_save(newsletter)

    def _extract_and_save(
        self,
        newsletter: Newsletter,
        *,
        mark_processed: bool = False,
    ) -> ExtractedContent | None:
        """Extract a newsletter's content and persist it straight away.

        :param newsletter: The newsletter, detached from its session.
        :param mark_processed: Also set the processed flag in the same update.
        :returns: The content, or None if the body was too short or extraction failed.
        """
        body = prepare_body(
            newsletter.body_text,
            newsletter.body_html,
            self._settings.extraction_max_chars,
        )
        if len(body) < self._settings.min_body_length:
            logger.info(f"Skipping newsletter {newsletter.id}: insufficient content")
            return None

        try:
            content = self._extractor.extract(newsletter.subject, body, newsletter.sender_address)
        except ExtractionError as e:
            logger.warning(f"Failed to extract newsletter {newsletter.id}: {e.message}")
            return None

        with self._database.session() as session:
            stored = get_newsletter_by_id(session, newsletter.id)
            if stored is None:
                logger.warning(f"Newsletter {newsletter.id} was deleted during extraction")
                return content

            save_extraction(session, stored, content.model_dump(mode="json"), content.topics)
            if mark_processed:
                mark_newsletters_processed(session, [newsletter.id])

        return content

    def stale_run_cutoff(self) -> datetime:
        """Trigger time before which a PROCESSING ad-hoc run no longer blocks new requests."""
        return self._clock() - timedelta(minutes=self._settings.stale_run_minutes)

    def process_newsletters(
        self,
        newsletter_ids: list[uuid.UUID] | None = None,
        *,
        force_all: bool = False,
        force_reprocess: bool = False,
    ) -> ProcessingRequestResult:
        """Accept an ad-hoc extraction request and run it in the background.

        :param newsletter_ids: Explicit newsletters to process. Defaults to all
            unprocessed newsletters.
        :param force_all: Without explicit IDs, include processed newsletters too.
        :param force_reprocess: Re-extract newsletters that already have content.
        :returns: The run ID and the number of newsletters accepted.
        :raises ProcessingInProgressError: If another ad-hoc run is in flight.
        :raises NothingToProcessError: If the request resolves to no newsletters.
        """
        with self._adhoc_lock:
            with self._database.session() as session:
                in_flight = get_in_progress_extraction_run(session, self.stale_run_cutoff())
                if in_flight is not None:
                    raise ProcessingInProgressError(
                        f"Processing run {in_flight.id} is still in progress"
                    )

                newsletters = get_newsletters_for_processing(
                    session,
                    newsletter_ids=newsletter_ids,
                    force_all=force_all,
                )
                if not newsletters:
                    raise NothingToProcessError("No newsletters to process")

                run = create_processing_run(
                    session,
                    RunType.EXTRACTION,
                    newsletter_ids=[newsletter.id for newsletter in newsletters],
                    triggered_at=self._clock(),
                )
                run_id = run.id

        self._executor.submit(self._run_extraction_batch, run_id, newsletters, force_reprocess)
        logger.info(f"Accepted processing run {run_id} for {len(newsletters)} newsletters")
        return ProcessingRequestResult(run_id=run_id, newsletter_count=len(newsletters))

    def _run_extraction_batch(
        self,
        run_id: uuid.UUID,
        newsletters: list[Newsletter],
        force_reprocess: bool,
    ) -> ExtractionBatchStats:
        """Extract a batch of newsletters and finish its run.

        Per-newsletter failures are skipped. Only an error escaping the whole
        batch fails the run.

        :param run_id: The run recording this batch.
        :param newsletters: The newsletters, detached from their session.
        :param force_reprocess: Re-extract newsletters that already have content.
        :returns: Stats for the batch.
        """
        stats = ExtractionBatchStats()
        try:
            for newsletter in newsletters:
                if newsletter.extracted_content is not None and not force_reprocess:
                    with self._database.session() as session:
                        mark_newsletters_processed(session, [newsletter.id])
                    stats.reused += 1
                    continue

                content = self._extract_and_save(newsletter, mark_processed=True)
                if content is None:
                    stats.skipped += 1
                else:
                    stats.extracted += 1

            with self._database.session() as session:
                complete_processing_run(session, run_id, now=self._clock())

        except Exception as e:
            logger.exception(f"Processing run {run_id} failed: {e}")
            self._fail_run(run_id, e)
            return stats

        logger.info(
            f"Processing run {run_id} complete: {stats.extracted} extracted, "
            f"{stats.reused} already extracted, {stats.skipped} skipped"
        )
        return stats

    def _fail_run(self, run_id: uuid.UUID, error: Exception) -> None:
        """Record a run failure, logging if the ledger itself cannot be written.

        :param run_id: The run that failed.
        :param error: The failure.
        """
        message = error.message if isinstance(error, DigestError) else str(error)
        try:
            with self._database.session() as session:
                fail_processing_run(
                    session,
                    run_id,
                    message or type(error).__name__,
                    now=self._clock(),
                )
        except Exception as e:
            logger.exception(f"Could not record failure of run {run_id}: {e}")

    def sync_mailbox(self, *, force: bool = False) -> SyncResult:
        """Sync the mailbox and start ad-hoc processing for new arrivals.

        :param force: Refresh bodies of messages that are already stored.
        :returns: The sync result.
        :raises RuntimeError: If no sync service was configured.
        :raises MailClientError: If the mailbox cannot be listed.
        """
        if self._sync_service is None:
            raise RuntimeError("DigestOrchestrator was created without a sync service")

        result = self._sync_service.sync(force=force)
        if result.synced > 0:
            self._auto_process()
        return result

    def _auto_process(self) -> None:
        try:
            with self._database.session() as session:
                pending = has_unprocessed_newsletters(session)
            if pending:
                self.process_newsletters()
        except DigestError as e:
            logger.info(f"Automatic processing after sync skipped: {e.message}")
        except Exception as e:
            logger.exception(f"Automatic processing after sync failed: {e}")

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting ad-hoc work and release the owned executor.

        :param wait: Wait for an in-flight batch to finish.
        """
        if self._owns_executor:
            self._executor.shutdown(wait=wait)
        logger.info("DigestOrchestrator shut down")
