"""Construction and teardown of the long-lived service objects."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.database.connection import Database
from src.digest.config import DigestConfig, get_digest_settings
from src.digest.extractor import ContentExtractor
from src.digest.generator import DigestGenerator
from src.digest.orchestrator import DigestOrchestrator
from src.llm.bedrock_client import BedrockClient
from src.mail.client import AgentMailClient
from src.mail.config import MailConfig, get_mail_settings
from src.mail.sync import MailboxSyncService
from src.scheduler.config import SchedulerConfig, get_scheduler_settings
from src.scheduler.runner import SchedulerRunner

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """The process-wide objects shared by the API and the timer loop."""

    database: Database
    mail_client: AgentMailClient
    orchestrator: DigestOrchestrator
    scheduler: SchedulerRunner
    scheduler_settings: SchedulerConfig

    def close(self) -> None:
        """Stop background work and release connections."""
        self.scheduler.stop()
        self.orchestrator.shutdown(wait=True)
        self.database.dispose()
        logger.info("Services closed")


def build_services(
    *,
    database: Database | None = None,
    mail_settings: MailConfig | None = None,
    digest_settings: DigestConfig | None = None,
    scheduler_settings: SchedulerConfig | None = None,
) -> Services:
    """Build every service from configuration.

    :param database: Database handle. Created from the environment when omitted.
    :param mail_settings: Mail settings. Loaded from the environment when omitted.
    :param digest_settings: Digest settings. Loaded from the environment when omitted.
    :param scheduler_settings: Scheduler settings. Loaded from the environment when omitted.
    :returns: The constructed services. Nothing is started.
    """
    database = database or Database.from_env()
    mail_settings = mail_settings or get_mail_settings()
    digest_settings = digest_settings or get_digest_settings()
    scheduler_settings = scheduler_settings or get_scheduler_settings()

    mail_client = AgentMailClient.from_config(mail_settings)
    bedrock_client = BedrockClient()
    orchestrator = DigestOrchestrator(
        database,
        mail_client,
        ContentExtractor(bedrock_client, model=digest_settings.model),
        DigestGenerator(bedrock_client, model=digest_settings.model),
        settings=digest_settings,
        sync_service=MailboxSyncService(database, mail_client),
    )
    scheduler = SchedulerRunner(orchestrator, scheduler_settings)

    logger.info(f"Services built for inbox={mail_settings.inbox_email}")
    return Services(
        database=database,
        mail_client=mail_client,
        orchestrator=orchestrator,
        scheduler=scheduler,
        scheduler_settings=scheduler_settings,
    )
