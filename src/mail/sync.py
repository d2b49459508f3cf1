"""Mailbox sync: copy new inbox messages into the newsletter store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from src.database.newsletters import insert_newsletter, newsletter_exists, update_newsletter_body
from src.mail.client import AgentMailClient, MailClientError
from src.mail.models import MailMessage

if TYPE_CHECKING:
    from src.database.connection import Database

logger = logging.getLogger(__name__)


class SyncResult(BaseModel):
    """Statistics from one mailbox sync."""

    synced: int = 0
    updated: int = 0
    skipped: int = 0
    pages: int = 0
    errors: list[str] = Field(default_factory=list)


class MailboxSyncService:
    """Pages through the inbox and stores every message not seen before.

    Messages sent from the inbox itself (outgoing digests) are ignored.
    """

    def __init__(self, database: Database, mail_client: AgentMailClient) -> None:
        """Initialise the sync service.

        :param database: Database handle used to open sessions.
        :param mail_client: Client for the inbox to sync.
        """
        self._database = database
        self._mail_client = mail_client

    def _is_own_message(self, message: MailMessage) -> bool:
        return message.sender_address.lower() == self._mail_client.inbox_email.lower()

    def _fetch_full_message(self, preview: MailMessage) -> MailMessage:
        """Fetch the full message, falling back to the listed preview.

        :param preview: The message as returned by the list endpoint.
        :returns: The full message, or the preview if the detail fetch fails.
        """
        try:
            return self._mail_client.get_message(preview.message_id)
        except MailClientError as e:
            logger.warning(f"Falling back to preview for message {preview.message_id}: {e}")
            return preview

    def sync(self, *, force: bool = False) -> SyncResult:
        """Sync every page of the inbox into the newsletter store.

        Pages are requested strictly in sequence. Each page is committed in its
        own transaction.

        :param force: Re-fetch messages that are already stored and overwrite
            their body fields instead of skipping them.
        :returns: A SyncResult with statistics.
        :raises MailClientError: If a page cannot be listed.
        """
        result = SyncResult()
        page_token: str | None = None

        while True:
            page = self._mail_client.list_messages(page_token)
            result.pages += 1

            with self._database.session() as session:
                for message in page.messages:
                    try:
                        self._sync_message(session, message, force, result)
                    except MailClientError as e:
                        error_msg = f"Failed to sync message {message.message_id}: {e}"
                        logger.warning(error_msg)
                        result.errors.append(error_msg)

            page_token = page.next_page_token
            if not page_token:
                break

        logger.info(
            f"Mailbox sync complete: {result.synced} new, {result.updated} refreshed, "
            f"{result.skipped} skipped, {len(result.errors)} errors across {result.pages} pages"
        )
        return result

    def _sync_message(
        self,
        session: Session,
        message: MailMessage,
        force: bool,
        result: SyncResult,
    ) -> None:
        """Store or refresh a single listed message.

        :param session: The database session for the current page.
        :param message: The listed message preview.
        :param force: Whether to refresh already stored messages.
        :param result: The SyncResult to update.
        """
        if self._is_own_message(message):
            result.skipped += 1
            return

        exists = newsletter_exists(session, message.message_id)
        if exists and not force:
            result.skipped += 1
            return

        full = self._fetch_full_message(message)

        if exists:
            update_newsletter_body(
                session,
                message.message_id,
                subject=full.subject_or_default,
                body_text=full.stored_body_text,
                body_html=full.html,
            )
            result.updated += 1
            return

        inserted = insert_newsletter(
            session,
            message_id=message.message_id,
            sender_address=full.sender_address,
            sender_name=full.sender_name,
            subject=full.subject_or_default,
            received_at=full.timestamp,
            body_text=full.stored_body_text,
            body_html=full.html,
        )
        if inserted:
            result.synced += 1
        else:
            result.skipped += 1
