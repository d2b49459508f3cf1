"""Database operations for newsletters."""

import logging
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.orm import Session

from src.database.newsletters.models import Newsletter

logger = logging.getLogger(__name__)


def newsletter_exists(session: Session, message_id: str) -> bool:
    """Check if a provider message has already been stored.

    :param session: The database session.
    :param message_id: The provider-assigned message ID.
    :returns: True if the newsletter exists in the database.
    """
    return (
        session.query(Newsletter.id).filter(Newsletter.message_id == message_id).first()
        is not None
    )


def insert_newsletter(
    session: Session,
    *,
    message_id: str,
    sender_address: str,
    subject: str,
    received_at: datetime,
    sender_name: str | None = None,
    body_text: str | None = None,
    body_html: str | None = None,
) -> bool:
    """Insert a newsletter unless its provider message ID is already stored.

    Uses INSERT ... ON CONFLICT DO NOTHING so concurrent syncs of the same page
    never create duplicates.

    :param session: The database session.
    :param message_id: The provider-assigned message ID.
    :param sender_address: The sender's e-mail address.
    :param subject: The message subject.
    :param received_at: When the provider received the message.
    :param sender_name: Optional display name of the sender.
    :param body_text: Plaintext body, if any.
    :param body_html: HTML body, if any.
    :returns: True if a new row was inserted, False if it already existed.
    """
    stmt = (
        insert(Newsletter)
        .values(
            id=uuid.uuid4(),
            message_id=message_id,
            sender_address=sender_address,
            sender_name=sender_name,
            subject=subject,
            received_at=received_at,
            body_text=body_text,
            body_html=body_html,
            is_processed=False,
        )
        .on_conflict_do_nothing(index_elements=[Newsletter.message_id])
        .returning(Newsletter.id)
    )
    inserted_id = session.execute(stmt).scalar_one_or_none()

    if inserted_id is None:
        logger.debug(f"Newsletter already stored: message_id={message_id}")
        return False

    logger.info(f"Stored newsletter: id={inserted_id}, subject={subject[:60]!r}")
    return True


def update_newsletter_body(
    session: Session,
    message_id: str,
    *,
    subject: str,
    body_text: str | None,
    body_html: str | None,
) -> bool:
    """Overwrite the body fields of an existing newsletter.

    Extraction fields are left untouched.

    :param session: The database session.
    :param message_id: The provider-assigned message ID.
    :param subject: The message subject.
    :param body_text: Plaintext body, if any.
    :param body_html: HTML body, if any.
    :returns: True if a row was updated, False if no such newsletter exists.
    """
    newsletter = session.query(Newsletter).filter(Newsletter.message_id == message_id).first()
    if newsletter is None:
        return False

    newsletter.subject = subject
    newsletter.body_text = body_text
    newsletter.body_html = body_html
    session.flush()
    logger.debug(f"Refreshed newsletter body: id={newsletter.id}")
    return True


def get_newsletter_by_id(session: Session, newsletter_id: uuid.UUID) -> Newsletter | None:
    """Get a newsletter by its ID.

    :param session: The database session.
    :param newsletter_id: The newsletter ID.
    :returns: The newsletter if found, None otherwise.
    """
    return session.query(Newsletter).filter(Newsletter.id == newsletter_id).first()


def list_newsletters(
    session: Session,
    *,
    page: int = 1,
    limit: int = 20,
    unprocessed_only: bool = False,
) -> tuple[list[Newsletter], int]:
    """List newsletters newest first with pagination.

    :param session: The database session.
    :param page: 1-based page number.
    :param limit: Page size.
    :param unprocessed_only: Only include newsletters not yet processed.
    :returns: A tuple of (newsletters on this page, total matching count).
    """
    query = session.query(Newsletter)
    if unprocessed_only:
        query = query.filter(Newsletter.is_processed.is_(False))

    total = query.count()
    newsletters = (
        query.order_by(Newsletter.received_at.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return newsletters, total


def get_recent_newsletters(session: Session, since: datetime) -> list[Newsletter]:
    """Get newsletters received at or after a cutoff, newest first.

    :param session: The database session.
    :param since: Inclusive lower bound on received_at.
    :returns: List of newsletters.
    """
    return (
        session.query(Newsletter)
        .filter(Newsletter.received_at >= since)
        .order_by(Newsletter.received_at.desc())
        .all()
    )


def get_newsletters_for_processing(
    session: Session,
    *,
    newsletter_ids: list[uuid.UUID] | None = None,
    force_all: bool = False,
) -> list[Newsletter]:
    """Resolve the set of newsletters an ad-hoc processing request targets.

    Explicit IDs win; otherwise all newsletters when force_all is set, or only
    unprocessed ones.

    :param session: The database session.
    :param newsletter_ids: Explicit newsletter IDs to process.
    :param force_all: Include newsletters regardless of processed state.
    :returns: List of newsletters, newest first.
    """
    query = session.query(Newsletter)
    if newsletter_ids:
        query = query.filter(Newsletter.id.in_(newsletter_ids))
    elif not force_all:
        query = query.filter(Newsletter.is_processed.is_(False))

    return query.order_by(Newsletter.received_at.desc()).all()


def save_extraction(
    session: Session,
    newsletter: Newsletter,
    extracted_content: dict[str, Any],
    topics: list[str],
) -> Newsletter:
    """Persist extracted content and its topics onto a newsletter.

    Both fields are written in the same update so they never disagree.

    :param session: The database session.
    :param newsletter: The newsletter to update.
    :param extracted_content: The structured extraction result.
    :param topics: Topics derived from the same extraction.
    :returns: The updated newsletter.
    """
    newsletter.extracted_content = extracted_content
    newsletter.topics = list(topics)
    session.flush()
    logger.info(f"Saved extraction for newsletter {newsletter.id}: topics={topics}")
    return newsletter


def mark_newsletters_processed(session: Session, newsletter_ids: list[uuid.UUID]) -> int:
    """Set the processed flag on a set of newsletters.

    :param session: The database session.
    :param newsletter_ids: IDs of the newsletters to mark.
    :returns: Number of rows updated.
    """
    if not newsletter_ids:
        return 0

    updated = (
        session.query(Newsletter)
        .filter(Newsletter.id.in_(newsletter_ids))
        .update({Newsletter.is_processed: True}, synchronize_session=False)
    )
    session.flush()
    logger.debug(f"Marked {updated} newsletters as processed")
    return updated


def has_unprocessed_newsletters(session: Session) -> bool:
    """Check whether any newsletter is still unprocessed.

    :param session: The database session.
    :returns: True if at least one unprocessed newsletter exists.
    """
    return (
        session.query(Newsletter.id).filter(Newsletter.is_processed.is_(False)).first()
        is not None
    )


def delete_newsletter(session: Session, newsletter_id: uuid.UUID) -> bool:
    """Delete a newsletter.

    :param session: The database session.
    :param newsletter_id: The newsletter ID.
    :returns: True if deleted, False if not found.
    """
    newsletter = get_newsletter_by_id(session, newsletter_id)
    if newsletter is None:
        return False

    session.delete(newsletter)
    session.flush()
    logger.info(f"Deleted newsletter: id={newsletter_id}")
    return True
