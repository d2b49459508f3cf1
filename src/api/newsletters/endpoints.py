"""API endpoints for browsing, syncing and deleting newsletters."""

import logging
import time
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_orchestrator, get_session
from src.api.newsletters.models import (
    NewsletterDetailResponse,
    NewsletterListResponse,
    NewsletterSummaryResponse,
    SyncRequest,
    SyncResponse,
)
from src.database.newsletters import (
    Newsletter,
    delete_newsletter,
    get_newsletter_by_id,
    list_newsletters,
)
from src.digest.orchestrator import DigestOrchestrator
from src.mail.client import MailClientError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/newsletters", tags=["Newsletters"])


def _to_summary(newsletter: Newsletter) -> NewsletterSummaryResponse:
    return NewsletterSummaryResponse(
        id=newsletter.id,
        sender_address=newsletter.sender_address,
        sender_name=newsletter.sender_name,
        subject=newsletter.subject,
        received_at=newsletter.received_at,
        topics=newsletter.topics or [],
        is_processed=newsletter.is_processed,
    )


@router.get("", response_model=NewsletterListResponse, summary="List newsletters")
def get_newsletters(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unprocessed: bool = Query(False, description="Only unprocessed newsletters"),
    session: Session = Depends(get_session),
) -> NewsletterListResponse:
    """List newsletters newest first."""
    newsletters, total = list_newsletters(
        session,
        page=page,
        limit=limit,
        unprocessed_only=unprocessed,
    )
    return NewsletterListResponse(
        newsletters=[_to_summary(n) for n in newsletters],
        total=total,
        page=page,
        limit=limit,
    )


@router.post("/sync", response_model=SyncResponse, summary="Sync the mailbox")
def sync_newsletters(
    request: SyncRequest | None = None,
    orchestrator: DigestOrchestrator = Depends(get_orchestrator),
) -> SyncResponse:
    """Pull new messages from the mailbox.

    New arrivals trigger background extraction automatically.
    """
    start = time.perf_counter()
    force = request.force if request is not None else False

    try:
        result = orchestrator.sync_mailbox(force=force)
    except MailClientError as e:
        logger.error(f"Mailbox sync failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Mailbox sync failed: {e}",
        ) from e

    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"Sync complete: synced={result.synced}, elapsed={elapsed_ms:.0f}ms")
    return SyncResponse(
        synced=result.synced,
        updated=result.updated,
        skipped=result.skipped,
        errors=result.errors,
    )


@router.get("/{newsletter_id}", response_model=NewsletterDetailResponse, summary="Get newsletter")
def get_newsletter(
    newsletter_id: UUID,
    session: Session = Depends(get_session),
) -> NewsletterDetailResponse:
    """Get a newsletter with its body and extracted content."""
    newsletter = get_newsletter_by_id(session, newsletter_id)
    if newsletter is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Newsletter not found: {newsletter_id}",
        )

    summary = _to_summary(newsletter)
    return NewsletterDetailResponse(
        **summary.model_dump(),
        body_text=newsletter.body_text,
        body_html=newsletter.body_html,
        extracted_content=newsletter.extracted_content,
        created_at=newsletter.created_at,
    )


@router.delete(
    "/{newsletter_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete newsletter",
)
def remove_newsletter(
    newsletter_id: UUID,
    session: Session = Depends(get_session),
) -> None:
    """Delete a newsletter permanently."""
    if not delete_newsletter(session, newsletter_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Newsletter not found: {newsletter_id}",
        )
