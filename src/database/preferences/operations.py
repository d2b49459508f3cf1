"""Database operations for user preferences."""

import logging

from sqlalchemy.orm import Session

from src.database.preferences.models import PREFERENCES_ROW_ID, Preferences
from src.enums import FormatPreference, SummaryLength

logger = logging.getLogger(__name__)


def get_preferences(session: Session) -> Preferences | None:
    """Get the preferences row.

    :param session: Database session.
    :returns: The preferences, or None if never saved.
    """
    return session.query(Preferences).filter(Preferences.id == PREFERENCES_ROW_ID).first()


def upsert_preferences(
    session: Session,
    *,
    delivery_email: str,
    interests: list[str],
    format_preference: FormatPreference = FormatPreference.DIGEST,
    summary_length: SummaryLength = SummaryLength.MEDIUM,
    include_links: bool = True,
    custom_prompt: str | None = None,
) -> Preferences:
    """Create or replace the preferences row.

    :param session: Database session.
    :param delivery_email: Default delivery address.
    :param interests: Default topics of interest.
    :param format_preference: Preferred digest format.
    :param summary_length: Default summary length.
    :param include_links: Whether digests include links by default.
    :param custom_prompt: Default extra instructions for the generator.
    :returns: The saved preferences.
    """
    preferences = get_preferences(session)
    if preferences is None:
        preferences = Preferences(id=PREFERENCES_ROW_ID)
        session.add(preferences)
        logger.info("Creating preferences")

    preferences.delivery_email = delivery_email
    preferences.interests = list(interests)
    preferences.format_preference = FormatPreference(format_preference).value
    preferences.summary_length = SummaryLength(summary_length).value
    preferences.include_links = include_links
    preferences.custom_prompt = custom_prompt
    session.flush()
    logger.info(f"Saved preferences: email={delivery_email}, interests={len(interests)}")
    return preferences
