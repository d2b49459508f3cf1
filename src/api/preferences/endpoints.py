"""API endpoints for user preferences."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from src.api.dependencies import get_session
from src.api.preferences.models import PreferencesRequest, PreferencesResponse
from src.database.preferences import Preferences, get_preferences, upsert_preferences
from src.enums import FormatPreference, SummaryLength

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/preferences", tags=["Preferences"])


def _preferences_to_response(preferences: Preferences) -> PreferencesResponse:
    return PreferencesResponse(
        delivery_email=preferences.delivery_email,
        interests=preferences.interests or [],
        format_preference=FormatPreference(preferences.format_preference),
        summary_length=SummaryLength(preferences.summary_length),
        include_links=preferences.include_links,
        custom_prompt=preferences.custom_prompt,
        updated_at=preferences.updated_at,
    )


@router.get("", response_model=PreferencesResponse, summary="Get preferences")
def get(session: Session = Depends(get_session)) -> PreferencesResponse:
    """Get the saved preferences."""
    preferences = get_preferences(session)
    if preferences is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Preferences have not been saved",
        )
    return _preferences_to_response(preferences)


@router.put("", response_model=PreferencesResponse, summary="Save preferences")
def put(
    request: PreferencesRequest,
    session: Session = Depends(get_session),
) -> PreferencesResponse:
    """Create or replace the preferences."""
    logger.info(f"Saving preferences: email={request.delivery_email}")
    preferences = upsert_preferences(
        session,
        delivery_email=str(request.delivery_email),
        interests=request.interests,
        format_preference=request.format_preference,
        summary_length=request.summary_length,
        include_links=request.include_links,
        custom_prompt=request.custom_prompt,
    )
    return _preferences_to_response(preferences)
