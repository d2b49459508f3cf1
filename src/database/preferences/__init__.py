"""Database model and operations for user preferences."""

from src.database.preferences.models import PREFERENCES_ROW_ID, Preferences
from src.database.preferences.operations import get_preferences, upsert_preferences

__all__ = [
    "PREFERENCES_ROW_ID",
    "Preferences",
    "get_preferences",
    "upsert_preferences",
]
