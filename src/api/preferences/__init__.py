"""User preferences API."""

from src.api.preferences.endpoints import router

__all__ = ["router"]
