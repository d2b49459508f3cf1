"""Newsletter API."""

from src.api.newsletters.endpoints import router

__all__ = ["router"]
