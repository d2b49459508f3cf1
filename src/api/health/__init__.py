"""Health check API."""

from src.api.health.endpoints import router

__all__ = ["router"]
