"""Processing run API."""

from src.api.processing.endpoints import router

__all__ = ["router"]
