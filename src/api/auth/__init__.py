"""API key management."""

from src.api.auth.endpoints import router

__all__ = ["router"]
