"""Digest schedule API."""

from src.api.schedules.endpoints import router

__all__ = ["router"]
