"""HTTP API for Newsletter Digest."""

from src.api.app import app

__all__ = ["app"]
