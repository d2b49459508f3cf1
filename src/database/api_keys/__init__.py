"""Database model and operations for API keys."""

from src.database.api_keys.models import ApiKey
from src.database.api_keys.operations import (
    count_api_keys,
    create_api_key,
    generate_api_key,
    hash_api_key,
    verify_api_key,
)

__all__ = [
    "ApiKey",
    "count_api_keys",
    "create_api_key",
    "generate_api_key",
    "hash_api_key",
    "verify_api_key",
]
