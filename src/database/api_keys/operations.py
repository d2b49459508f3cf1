"""Database operations for API keys."""

import hashlib
import logging
import secrets
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from src.database.api_keys.models import ApiKey

logger = logging.getLogger(__name__)

# Prefix makes keys easy to recognise in config files and logs
API_KEY_PREFIX = "nd_"


def hash_api_key(key: str) -> str:
    """Compute the SHA-256 hex digest of an API key.

    :param key: The plaintext key.
    :returns: The hex-encoded hash.
    """
    return hashlib.sha256(key.encode()).hexdigest()


def generate_api_key() -> str:
    """Generate a new random plaintext API key."""
    return API_KEY_PREFIX + secrets.token_urlsafe(32)


def create_api_key(session: Session, name: str | None = None) -> tuple[ApiKey, str]:
    """Create and store a new API key.

    :param session: Database session.
    :param name: Optional label for the key.
    :returns: A tuple of (stored row, plaintext key). The plaintext is not stored.
    """
    key = generate_api_key()
    api_key = ApiKey(key_hash=hash_api_key(key), name=name)
    session.add(api_key)
    session.flush()
    logger.info(f"Created API key: id={api_key.id}, name={name!r}")
    return api_key, key


def verify_api_key(session: Session, key: str) -> ApiKey | None:
    """Look up an API key and record its use.

    :param session: Database session.
    :param key: The plaintext key presented by a client.
    :returns: The matching key row, or None if the key is unknown.
    """
    api_key = session.query(ApiKey).filter(ApiKey.key_hash == hash_api_key(key)).first()
    if api_key is None:
        return None

    api_key.last_used_at = datetime.now(UTC)
    session.flush()
    return api_key


def count_api_keys(session: Session) -> int:
    """Count stored API keys.

    :param session: Database session.
    :returns: The number of keys.
    """
    return session.query(ApiKey).count()
