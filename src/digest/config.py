"""Configuration for digest processing using pydantic-settings."""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.llm.bedrock_client import VALID_MODEL_OPTIONS
from src.paths import ENV_FILE


class DigestConfig(BaseSettings):
    """Tunables for extraction, matching and digest runs.

    All settings are loaded from environment variables with the DIGEST_ prefix.

    :param candidate_window_days: Trailing window of received newsletters a
        scheduled digest considers.
    :param extraction_max_chars: Body characters sent to the extractor.
    :param min_body_length: Bodies shorter than this are skipped.
    :param model: Bedrock model alias used for extraction and digests.
    :param max_parallel_schedules: Due schedules run concurrently per tick.
    :param stale_run_minutes: Age after which an in-flight ad-hoc run no longer
        blocks a new one.
    """

    model_config = SettingsConfigDict(
        env_prefix="DIGEST_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    candidate_window_days: int = Field(default=7, ge=1, le=90)
    extraction_max_chars: int = Field(default=15_000, ge=500, le=200_000)
    min_body_length: int = Field(default=50, ge=0)
    model: str = Field(default="haiku")
    max_parallel_schedules: int = Field(default=4, ge=1, le=32)
    stale_run_minutes: int = Field(default=60, ge=1)

    @field_validator("model")
    @classmethod
    def validate_model(cls, v: str) -> str:
        """Validate the model alias.

        :param v: Raw alias from the environment.
        :returns: The lower-cased alias.
        :raises ValueError: If the alias is unknown.
        """
        if v.lower() not in VALID_MODEL_OPTIONS:
            raise ValueError(f"Unknown model alias '{v}'")
        return v.lower()


@lru_cache
def get_digest_settings() -> DigestConfig:
    """Get cached digest settings.

    :returns: Configured DigestConfig instance.
    """
    return DigestConfig()
