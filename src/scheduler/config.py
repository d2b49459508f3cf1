"""Configuration for the background scheduler using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE


class SchedulerConfig(BaseSettings):
    """Cadences of the background timer loop.

    All settings are loaded from environment variables with the SCHEDULER_ prefix.

    :param enabled: Whether the API process starts the timer loop.
    :param schedule_check_interval_seconds: Seconds between due-schedule checks.
    :param mailbox_sync_interval_seconds: Seconds between mailbox syncs.
    :param initial_sync_delay_seconds: Delay before the first mailbox sync.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEDULER_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    enabled: bool = Field(default=True)
    schedule_check_interval_seconds: int = Field(default=60, ge=1, le=3600)
    mailbox_sync_interval_seconds: int = Field(default=3600, ge=60, le=86_400)
    initial_sync_delay_seconds: int = Field(default=5, ge=0, le=3600)


@lru_cache
def get_scheduler_settings() -> SchedulerConfig:
    """Get cached scheduler settings.

    :returns: Configured SchedulerConfig instance.
    """
    return SchedulerConfig()
