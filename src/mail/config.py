"""Configuration for the AgentMail integration using pydantic-settings."""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.paths import ENV_FILE


class MailConfig(BaseSettings):
    """Configuration for the AgentMail mailbox.

    All settings are loaded from environment variables with the AGENTMAIL_ prefix.

    :param api_key: AgentMail API key.
    :param inbox_email: Address of the inbox newsletters are delivered to and
        digests are sent from.
    :param base_url: Base URL of the AgentMail REST API.
    :param page_size: Number of messages requested per list page.
    :param request_timeout: Timeout in seconds for each API request.
    """

    model_config = SettingsConfigDict(
        env_prefix="AGENTMAIL_",
        env_file=ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    api_key: str = Field(..., description="AgentMail API key")
    inbox_email: str = Field(
        default="news@agentmail.to",
        description="Inbox address for receiving newsletters and sending digests",
    )
    base_url: str = Field(
        default="https://api.agentmail.to/v0",
        description="AgentMail REST API base URL",
    )
    page_size: int = Field(
        default=50,
        ge=1,
        le=100,
        description="Messages requested per list page",
    )
    request_timeout: int = Field(
        default=30,
        ge=1,
        le=120,
        description="Request timeout in seconds",
    )


@lru_cache
def get_mail_settings() -> MailConfig:
    """Get cached mail settings.

    :returns: Configured MailConfig instance.
    """
    return MailConfig()  # type: ignore[call-arg]
