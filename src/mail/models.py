"""Pydantic models for AgentMail messages."""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

# Matches "Display Name <address@example.com>"
_NAMED_ADDRESS_PATTERN = re.compile(r"^\s*\"?(?P<name>[^\"<]*?)\"?\s*<(?P<address>[^>]+)>\s*$")

# Subject used when the provider reports none
NO_SUBJECT = "(No subject)"


def parse_sender(raw_from: str) -> tuple[str, str | None]:
    """Split a From header into address and display name.

    :param raw_from: The raw From value, e.g. ``"Jane <jane@example.com>"``.
    :returns: A tuple of (address, name or None).
    """
    match = _NAMED_ADDRESS_PATTERN.match(raw_from)
    if match is None:
        return raw_from.strip(), None

    name = match.group("name").strip()
    return match.group("address").strip(), name or None


class MailMessage(BaseModel):
    """A message as returned by the AgentMail API.

    List responses carry previews only; text and html are populated by a
    detail fetch.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    message_id: str
    thread_id: str | None = None
    timestamp: datetime
    from_: str = Field(alias="from")
    to: list[str] = Field(default_factory=list)
    subject: str | None = None
    preview: str | None = None
    text: str | None = None
    html: str | None = None
    labels: list[str] = Field(default_factory=list)

    @property
    def sender_address(self) -> str:
        """The sender's e-mail address."""
        return parse_sender(self.from_)[0]

    @property
    def sender_name(self) -> str | None:
        """The sender's display name, if any."""
        return parse_sender(self.from_)[1]

    @property
    def subject_or_default(self) -> str:
        """The subject, or a placeholder when it is missing."""
        return self.subject or NO_SUBJECT

    @property
    def stored_body_text(self) -> str | None:
        """The plaintext body to persist.

        The preview is only used when the message carries neither a text nor
        an html part, i.e. the detail fetch never happened or failed. An
        html-only message stores no plaintext so extraction reads the html.
        """
        if self.text or self.html:
            return self.text
        return self.preview


class ListMessagesResult(BaseModel):
    """One page of messages from the list endpoint."""

    model_config = ConfigDict(extra="ignore")

    count: int = 0
    messages: list[MailMessage] = Field(default_factory=list)
    next_page_token: str | None = None


class SendMessageResult(BaseModel):
    """Confirmation returned after sending a message."""

    model_config = ConfigDict(extra="ignore")

    message_id: str
    thread_id: str | None = None
