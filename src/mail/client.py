"""AgentMail REST API client for listing, fetching and sending messages."""

import logging
from typing import Any
from urllib.parse import quote

import requests
from pydantic import ValidationError

from src.mail.config import MailConfig
from src.mail.models import ListMessagesResult, MailMessage, SendMessageResult

logger = logging.getLogger(__name__)


class MailClientError(Exception):
    """Raised when an AgentMail API request fails."""

    pass


class AgentMailClient:
    """Client for one AgentMail inbox.

    All operations act on the configured inbox: listing and fetching
    received messages, and sending digests from it.
    """

    def __init__(
        self,
        *,
        api_key: str,
        inbox_email: str,
        base_url: str = "https://api.agentmail.to/v0",
        page_size: int = 50,
        request_timeout: int = 30,
    ) -> None:
        """Initialise the AgentMail client.

        :param api_key: AgentMail API key.
        :param inbox_email: Address of the inbox to operate on.
        :param base_url: Base URL of the REST API.
        :param page_size: Messages requested per list page.
        :param request_timeout: Timeout in seconds for each request.
        """
        self._api_key = api_key
        self._inbox_email = inbox_email
        self._page_size = page_size
        self._request_timeout = request_timeout
        self._inbox_url = f"{base_url.rstrip('/')}/inboxes/{quote(inbox_email, safe='')}"
        logger.debug(f"AgentMailClient initialised for inbox={inbox_email}")

    @classmethod
    def from_config(cls, config: MailConfig) -> "AgentMailClient":
        """Create a client from mail settings.

        :param config: Mail configuration.
        :returns: A configured client.
        """
        return cls(
            api_key=config.api_key,
            inbox_email=config.inbox_email,
            base_url=config.base_url,
            page_size=config.page_size,
            request_timeout=config.request_timeout,
        )

    @property
    def inbox_email(self) -> str:
        """Get the configured inbox address."""
        return self._inbox_email

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        url = f"{self._inbox_url}{path}"
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            response = requests.request(
                method,
                url,
                headers=headers,
                params=params,
                json=payload,
                timeout=self._request_timeout,
            )
            response.raise_for_status()
            return response.json()

        except requests.exceptions.Timeout as e:
            raise MailClientError(
                f"AgentMail request timed out after {self._request_timeout}s: {method} {path}"
            ) from e
        except requests.exceptions.RequestException as e:
            raise MailClientError(f"AgentMail request failed: {method} {path}: {e}") from e
        except ValueError as e:
            raise MailClientError(f"AgentMail returned invalid JSON: {method} {path}") from e

    def list_messages(self, page_token: str | None = None) -> ListMessagesResult:
        """List one page of messages in the inbox.

        Listed messages carry previews only.

        :param page_token: Token from the previous page, or None for the first page.
        :returns: The page of messages and the next page token, if any.
        :raises MailClientError: If the request fails or the response is malformed.
        """
        params: dict[str, Any] = {"limit": self._page_size}
        if page_token:
            params["page_token"] = page_token

        logger.debug(f"Listing messages: page_token={page_token}")
        data = self._request("GET", "/messages", params=params)

        try:
            return ListMessagesResult.model_validate(data)
        except ValidationError as e:
            raise MailClientError(f"Unexpected list messages response: {e}") from e

    def get_message(self, message_id: str) -> MailMessage:
        """Fetch a message with its full body.

        :param message_id: The provider message ID.
        :returns: The full message.
        :raises MailClientError: If the request fails or the response is malformed.
        """
        data = self._request("GET", f"/messages/{quote(message_id, safe='')}")

        try:
            return MailMessage.model_validate(data)
        except ValidationError as e:
            raise MailClientError(f"Unexpected message response for {message_id}: {e}") from e

    def send_message(self, to: str, subject: str, html: str, text: str) -> SendMessageResult:
        """Send a message from the inbox.

        :param to: Recipient address.
        :param subject: Message subject.
        :param html: HTML body.
        :param text: Plaintext body.
        :returns: Result containing the provider message ID.
        :raises MailClientError: If the request fails or the response is malformed.
        """
        logger.info(f"Sending message to {to}: subject={subject!r}")
        payload = {"to": [to], "subject": subject, "html": html, "text": text}
        data = self._request("POST", "/messages/send", payload=payload)

        try:
            result = SendMessageResult.model_validate(data)
        except ValidationError as e:
            raise MailClientError(f"Unexpected send response: {e}") from e

        logger.info(f"Message sent successfully: message_id={result.message_id}, to={to}")
        return result
