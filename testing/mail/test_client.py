"""Tests for AgentMail client module."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from src.mail.client import AgentMailClient, MailClientError
from src.mail.config import MailConfig


def _message_payload(message_id: str = "m1") -> dict[str, object]:
    return {
        "message_id": message_id,
        "timestamp": "2025-01-06T09:00:00Z",
        "from": "News <news@example.com>",
        "subject": "Issue 42",
    }


def _response(payload: dict[str, object]) -> MagicMock:
    mock_response = MagicMock()
    mock_response.json.return_value = payload
    return mock_response


class TestAgentMailClientInitialisation(unittest.TestCase):
    """Tests for AgentMailClient initialisation."""

    def test_from_config(self) -> None:
        """Test that the client takes its settings from MailConfig."""
        config = MailConfig(api_key="key", inbox_email="digest@agentmail.to", page_size=10)

        client = AgentMailClient.from_config(config)

        self.assertEqual(client.inbox_email, "digest@agentmail.to")
        self.assertEqual(client._page_size, 10)
        self.assertEqual(
            client._inbox_url,
            "https://api.agentmail.to/v0/inboxes/digest%40agentmail.to",
        )


class TestAgentMailClientListMessages(unittest.TestCase):
    """Tests for AgentMailClient.list_messages method."""

    def setUp(self) -> None:
        """Set up client."""
        self.client = AgentMailClient(api_key="key", inbox_email="news@agentmail.to", page_size=25)

    @patch("src.mail.client.requests.request")
    def test_first_page(self, mock_request: MagicMock) -> None:
        """Test listing the first page sends the page size and auth header."""
        mock_request.return_value = _response(
            {"count": 1, "messages": [_message_payload()], "next_page_token": "p2"}
        )

        result = self.client.list_messages()

        self.assertEqual(len(result.messages), 1)
        self.assertEqual(result.next_page_token, "p2")
        args, kwargs = mock_request.call_args
        self.assertEqual(args[0], "GET")
        self.assertTrue(args[1].endswith("/messages"))
        self.assertEqual(kwargs["params"], {"limit": 25})
        self.assertEqual(kwargs["headers"]["Authorization"], "Bearer key")

    @patch("src.mail.client.requests.request")
    def test_page_token_is_sent(self, mock_request: MagicMock) -> None:
        """Test that the page token is passed through."""
        mock_request.return_value = _response({"count": 0, "messages": []})

        self.client.list_messages("p2")

        self.assertEqual(mock_request.call_args.kwargs["params"]["page_token"], "p2")

    @patch("src.mail.client.requests.request")
    def test_timeout_raises_client_error(self, mock_request: MagicMock) -> None:
        """Test that a timeout becomes MailClientError."""
        mock_request.side_effect = requests.exceptions.Timeout()

        with self.assertRaises(MailClientError) as ctx:
            self.client.list_messages()

        self.assertIn("timed out", str(ctx.exception))

    @patch("src.mail.client.requests.request")
    def test_http_error_raises_client_error(self, mock_request: MagicMock) -> None:
        """Test that an HTTP error status becomes MailClientError."""
        mock_response = MagicMock()
        mock_response.raise_for_status.side_effect = requests.exceptions.HTTPError("500")
        mock_request.return_value = mock_response

        with self.assertRaises(MailClientError):
            self.client.list_messages()

    @patch("src.mail.client.requests.request")
    def test_malformed_response_raises_client_error(self, mock_request: MagicMock) -> None:
        """Test that an unexpected response shape becomes MailClientError."""
        mock_request.return_value = _response({"messages": [{"message_id": "m1"}]})

        with self.assertRaises(MailClientError):
            self.client.list_messages()


class TestAgentMailClientSendMessage(unittest.TestCase):
    """Tests for AgentMailClient.send_message method."""

    @patch("src.mail.client.requests.request")
    def test_send_message(self, mock_request: MagicMock) -> None:
        """Test that a message is posted with both bodies."""
        mock_request.return_value = _response({"message_id": "sent-1", "thread_id": "t1"})
        client = AgentMailClient(api_key="key", inbox_email="news@agentmail.to")

        result = client.send_message("me@example.com", "AI Weekly", "<p>hi</p>", "hi")

        self.assertEqual(result.message_id, "sent-1")
        args, kwargs = mock_request.call_args
        self.assertEqual(args[0], "POST")
        self.assertTrue(args[1].endswith("/messages/send"))
        self.assertEqual(
            kwargs["json"],
            {"to": ["me@example.com"], "subject": "AI Weekly", "html": "<p>hi</p>", "text": "hi"},
        )


if __name__ == "__main__":
    unittest.main()
