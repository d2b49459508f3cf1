"""Tests for preferences API endpoints."""

import unittest
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from src.api.app import app
from src.database.preferences.models import PREFERENCES_ROW_ID, Preferences


class TestPreferencesEndpoints(unittest.TestCase):
    """Tests for /preferences endpoints."""

    def setUp(self) -> None:
        """Set up test client with mocked services and a valid API key."""
        self.app = app
        self.mock_session = MagicMock()
        services = MagicMock()
        services.database.session.return_value.__enter__.return_value = self.mock_session
        services.database.session.return_value.__exit__.return_value = False
        self.app.state.services = services
        self.addCleanup(setattr, self.app.state, "services", None)

        verify_patch = patch("src.api.dependencies.verify_api_key")
        verify_patch.start()
        self.addCleanup(verify_patch.stop)

        self.client = TestClient(self.app)
        self.auth_headers = {"X-API-Key": "nd_test"}

    @patch("src.api.preferences.endpoints.get_preferences", return_value=None)
    def test_get_before_save(self, mock_get: MagicMock) -> None:
        """Test that unsaved preferences return 404."""
        response = self.client.get("/preferences", headers=self.auth_headers)

        self.assertEqual(response.status_code, 404)

    @patch("src.api.preferences.endpoints.upsert_preferences")
    def test_put_saves(self, mock_upsert: MagicMock) -> None:
        """Test that preferences are saved and echoed back."""
        mock_upsert.return_value = Preferences(
            id=PREFERENCES_ROW_ID,
            delivery_email="me@example.com",
            interests=["AI"],
            format_preference="bullets",
            summary_length="short",
            include_links=True,
            custom_prompt=None,
            updated_at=datetime(2025, 1, 6, tzinfo=UTC),
        )

        response = self.client.put(
            "/preferences",
            headers=self.auth_headers,
            json={
                "delivery_email": "me@example.com",
                "interests": ["AI", " "],
                "format_preference": "bullets",
                "summary_length": "short",
            },
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["format_preference"], "bullets")
        kwargs = mock_upsert.call_args.kwargs
        self.assertEqual(kwargs["interests"], ["AI"])
        self.assertEqual(kwargs["delivery_email"], "me@example.com")

    def test_put_rejects_invalid_email(self) -> None:
        """Test that an invalid address returns 422."""
        response = self.client.put(
            "/preferences",
            headers=self.auth_headers,
            json={"delivery_email": "nope"},
        )

        self.assertEqual(response.status_code, 422)


if __name__ == "__main__":
    unittest.main()
