"""Tests for schedule API endpoints."""

import unittest
import uuid
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from src.api.app import app
from src.database.preferences.models import Preferences
from src.database.processing_runs.models import ProcessingRun
from src.database.schedules.models import DigestSchedule
from src.digest.cron import CRON_PRESETS
from src.digest.exceptions import NoCandidatesError, ScheduleNotFoundError
from src.digest.orchestrator import DigestRunResult
from src.enums import RunStatus, RunType


def _make_schedule(**overrides: object) -> DigestSchedule:
    values: dict[str, object] = {
        "id": uuid.uuid4(),
        "name": "AI Weekly",
        "topics": ["AI"],
        "cron_schedule": "0 9 * * 1",
        "delivery_email": "me@example.com",
        "summary_length": "medium",
        "include_links": True,
        "custom_prompt": None,
        "is_active": True,
        "last_run_at": None,
        "next_run_at": datetime(2025, 1, 6, 9, 0, tzinfo=UTC),
        "created_at": datetime(2025, 1, 1, tzinfo=UTC),
    }
    values.update(overrides)
    return DigestSchedule(**values)


class ScheduleEndpointTestCase(unittest.TestCase):
    """Shared setup for schedule endpoint tests."""

    def setUp(self) -> None:
        """Set up test client with mocked services and a valid API key."""
        self.app = app
        self.mock_session = MagicMock()
        self.services = MagicMock()
        self.services.database.session.return_value.__enter__.return_value = self.mock_session
        self.services.database.session.return_value.__exit__.return_value = False
        self.app.state.services = self.services
        self.addCleanup(setattr, self.app.state, "services", None)

        verify_patch = patch("src.api.dependencies.verify_api_key")
        verify_patch.start()
        self.addCleanup(verify_patch.stop)

        self.client = TestClient(self.app)
        self.auth_headers = {"X-API-Key": "nd_test"}


class TestCreateScheduleEndpoint(ScheduleEndpointTestCase):
    """Tests for POST /schedules endpoint."""

    @patch("src.api.schedules.endpoints.create_schedule")
    def test_create_schedule(self, mock_create: MagicMock) -> None:
        """Test that a valid schedule is created with its first run computed."""
        mock_create.return_value = _make_schedule()

        response = self.client.post(
            "/schedules",
            headers=self.auth_headers,
            json={
                "name": "AI Weekly",
                "topics": [" AI ", ""],
                "cron_schedule": "0 9 * * 1",
                "delivery_email": "me@example.com",
                "summary_length": "short",
            },
        )

        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["name"], "AI Weekly")
        kwargs = mock_create.call_args.kwargs
        self.assertEqual(kwargs["topics"], ["AI"])
        self.assertEqual(kwargs["summary_length"].value, "short")
        self.assertGreater(kwargs["next_run_at"], datetime.now(UTC))
        self.assertEqual(kwargs["next_run_at"].weekday(), 0)

    @patch("src.api.schedules.endpoints.create_schedule")
    def test_invalid_cron_rejected(self, mock_create: MagicMock) -> None:
        """Test that an invalid cron expression returns 422."""
        response = self.client.post(
            "/schedules",
            headers=self.auth_headers,
            json={
                "name": "Bad",
                "topics": ["AI"],
                "cron_schedule": "every monday",
                "delivery_email": "me@example.com",
            },
        )

        self.assertEqual(response.status_code, 422)
        mock_create.assert_not_called()

    @patch("src.api.schedules.endpoints.create_schedule")
    def test_invalid_email_rejected(self, mock_create: MagicMock) -> None:
        """Test that an invalid delivery address returns 422."""
        response = self.client.post(
            "/schedules",
            headers=self.auth_headers,
            json={
                "name": "AI",
                "topics": ["AI"],
                "cron_schedule": "0 9 * * 1",
                "delivery_email": "not-an-email",
            },
        )

        self.assertEqual(response.status_code, 422)
        mock_create.assert_not_called()

    @patch("src.api.schedules.endpoints.create_schedule")
    def test_blank_topics_rejected(self, mock_create: MagicMock) -> None:
        """Test that a schedule needs at least one real topic."""
        response = self.client.post(
            "/schedules",
            headers=self.auth_headers,
            json={
                "name": "AI",
                "topics": ["  "],
                "cron_schedule": "0 9 * * 1",
                "delivery_email": "me@example.com",
            },
        )

        self.assertEqual(response.status_code, 422)


class TestScheduleReadEndpoints(ScheduleEndpointTestCase):
    """Tests for schedule read endpoints."""

    @patch("src.api.schedules.endpoints.list_schedules")
    def test_list(self, mock_list: MagicMock) -> None:
        """Test listing schedules."""
        mock_list.return_value = [_make_schedule(), _make_schedule(name="Crypto")]

        response = self.client.get("/schedules", headers=self.auth_headers)

        self.assertEqual(response.status_code, 200)
        self.assertEqual([s["name"] for s in response.json()], ["AI Weekly", "Crypto"])

    def test_presets(self) -> None:
        """Test that presets are served without hitting /{id}."""
        response = self.client.get("/schedules/presets", headers=self.auth_headers)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(response.json()["presets"]), len(CRON_PRESETS))

    @patch("src.api.schedules.endpoints.get_preferences", return_value=None)
    def test_defaults_without_preferences(self, mock_prefs: MagicMock) -> None:
        """Test the fallback defaults."""
        data = self.client.get("/schedules/defaults", headers=self.auth_headers).json()

        self.assertEqual(data["delivery_email"], "")
        self.assertEqual(data["summary_length"], "medium")
        self.assertTrue(data["include_links"])
        self.assertEqual(data["interests"], [])

    @patch("src.api.schedules.endpoints.get_preferences")
    def test_defaults_from_preferences(self, mock_prefs: MagicMock) -> None:
        """Test that saved preferences prefill new schedules."""
        mock_prefs.return_value = Preferences(
            delivery_email="me@example.com",
            interests=["AI"],
            format_preference="digest",
            summary_length="long",
            include_links=False,
            custom_prompt="Be brief",
        )

        data = self.client.get("/schedules/defaults", headers=self.auth_headers).json()

        self.assertEqual(data["delivery_email"], "me@example.com")
        self.assertEqual(data["summary_length"], "long")
        self.assertFalse(data["include_links"])
        self.assertEqual(data["custom_prompt"], "Be brief")

    @patch("src.api.schedules.endpoints.get_schedule_by_id", return_value=None)
    def test_get_not_found(self, mock_get: MagicMock) -> None:
        """Test that an unknown schedule returns 404."""
        response = self.client.get(f"/schedules/{uuid.uuid4()}", headers=self.auth_headers)

        self.assertEqual(response.status_code, 404)


class TestUpdateScheduleEndpoint(ScheduleEndpointTestCase):
    """Tests for PATCH /schedules/{id} endpoint."""

    @patch("src.api.schedules.endpoints.update_schedule")
    def test_partial_update(self, mock_update: MagicMock) -> None:
        """Test that only sent fields are updated."""
        schedule = _make_schedule(is_active=False)
        mock_update.return_value = schedule

        response = self.client.patch(
            f"/schedules/{schedule.id}",
            headers=self.auth_headers,
            json={"is_active": False},
        )

        self.assertEqual(response.status_code, 200)
        mock_update.assert_called_once_with(self.mock_session, schedule.id, is_active=False)

    @patch("src.api.schedules.endpoints.update_schedule")
    def test_cron_change_recomputes_next_run(self, mock_update: MagicMock) -> None:
        """Test that a new cron moves next_run_at to its next occurrence."""
        schedule = _make_schedule(cron_schedule="0 8 * * *")
        mock_update.return_value = schedule

        response = self.client.patch(
            f"/schedules/{schedule.id}",
            headers=self.auth_headers,
            json={"cron_schedule": "0 8 * * *"},
        )

        self.assertEqual(response.status_code, 200)
        kwargs = mock_update.call_args.kwargs
        self.assertEqual(kwargs["cron_schedule"], "0 8 * * *")
        self.assertGreater(kwargs["next_run_at"], datetime.now(UTC))
        self.assertEqual(kwargs["next_run_at"].hour, 8)

    @patch("src.api.schedules.endpoints.update_schedule")
    def test_null_for_required_field_rejected(self, mock_update: MagicMock) -> None:
        """Test that required fields cannot be cleared."""
        response = self.client.patch(
            f"/schedules/{uuid.uuid4()}",
            headers=self.auth_headers,
            json={"name": None},
        )

        self.assertEqual(response.status_code, 422)
        mock_update.assert_not_called()

    @patch("src.api.schedules.endpoints.update_schedule", return_value=None)
    def test_update_not_found(self, mock_update: MagicMock) -> None:
        """Test that updating an unknown schedule returns 404."""
        response = self.client.patch(
            f"/schedules/{uuid.uuid4()}",
            headers=self.auth_headers,
            json={"name": "x"},
        )

        self.assertEqual(response.status_code, 404)


class TestDeleteScheduleEndpoint(ScheduleEndpointTestCase):
    """Tests for DELETE /schedules/{id} endpoint."""

    @patch("src.api.schedules.endpoints.delete_schedule", return_value=True)
    def test_delete(self, mock_delete: MagicMock) -> None:
        """Test that deletion returns 204."""
        response = self.client.delete(f"/schedules/{uuid.uuid4()}", headers=self.auth_headers)

        self.assertEqual(response.status_code, 204)


class TestTriggerScheduleEndpoint(ScheduleEndpointTestCase):
    """Tests for POST /schedules/{id}/trigger endpoint."""

    def test_trigger_success(self) -> None:
        """Test that a manual trigger reports the run."""
        schedule_id = uuid.uuid4()
        run_id = uuid.uuid4()
        self.services.orchestrator.trigger_schedule.return_value = DigestRunResult(
            run_id=run_id, schedule_id=schedule_id, newsletter_count=3
        )

        response = self.client.post(f"/schedules/{schedule_id}/trigger", headers=self.auth_headers)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["run_id"], str(run_id))
        self.assertEqual(response.json()["newsletter_count"], 3)
        self.services.orchestrator.trigger_schedule.assert_called_once_with(schedule_id)

    def test_trigger_unknown_schedule(self) -> None:
        """Test that triggering an unknown schedule returns 404."""
        self.services.orchestrator.trigger_schedule.side_effect = ScheduleNotFoundError("gone")

        response = self.client.post(f"/schedules/{uuid.uuid4()}/trigger", headers=self.auth_headers)

        self.assertEqual(response.status_code, 404)

    def test_trigger_without_candidates(self) -> None:
        """Test that an empty window returns 400 with the reason."""
        self.services.orchestrator.trigger_schedule.side_effect = NoCandidatesError(
            "No newsletters received in the last 7 days"
        )

        response = self.client.post(f"/schedules/{uuid.uuid4()}/trigger", headers=self.auth_headers)

        self.assertEqual(response.status_code, 400)
        self.assertIn("No newsletters", response.json()["detail"])


class TestScheduleHistoryEndpoint(ScheduleEndpointTestCase):
    """Tests for GET /schedules/{id}/history endpoint."""

    @patch("src.api.schedules.endpoints.list_runs_for_schedule")
    @patch("src.api.schedules.endpoints.get_schedule_by_id")
    def test_history(self, mock_get: MagicMock, mock_runs: MagicMock) -> None:
        """Test that the schedule's runs are listed."""
        schedule = _make_schedule()
        mock_get.return_value = schedule
        mock_runs.return_value = [
            ProcessingRun(
                id=uuid.uuid4(),
                run_type=RunType.MANUAL_DIGEST.value,
                status=RunStatus.FAILED.value,
                triggered_at=datetime(2025, 1, 3, tzinfo=UTC),
                newsletter_count=0,
                error_message="No newsletters found",
                schedule_id=schedule.id,
            )
        ]

        response = self.client.get(f"/schedules/{schedule.id}/history", headers=self.auth_headers)

        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data["schedule_name"], "AI Weekly")
        self.assertEqual(data["runs"][0]["run_type"], "manual_digest")
        self.assertEqual(data["runs"][0]["schedule_name"], "AI Weekly")


if __name__ == "__main__":
    unittest.main()
