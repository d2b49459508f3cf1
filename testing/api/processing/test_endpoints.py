"""Tests for processing API endpoints."""

import unittest
import uuid
from datetime import UTC, datetime
from unittest.mock import MagicMock, patch

from fastapi.testclient import TestClient

from src.api.app import app
from src.database.processing_runs.models import ProcessingRun
from src.digest.exceptions import NothingToProcessError, ProcessingInProgressError
from src.digest.orchestrator import ProcessingRequestResult
from src.enums import RunStatus, RunType


def _make_run(**overrides: object) -> ProcessingRun:
    values: dict[str, object] = {
        "id": uuid.uuid4(),
        "run_type": RunType.SCHEDULED_DIGEST.value,
        "status": RunStatus.COMPLETED.value,
        "triggered_at": datetime(2025, 1, 6, 9, 0, tzinfo=UTC),
        "completed_at": datetime(2025, 1, 6, 9, 2, tzinfo=UTC),
        "newsletter_count": 1,
        "newsletter_ids": [str(uuid.uuid4())],
        "summary_html": "<p>digest</p>",
        "summary_text": "digest",
        "sent_to_email": "me@example.com",
        "provider_message_id": "sent-1",
        "schedule_id": uuid.uuid4(),
    }
    values.update(overrides)
    return ProcessingRun(**values)


class ProcessingEndpointTestCase(unittest.TestCase):
    """Shared setup for processing endpoint tests."""

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


class TestGenerateEndpoint(ProcessingEndpointTestCase):
    """Tests for POST /processing/generate endpoint."""

    def test_accepts_request(self) -> None:
        """Test that an accepted request returns 202 with the run ID."""
        run_id = uuid.uuid4()
        newsletter_id = uuid.uuid4()
        self.services.orchestrator.process_newsletters.return_value = ProcessingRequestResult(
            run_id=run_id, newsletter_count=1
        )

        response = self.client.post(
            "/processing/generate",
            headers=self.auth_headers,
            json={"newsletter_ids": [str(newsletter_id)], "force_reprocess": True},
        )

        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.json()["run_id"], str(run_id))
        self.services.orchestrator.process_newsletters.assert_called_once_with(
            [newsletter_id], force_all=False, force_reprocess=True
        )

    def test_in_progress_returns_409(self) -> None:
        """Test that a concurrent request is refused with 409."""
        self.services.orchestrator.process_newsletters.side_effect = ProcessingInProgressError(
            "busy"
        )

        response = self.client.post("/processing/generate", headers=self.auth_headers)

        self.assertEqual(response.status_code, 409)

    def test_nothing_to_process_returns_400(self) -> None:
        """Test that an empty request returns 400."""
        self.services.orchestrator.process_newsletters.side_effect = NothingToProcessError(
            "No newsletters to process"
        )

        response = self.client.post("/processing/generate", headers=self.auth_headers, json={})

        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["detail"], "No newsletters to process")


class TestStatusEndpoint(ProcessingEndpointTestCase):
    """Tests for GET /processing/status endpoint."""

    @patch("src.api.processing.endpoints.get_latest_run")
    @patch("src.api.processing.endpoints.get_in_progress_extraction_run")
    def test_reports_in_flight_run(self, mock_in_flight: MagicMock, mock_latest: MagicMock) -> None:
        """Test that an in-flight extraction run is reported."""
        run = _make_run(
            run_type=RunType.EXTRACTION.value,
            status=RunStatus.PROCESSING.value,
            completed_at=None,
            schedule_id=None,
        )
        mock_in_flight.return_value = run
        cutoff = datetime(2025, 1, 6, 8, 0, tzinfo=UTC)
        self.services.orchestrator.stale_run_cutoff.return_value = cutoff

        data = self.client.get("/processing/status", headers=self.auth_headers).json()

        self.assertTrue(data["in_progress"])
        self.assertEqual(data["run"]["id"], str(run.id))
        mock_in_flight.assert_called_once_with(self.mock_session, cutoff)
        mock_latest.assert_not_called()

    @patch("src.api.processing.endpoints.get_latest_run")
    @patch("src.api.processing.endpoints.get_in_progress_extraction_run", return_value=None)
    def test_reports_latest_run(self, mock_in_flight: MagicMock, mock_latest: MagicMock) -> None:
        """Test that the latest run is reported when nothing is in flight."""
        mock_latest.return_value = _make_run()

        data = self.client.get("/processing/status", headers=self.auth_headers).json()

        self.assertFalse(data["in_progress"])
        self.assertEqual(data["run"]["status"], "completed")

    @patch("src.api.processing.endpoints.get_run_by_id", return_value=None)
    def test_unknown_run_id(self, mock_get: MagicMock) -> None:
        """Test that polling an unknown run returns 404."""
        response = self.client.get(
            f"/processing/status?run_id={uuid.uuid4()}",
            headers=self.auth_headers,
        )

        self.assertEqual(response.status_code, 404)


class TestHistoryEndpoint(ProcessingEndpointTestCase):
    """Tests for GET /processing/history endpoint."""

    @patch("src.api.processing.endpoints.list_runs")
    def test_lists_runs_with_schedule_names(self, mock_list: MagicMock) -> None:
        """Test that history includes schedule names and failure reasons."""
        failed = _make_run(status=RunStatus.FAILED.value, error_message="No newsletters found")
        mock_list.return_value = [(_make_run(), "AI Weekly"), (failed, None)]

        response = self.client.get("/processing/history?limit=5", headers=self.auth_headers)

        self.assertEqual(response.status_code, 200)
        runs = response.json()["runs"]
        self.assertEqual(runs[0]["schedule_name"], "AI Weekly")
        self.assertEqual(runs[1]["error_message"], "No newsletters found")
        mock_list.assert_called_once_with(self.mock_session, limit=5)


class TestGetRunEndpoint(ProcessingEndpointTestCase):
    """Tests for GET /processing/{run_id} endpoint."""

    @patch("src.api.processing.endpoints.get_schedule_by_id")
    @patch("src.api.processing.endpoints.get_run_by_id")
    def test_returns_detail(self, mock_get_run: MagicMock, mock_get_schedule: MagicMock) -> None:
        """Test that the detail includes renderings and newsletter IDs."""
        run = _make_run()
        mock_get_run.return_value = run
        mock_get_schedule.return_value = MagicMock(name="schedule")
        mock_get_schedule.return_value.name = "AI Weekly"

        data = self.client.get(f"/processing/{run.id}", headers=self.auth_headers).json()

        self.assertEqual(data["summary_html"], "<p>digest</p>")
        self.assertEqual(data["newsletter_ids"], run.newsletter_ids)
        self.assertEqual(data["schedule_name"], "AI Weekly")

    @patch("src.api.processing.endpoints.get_run_by_id", return_value=None)
    def test_not_found(self, mock_get_run: MagicMock) -> None:
        """Test that an unknown run returns 404."""
        response = self.client.get(f"/processing/{uuid.uuid4()}", headers=self.auth_headers)

        self.assertEqual(response.status_code, 404)


if __name__ == "__main__":
    unittest.main()
