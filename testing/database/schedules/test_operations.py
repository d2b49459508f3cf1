"""Tests for digest schedule database operations."""

import unittest
import uuid
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

from src.database.schedules.models import DigestSchedule
from src.database.schedules.operations import (
    create_schedule,
    delete_schedule,
    get_due_schedules,
    mark_schedule_triggered,
    record_schedule_run,
    update_schedule,
)
from src.enums import SummaryLength


def _make_schedule(**overrides: object) -> DigestSchedule:
    values: dict[str, object] = {
        "id": uuid.uuid4(),
        "name": "AI Weekly",
        "topics": ["AI"],
        "cron_schedule": "0 9 * * 1",
        "delivery_email": "me@example.com",
        "summary_length": SummaryLength.MEDIUM.value,
        "include_links": True,
        "is_active": True,
        "next_run_at": datetime(2025, 1, 6, 9, 0, tzinfo=UTC),
    }
    values.update(overrides)
    return DigestSchedule(**values)


class TestCreateSchedule(unittest.TestCase):
    """Tests for create_schedule function."""

    def test_creates_schedule(self) -> None:
        """Test that the schedule is added with the given fields."""
        mock_session = MagicMock()
        next_run = datetime(2025, 1, 6, 9, 0, tzinfo=UTC)

        schedule = create_schedule(
            mock_session,
            name="AI Weekly",
            topics=["AI", "Robotics"],
            cron_schedule="0 9 * * 1",
            delivery_email="me@example.com",
            next_run_at=next_run,
            summary_length=SummaryLength.SHORT,
        )

        self.assertEqual(schedule.name, "AI Weekly")
        self.assertEqual(schedule.topics, ["AI", "Robotics"])
        self.assertEqual(schedule.summary_length, "short")
        self.assertEqual(schedule.next_run_at, next_run)
        self.assertTrue(schedule.is_active)
        mock_session.add.assert_called_once_with(schedule)
        mock_session.flush.assert_called_once()


class TestGetDueSchedules(unittest.TestCase):
    """Tests for get_due_schedules function."""

    def test_returns_query_results(self) -> None:
        """Test that due schedules come from a filtered query."""
        mock_session = MagicMock()
        due = [_make_schedule()]
        mock_session.query.return_value.filter.return_value.all.return_value = due

        result = get_due_schedules(mock_session, datetime.now(UTC))

        self.assertEqual(result, due)


class TestUpdateSchedule(unittest.TestCase):
    """Tests for update_schedule function."""

    def test_applies_fields(self) -> None:
        """Test that a partial update changes only the given fields."""
        schedule = _make_schedule()
        mock_session = MagicMock()
        mock_session.query.return_value.filter.return_value.first.return_value = schedule

        result = update_schedule(
            mock_session,
            schedule.id,
            name="Renamed",
            summary_length=SummaryLength.LONG,
        )

        self.assertIs(result, schedule)
        self.assertEqual(schedule.name, "Renamed")
        self.assertEqual(schedule.summary_length, "long")
        self.assertEqual(schedule.cron_schedule, "0 9 * * 1")

    def test_rejects_unknown_fields(self) -> None:
        """Test that non-updatable fields raise ValueError."""
        mock_session = MagicMock()

        with self.assertRaises(ValueError):
            update_schedule(mock_session, uuid.uuid4(), created_at=datetime.now(UTC))

    def test_returns_none_when_missing(self) -> None:
        """Test that updating an unknown schedule returns None."""
        mock_session = MagicMock()
        mock_session.query.return_value.filter.return_value.first.return_value = None

        self.assertIsNone(update_schedule(mock_session, uuid.uuid4(), name="x"))


class TestRecordScheduleRun(unittest.TestCase):
    """Tests for record_schedule_run function."""

    def test_sets_last_and_next_run(self) -> None:
        """Test that both timestamps are written."""
        schedule = _make_schedule()
        mock_session = MagicMock()
        mock_session.query.return_value.filter.return_value.first.return_value = schedule
        fired = datetime(2025, 1, 6, 9, 0, tzinfo=UTC)
        next_run = fired + timedelta(days=7)

        record_schedule_run(mock_session, schedule.id, fired, next_run)

        self.assertEqual(schedule.last_run_at, fired)
        self.assertEqual(schedule.next_run_at, next_run)


class TestMarkScheduleTriggered(unittest.TestCase):
    """Tests for mark_schedule_triggered function."""

    def test_sets_last_run_only(self) -> None:
        """Test that a manual trigger leaves next_run_at alone."""
        schedule = _make_schedule()
        original_next = schedule.next_run_at
        mock_session = MagicMock()
        mock_session.query.return_value.filter.return_value.first.return_value = schedule
        triggered = datetime(2025, 1, 3, 12, 0, tzinfo=UTC)

        mark_schedule_triggered(mock_session, schedule.id, triggered)

        self.assertEqual(schedule.last_run_at, triggered)
        self.assertEqual(schedule.next_run_at, original_next)


class TestDeleteSchedule(unittest.TestCase):
    """Tests for delete_schedule function."""

    def test_deletes_existing(self) -> None:
        """Test that an existing schedule is deleted."""
        schedule = _make_schedule()
        mock_session = MagicMock()
        mock_session.query.return_value.filter.return_value.first.return_value = schedule

        self.assertTrue(delete_schedule(mock_session, schedule.id))
        mock_session.delete.assert_called_once_with(schedule)

    def test_returns_false_when_missing(self) -> None:
        """Test that deleting an unknown schedule returns False."""
        mock_session = MagicMock()
        mock_session.query.return_value.filter.return_value.first.return_value = None

        self.assertFalse(delete_schedule(mock_session, uuid.uuid4()))


if __name__ == "__main__":
    unittest.main()
