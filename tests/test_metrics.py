import unittest
from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

from database.models import GoalStatus
from services.goal_lifecycle import determine_new_status
from services.metrics import (
    compute_goal_metrics,
    days_remaining,
    format_decimal,
    is_goal_locked,
    progress_percent,
    progress_ratio,
)

TODAY = date(2025, 6, 1)


class TestMetrics(unittest.TestCase):

    def test_format_decimal(self):
        self.assertEqual(format_decimal(Decimal("12.5000")), "12.5")
        self.assertEqual(format_decimal(Decimal("100.0000")), "100")
        self.assertEqual(format_decimal(Decimal("0.0000")), "0")
        self.assertEqual(format_decimal(None), "0")

    def test_progress(self):
        self.assertEqual(progress_ratio(Decimal("25"), Decimal("100")), 0.25)
        self.assertEqual(progress_ratio(Decimal("5"), Decimal("0")), 0.0)
        self.assertEqual(progress_percent(Decimal("1"), Decimal("8")), 13)
        self.assertEqual(progress_percent(Decimal("150"), Decimal("100")), 150)

    def test_days_remaining(self):
        self.assertEqual(days_remaining(date(2025, 6, 11), today=TODAY), 10)
        self.assertEqual(days_remaining(date(2025, 5, 30), today=TODAY), -2)

    def test_is_locked(self):
        self.assertFalse(is_goal_locked(GoalStatus.ACTIVE, 0))
        self.assertTrue(is_goal_locked(GoalStatus.ACTIVE, 1))
        self.assertTrue(is_goal_locked(GoalStatus.ABANDONED, 0))

    def test_compute_goal_metrics(self):
        goal = SimpleNamespace(target_value=Decimal("40"), deadline=date(2025, 6, 5), status=GoalStatus.ACTIVE)

        metrics = compute_goal_metrics(goal, [Decimal("10.5"), Decimal("9.5")], today=TODAY)

        self.assertEqual(metrics.to_dict(include_entries_count=True), {
            "current_value": "20",
            "progress_ratio": 0.5,
            "progress_percent": 50,
            "is_locked": True,
            "days_remaining": 4,
            "entries_count": 2,
        })
        self.assertNotIn("entries_count", metrics.to_dict())


class TestDetermineNewStatus(unittest.TestCase):

    DEADLINE = date(2025, 6, 1)

    def test_fails_after_deadline_day(self):
        now = datetime(2025, 6, 2, 0, 0, 1, tzinfo=timezone.utc)
        self.assertEqual(
            determine_new_status(GoalStatus.ACTIVE, Decimal("5"), Decimal("10"), self.DEADLINE, now),
            GoalStatus.COMPLETED_FAILURE,
        )

    def test_deadline_day_itself_is_still_open(self):
        now = datetime(2025, 6, 1, 23, 59, tzinfo=timezone.utc)
        self.assertIsNone(determine_new_status(GoalStatus.ACTIVE, Decimal("5"), Decimal("10"), self.DEADLINE, now))

    def test_never_succeeds_automatically(self):
        now = datetime(2025, 7, 1, tzinfo=timezone.utc)
        self.assertIsNone(determine_new_status(GoalStatus.ACTIVE, Decimal("10"), Decimal("10"), self.DEADLINE, now))

    def test_closed_goals_untouched(self):
        now = datetime(2025, 7, 1, tzinfo=timezone.utc)
        for status in (GoalStatus.ABANDONED, GoalStatus.COMPLETED_SUCCESS, GoalStatus.COMPLETED_FAILURE):
            self.assertIsNone(determine_new_status(status, Decimal("0"), Decimal("10"), self.DEADLINE, now))
