import unittest
from datetime import datetime

import pytz

from core import operations as ops
from core.models import AppData, DayColor, DayEntry, Goal, ValidationError, create_empty_app_data
from core.validation import validate_app_data

NOW = datetime(2025, 6, 15, 9, 30, 0)
STAMP = "2025-06-15T09:30:00Z"


class TestTimestamps(unittest.TestCase):
    def test_naive_datetime_is_treated_as_utc(self) -> None:
        self.assertEqual(ops.utc_timestamp(datetime(2025, 1, 2, 3, 4, 5)), "2025-01-02T03:04:05Z")

    def test_aware_datetime_is_converted_to_utc(self) -> None:
        tokyo = pytz.timezone("Asia/Tokyo").localize(datetime(2025, 1, 2, 9, 0))
        self.assertEqual(ops.utc_timestamp(tokyo), "2025-01-02T00:00:00Z")


class TestDayOperations(unittest.TestCase):
    def test_upsert_creates_yellow_day_without_touching_original(self) -> None:
        original = create_empty_app_data()
        updated = ops.upsert_day(original, "2025-06-14", text="hello", now=NOW)

        self.assertEqual(original.days, [])
        day = updated.find_day("2025-06-14")
        self.assertEqual(day.text, "hello")
        self.assertEqual(day.color, DayColor.YELLOW)
        self.assertEqual((day.created_at, day.updated_at), (STAMP, STAMP))

    def test_upsert_updates_only_given_fields(self) -> None:
        app_data = ops.upsert_day(create_empty_app_data(), "2025-06-14", text="hello", color="red",
                                  now=datetime(2025, 6, 14, 8, 0))
        app_data = ops.upsert_day(app_data, "2025-06-14", diary_entry="## notes", now=NOW)

        day = app_data.find_day("2025-06-14")
        self.assertEqual(day.text, "hello")
        self.assertEqual(day.color, DayColor.RED)
        self.assertEqual(day.diary_entry, "## notes")
        self.assertEqual(day.created_at, "2025-06-14T08:00:00Z")
        self.assertEqual(day.updated_at, STAMP)

    def test_days_stay_sorted(self) -> None:
        app_data = create_empty_app_data()
        for key in ("2025-03-01", "2025-01-01", "2025-02-01"):
            app_data = ops.upsert_day(app_data, key, text=key, now=NOW)
        self.assertEqual([d.date for d in app_data.days], ["2025-01-01", "2025-02-01", "2025-03-01"])

    def test_upsert_rejects_invalid_arguments(self) -> None:
        with self.assertRaises(ValidationError):
            ops.upsert_day(create_empty_app_data(), "2025-02-30", text="x")
        with self.assertRaises(ValidationError):
            ops.upsert_day(create_empty_app_data(), "2025-02-01", color="purple")


class TestGoalOperations(unittest.TestCase):
    def setUp(self) -> None:
        self.app_data = AppData(goals=[Goal(id="g1", title="Run", start_date="2025-06-01")])

    def test_toggle_creates_green_day(self) -> None:
        app_data = ops.toggle_goal_completion(self.app_data, "2025-06-10", "g1", now=NOW)
        day = app_data.find_day("2025-06-10")
        self.assertEqual(day.color, DayColor.GREEN)
        self.assertEqual(day.completed_goals, ["g1"])

    def test_toggle_twice_clears_completion(self) -> None:
        app_data = ops.upsert_day(self.app_data, "2025-06-10", text="x", color="red", now=NOW)
        app_data = ops.toggle_goal_completion(app_data, "2025-06-10", "g1", now=NOW)
        self.assertTrue(app_data.find_day("2025-06-10").has_completed("g1"))
        self.assertEqual(app_data.find_day("2025-06-10").color, DayColor.RED)

        app_data = ops.toggle_goal_completion(app_data, "2025-06-10", "g1", now=NOW)
        self.assertIsNone(app_data.find_day("2025-06-10").completed_goals)

    def test_toggle_unknown_goal(self) -> None:
        with self.assertRaises(ops.GoalNotFoundError):
            ops.toggle_goal_completion(self.app_data, "2025-06-10", "nope")

    def test_add_goal(self) -> None:
        app_data = ops.add_goal(self.app_data, "  Read 10 pages ", "2025-06-15", description="books", now=NOW)
        added = app_data.goals[-1]
        self.assertTrue(added.id.startswith("g_"))
        self.assertEqual(added.title, "Read 10 pages")
        self.assertEqual(added.description, "books")
        self.assertEqual(added.created_at, STAMP)
        self.assertEqual(len(self.app_data.goals), 1)

    def test_add_goal_validates_input(self) -> None:
        with self.assertRaises(ValidationError):
            ops.add_goal(self.app_data, "   ", "2025-06-15")
        with self.assertRaises(ValidationError):
            ops.add_goal(self.app_data, "x" * (ops.TITLE_MAX_LENGTH + 1), "2025-06-15")
        with self.assertRaises(ValidationError):
            ops.add_goal(self.app_data, "Read", "15.06.2025")
        with self.assertRaises(ValidationError):
            ops.add_goal(self.app_data, "Read", "2025-06-15", completed_at="later")

    def test_update_and_archive_goal(self) -> None:
        app_data = ops.update_goal(self.app_data, "g1", title="Run 5k", now=NOW)
        self.assertEqual(app_data.find_goal("g1").title, "Run 5k")
        self.assertEqual(app_data.find_goal("g1").updated_at, STAMP)

        app_data = ops.archive_goal(app_data, "g1", "2025-06-14", now=NOW)
        self.assertTrue(app_data.find_goal("g1").is_archived("2025-06-15"))

        app_data = ops.update_goal(app_data, "g1", completed_at=None, now=NOW)
        self.assertIsNone(app_data.find_goal("g1").completed_at)

        with self.assertRaises(ops.GoalNotFoundError):
            ops.update_goal(app_data, "missing", title="x")

    def test_delete_goal_removes_it_from_days(self) -> None:
        app_data = AppData(
            goals=[Goal(id="g1", title="Run", start_date="2025-06-01"),
                   Goal(id="g2", title="Read", start_date="2025-06-01")],
            days=[DayEntry(date="2025-06-02", color=DayColor.GREEN, completed_goals=["g1"]),
                  DayEntry(date="2025-06-03", color=DayColor.GREEN, completed_goals=["g1", "g2"])],
        )
        app_data = ops.delete_goal(app_data, "g1")
        self.assertEqual([g.id for g in app_data.goals], ["g2"])
        self.assertIsNone(app_data.find_day("2025-06-02").completed_goals)
        self.assertEqual(app_data.find_day("2025-06-03").completed_goals, ["g2"])

    def test_operation_results_pass_validation(self) -> None:
        app_data = ops.add_goal(self.app_data, "Read", "2025-06-01", now=NOW)
        app_data = ops.toggle_goal_completion(app_data, "2025-06-02", "g1", now=NOW)
        app_data = ops.upsert_day(app_data, "2025-06-03", text="fine", color="neutral", now=NOW)

        result = validate_app_data(app_data.to_dict())
        self.assertTrue(result.ok)
        self.assertEqual(result.warnings, [])
        self.assertEqual(result.data, app_data)


if __name__ == "__main__":
    unittest.main(verbosity=2)
