import copy
import unittest

from core.models import DayColor
from core.schema import SchemaVersionPolicy
from core.validation import (
    AppDataValidationError,
    assert_valid_app_data,
    validate_app_data,
    validate_day,
    validate_goal,
)


def goal(goal_id="g1", title="Drink water", start="2025-01-01", **extra):
    return {"id": goal_id, "title": title, "startDate": start, **extra}


class TestValidateAppData(unittest.TestCase):
    def test_duplicate_days_keep_last_occurrence(self) -> None:
        raw = {"days": [{"date": "2025-01-01", "text": "hi"}, {"date": "2025-01-01", "text": "bye"}], "goals": []}
        result = validate_app_data(raw)
        self.assertTrue(result.ok)
        self.assertEqual(len(result.data.days), 1)
        self.assertEqual(result.data.days[0].text, "bye")
        self.assertIn("duplicate day 2025-01-01; keeping last occurrence", result.warnings)

    def test_duplicate_goals_keep_first_occurrence(self) -> None:
        raw = {"goals": [goal("g1", "A"), goal("g1", "B")]}
        result = validate_app_data(raw)
        self.assertTrue(result.ok)
        self.assertEqual([(g.id, g.title) for g in result.data.goals], [("g1", "A")])
        self.assertIn("duplicate goal.id g1; keeping first", result.warnings)

    def test_unknown_completed_goal_is_dropped_with_warning(self) -> None:
        raw = {
            "goals": [goal("g1")],
            "days": [{"date": "2025-01-02", "text": "", "color": "green", "completedGoals": ["g1", "ghost"]}],
        }
        result = validate_app_data(raw)
        self.assertTrue(result.ok)
        self.assertEqual(result.data.days[0].completed_goals, ["g1"])
        self.assertEqual(result.warnings, ["day.completedGoals contained unknown goal ids"])
        self.assertEqual(result.errors, [])

    def test_goal_without_title_rejects_whole_document(self) -> None:
        raw = {"goals": [goal("g1"), goal("g2", "   ")], "days": [{"date": "2025-01-01", "text": "ok"}]}
        result = validate_app_data(raw)
        self.assertFalse(result.ok)
        self.assertIsNone(result.data)
        self.assertEqual(result.errors, ["goals[1]: goal.title missing"])

    def test_every_item_is_checked_before_failing(self) -> None:
        raw = {"goals": [{}, goal("g2", completedAt="someday")], "days": [{"date": "yesterday"}, {"date": "2025-01-01"}]}
        result = validate_app_data(raw)
        self.assertFalse(result.ok)
        self.assertEqual(result.errors, [
            "goals[0]: goal.id missing",
            "goals[0]: goal.title missing",
            "goals[0]: goal.startDate invalid",
            "goals[1]: goal.completedAt invalid",
            "days[0]: day.date invalid",
        ])

    def test_days_are_sorted_by_date(self) -> None:
        raw = {"days": [
            {"date": "2025-03-01", "color": "red"},
            {"date": "2025-01-15", "color": "green"},
            {"date": "2025-02-01", "color": "yellow"},
        ]}
        result = validate_app_data(raw)
        self.assertEqual([d.date for d in result.data.days], ["2025-01-15", "2025-02-01", "2025-03-01"])
        self.assertEqual(result.warnings, [])

    def test_non_object_input_is_treated_as_empty_document(self) -> None:
        for raw in (None, [1, 2], "text", 42):
            result = validate_app_data(raw)
            self.assertTrue(result.ok)
            self.assertEqual(result.data.to_dict(), {"version": 1, "days": [], "goals": []})

    def test_input_is_not_mutated(self) -> None:
        raw = {
            "version": 3,
            "goals": [goal("g1"), goal("g1", "dup")],
            "days": [{"date": "2025-01-02", "color": "blue", "completedGoals": ["g1", "g1", 7, "x"]}],
        }
        snapshot = copy.deepcopy(raw)
        validate_app_data(raw)
        self.assertEqual(raw, snapshot)

    def test_habit_aliases_are_accepted(self) -> None:
        raw = {
            "habits": [goal("h1", "Stretch")],
            "days": [{"date": "2025-01-02", "color": "green", "completedHabits": ["h1"]}],
        }
        result = validate_app_data(raw)
        self.assertTrue(result.ok)
        self.assertEqual(result.data.goals[0].id, "h1")
        document = result.data.to_dict()
        self.assertEqual(document["days"][0]["completedGoals"], ["h1"])
        self.assertNotIn("habits", document)

    def test_normalized_document_validates_cleanly_again(self) -> None:
        raw = {
            "version": 1,
            "goals": [goal("g1", description="desc", createdAt="2025-01-01T00:00:00Z")],
            "days": [{"date": "2025-01-02", "text": "x", "diaryEntry": "# md", "color": "neutral",
                      "completedGoals": ["g1"], "updatedAt": "2025-01-02T10:00:00Z"}],
        }
        first = validate_app_data(raw)
        second = validate_app_data(first.data.to_dict())
        self.assertTrue(second.ok)
        self.assertEqual(second.warnings, [])
        self.assertEqual(second.data, first.data)

    def test_assert_valid_app_data_raises_with_error_list(self) -> None:
        with self.assertRaises(AppDataValidationError) as ctx:
            assert_valid_app_data({"goals": [{"id": "g1"}]})
        self.assertEqual(ctx.exception.errors, ["goals[0]: goal.title missing", "goals[0]: goal.startDate invalid"])
        self.assertEqual(assert_valid_app_data({}).days, [])


class TestVersionHandling(unittest.TestCase):
    def test_missing_or_null_version_is_silent(self) -> None:
        self.assertEqual(validate_app_data({}).warnings, [])
        self.assertEqual(validate_app_data({"version": None}).warnings, [])
        self.assertEqual(validate_app_data({"version": 1.0}).warnings, [])

    def test_mismatched_version_is_coerced_with_warning(self) -> None:
        result = validate_app_data({"version": 2})
        self.assertTrue(result.ok)
        self.assertEqual(result.data.version, 1)
        self.assertEqual(result.warnings, ["unexpected version 2; parsed as v1"])
        self.assertEqual(validate_app_data({"version": "1"}).warnings, ["unexpected version 1; parsed as v1"])
        self.assertEqual(validate_app_data({"version": True}).warnings, ["unexpected version true; parsed as v1"])

    def test_registered_migration_upgrades_document(self) -> None:
        def rename_entries(doc):
            out = {k: v for k, v in doc.items() if k != "entries"}
            out["days"] = doc.get("entries", [])
            out["version"] = 2
            return out

        policy = SchemaVersionPolicy(current=2)
        policy.register(1, rename_entries)
        raw = {"version": 1, "entries": [{"date": "2025-01-01", "text": "x", "color": "red"}]}
        snapshot = copy.deepcopy(raw)

        result = validate_app_data(raw, policy)
        self.assertTrue(result.ok)
        self.assertEqual(result.data.version, 2)
        self.assertEqual(result.data.days[0].color, DayColor.RED)
        self.assertEqual(result.warnings, [])
        self.assertEqual(raw, snapshot)

    def test_register_rejects_migration_from_current_version(self) -> None:
        with self.assertRaises(ValueError):
            SchemaVersionPolicy(current=1).register(1, lambda doc: doc)

    def test_migration_cycle_is_detected(self) -> None:
        policy = SchemaVersionPolicy(current=3, migrations={
            1: lambda doc: {**doc, "version": 2},
            2: lambda doc: {**doc, "version": 1},
        })
        with self.assertRaises(ValueError):
            policy.apply({"version": 1})


class TestValidateItems(unittest.TestCase):
    def test_goal_cosmetic_fields_of_wrong_type_are_dropped_silently(self) -> None:
        result = validate_goal(goal(description=5, createdAt=None, updatedAt="2025-01-01T00:00:00Z"))
        self.assertTrue(result.ok)
        self.assertIsNone(result.data.description)
        self.assertIsNone(result.data.created_at)
        self.assertEqual(result.data.updated_at, "2025-01-01T00:00:00Z")
        self.assertEqual(result.warnings, [])

    def test_goal_id_and_title_are_trimmed(self) -> None:
        result = validate_goal(goal("  g1 ", "  Read  "))
        self.assertEqual((result.data.id, result.data.title), ("g1", "Read"))

    def test_day_color_is_normalized_to_yellow(self) -> None:
        for color in (None, "blue", 3):
            result = validate_day({"date": "2025-01-01", "color": color})
            self.assertTrue(result.ok)
            self.assertEqual(result.data.color, DayColor.YELLOW)
            self.assertEqual(result.warnings, ["day.color normalized to yellow"])

    def test_neutral_color_is_accepted(self) -> None:
        result = validate_day({"date": "2025-01-01", "color": "neutral"})
        self.assertEqual(result.data.color, DayColor.NEUTRAL)
        self.assertEqual(result.warnings, [])

    def test_completed_goals_are_deduplicated_in_first_seen_order(self) -> None:
        result = validate_day({"date": "2025-01-01", "color": "green", "completedGoals": ["b", 1, "a", "b", None]})
        self.assertEqual(result.data.completed_goals, ["b", "a"])
        self.assertEqual(result.warnings, [])

    def test_empty_completed_goals_are_omitted(self) -> None:
        result = validate_day({"date": "2025-01-01", "color": "green", "completedGoals": []})
        self.assertIsNone(result.data.completed_goals)
        self.assertNotIn("completedGoals", result.data.to_dict())

    def test_day_text_and_diary_entry_defaults(self) -> None:
        result = validate_day({"date": "2025-01-01", "color": "red", "text": 12, "diaryEntry": ["no"]})
        self.assertEqual(result.data.text, "")
        self.assertIsNone(result.data.diary_entry)


if __name__ == "__main__":
    unittest.main(verbosity=2)
