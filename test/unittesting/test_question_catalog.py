"""
Unit tests for plan/config.py
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import unittest
from state import Answer, PlanKind
from plan.answer_store import AnswerStore
from plan.config import (
    DYNAMIC_BOUND_SENTINEL,
    DynamicBound,
    QuestionKind,
    QuestionSpec,
    VisibilityCondition,
    check_flow,
    find_question,
    get_flow,
    get_plan_option,
    is_visible,
    resolve_bound,
)


class TestQuestionCatalog(unittest.TestCase):
    """Test cases for the question catalog and its predicates."""

    def test_every_kind_has_a_flow(self):
        """Test that each plan kind maps to a non-empty flow."""
        for kind in PlanKind:
            flow = get_flow(kind)
            self.assertGreater(len(flow), 0)
            self.assertEqual(flow[0].id, "monthly_income")

    def test_flow_lookup_accepts_kind_string(self):
        """Test that the plain string value of a kind resolves the same flow."""
        self.assertEqual(get_flow("retirement"), get_flow(PlanKind.RETIREMENT))

    def test_unknown_kind_raises(self):
        """Test that an unknown plan kind is a programming error."""
        with self.assertRaises(ValueError):
            get_flow("holiday")

    def test_kind_specific_questions(self):
        """Test the questions that distinguish the three flows."""
        saving = [q.id for q in get_flow(PlanKind.SAVING)]
        goal = [q.id for q in get_flow(PlanKind.GOAL)]
        retirement = [q.id for q in get_flow(PlanKind.RETIREMENT)]

        self.assertIn("saving_timeline", saving)
        self.assertNotIn("big_purchase", saving)

        self.assertIn("big_purchase", goal)
        self.assertIn("big_purchase_timeline", goal)
        self.assertIn("goal_priority", goal)

        for question_id in ("current_age", "retirement_age", "expected_lifespan",
                            "retirement_monthly_expense", "retirement_savings",
                            "retirement_savings_manual"):
            self.assertIn(question_id, retirement)
        self.assertNotIn("current_savings", retirement)

    def test_plan_options(self):
        """Test the display presets of the plan kinds."""
        option = get_plan_option(PlanKind.GOAL)
        self.assertEqual(option.kind, PlanKind.GOAL)
        self.assertEqual(option.display_name, "Goal Plan")
        self.assertTrue(option.emoji)

    def test_find_question(self):
        """Test finding a question across flows and within one flow."""
        self.assertIsNotNone(find_question("goal_priority"))
        self.assertIsNone(find_question("goal_priority", PlanKind.SAVING))
        self.assertIsNone(find_question("nonexistent_id"))


class TestVisibility(unittest.TestCase):
    """Test cases for is_visible."""

    def setUp(self):
        """Set up test fixtures."""
        self.manual = find_question("current_savings_manual")

    def test_unconditional_question_is_visible(self):
        """Test that a question without a condition is always shown."""
        self.assertTrue(is_visible(find_question("monthly_income"), AnswerStore()))

    def test_missing_answer_hides_question(self):
        """Test that visibility fails closed when the gating answer is absent."""
        self.assertFalse(is_visible(self.manual, AnswerStore()))

    def test_accepted_value_shows_question(self):
        """Test that an accepted gating value reveals the question."""
        answers = AnswerStore([Answer(question_id="current_savings", value="manual")])
        self.assertTrue(is_visible(self.manual, answers))

    def test_other_value_hides_question(self):
        """Test that any other gating value hides the question."""
        answers = AnswerStore([Answer(question_id="current_savings", value=50000)])
        self.assertFalse(is_visible(self.manual, answers))

    def test_multiple_accepted_values(self):
        """Test a condition listing several accepted values."""
        avg_income = find_question("avg_income")
        for value, expected in (("stable", False), ("mixed", True), ("variable", True)):
            answers = AnswerStore([Answer(question_id="income_stability", value=value)])
            self.assertEqual(is_visible(avg_income, answers), expected)


class TestResolveBound(unittest.TestCase):
    """Test cases for resolve_bound."""

    def setUp(self):
        """Set up test fixtures."""
        self.expenses = find_question("monthly_expenses")

    def test_fixed_bound(self):
        """Test that fixed bounds are returned as they are."""
        age = find_question("current_age")
        self.assertEqual(resolve_bound(age, "min", AnswerStore()), 18)
        self.assertEqual(resolve_bound(age, "max", AnswerStore()), 70)

    def test_dynamic_bound_follows_answer(self):
        """Test that a dynamic max follows the referenced answer."""
        answers = AnswerStore([Answer(question_id="monthly_income", value=45000)])
        self.assertEqual(resolve_bound(self.expenses, "max", answers), 45000)

    def test_dynamic_bound_sentinel_when_unanswered(self):
        """Test the sentinel when the referenced question is unanswered."""
        self.assertEqual(resolve_bound(self.expenses, "max", AnswerStore()), DYNAMIC_BOUND_SENTINEL)

    def test_dynamic_bound_sentinel_when_non_numeric(self):
        """Test the sentinel when the referenced answer is not a number."""
        answers = AnswerStore([Answer(question_id="monthly_income", value="lots")])
        self.assertEqual(resolve_bound(self.expenses, "max", answers), DYNAMIC_BOUND_SENTINEL)

    def test_missing_bounds(self):
        """Test that a missing min is 0 and a missing max is the sentinel."""
        spec = QuestionSpec(id="free", group_key="misc", kind=QuestionKind.PLAIN_NUMERIC)
        self.assertEqual(resolve_bound(spec, "min", AnswerStore()), 0)
        self.assertEqual(resolve_bound(spec, "max", AnswerStore()), DYNAMIC_BOUND_SENTINEL)

    def test_invalid_which_raises(self):
        """Test that asking for anything but min/max raises an error."""
        with self.assertRaises(ValueError):
            resolve_bound(self.expenses, "step", AnswerStore())


class TestCheckFlow(unittest.TestCase):
    """Test cases for catalog validation."""

    def test_forward_visibility_reference_rejected(self):
        """Test that a condition on a later question is rejected."""
        gated = QuestionSpec(
            id="gated", group_key="misc", kind=QuestionKind.PLAIN_NUMERIC,
            visibility_condition=VisibilityCondition("gate", ("yes",)),
        )
        gate = QuestionSpec(id="gate", group_key="misc", kind=QuestionKind.CHOICE)
        with self.assertRaises(ValueError):
            check_flow(PlanKind.SAVING, (gated, gate))

    def test_forward_bound_reference_rejected(self):
        """Test that a dynamic bound on a later question is rejected."""
        bounded = QuestionSpec(
            id="bounded", group_key="misc", kind=QuestionKind.SLIDER_NUMERIC,
            max=DynamicBound("ceiling"),
        )
        ceiling = QuestionSpec(id="ceiling", group_key="misc", kind=QuestionKind.PLAIN_NUMERIC)
        with self.assertRaises(ValueError):
            check_flow(PlanKind.SAVING, (bounded, ceiling))

    def test_duplicate_id_rejected(self):
        """Test that duplicate question ids are rejected."""
        spec = QuestionSpec(id="twice", group_key="misc", kind=QuestionKind.PLAIN_NUMERIC)
        with self.assertRaises(ValueError):
            check_flow(PlanKind.GOAL, (spec, spec))

    def test_shipped_flows_are_valid(self):
        """Test that the shipped flows pass validation."""
        for kind in PlanKind:
            check_flow(kind, get_flow(kind))


if __name__ == '__main__':
    unittest.main()
