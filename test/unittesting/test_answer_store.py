"""
Unit tests for plan/answer_store.py
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import unittest
from state import Answer
from plan.answer_store import AnswerStore, to_number


class TestAnswerStore(unittest.TestCase):
    """Test cases for AnswerStore class."""

    def setUp(self):
        """Set up test fixtures."""
        self.store = AnswerStore()
        self.store.upsert(Answer(question_id="monthly_income", value=30000, label="30,000 ฿"))
        self.store.upsert(Answer(question_id="income_stability", value="stable", label="Very stable"))

    def test_upsert_replaces_existing_answer(self):
        """Test that re-submitting an id keeps exactly one answer with the latest value."""
        self.store.upsert(Answer(question_id="monthly_income", value=45000))
        self.assertEqual(len(self.store), 2)
        self.assertEqual(self.store.value("monthly_income"), 45000)
        ids = [answer.question_id for answer in self.store]
        self.assertEqual(ids.count("monthly_income"), 1)

    def test_replaced_answer_moves_to_end(self):
        """Test that a replaced answer is ordered like a fresh submission."""
        self.store.upsert(Answer(question_id="monthly_income", value=45000))
        ids = [answer.question_id for answer in self.store]
        self.assertEqual(ids, ["income_stability", "monthly_income"])

    def test_lookup_helpers(self):
        """Test get/value/numeric/text lookups and their defaults."""
        self.assertEqual(self.store.get("monthly_income").label, "30,000 ฿")
        self.assertIsNone(self.store.get("monthly_expenses"))
        self.assertEqual(self.store.value("monthly_expenses", 20000), 20000)
        self.assertEqual(self.store.numeric("monthly_income"), 30000)
        self.assertIsNone(self.store.numeric("income_stability"))
        self.assertEqual(self.store.numeric("income_stability", 7), 7)
        self.assertEqual(self.store.text("income_stability"), "stable")
        self.assertEqual(self.store.text("risk_tolerance", "moderate"), "moderate")

    def test_contains(self):
        self.assertIn("monthly_income", self.store)
        self.assertNotIn("avg_income", self.store)

    def test_to_list_returns_copies(self):
        """Test that exported answers do not alias the stored ones."""
        exported = self.store.to_list()
        exported[0].value = 1
        self.assertEqual(self.store.value("monthly_income"), 30000)

    def test_construct_from_answers(self):
        """Test that building from a list applies upsert semantics."""
        store = AnswerStore([
            Answer(question_id="current_age", value=30),
            Answer(question_id="current_age", value=35),
        ])
        self.assertEqual(len(store), 1)
        self.assertEqual(store.value("current_age"), 35)


class TestToNumber(unittest.TestCase):
    """Test cases for to_number."""

    def test_numbers_pass_through(self):
        self.assertEqual(to_number(42), 42)
        self.assertEqual(to_number(2.5), 2.5)

    def test_digit_strings(self):
        """Test digit strings, with and without thousands separators."""
        self.assertEqual(to_number("30000"), 30000)
        self.assertEqual(to_number("1,250,000"), 1250000)
        self.assertEqual(to_number(" 12.5 "), 12.5)

    def test_rejected_values(self):
        """Test values that are not usable numbers."""
        for value in ("", "abc", "12abc", float("nan"), float("inf"), "inf", None, True, [1]):
            self.assertIsNone(to_number(value), msg=repr(value))


if __name__ == '__main__':
    unittest.main()
