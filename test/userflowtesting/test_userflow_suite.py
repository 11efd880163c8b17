#!/usr/bin/env python3
"""
User Flow Test Suite
Aggregates the end-to-end engine flows so they can be run in one go.
"""

import sys
import os

project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Sibling modules are imported by name; "test" itself is a standard library package
suite_dir = os.path.dirname(os.path.abspath(__file__))
if suite_dir not in sys.path:
    sys.path.insert(0, suite_dir)

from test_retirement_flow import test_retirement_flow, test_rejected_input_flow
from test_multi_plan_flow import test_multi_plan_flow
from test_weekly_progress_flow import test_weekly_progress_flow
from test_persistence_flow import test_persistence_flow, test_corrupt_state_flow

FLOWS = [
    ("Retirement Questionnaire", test_retirement_flow),
    ("Rejected Input", test_rejected_input_flow),
    ("Multiple Plans", test_multi_plan_flow),
    ("Weekly Progress", test_weekly_progress_flow),
    ("Persistence", test_persistence_flow),
    ("Corrupt State Recovery", test_corrupt_state_flow),
]


class UserFlowTestSuite:
    """Test suite for validating user flows through the game engine."""

    def __init__(self):
        self.test_results = []

    def run_all_tests(self):
        """Run all user flow tests and return results."""
        print("=== Running User Flow Test Suite ===\n")
        for name, flow in FLOWS:
            self.run_test(name, flow)
        self.print_test_summary()
        return self.test_results

    def run_test(self, test_name, test_function):
        """Run a single test and record the result."""
        print(f"\n{'='*60}")
        print(f"Running: {test_name}")
        print(f"{'='*60}")

        try:
            test_function()
            self.test_results.append((test_name, "PASS", "Test completed successfully"))
        except AssertionError as e:
            self.test_results.append((test_name, "FAIL", str(e) or "Assertion failed"))
            print(f"Test failed: {e}")
        except Exception as e:
            self.test_results.append((test_name, "ERROR", str(e)))
            print(f"Test failed with error: {str(e)}")

    def print_test_summary(self):
        """Print test summary."""
        print("\n=== Test Summary ===")
        print("-" * 50)

        passed = sum(1 for _, status, _ in self.test_results if status == "PASS")
        failed = sum(1 for _, status, _ in self.test_results if status == "FAIL")
        errors = sum(1 for _, status, _ in self.test_results if status == "ERROR")

        print(f"Total Tests: {len(self.test_results)}")
        print(f"Passed: {passed}")
        print(f"Failed: {failed}")
        print(f"Errors: {errors}")
        for name, status, message in self.test_results:
            if status != "PASS":
                print(f"  {status}: {name} - {message}")


if __name__ == "__main__":
    results = UserFlowTestSuite().run_all_tests()
    sys.exit(0 if all(status == "PASS" for _, status, _ in results) else 1)
