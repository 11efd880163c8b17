"""
Unit test suite runner for all core function tests.
"""

import sys
import os

# Add project root to path
project_root = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

# Sibling modules are imported by name; "test" itself is a standard library package
suite_dir = os.path.dirname(os.path.abspath(__file__))
if suite_dir not in sys.path:
    sys.path.insert(0, suite_dir)

import unittest

from test_question_catalog import (
    TestQuestionCatalog, TestVisibility, TestResolveBound, TestCheckFlow
)
from test_answer_store import TestAnswerStore, TestToNumber
from test_flow_resolver import TestActiveQuestions, TestFlowResolver, TestValidation
from test_projection_engine import (
    TestComputeSnapshot, TestExistingSavings, TestGrowthHelpers, TestProjectionSchedule, TestWhatIf
)
from test_progress_manager import (
    TestXP, TestAppOpen, TestQuests, TestMonthlyLogs, TestPlans, TestResetAndPersistence
)
from test_quests import TestCalendarKeys, TestWeeklyQuests, TestMonthPlan
from test_ranks import TestRanks
from test_event_bus import TestEventBus
from test_state_store import TestInMemoryStateStore, TestJsonFileStateStore
from test_monitoring import TestMetrics
from test_logging_config import TestLoggingConfig

TEST_CASES = [
    TestQuestionCatalog, TestVisibility, TestResolveBound, TestCheckFlow,
    TestAnswerStore, TestToNumber,
    TestActiveQuestions, TestFlowResolver, TestValidation,
    TestComputeSnapshot, TestExistingSavings, TestGrowthHelpers, TestProjectionSchedule, TestWhatIf,
    TestXP, TestAppOpen, TestQuests, TestMonthlyLogs, TestPlans, TestResetAndPersistence,
    TestCalendarKeys, TestWeeklyQuests, TestMonthPlan,
    TestRanks,
    TestEventBus,
    TestInMemoryStateStore, TestJsonFileStateStore,
    TestMetrics,
    TestLoggingConfig,
]


def run_all_tests():
    """Run all unit tests."""
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    for case in TEST_CASES:
        suite.addTests(loader.loadTestsFromTestCase(case))

    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)

    # Print summary
    print("\n" + "=" * 60)
    print("Test Summary:")
    print(f"Tests run: {result.testsRun}")
    print(f"Failures: {len(result.failures)}")
    print(f"Errors: {len(result.errors)}")
    print("=" * 60)

    return result


if __name__ == '__main__':
    run_all_tests()
