"""
Unit tests for operation/monitoring
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

import unittest
from operation.monitoring.metrics import Counter, MetricsRegistry, Timer
from operation.monitoring.performance import performance_timer


class TestMetrics(unittest.TestCase):
    """Test cases for metric types and the registry."""

    def setUp(self):
        """Set up test fixtures."""
        self.registry = MetricsRegistry()

    def test_counter_only_increases(self):
        counter = Counter("answers_submitted")
        counter.inc()
        counter.inc(2)
        self.assertEqual(counter.get(), 3)
        with self.assertRaises(ValueError):
            counter.inc(-1)

    def test_timer_stats(self):
        timer = Timer("compute_snapshot")
        self.assertEqual(timer.get_stats()["count"], 0)
        timer.record(0.1)
        timer.record(0.3)
        stats = timer.get_stats()
        self.assertEqual(stats["count"], 2)
        self.assertAlmostEqual(stats["mean"], 0.2)
        self.assertAlmostEqual(stats["max"], 0.3)

    def test_registry_returns_same_metric(self):
        self.assertIs(self.registry.counter("xp_awarded"), self.registry.counter("xp_awarded"))
        self.registry.gauge("xp").set(120)
        self.registry.counter("xp_awarded").inc(120)
        metrics = self.registry.get_all_metrics()
        self.assertEqual(metrics["gauge_xp"], 120)
        self.assertEqual(metrics["counter_xp_awarded"], 120)
        self.assertIn("uptime_seconds", metrics)

    def test_reset_all_keeps_gauges(self):
        self.registry.gauge("xp").set(50)
        self.registry.counter("xp_awarded").inc(50)
        self.registry.reset_all()
        self.assertEqual(self.registry.counter("xp_awarded").get(), 0)
        self.assertEqual(self.registry.gauge("xp").get(), 50)

    def test_registries_are_independent(self):
        MetricsRegistry().counter("xp_awarded").inc()
        self.assertEqual(self.registry.counter("xp_awarded").get(), 0)

    def test_performance_timer_records_even_on_error(self):
        with performance_timer(self.registry, "compute_snapshot"):
            pass
        with self.assertRaises(RuntimeError):
            with performance_timer(self.registry, "compute_snapshot"):
                raise RuntimeError("boom")
        self.assertEqual(self.registry.timer("compute_snapshot").get_stats()["count"], 2)


if __name__ == '__main__':
    unittest.main()
