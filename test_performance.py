#!/usr/bin/env python3
"""
Tests for operation timing.
"""

import sys
import unittest
from pathlib import Path
from unittest.mock import patch

sys.path.insert(0, str(Path(__file__).parent))

from aursync.performance import PerformanceLogger


class TestPerformanceLogger(unittest.TestCase):

    def test_records_successful_operation(self):
        perf = PerformanceLogger()

        with perf.time_operation("sync foo"):
            pass

        self.assertEqual(len(perf.metrics), 1)
        self.assertEqual(perf.metrics[0].operation, "sync foo")
        self.assertTrue(perf.metrics[0].success)
        self.assertGreaterEqual(perf.metrics[0].duration, 0)

    def test_records_failure_and_reraises(self):
        perf = PerformanceLogger()

        with self.assertRaises(RuntimeError):
            with perf.time_operation("build foo"):
                raise RuntimeError("makepkg exploded")

        self.assertFalse(perf.metrics[0].success)

    @patch("aursync.performance.SLOW_OPERATION_SECONDS", -1.0)
    def test_slow_operation_is_logged_as_warning(self):
        perf = PerformanceLogger()

        with self.assertLogs("aursync.performance", level="WARNING") as logs:
            with perf.time_operation("build foo"):
                pass

        self.assertIn("Slow operation: build foo", logs.output[0])

    def test_summary(self):
        perf = PerformanceLogger()
        with perf.time_operation("sync foo"):
            pass
        with self.assertRaises(ValueError):
            with perf.time_operation("sync bar"):
                raise ValueError("nope")

        summary = perf.log_performance_summary()

        self.assertEqual(summary["total_operations"], 2)
        self.assertEqual(summary["success_rate"], 0.5)
        self.assertIn(summary["slowest_operation"]["name"], ("sync foo", "sync bar"))

    def test_empty_summary(self):
        perf = PerformanceLogger()

        self.assertIsNone(perf.log_performance_summary())
        self.assertEqual(perf.get_performance_summary()["total_operations"], 0)


if __name__ == "__main__":
    unittest.main()
