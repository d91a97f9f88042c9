"""Tests for error tracking and component health."""

import unittest
import sys
import os
from datetime import datetime, timedelta

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from catpoint_security.services.error_handler import (
    ErrorHandler, ErrorSeverity, ComponentStatus, global_error_handler
)


class TestErrorHandler(unittest.TestCase):
    """Test error handler functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.error_handler = ErrorHandler(max_error_history=5)

    def tearDown(self):
        """Clean up test fixtures."""
        self.error_handler.clear_error_history()

    def test_component_registration(self):
        """Test component registration for health monitoring."""
        self.error_handler.register_component("storage_service")

        health = self.error_handler.get_component_health()
        self.assertEqual(health["storage_service"], ComponentStatus.HEALTHY)
        self.assertEqual(self.error_handler.get_error_stats()["component_error_counts"]["storage_service"], 0)

    def test_error_handling_basic(self):
        """Test basic error handling."""
        error = ValueError("bad value")

        record = self.error_handler.handle_error("cat_classifier", error)

        self.assertEqual(record.component_name, "cat_classifier")
        self.assertIs(record.error, error)
        self.assertEqual(record.severity, ErrorSeverity.MEDIUM)
        self.assertIn("ValueError", record.traceback_str)
        self.assertEqual(self.error_handler.get_error_stats()["total_errors"], 1)

    def test_severity_updates_status(self):
        self.error_handler.handle_error("a", RuntimeError("x"), ErrorSeverity.LOW)
        self.error_handler.handle_error("b", RuntimeError("x"), ErrorSeverity.HIGH)
        self.error_handler.handle_error("c", RuntimeError("x"), ErrorSeverity.CRITICAL)

        health = self.error_handler.get_component_health()
        self.assertEqual(health["a"], ComponentStatus.HEALTHY)
        self.assertEqual(health["b"], ComponentStatus.DEGRADED)
        self.assertEqual(health["c"], ComponentStatus.FAILED)

    def test_mark_healthy(self):
        self.error_handler.handle_error("cat_classifier", RuntimeError("offline"), ErrorSeverity.HIGH)

        self.error_handler.mark_healthy("cat_classifier")

        self.assertEqual(self.error_handler.get_component_health()["cat_classifier"],
                         ComponentStatus.HEALTHY)

    def test_history_is_bounded(self):
        for i in range(8):
            self.error_handler.handle_error("storage_service", RuntimeError(str(i)))

        stats = self.error_handler.get_error_stats()
        self.assertEqual(stats["total_errors"], 5)
        self.assertEqual(stats["component_error_counts"]["storage_service"], 8)

    def test_error_summary(self):
        self.error_handler.handle_error("a", RuntimeError("new"), ErrorSeverity.HIGH)
        old = self.error_handler.handle_error("a", RuntimeError("old"), ErrorSeverity.LOW)
        old.timestamp = datetime.now() - timedelta(hours=48)

        summary = self.error_handler.get_error_summary(hours=24)

        self.assertEqual(summary["total_errors"], 1)
        self.assertEqual(summary["component_counts"], {"a": 1})
        self.assertEqual(summary["severity_counts"]["high"], 1)
        self.assertEqual(summary["severity_counts"]["low"], 0)
        self.assertEqual(summary["time_period_hours"], 24)

    def test_reset_error_counts(self):
        self.error_handler.handle_error("a", RuntimeError("x"), ErrorSeverity.CRITICAL)
        self.error_handler.handle_error("b", RuntimeError("x"), ErrorSeverity.HIGH)

        self.error_handler.reset_error_counts("a")
        stats = self.error_handler.get_error_stats()
        self.assertEqual(stats["component_error_counts"], {"a": 0, "b": 1})
        self.assertEqual(stats["component_status"]["a"], "healthy")

        self.error_handler.reset_error_counts()
        self.assertEqual(self.error_handler.get_error_stats()["component_error_counts"]["b"], 0)

    def test_global_error_handler(self):
        self.assertIsInstance(global_error_handler, ErrorHandler)


if __name__ == '__main__':
    unittest.main()
