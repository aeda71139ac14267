from __future__ import annotations

import logging
import unittest

from loguru import logger

from services.logging_setup import _level_name, log_timing


class LogTimingTests(unittest.TestCase):
    def setUp(self) -> None:
        self.lines: list[str] = []
        sink_id = logger.add(lambda msg: self.lines.append(msg.record["message"]), level="DEBUG")
        self.addCleanup(logger.remove, sink_id)

    def test_success_logs_start_and_end(self) -> None:
        with log_timing("SmsApiClient._get", endpoint="sent-sms"):
            pass
        self.assertTrue(self.lines[0].startswith("[SmsApiClient._get] - start endpoint=sent-sms"))
        self.assertIn("- end - duration_ms=", self.lines[-1])

    def test_failure_is_logged_and_reraised(self) -> None:
        with self.assertRaises(KeyError):
            with log_timing("SmsApiClient._get", endpoint="x" * 500):
                raise KeyError("boom")
        self.assertIn("- failed - duration_ms=", self.lines[-1])
        self.assertIn("(500 chars)", self.lines[-1])


class LevelNameTests(unittest.TestCase):
    def test_levels(self) -> None:
        self.assertEqual(_level_name(logging.WARNING, "INFO"), "WARNING")
        self.assertEqual(_level_name("debug", "INFO"), "DEBUG")
        self.assertEqual(_level_name("loud", "INFO"), "INFO")
        self.assertEqual(_level_name(None, "DEBUG"), "DEBUG")


if __name__ == "__main__":
    unittest.main()
