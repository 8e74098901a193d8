"""Tests for logging configuration."""

import json
import logging
import unittest

from licensegraph.logging_config import StructuredFormatter, logger, setup_logging


class TestSetupLogging(unittest.TestCase):
    def tearDown(self):
        setup_logging("INFO")

    def test_global_logger_has_single_handler(self):
        self.assertEqual(logger.name, "licensegraph")
        setup_logging("INFO")
        setup_logging("INFO")
        self.assertEqual(len(logger.handlers), 1)

    def test_level_update(self):
        setup_logging("debug")
        self.assertEqual(logger.level, logging.DEBUG)
        self.assertEqual(logger.handlers[0].level, logging.DEBUG)


class TestStructuredFormatter(unittest.TestCase):
    def test_record_is_json(self):
        record = logging.LogRecord("licensegraph", logging.WARNING, __file__, 1, "resolved %d modules", (2,), None)
        entry = json.loads(StructuredFormatter().format(record))

        self.assertEqual(entry["level"], "WARNING")
        self.assertEqual(entry["logger"], "licensegraph")
        self.assertEqual(entry["message"], "resolved 2 modules")
        self.assertNotIn("exception", entry)


if __name__ == "__main__":
    unittest.main()
