import unittest
import logging
import tempfile
from pathlib import Path
from logging.handlers import RotatingFileHandler
from unittest.mock import patch

from app.config import logging_config
from app.config.logging_config import configure_logging


class TestLoggingConfig(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        log_dir = Path(self.tmp.name)
        self.patches = [
            patch.object(logging_config, "LOG_DIR", log_dir),
            patch.object(logging_config, "LOG_FILE", log_dir / "realtime_agents.log"),
        ]
        for p in self.patches:
            p.start()

    def tearDown(self):
        logger = logging.getLogger("realtime_agents")
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
            handler.close()
        for p in self.patches:
            p.stop()
        self.tmp.cleanup()

    def test_configure_logging(self):
        logger = configure_logging()
        self.assertIsInstance(logger, logging.Logger)
        self.assertEqual(logger.name, "realtime_agents")
        self.assertFalse(logger.propagate)

        handler = logger.handlers[0]
        self.assertIsInstance(handler, logging.StreamHandler)
        self.assertEqual(handler.formatter._fmt, "%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        self.assertTrue(any(isinstance(h, RotatingFileHandler) for h in logger.handlers))

    def test_level_override(self):
        logger = configure_logging("debug")
        self.assertEqual(logger.level, logging.DEBUG)

    def test_reconfiguring_does_not_stack_handlers(self):
        configure_logging()
        logger = configure_logging()
        self.assertEqual(len(logger.handlers), 2)


if __name__ == "__main__":
    unittest.main()
