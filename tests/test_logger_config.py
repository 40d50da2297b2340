import logging
import os
import shutil
import tempfile
import unittest
from logging.handlers import RotatingFileHandler

from config import settings
from services.logger_config import NOISY_LOGGERS, setup_logging


class TestSetupLogging(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self._saved_path = settings.LOG_FILE_PATH
        settings.LOG_FILE_PATH = os.path.join(self.temp_dir, "nested", "search.log")

    def tearDown(self):
        logger = logging.getLogger(settings.LOGGER_NAME)
        for handler in logger.handlers:
            handler.close()
        settings.LOG_FILE_PATH = self._saved_path
        setup_logging()
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_file_and_console_handlers(self):
        setup_logging()
        logger = logging.getLogger(settings.LOGGER_NAME)

        file_handlers = [h for h in logger.handlers if isinstance(h, RotatingFileHandler)]
        self.assertEqual(len(file_handlers), 1)
        self.assertEqual(file_handlers[0].maxBytes, settings.LOG_MAX_BYTES)
        self.assertEqual(len(logger.handlers), 2)
        self.assertTrue(os.path.exists(settings.LOG_FILE_PATH))

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging()
        setup_logging()
        self.assertEqual(len(logging.getLogger(settings.LOGGER_NAME).handlers), 2)

    def test_client_loggers_are_quieted(self):
        setup_logging()
        for name in NOISY_LOGGERS:
            self.assertEqual(logging.getLogger(name).level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
