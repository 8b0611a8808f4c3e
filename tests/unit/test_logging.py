import logging
import os
import shutil
import tempfile
import unittest

from pathlib import Path
from unittest.mock import patch

from rhinoview.utils.logging import FileLoggingContext, setup_logging


class TestFileLoggingContext(unittest.TestCase):
    """Test FileLoggingContext."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.root_logger = logging.getLogger()
        self.original_level = self.root_logger.level
        self.root_logger.setLevel(logging.INFO)

    def tearDown(self):
        """Clean up test fixtures."""
        self.root_logger.setLevel(self.original_level)
        shutil.rmtree(self.temp_dir)

    def test_logs_written_to_file(self):
        """Test records from any logger end up in the run log."""
        log_path = self.temp_dir / "nested" / "run.log"

        with FileLoggingContext(log_path):
            logging.getLogger("rhinoview.viewer.materializer").info("Decoded 3 objects")

        self.assertIn("Decoded 3 objects", log_path.read_text())
        self.assertIn("rhinoview.viewer.materializer", log_path.read_text())

    def test_handler_removed_on_exit(self):
        """Test the file handler does not outlive the context."""
        handlers_before = list(self.root_logger.handlers)
        log_path = self.temp_dir / "run.log"

        with FileLoggingContext(log_path) as context:
            self.assertIn(context.file_handler, self.root_logger.handlers)
        logging.getLogger(__name__).info("after exit")

        self.assertEqual(self.root_logger.handlers, handlers_before)
        self.assertNotIn("after exit", log_path.read_text())

    def test_suppress_stdout_restores_handlers(self):
        """Test console handlers are detached inside and restored after."""
        console_handler = logging.StreamHandler()
        self.root_logger.addHandler(console_handler)
        try:
            with FileLoggingContext(self.temp_dir / "run.log", suppress_stdout=True):
                self.assertNotIn(console_handler, self.root_logger.handlers)
            self.assertIn(console_handler, self.root_logger.handlers)
        finally:
            self.root_logger.removeHandler(console_handler)


class TestSetupLogging(unittest.TestCase):
    """Test setup_logging level selection."""

    @patch("logging.basicConfig")
    def test_verbose_selects_debug(self, mock_basic_config):
        setup_logging(verbose=True)

        self.assertEqual(mock_basic_config.call_args.kwargs["level"], logging.DEBUG)

    @patch("logging.basicConfig")
    def test_level_from_environment(self, mock_basic_config):
        with patch.dict(os.environ, {"LOGLEVEL": "warning"}):
            setup_logging()

        self.assertEqual(mock_basic_config.call_args.kwargs["level"], logging.WARNING)

    @patch("logging.basicConfig")
    def test_unknown_level_falls_back_to_info(self, mock_basic_config):
        setup_logging(level="chatty")

        self.assertEqual(mock_basic_config.call_args.kwargs["level"], logging.INFO)


if __name__ == "__main__":
    unittest.main()
