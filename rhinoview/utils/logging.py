import logging
import os

from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False, level: str | None = None) -> None:
    """Configure root logging for an entry point.

    Args:
        verbose: Enable debug level logging if True.
        level: Explicit level name. Defaults to the LOGLEVEL environment
            variable, then INFO.
    """
    if verbose:
        log_level = logging.DEBUG
    else:
        level_name = (level or os.environ.get("LOGLEVEL", "INFO")).upper()
        log_level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=log_level, format=LOG_FORMAT)


class FileLoggingContext:
    """Context manager that tees all logging to a run-specific log file.

    This class captures ALL logging that occurs within its context.
    """

    def __init__(self, log_file_path: Path, suppress_stdout: bool = False):
        """
        Args:
            log_file_path: Path to the log file. Parent directories are created.
            suppress_stdout: If True, prevents logs from also going to stdout
        """
        self.log_file_path = Path(log_file_path)
        self.suppress_stdout = suppress_stdout
        self.file_handler: logging.FileHandler | None = None
        self.original_handlers: list[logging.Handler] = []

    def __enter__(self):
        """Set up file handler and redirect all loggers."""
        self.log_file_path.parent.mkdir(parents=True, exist_ok=True)
        self.file_handler = logging.FileHandler(self.log_file_path)
        self.file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

        # Get root logger to capture everything.
        root_logger = logging.getLogger()
        root_logger.addHandler(self.file_handler)

        if self.suppress_stdout:
            # Save original handlers and remove console handlers temporarily.
            self.original_handlers = root_logger.handlers[:]
            for handler in self.original_handlers:
                if handler != self.file_handler:
                    root_logger.removeHandler(handler)

        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Clean up handlers and restore original state."""
        root_logger = logging.getLogger()

        if self.file_handler in root_logger.handlers:
            root_logger.removeHandler(self.file_handler)

        if self.suppress_stdout and self.original_handlers:
            for handler in self.original_handlers:
                if handler not in root_logger.handlers and handler != self.file_handler:
                    root_logger.addHandler(handler)

        if self.file_handler:
            self.file_handler.close()
