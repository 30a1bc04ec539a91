"""
Logging utilities for task-sh.

This module provides a structured logging system for the application,
with support for different log levels, file output, and formatting.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

ROOT_LOGGER_NAME = "task_sh"


class LogFormatter(logging.Formatter):
    """Custom formatter for logs with color support."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",  # Reset
    }

    def __init__(self, use_colors: bool = True):
        """
        Initialize the formatter.

        Args:
            use_colors (bool): Whether to use colors in the output.
        """
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """
        Format the log record with optional colors.

        Args:
            record (logging.LogRecord): The log record to format.

        Returns:
            str: Formatted log message.
        """
        original_levelname = record.levelname

        if self.use_colors and record.levelname in self.COLORS:
            record.levelname = (
                f"{self.COLORS[record.levelname]}"
                f"{record.levelname}{self.COLORS['RESET']}"
            )

        result = super().format(record)

        # Restore so other handlers see the plain level name
        record.levelname = original_levelname

        return result


def supports_ansi_colors() -> bool:
    """Return True when stderr is a terminal and NO_COLOR is not set."""
    if os.environ.get("NO_COLOR"):
        return False
    stream = sys.stderr
    return hasattr(stream, "isatty") and stream.isatty()


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Set up the logging system.

    Args:
        log_level (str): Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file (Optional[Union[str, Path]]): Path to log file.
        use_colors (bool): Whether to use colors in console output.

    Returns:
        logging.Logger: Configured logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)

    # Clear any existing handlers to avoid duplicate logs
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()

    requested = (log_level or "INFO").upper()
    valid_names = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    if requested not in valid_names:
        requested = "INFO"
    numeric_level = getattr(logging, requested, logging.INFO)
    logger.setLevel(numeric_level)
    logger.propagate = False

    logging.getLogger("openai").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    # Console output goes to stderr; stdout carries the suggested command
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(
        LogFormatter(use_colors=use_colors and supports_ansi_colors())
    )
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        os.makedirs(log_path.parent, exist_ok=True)

        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        logger.addHandler(file_handler)

    logger.debug(f"Logging initialized at level {requested}")

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name (str): Logger name, relative to the base package.

    Returns:
        logging.Logger: Logger instance.
    """
    if name:
        return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
    return logging.getLogger(ROOT_LOGGER_NAME)


def initialize_logging(settings, debug: bool = False) -> logging.Logger:
    """
    Initialize logging for one CLI session.

    Non-debug sessions stay quiet at WARNING; debug sessions log at DEBUG and
    also write to the configured (or default) log file.

    Args:
        settings: The loaded ``Settings`` instance.
        debug (bool): Whether ``--debug`` was given.

    Returns:
        logging.Logger: Configured logger.
    """
    if debug:
        settings.set("advanced", "debug_mode", True)
        return setup_logging(
            log_level="DEBUG",
            log_file=settings.get_log_file_path(),
            use_colors=True,
        )

    return setup_logging(
        log_level=settings.get("advanced", "log_level", "WARNING"),
        log_file=settings.get("advanced", "log_file", None) or None,
        use_colors=True,
    )
