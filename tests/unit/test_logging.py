"""
Unit tests for task_sh.utils.logging module.

This module tests the logging utilities including the color formatter,
logger setup and per-session initialization.
"""

import logging
import sys
from unittest.mock import patch

import pytest

from task_sh.config.settings import Settings
from task_sh.utils.logging import (
    ROOT_LOGGER_NAME,
    LogFormatter,
    get_logger,
    initialize_logging,
    setup_logging,
    supports_ansi_colors,
)


def make_record(level: int, message: str) -> logging.LogRecord:
    return logging.LogRecord(
        name="task_sh.test",
        level=level,
        pathname="test.py",
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )


class TestLogFormatter:
    """Test cases for LogFormatter class."""

    def test_formatter_initialization(self):
        formatter = LogFormatter(use_colors=False)

        assert formatter.use_colors is False
        assert formatter._fmt == "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
        assert formatter.datefmt == "%Y-%m-%d %H:%M:%S"

    @pytest.mark.parametrize(
        "level,color",
        [
            (logging.DEBUG, "\033[36m"),
            (logging.INFO, "\033[32m"),
            (logging.WARNING, "\033[33m"),
            (logging.ERROR, "\033[31m"),
            (logging.CRITICAL, "\033[35m"),
        ],
    )
    def test_format_with_colors(self, level, color):
        formatted = LogFormatter(use_colors=True).format(make_record(level, "hello"))

        assert color in formatted
        assert "\033[0m" in formatted
        assert "hello" in formatted

    def test_format_without_colors(self):
        formatted = LogFormatter(use_colors=False).format(
            make_record(logging.INFO, "Test message")
        )

        assert "\033[" not in formatted
        assert "[INFO] task_sh.test: Test message" in formatted

    def test_format_preserves_original_levelname(self):
        record = make_record(logging.WARNING, "x")

        LogFormatter(use_colors=True).format(record)

        assert record.levelname == "WARNING"


class TestSupportsAnsiColors:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")

        assert supports_ansi_colors() is False

    def test_non_tty_stderr(self):
        with patch.object(sys, "stderr") as mock_stderr:
            mock_stderr.isatty.return_value = False
            assert supports_ansi_colors() is False

    def test_tty_stderr(self):
        with patch.object(sys, "stderr") as mock_stderr:
            mock_stderr.isatty.return_value = True
            assert supports_ansi_colors() is True


class TestSetupLogging:
    """Test cases for setup_logging function."""

    def test_basic(self):
        logger = setup_logging(log_level="INFO")

        assert logger.name == ROOT_LOGGER_NAME
        assert logger.level == logging.INFO
        assert len(logger.handlers) == 1
        assert logger.handlers[0].stream is sys.stderr
        assert logger.propagate is False

    @pytest.mark.parametrize("name", ["DEBUG", "warning", "Error", "CRITICAL"])
    def test_levels(self, name):
        logger = setup_logging(log_level=name)

        assert logger.level == getattr(logging, name.upper())
        assert logger.handlers[0].level == logger.level

    def test_invalid_level_falls_back_to_info(self):
        assert setup_logging(log_level="VERBOSE").level == logging.INFO

    def test_repeated_setup_does_not_duplicate_handlers(self):
        setup_logging()
        logger = setup_logging()

        assert len(logger.handlers) == 1

    def test_third_party_loggers_are_quiet(self):
        setup_logging(log_level="DEBUG")

        assert logging.getLogger("openai").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "task-sh.log"

        logger = setup_logging(log_level="DEBUG", log_file=log_file)
        get_logger("tests").debug("written to file")
        for handler in logger.handlers:
            handler.flush()

        assert len(logger.handlers) == 2
        content = log_file.read_text(encoding="utf-8")
        assert "written to file" in content
        assert "\033[" not in content


class TestGetLogger:
    def test_child_logger(self):
        assert get_logger("translator").name == "task_sh.translator"

    def test_root_logger(self):
        assert get_logger().name == ROOT_LOGGER_NAME


class TestInitializeLogging:
    def test_quiet_by_default(self):
        logger = initialize_logging(Settings())

        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1

    def test_settings_log_level(self):
        settings = Settings()
        settings.set("advanced", "log_level", "INFO")

        assert initialize_logging(settings).level == logging.INFO

    def test_debug_writes_default_log_file(self):
        settings = Settings()

        logger = initialize_logging(settings, debug=True)

        assert logger.level == logging.DEBUG
        assert settings.get("advanced", "debug_mode") is True
        assert (settings.config_dir / "task-sh.log").exists()
