"""
Tests for logging configuration module.
"""

import logging

from update_bin.logging_config import ColoredFormatter, get_logger, setup_logging


class TestSetupLogging:
    """Test logging setup and configuration."""

    def test_setup_logging_default(self):
        logger = setup_logging()
        assert logger.name == "update_bin"
        assert logger.level == logging.INFO

    def test_setup_logging_verbose(self):
        """Test verbose logging enables DEBUG level."""
        logger = setup_logging(verbose=True)
        assert logger.level == logging.DEBUG

    def test_setup_logging_quiet(self):
        """Test quiet mode keeps warnings on the console."""
        logger = setup_logging(quiet=True)
        assert logger.level == logging.WARNING
        console_handlers = [
            h for h in logger.handlers
            if isinstance(h, logging.StreamHandler) and not isinstance(h, logging.FileHandler)
        ]
        assert len(console_handlers) == 1
        assert console_handlers[0].level == logging.WARNING
        assert isinstance(console_handlers[0].formatter, ColoredFormatter)

    def test_quiet_still_shows_warnings(self, capsys):
        logger = setup_logging(quiet=True)
        logger.info("progress")
        logger.warning("rg moved to a new major version")
        err = capsys.readouterr().err
        assert "progress" not in err
        assert "WARNING rg moved to a new major version" in err

    def test_verbose_wins_over_quiet(self):
        logger = setup_logging(verbose=True, quiet=True)
        assert logger.level == logging.DEBUG

    def test_setup_logging_with_file(self, tmp_path):
        log_file = tmp_path / "logs" / "update-bin.log"
        logger = setup_logging(log_file=str(log_file), quiet=True)
        logger.debug("Debug detail")
        logger.warning("Test message")
        for handler in logger.handlers:
            handler.flush()
        contents = log_file.read_text()
        assert "Test message" in contents
        assert "Debug detail" in contents

    def test_setup_logging_custom_level(self):
        logger = setup_logging(level="warning")
        assert logger.level == logging.WARNING

    def test_setup_logging_replaces_handlers(self):
        """Test repeated setup does not stack handlers."""
        setup_logging()
        logger = setup_logging()
        assert len(logger.handlers) == 1

    def test_get_logger_returns_configured(self):
        logger = setup_logging(level="ERROR")
        assert get_logger() is logger


class TestColoredFormatter:
    """Test colored formatter."""

    def _record(self, level):
        return logging.LogRecord("update_bin", level, __file__, 1, "hello", None, None)

    def test_plain(self):
        formatter = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=False)
        assert formatter.format(self._record(logging.WARNING)) == "WARNING hello"

    def test_colored(self):
        formatter = ColoredFormatter("%(levelname_colored)s %(message)s", use_colors=True)
        output = formatter.format(self._record(logging.ERROR))
        assert output.startswith("\033[31m")
        assert "ERROR" in output
        assert output.endswith("hello")
