"""Tests for logging_config.setup_logging."""

import logging

import pytest
from rich.logging import RichHandler

from termlytic.logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestSetupLogging:
    """Test levels and handlers."""

    @pytest.mark.parametrize(
        "verbose,quiet,expected",
        [
            (False, False, logging.WARNING),
            (True, False, logging.DEBUG),
            (False, True, logging.ERROR),
            (True, True, logging.ERROR),
        ],
    )
    def test_levels(self, verbose, quiet, expected):
        logger = setup_logging(verbose=verbose, quiet=quiet)

        assert logger.name == "termlytic"
        assert logger.level == expected

    def test_rich_handler_logs_markup_verbatim(self):
        setup_logging()

        handler = next(h for h in logging.getLogger().handlers if isinstance(h, RichHandler))
        assert handler.markup is False

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "termlytic.log"
        logger = setup_logging(verbose=True, log_file=str(log_file))

        logger.getChild("tests").debug("echo [red]hi[/red]")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "echo [red]hi[/red]" in log_file.read_text(encoding="utf-8")
