"""
Logging configuration for termlytic.

Log records go to stderr through rich so they never mix with command output.
Messages carry raw shell commands and file paths, so rich markup is disabled
on the handler: a command like ``echo [red]`` must be logged verbatim.
"""
#region Imports
import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
#endregion


#region Constants
PACKAGE_LOGGER = "termlytic"

FILE_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are chatty at INFO/DEBUG
NOISY_LOGGERS = ("watchdog",)
#endregion


#region Functions


def _resolve_level(verbose: bool, quiet: bool) -> int:
    # quiet wins when both flags are given
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def _terminal_handler(verbose: bool) -> RichHandler:
    return RichHandler(
        console=Console(stderr=True),
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=verbose,
        show_path=verbose,
    )


def _file_handler(log_file: str) -> logging.FileHandler:
    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt=FILE_DATE_FORMAT))
    return handler


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Route termlytic logging to stderr (and optionally a file).

    Called once per CLI invocation; calling it again replaces the handlers.

    Args:
        verbose: DEBUG level, with source paths and locals in tracebacks
        quiet: ERROR level only
        log_file: Append plain-text records to this file as well

    Returns:
        The package logger
    """
    level = _resolve_level(verbose, quiet)

    handlers: list[logging.Handler] = [_terminal_handler(verbose)]
    if log_file:
        handlers.append(_file_handler(log_file))

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True)

    if not verbose:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(max(level, logging.WARNING))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)
    return logger


#endregion
