"""Progress logging setup for the command line."""

import logging

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "weekly_report"


def setup_logging(
    verbose: bool = False, quiet: bool = False, console: Console | None = None
) -> logging.Logger:
    """Send package log records to stderr through rich.

    Args:
        verbose: Log at DEBUG instead of INFO
        quiet: Silence progress logging entirely (takes precedence)
        console: Console to write to, stderr by default

    Returns:
        The package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    if quiet:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)
    else:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    logger.propagate = False
    return logger
