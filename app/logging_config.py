"""Logging configuration for the application."""

import logging
import sys

from app.config import settings


def setup_logging() -> None:
    """Configure application-wide logging.

    Level is DEBUG when settings.DEBUG is True, otherwise settings.LOG_LEVEL.
    Output goes to stdout.
    """
    log_level = logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL.upper()
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def get_logger(name: str) -> logging.Logger:
    """Return a logger for the given module name.

    Args:
        name: Usually __name__ of the calling module.
    """
    return logging.getLogger(name)
