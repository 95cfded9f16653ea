"""Console logging setup for the command-line tool."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

from digup.index import printable_path

LOGGER_NAME = "digup"
LOG_FORMAT = "digup: %(message)s"


class PrintableFormatter(logging.Formatter):
    """Formatter whose output survives paths that are not valid UTF-8."""

    def format(self, record: logging.LogRecord) -> str:
        return printable_path(super().format(record))


def level_for_verbosity(verbosity: int) -> int:
    """Map the 0..3 verbosity scale onto logging levels.

    Warnings are shown at every verbosity; quiet modes only hide status lines.
    """
    if verbosity < 3:
        return logging.WARNING
    return logging.INFO


def configure_logging(verbosity: int = 2, stream: TextIO | None = None) -> logging.Logger:
    """Install a single stderr handler on the package logger."""
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(PrintableFormatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level_for_verbosity(verbosity))
    logger.propagate = False
    return logger
