"""Structured logging utilities."""

from .audit import JsonlScanLogger, ScanEvent, utc_timestamp
from .console import configure_logging, level_for_verbosity

__all__ = [
    "JsonlScanLogger",
    "ScanEvent",
    "configure_logging",
    "level_for_verbosity",
    "utc_timestamp",
]
