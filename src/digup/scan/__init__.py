"""Filesystem scanning and classification."""

from .classifier import ClassifierOptions, ReconciliationSession, classify_path
from .filesystem import LocalFileSystem, ReadError, StatLike
from .traversal import ScanObserver, TraversalIssue, TraversalReport, scan_tree

__all__ = [
    "ClassifierOptions",
    "LocalFileSystem",
    "ReadError",
    "ReconciliationSession",
    "ScanObserver",
    "StatLike",
    "TraversalIssue",
    "TraversalReport",
    "classify_path",
    "scan_tree",
]
