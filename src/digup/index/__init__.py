"""Ordered file index and digest index."""

from .digest_index import DigestIndex
from .file_index import FileIndex, path_sort_key, printable_path
from .models import (
    UNWRITTEN_STATUSES,
    FileRecord,
    FileStatus,
    LiveMetadata,
    StatusCounters,
    StatusOutcome,
)
from .rbtree import Cursor, DuplicateKeyError, RedBlackTree

__all__ = [
    "Cursor",
    "DigestIndex",
    "DuplicateKeyError",
    "FileIndex",
    "FileRecord",
    "FileStatus",
    "LiveMetadata",
    "RedBlackTree",
    "StatusCounters",
    "StatusOutcome",
    "UNWRITTEN_STATUSES",
    "path_sort_key",
    "printable_path",
]
