"""Ordered index of tracked files keyed by path bytes."""

from __future__ import annotations

from collections.abc import Callable, Iterator

from digup.index.models import FileRecord, FileStatus
from digup.index.rbtree import DuplicateKeyError, RedBlackTree


def path_sort_key(path: str) -> bytes:
    """Byte ordering used for manifest paths."""
    return path.encode("utf-8", "surrogateescape")


def printable_path(text: str) -> str:
    """Render text holding undecodable path bytes as \\xNN escapes for output."""
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "backslashreplace")


class FileIndex:
    """Maps relative paths to FileRecords in ascending path-byte order."""

    def __init__(self) -> None:
        self._tree = RedBlackTree()

    def insert(self, path: str, record: FileRecord) -> None:
        """Insert a record; raises DuplicateKeyError if the path exists."""
        if record.path != path:
            raise ValueError(f"Record path {record.path!r} does not match key {path!r}")
        try:
            self._tree.insert(path_sort_key(path), record)
        except DuplicateKeyError:
            raise DuplicateKeyError(path) from None

    def add(self, record: FileRecord) -> None:
        self.insert(record.path, record)

    def find(self, path: str) -> FileRecord | None:
        cursor = self._tree.find(path_sort_key(path))
        if cursor is None:
            return None
        return cursor.value

    def __contains__(self, path: str) -> bool:
        return self.find(path) is not None

    def __iter__(self) -> Iterator[FileRecord]:
        for _, record in self._tree:
            yield record

    def __len__(self) -> int:
        return len(self._tree)

    def size(self) -> int:
        return len(self._tree)

    def is_empty(self) -> bool:
        return self._tree.is_empty()

    def for_each_in_order(self, visit: Callable[[FileRecord], None]) -> None:
        for record in self:
            visit(record)

    def paths(self) -> list[str]:
        return [record.path for record in self]

    def records_with_status(self, *statuses: FileStatus) -> list[FileRecord]:
        """Return records in path order whose status is one of ``statuses``."""
        wanted = set(statuses)
        return [record for record in self if record.status in wanted]

    def check_invariants(self) -> bool:
        return self._tree.check_invariants()
