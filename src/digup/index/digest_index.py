"""Secondary index from content digest to the paths that produced it."""

from __future__ import annotations

from collections.abc import Iterator

from digup.digest import Digest
from digup.index.file_index import FileIndex
from digup.index.rbtree import Cursor, RedBlackTree


class DigestIndex:
    """Maps digests to paths; equal digests form ordered fingerprint runs.

    Holds path strings only. Metadata always comes from the FileIndex.
    """

    def __init__(self) -> None:
        self._tree = RedBlackTree(allow_duplicates=True)

    @classmethod
    def from_file_index(cls, file_index: FileIndex) -> DigestIndex:
        """Build an index over every record that carries a digest, in path order."""
        index = cls()
        for record in file_index:
            if record.digest is None:
                continue
            index.insert(record.digest, record.path)
        return index

    def insert(self, digest: Digest, path: str) -> None:
        self._tree.insert(digest, path)

    def find_first(self, digest: Digest) -> Cursor | None:
        """Return a cursor at the first entry of the run for ``digest``."""
        return self._tree.find(digest)

    def next(self, cursor: Cursor) -> Cursor:
        """Advance to the next entry in ascending digest order."""
        return self._tree.successor(cursor)

    def run(self, digest: Digest) -> Iterator[str]:
        """Yield the paths of the fingerprint run for ``digest`` in insertion order."""
        cursor = self.find_first(digest)
        while cursor is not None and not cursor.at_end and cursor.key == digest:
            yield cursor.value
            cursor = self.next(cursor)

    def __len__(self) -> int:
        return len(self._tree)

    def is_empty(self) -> bool:
        return self._tree.is_empty()
