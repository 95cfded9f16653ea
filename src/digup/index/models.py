"""Typed models for reconciliation state."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from digup.digest import Digest


class FileStatus(StrEnum):
    """Per-record reconciliation status."""

    UNSEEN = "unseen"
    SEEN = "seen"
    NEW = "new"
    TOUCHED = "touched"
    CHANGED = "changed"
    ERROR = "error"
    COPIED = "copied"
    RENAMED = "renamed"
    OLDPATH = "oldpath"
    SKIPPED = "skipped"


# Records in these states are not written back to the manifest.
UNWRITTEN_STATUSES = frozenset({FileStatus.UNSEEN, FileStatus.ERROR, FileStatus.OLDPATH})


@dataclass(slots=True)
class FileRecord:
    """Represents a file tracked by the manifest or found by the scan."""

    path: str
    status: FileStatus = FileStatus.UNSEEN
    mtime: int | None = None
    size: int | None = None
    digest: Digest | None = None
    symlink_target: str | None = None
    old_path: str | None = None
    error: str | None = None

    @property
    def is_symlink(self) -> bool:
        return self.symlink_target is not None

    @property
    def writable(self) -> bool:
        return self.status not in UNWRITTEN_STATUSES


@dataclass(slots=True, frozen=True)
class LiveMetadata:
    """Live filesystem metadata for one scanned entry."""

    mtime: int
    size: int
    is_symlink: bool = False


@dataclass(slots=True, frozen=True)
class StatusOutcome:
    """Result of classifying one scanned path.

    ``status`` is None for paths that are not tracked at all (the manifest).
    ``ok`` is False when the file content or symlink could not be read.
    """

    path: str
    status: FileStatus | None
    ok: bool = True
    old_path: str | None = None
    error: str | None = None
    digest_computed: bool = False


@dataclass(slots=True)
class StatusCounters:
    """Per-status tallies for one reconciliation run."""

    counts: dict[FileStatus, int] = field(
        default_factory=lambda: {status: 0 for status in FileStatus}
    )

    def increment(self, status: FileStatus) -> None:
        self.counts[status] += 1

    def transition(self, old: FileStatus, new: FileStatus) -> None:
        """Move one record from ``old`` to ``new``."""
        self.counts[old] -= 1
        self.counts[new] += 1

    def __getitem__(self, status: FileStatus) -> int:
        return self.counts[status]

    @property
    def deleted(self) -> int:
        return self.counts[FileStatus.UNSEEN]

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def only_unchanged(self) -> bool:
        """Return True when every record is SEEN, TOUCHED or SKIPPED."""
        unchanged = (
            self.counts[FileStatus.SEEN]
            + self.counts[FileStatus.TOUCHED]
            + self.counts[FileStatus.SKIPPED]
        )
        return unchanged == self.total
