"""Reconciliation of scanned paths against the loaded manifest."""

from __future__ import annotations

import fnmatch
import logging
from dataclasses import dataclass

from digup.digest import Digest, DigestAlgorithm
from digup.index import (
    DigestIndex,
    FileIndex,
    FileRecord,
    FileStatus,
    LiveMetadata,
    StatusCounters,
    StatusOutcome,
)
from digup.manifest import LoadedManifest
from digup.scan.filesystem import LocalFileSystem, ReadError

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class ClassifierOptions:
    """Per-run classification settings."""

    full_check: bool = False
    mtime_tolerance: int = 0
    restrict: tuple[str, ...] = ()
    manifest_path: str | None = None
    ignored_paths: tuple[str, ...] = ()


class ReconciliationSession:
    """Owns the indexes, counters and options of one reconciliation run."""

    def __init__(
        self,
        file_index: FileIndex,
        digest_index: DigestIndex,
        algorithm: DigestAlgorithm,
        filesystem: LocalFileSystem,
        options: ClassifierOptions | None = None,
    ) -> None:
        self.file_index = file_index
        self.digest_index = digest_index
        self.algorithm = algorithm
        self.filesystem = filesystem
        self.options = options or ClassifierOptions()
        self.counters = StatusCounters()
        self.warnings: list[str] = []
        for record in file_index:
            self.counters.increment(record.status)

    @classmethod
    def from_manifest(
        cls,
        loaded: LoadedManifest,
        algorithm: DigestAlgorithm,
        filesystem: LocalFileSystem,
        options: ClassifierOptions | None = None,
    ) -> ReconciliationSession:
        return cls(loaded.file_index, loaded.digest_index, algorithm, filesystem, options)

    def classify(self, path: str, live: LiveMetadata) -> StatusOutcome:
        return classify_path(self, path, live)

    def matches_restriction(self, path: str) -> bool:
        """Return True when no restriction is active or ``path`` matches one."""
        patterns = self.options.restrict
        if not patterns:
            return True
        anchored = f"/{path}"
        return any(
            fnmatch.fnmatch(path, pattern) or fnmatch.fnmatch(anchored, pattern)
            for pattern in patterns
        )

    def apply_restriction(self) -> int:
        """Mark UNSEEN records outside the restriction as SKIPPED."""
        skipped = 0
        if not self.options.restrict:
            return skipped
        for record in self.file_index:
            if record.status is not FileStatus.UNSEEN or self.matches_restriction(record.path):
                continue
            self.set_status(record, FileStatus.SKIPPED)
            skipped += 1
        return skipped

    def deleted_records(self) -> list[FileRecord]:
        """Records never encountered by the scan."""
        return self.file_index.records_with_status(FileStatus.UNSEEN)

    def set_status(self, record: FileRecord, status: FileStatus) -> None:
        self.counters.transition(record.status, status)
        record.status = status

    def add_record(self, record: FileRecord) -> None:
        self.file_index.add(record)
        self.counters.increment(record.status)

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)


def classify_path(
    session: ReconciliationSession,
    path: str,
    live: LiveMetadata,
) -> StatusOutcome:
    """Classify one scanned path and update the session indexes."""
    options = session.options
    if path == options.manifest_path or path in options.ignored_paths:
        return StatusOutcome(path=path, status=None)
    if not session.matches_restriction(path):
        return StatusOutcome(path=path, status=FileStatus.SKIPPED)

    record = session.file_index.find(path)
    if record is not None:
        return _classify_known(session, record, live)
    return _classify_new(session, path, live)


def _classify_known(
    session: ReconciliationSession,
    record: FileRecord,
    live: LiveMetadata,
) -> StatusOutcome:
    if record.status is not FileStatus.UNSEEN:
        session.warn(f"{record.path}: same file processed twice. This should never occur.")
        return StatusOutcome(path=record.path, status=record.status, old_path=record.old_path)

    options = session.options
    if (
        not options.full_check
        and record.mtime is not None
        and abs(live.mtime - record.mtime) <= options.mtime_tolerance
        and live.size == record.size
    ):
        session.set_status(record, FileStatus.SEEN)
        return StatusOutcome(path=record.path, status=FileStatus.SEEN)

    try:
        target, digest = _read_content(session, record.path, live)
    except ReadError as error:
        session.set_status(record, FileStatus.ERROR)
        record.error = error.message
        record.mtime = live.mtime
        record.size = live.size
        return StatusOutcome(
            path=record.path, status=FileStatus.ERROR, ok=False, error=error.message
        )

    record.mtime = live.mtime
    record.size = live.size
    if live.is_symlink:
        unchanged = record.symlink_target is not None and record.symlink_target == target
    else:
        unchanged = record.digest is not None and record.digest == digest

    if unchanged:
        session.set_status(record, FileStatus.TOUCHED)
    else:
        session.set_status(record, FileStatus.CHANGED)
        record.digest = digest
        record.symlink_target = target
    return StatusOutcome(path=record.path, status=record.status, digest_computed=digest is not None)


def _classify_new(
    session: ReconciliationSession,
    path: str,
    live: LiveMetadata,
) -> StatusOutcome:
    record = FileRecord(path=path, status=FileStatus.NEW, mtime=live.mtime, size=live.size)
    try:
        record.symlink_target, record.digest = _read_content(session, path, live)
    except ReadError as error:
        record.status = FileStatus.ERROR
        record.error = error.message
        session.add_record(record)
        return StatusOutcome(path=path, status=FileStatus.ERROR, ok=False, error=error.message)

    if record.digest is not None:
        _detect_copy_or_rename(session, record, record.digest)
    session.add_record(record)
    return StatusOutcome(
        path=path,
        status=record.status,
        old_path=record.old_path,
        digest_computed=record.digest is not None,
    )


def _detect_copy_or_rename(
    session: ReconciliationSession,
    record: FileRecord,
    digest: Digest,
) -> None:
    """Match a new file against earlier paths with the same digest.

    Any candidate still on disk makes the file a copy of the last such
    candidate in run order. Otherwise it is a rename of the first candidate
    and every vanished candidate becomes OLDPATH.
    """
    first: str | None = None
    live_match: str | None = None
    for candidate in session.digest_index.run(digest):
        if first is None:
            first = candidate
        if session.filesystem.path_exists(candidate):
            live_match = candidate
            continue
        _mark_old_path(session, candidate)

    if first is None:
        return
    if live_match is not None:
        record.status = FileStatus.COPIED
        record.old_path = live_match
    else:
        record.status = FileStatus.RENAMED
        record.old_path = first


def _mark_old_path(session: ReconciliationSession, candidate: str) -> None:
    original = session.file_index.find(candidate)
    if original is None:
        session.warn(f"internal error: cannot find entry for matching file {candidate}.")
    elif original.status is FileStatus.UNSEEN:
        session.set_status(original, FileStatus.OLDPATH)
    elif original.status in (FileStatus.OLDPATH, FileStatus.SKIPPED):
        return
    else:
        session.warn(f"{candidate}: renamed original file still existed when scanning.")


def _read_content(
    session: ReconciliationSession,
    path: str,
    live: LiveMetadata,
) -> tuple[str | None, Digest | None]:
    """Return (symlink target, digest); exactly one is set."""
    if live.is_symlink:
        return session.filesystem.read_symlink_target(path), None
    return None, session.filesystem.digest_file(path, session.algorithm, live.size)
