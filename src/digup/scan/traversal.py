"""Deterministic directory traversal feeding the classifier."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from digup.index import LiveMetadata, StatusOutcome
from digup.scan.classifier import ReconciliationSession
from digup.scan.filesystem import StatLike

logger = logging.getLogger(__name__)

ScanObserver = Callable[[StatusOutcome], None]


@dataclass(slots=True, frozen=True)
class TraversalIssue:
    """A directory or entry the traversal could not process."""

    path: str
    message: str


@dataclass(slots=True)
class TraversalReport:
    """Counters and issues collected during one scan."""

    issues: list[TraversalIssue] = field(default_factory=list)
    excluded_directories: list[str] = field(default_factory=list)
    classified: int = 0
    read_errors: int = 0


class _TreeScanner:
    def __init__(
        self,
        session: ReconciliationSession,
        follow_symlinks: bool,
        exclude_marker: str | None,
        observer: ScanObserver | None,
    ) -> None:
        self._session = session
        self._filesystem = session.filesystem
        self._follow_symlinks = follow_symlinks
        self._exclude_marker = exclude_marker
        self._observer = observer
        self._ancestors: list[tuple[int, int]] = []
        self.report = TraversalReport()

    def scan(self, start: str) -> None:
        try:
            info = self._filesystem.stat_like(start)
        except OSError as error:
            self._issue(start or ".", f"could not stat path: {error.strerror or error}")
            return
        if info.is_directory:
            self._scan_directory(start, info)
        elif info.is_regular:
            self._classify(start, info, is_symlink=False)
        else:
            self._issue(start or ".", "skipping special path")

    def _scan_directory(self, relative: str, info: StatLike) -> None:
        identity = (info.dev, info.ino)
        if identity in self._ancestors:
            self._issue(relative or ".", "filesystem loop detected")
            return
        try:
            names = self._filesystem.list_directory(relative)
        except OSError as error:
            self._issue(relative or ".", f"could not open directory: {error.strerror or error}")
            return
        if self._exclude_marker is not None and self._exclude_marker in names:
            logger.info(
                "skipping %s: contains exclude marker %s", relative or ".", self._exclude_marker
            )
            self.report.excluded_directories.append(relative)
            return

        self._ancestors.append(identity)
        try:
            for name in names:
                child = f"{relative}/{name}" if relative else name
                self._visit(child)
        finally:
            self._ancestors.pop()

    def _visit(self, relative: str) -> None:
        try:
            info = self._filesystem.stat_like(relative)
        except OSError as error:
            self._issue(relative, f"could not stat file: {error.strerror or error}")
            return

        if info.is_symlink:
            if not self._follow_symlinks:
                self._classify(relative, info, is_symlink=True)
                return
            try:
                info = self._filesystem.stat_like(relative, follow_symlinks=True)
            except OSError as error:
                self._issue(relative, f"could not stat symlink: {error.strerror or error}")
                return
            self._dispatch(relative, info, "symlink")
            return
        self._dispatch(relative, info, "")

    def _dispatch(self, relative: str, info: StatLike, via: str) -> None:
        if info.is_directory:
            self._scan_directory(relative, info)
            return
        kind = info.special_kind()
        if kind is not None:
            label = f"{kind} {via}".strip()
            logger.warning("skipping %s %s", label, relative)
            return
        self._classify(relative, info, is_symlink=False)

    def _classify(self, relative: str, info: StatLike, *, is_symlink: bool) -> None:
        live = LiveMetadata(mtime=info.mtime, size=info.size, is_symlink=is_symlink)
        outcome = self._session.classify(relative, live)
        if outcome.status is None:
            return
        self.report.classified += 1
        if not outcome.ok:
            self.report.read_errors += 1
        if self._observer is not None:
            self._observer(outcome)

    def _issue(self, relative: str, message: str) -> None:
        self.report.issues.append(TraversalIssue(path=relative, message=message))
        logger.warning("%s: %s", relative, message)


def scan_tree(
    session: ReconciliationSession,
    *,
    follow_symlinks: bool = False,
    exclude_marker: str | None = None,
    observer: ScanObserver | None = None,
    start: str = "",
) -> TraversalReport:
    """Walk the session's filesystem in sorted order and classify every entry."""
    scanner = _TreeScanner(session, follow_symlinks, exclude_marker, observer)
    scanner.scan(start)
    return scanner.report
