"""Scan reporting and the interactive review shell."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TextIO

from digup.index import (
    FileIndex,
    FileRecord,
    FileStatus,
    StatusCounters,
    StatusOutcome,
    printable_path,
)

SUMMARY_ROWS: tuple[tuple[str, FileStatus], ...] = (
    ("New", FileStatus.NEW),
    ("Untouched", FileStatus.SEEN),
    ("Touched", FileStatus.TOUCHED),
    ("Changed", FileStatus.CHANGED),
    ("Errors", FileStatus.ERROR),
    ("Renamed", FileStatus.RENAMED),
    ("Copied", FileStatus.COPIED),
    ("Skipped", FileStatus.SKIPPED),
    ("Deleted", FileStatus.UNSEEN),
)

_STATUS_WORDS: dict[FileStatus, str] = {
    FileStatus.UNSEEN: "DELETED.",
    FileStatus.SEEN: "untouched.",
    FileStatus.NEW: "new.",
    FileStatus.TOUCHED: "touched.",
    FileStatus.CHANGED: "CHANGED.",
    FileStatus.ERROR: "ERROR.",
    FileStatus.COPIED: "copied.",
    FileStatus.RENAMED: "renamed.",
    FileStatus.OLDPATH: "moved away.",
    FileStatus.SKIPPED: "skipped.",
}

# Statuses hidden by --modified.
_UNMODIFIED = frozenset({FileStatus.SEEN, FileStatus.TOUCHED, FileStatus.SKIPPED})


def summary_lines(counters: StatusCounters) -> list[str]:
    """Return the scan summary; zero counts are omitted except the total."""
    lines = ["File scan summary:"]
    for label, status in SUMMARY_ROWS:
        count = counters[status]
        if count:
            lines.append(f"{label + ':':>12} {count}")
    lines.append(f"{'Total:':>12} {counters.total}")
    return lines


def format_status(
    path: str,
    status: FileStatus,
    old_path: str | None = None,
    error: str | None = None,
) -> str:
    """Render one per-file status line as printed during scan and review."""
    line = f"{printable_path(path)} {_STATUS_WORDS[status]}"
    if status is FileStatus.ERROR and error:
        line = f"{line} {error}"
    if status in (FileStatus.COPIED, FileStatus.RENAMED) and old_path is not None:
        line = f"{line}\n<-- {printable_path(old_path)}"
    return line


def format_record(record: FileRecord) -> str:
    return format_status(record.path, record.status, record.old_path, record.error)


def should_report(status: FileStatus, verbosity: int, only_modified: bool) -> bool:
    """Decide whether a scan outcome is printed at the given verbosity."""
    if status is FileStatus.ERROR:
        return True
    if verbosity < 1:
        return False
    if status in _UNMODIFIED:
        return verbosity >= 2 or not only_modified
    return True


def report_outcome(
    outcome: StatusOutcome, verbosity: int, only_modified: bool
) -> str | None:
    """Return the line to print for a scan outcome, or None to stay quiet."""
    if outcome.status is None or not should_report(outcome.status, verbosity, only_modified):
        return None
    return format_status(outcome.path, outcome.status, outcome.old_path, outcome.error)


def listing(file_index: FileIndex, status: FileStatus) -> list[str]:
    """Status lines for every record in ``status``, in path order."""
    return [format_record(record) for record in file_index.records_with_status(status)]


HELP_TEXT = """Commands: (can be abbreviated)
  help       See this help text.
  new        Print all newly seen files.
  untouched  Print all untouched files.
  touched    Print all touched but unchanged files.
  changed    Print all changed files (also: modified).
  deleted    Print all deleted files.
  copied     Print all copied files and their origin.
  renamed    Print all renamed files and their origin.
  error      Print all files that could not be read.
  skipped    Print all files outside the --restrict patterns.
  write      Write the digest file and quit (also: save).
  quit       Quit without writing (also: exit)."""


@dataclass(slots=True, frozen=True)
class ReviewCommand:
    """One review shell command; ``handler`` returns False to end the session."""

    name: str
    handler: Callable[[], bool]


class ReviewShell:
    """Prefix-matched command loop over the results of one scan."""

    def __init__(
        self,
        file_index: FileIndex,
        counters: StatusCounters,
        save: Callable[[], str],
        *,
        in_stream: TextIO,
        out_stream: TextIO,
    ) -> None:
        self._file_index = file_index
        self._counters = counters
        self._save = save
        self._in = in_stream
        self._out = out_stream
        self.saved = False
        self._commands: list[ReviewCommand] = [
            ReviewCommand("help", self._cmd_help),
            ReviewCommand("new", self._lister(FileStatus.NEW)),
            ReviewCommand("untouched", self._lister(FileStatus.SEEN)),
            ReviewCommand("touched", self._lister(FileStatus.TOUCHED)),
            ReviewCommand("changed", self._lister(FileStatus.CHANGED)),
            ReviewCommand("modified", self._lister(FileStatus.CHANGED)),
            ReviewCommand("deleted", self._lister(FileStatus.UNSEEN)),
            ReviewCommand("copied", self._lister(FileStatus.COPIED)),
            ReviewCommand("renamed", self._lister(FileStatus.RENAMED)),
            ReviewCommand("error", self._lister(FileStatus.ERROR)),
            ReviewCommand("skipped", self._lister(FileStatus.SKIPPED)),
            ReviewCommand("write", self._cmd_write),
            ReviewCommand("save", self._cmd_write),
            ReviewCommand("quit", self._cmd_quit),
            ReviewCommand("exit", self._cmd_quit),
        ]

    def resolve(self, text: str) -> ReviewCommand | str:
        """Return the command matching ``text`` or an error message."""
        matches = [command for command in self._commands if command.name.startswith(text)]
        if not matches:
            return 'Unknown command. See "help".'
        exact = [command for command in matches if command.name == text]
        if exact:
            return exact[0]
        if len(matches) > 1:
            return 'Ambiguous command. See "help".'
        return matches[0]

    def run(self) -> bool:
        """Run until write, quit or end of input; returns True if the manifest was written."""
        while True:
            self._print("\n".join(summary_lines(self._counters)))
            self._out.write("Command (see help)? ")
            self._out.flush()
            raw = self._in.readline()
            if not raw:
                self._print("")
                return self.saved
            text = raw.strip()
            if not text:
                continue
            resolved = self.resolve(text)
            if isinstance(resolved, str):
                self._print(resolved)
                continue
            if not resolved.handler():
                return self.saved

    def _lister(self, status: FileStatus) -> Callable[[], bool]:
        def handler() -> bool:
            for line in listing(self._file_index, status):
                self._print(line)
            return True

        return handler

    def _cmd_help(self) -> bool:
        self._print(HELP_TEXT)
        return True

    def _cmd_write(self) -> bool:
        try:
            message = self._save()
        except OSError as error:
            self._print(f"could not write digest file: {error.strerror or error}")
            return True
        self._print(message)
        self.saved = True
        return False

    def _cmd_quit(self) -> bool:
        return False

    def _print(self, text: str) -> None:
        self._out.write(text)
        self._out.write("\n")
