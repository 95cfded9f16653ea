"""Local filesystem access used by the scanner and classifier."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from pathlib import Path

from digup.digest import Digest, DigestAlgorithm

READ_CHUNK_BYTES = 1024 * 1024


class ReadError(Exception):
    """Raised when file content or a symlink target cannot be read."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(slots=True, frozen=True)
class StatLike:
    """Subset of stat results the scanner needs."""

    mtime: int
    size: int
    mode: int
    dev: int
    ino: int

    @property
    def is_symlink(self) -> bool:
        return stat.S_ISLNK(self.mode)

    @property
    def is_directory(self) -> bool:
        return stat.S_ISDIR(self.mode)

    @property
    def is_regular(self) -> bool:
        return stat.S_ISREG(self.mode)

    def special_kind(self) -> str | None:
        """Describe device, FIFO, socket or other special entries."""
        if stat.S_ISCHR(self.mode) or stat.S_ISBLK(self.mode):
            return "special device"
        if stat.S_ISFIFO(self.mode):
            return "named pipe"
        if stat.S_ISSOCK(self.mode):
            return "unix socket"
        if self.is_symlink or self.is_directory or self.is_regular:
            return None
        return "special file"


class LocalFileSystem:
    """Filesystem rooted at a scan directory; all paths are root-relative."""

    def __init__(self, root: Path) -> None:
        self._root = root

    @property
    def root(self) -> Path:
        return self._root

    def full_path(self, relative: str) -> Path:
        if relative in ("", "."):
            return self._root
        return self._root / relative

    def stat_like(self, relative: str, *, follow_symlinks: bool = False) -> StatLike:
        """Stat a path; raises OSError."""
        result = os.stat(self.full_path(relative), follow_symlinks=follow_symlinks)
        return StatLike(
            mtime=int(result.st_mtime),
            size=result.st_size,
            mode=result.st_mode,
            dev=result.st_dev,
            ino=result.st_ino,
        )

    def read_symlink_target(self, relative: str) -> str:
        try:
            return os.readlink(self.full_path(relative))
        except OSError as error:
            raise ReadError(f"Could not read symlink: {error.strerror or error}.") from error

    def path_exists(self, relative: str) -> bool:
        return os.path.exists(self.full_path(relative))

    def list_directory(self, relative: str) -> list[str]:
        """Return entry names sorted by their byte representation; raises OSError."""
        names = os.listdir(self.full_path(relative))
        return sorted(names, key=os.fsencode)

    def digest_file(
        self,
        relative: str,
        algorithm: DigestAlgorithm,
        expected_size: int | None = None,
    ) -> Digest:
        """Digest file content in chunks; raises ReadError."""
        path = self.full_path(relative)
        try:
            fd = _open_noatime(path)
        except OSError as error:
            raise ReadError(f"Could not open file: {error.strerror or error}.") from error

        context = algorithm.new()
        total = 0
        try:
            with os.fdopen(fd, "rb") as handle:
                while True:
                    chunk = handle.read(READ_CHUNK_BYTES)
                    if not chunk:
                        break
                    context.update(chunk)
                    total += len(chunk)
        except OSError as error:
            raise ReadError(f"Could not read file: {error.strerror or error}.") from error

        if expected_size is not None and total != expected_size:
            raise ReadError(f"Short read: expected {expected_size} bytes, got {total}.")
        return context.finish()


def _open_noatime(path: Path) -> int:
    flags = os.O_RDONLY | getattr(os, "O_BINARY", 0)
    noatime = getattr(os, "O_NOATIME", 0)
    if noatime:
        try:
            return os.open(path, flags | noatime)
        except PermissionError:
            # O_NOATIME is refused for files the caller does not own.
            pass
    return os.open(path, flags)
