"""Manifest parsing and serialization with a running CRC32 envelope.

A manifest is a ``sha1sum``-compatible text file. Metadata for each entry is
carried in preceding ``#:`` comment lines (``mtime``, ``size``, ``target``),
symlinks are declared with ``#: symlink``, persistent options with
``#: option``, and the file ends with ``#: crc 0x........ eof`` asserting the
CRC32 of every byte before that line.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from digup.digest import Digest, DigestType, checksum_algorithm
from digup.index import DigestIndex, DuplicateKeyError, FileIndex, FileRecord, FileStatus
from digup.manifest.escaping import EscapeError, escape_path, unescape_path

logger = logging.getLogger(__name__)

PROGRAM_NAME = "digup"
EXCLUDE_MARKER_OPTION = "--exclude-marker="

_HEX_PREFIX = re.compile(r"[0-9A-Fa-f]*")
_KEYWORD = re.compile(r"[A-Za-z]+\\?")
_INTEGER_ARGUMENT = re.compile(r"\s*(-?\d+)(?=\s|$)")
_CRC_ARGUMENT = re.compile(r"\s*0x([0-9A-Fa-f]{8})(?=\s|$)")

ChecksumConfirm = Callable[[str], bool]


class ManifestParseError(Exception):
    """Raised when a manifest cannot be loaded."""

    def __init__(self, source: str, line: int | None, message: str) -> None:
        location = f"{source} line {line}" if line is not None else source
        super().__init__(f"{location}: {message}")
        self.source = source
        self.line = line
        self.message = message


class ManifestChecksumError(ManifestParseError):
    """Raised when the trailing CRC does not match the manifest content."""


@dataclass(slots=True, frozen=True)
class PersistentOptions:
    """Options stored inside the manifest itself."""

    exclude_marker: str | None = None


@dataclass(slots=True)
class LoadedManifest:
    """Indexes and metadata recovered from one manifest."""

    file_index: FileIndex
    digest_index: DigestIndex
    digest_type: DigestType | None
    options: PersistentOptions
    crc_verified: bool = False
    warnings: list[str] = field(default_factory=list)


@dataclass(slots=True)
class _PendingRecord:
    mtime: int | None = None
    size: int | None = None
    symlink_target: str | None = None

    def is_empty(self) -> bool:
        return self.mtime is None and self.size is None and self.symlink_target is None

    def build(self, path: str, digest: Digest | None = None) -> FileRecord:
        return FileRecord(
            path=path,
            status=FileStatus.UNSEEN,
            mtime=self.mtime,
            size=self.size,
            digest=digest,
            symlink_target=self.symlink_target,
        )


class _ManifestReader:
    """Line-at-a-time manifest parser."""

    def __init__(
        self,
        source: str,
        expected_type: DigestType | None,
        confirm_checksum_mismatch: ChecksumConfirm | None,
    ) -> None:
        self._source = source
        self._digest_type = expected_type
        self._confirm = confirm_checksum_mismatch
        self._index = FileIndex()
        self._pending = _PendingRecord()
        self._crc = checksum_algorithm().new()
        self._exclude_marker: str | None = None
        self._eof_line: int | None = None
        self._crc_verified = False
        self._warnings: list[str] = []

    def feed(self, raw: bytes, line_number: int) -> None:
        if self._eof_line is not None:
            if raw.strip():
                self._warn(line_number, "superfluous content after eof marker.")
            return
        text = raw.decode("utf-8", "surrogateescape")
        if text.endswith("\n"):
            text = text[:-1]
        self._parse_line(text, line_number)
        self._crc.update(raw)

    def result(self) -> LoadedManifest:
        if not self._pending.is_empty():
            self._warn(None, "trailing metadata lines without a file name.")
        return LoadedManifest(
            file_index=self._index,
            digest_index=DigestIndex.from_file_index(self._index),
            digest_type=self._digest_type,
            options=PersistentOptions(exclude_marker=self._exclude_marker),
            crc_verified=self._crc_verified,
            warnings=self._warnings,
        )

    def _parse_line(self, text: str, line_number: int) -> None:
        stripped = text.lstrip()
        if not stripped:
            return
        if stripped.startswith("#"):
            if stripped.startswith("#:"):
                self._parse_extension(stripped[2:], line_number)
            return
        self._parse_digest_line(stripped, line_number)

    def _parse_digest_line(self, line: str, line_number: int) -> None:
        escaped = line.startswith("\\")
        body = line[1:] if escaped else line
        hex_text = _HEX_PREFIX.match(body).group(0)  # type: ignore[union-attr]
        rest = body[len(hex_text) :]
        digest_type = DigestType.from_hex_length(len(hex_text))
        if not rest or not rest[0].isspace() or digest_type is None:
            raise self._error(line_number, "no proper hex digest detected on line.")
        if len(rest) < 2 or rest[1] not in (" ", "*"):
            raise self._error(line_number, "improper type indicator.")
        filename = rest[2:]
        if escaped:
            filename = self._unescape(filename, line_number, "improperly escaped file name.")
        if not filename:
            raise self._error(line_number, "missing file name.")

        if self._digest_type is None:
            self._digest_type = digest_type
        elif digest_type is not self._digest_type:
            raise self._error(
                line_number,
                f"different digest types in file ({digest_type} after {self._digest_type}).",
            )

        record = self._pending.build(filename, digest=Digest.from_hex(hex_text))
        self._commit(record, line_number, "duplicate file name.")

    def _parse_extension(self, rest: str, line_number: int) -> None:
        position = 0
        length = len(rest)
        while True:
            while position < length and rest[position].isspace():
                position += 1
            if position >= length:
                return
            match = _KEYWORD.match(rest, position)
            if match is None:
                raise self._error(line_number, "unparseable digest comment line.")
            keyword = match.group(0)
            position = match.end()
            if position < length and not rest[position].isspace():
                raise self._error(line_number, "unparseable digest comment line.")

            if keyword in ("mtime", "size"):
                number = _INTEGER_ARGUMENT.match(rest, position)
                if number is None:
                    raise self._error(line_number, f"unparseable {keyword} value.")
                if keyword == "mtime":
                    self._pending.mtime = int(number.group(1))
                else:
                    self._pending.size = int(number.group(1))
                position = number.end()
                continue

            if keyword == "crc":
                crc = _CRC_ARGUMENT.match(rest, position)
                if crc is None:
                    raise self._error(line_number, "unparseable crc value.")
                self._verify_checksum(int(crc.group(1), 16), line_number)
                position = crc.end()
                continue

            if keyword == "eof":
                self._eof_line = line_number
                continue

            if keyword not in ("target", "target\\", "symlink", "symlink\\", "option"):
                raise self._error(line_number, f"unknown keyword '{keyword}'.")
            # The remaining keywords consume the rest of the line after one separator.
            if position >= length:
                raise self._error(line_number, f"missing argument for '{keyword}'.")
            argument = rest[position + 1 :]
            if keyword == "target":
                self._pending.symlink_target = argument
            elif keyword == "target\\":
                self._pending.symlink_target = self._unescape(
                    argument, line_number, "improperly escaped symlink target."
                )
            elif keyword == "option":
                self._parse_option(argument, line_number)
            else:
                filename = argument
                if keyword == "symlink\\":
                    filename = self._unescape(
                        argument, line_number, "improperly escaped symlink filename."
                    )
                if self._pending.symlink_target is None:
                    raise self._error(line_number, "symlink declaration without target.")
                self._commit(
                    self._pending.build(filename), line_number, "duplicate symlink file name."
                )
            return

    def _parse_option(self, argument: str, line_number: int) -> None:
        option = argument.strip()
        if option.startswith(EXCLUDE_MARKER_OPTION):
            value = option[len(EXCLUDE_MARKER_OPTION) :]
            if not value:
                raise self._error(line_number, "empty exclude marker option.")
            self._exclude_marker = value
            return
        raise self._error(line_number, f"unknown option '{option}'.")

    def _verify_checksum(self, expected: int, line_number: int) -> None:
        actual = int.from_bytes(self._crc.finish().data, "big")
        if actual == expected:
            self._crc_verified = True
            return
        message = (
            f"checksum mismatch: expected 0x{expected:08x}, content has 0x{actual:08x}. "
            "The manifest may have been modified or corrupted."
        )
        if self._confirm is None or not self._confirm(message):
            raise ManifestChecksumError(self._source, line_number, message)
        self._warn(line_number, message)

    def _commit(self, record: FileRecord, line_number: int, duplicate_message: str) -> None:
        try:
            self._index.add(record)
        except DuplicateKeyError:
            raise self._error(line_number, duplicate_message) from None
        self._pending = _PendingRecord()

    def _unescape(self, text: str, line_number: int, message: str) -> str:
        try:
            return unescape_path(text)
        except EscapeError:
            raise self._error(line_number, message) from None

    def _warn(self, line_number: int | None, message: str) -> None:
        location = f"{self._source} line {line_number}" if line_number else self._source
        text = f"{location}: {message}"
        self._warnings.append(text)
        logger.warning(text)

    def _error(self, line_number: int, message: str) -> ManifestParseError:
        return ManifestParseError(self._source, line_number, message)


def parse_manifest(
    lines: Iterable[bytes],
    source: str = "<manifest>",
    *,
    expected_type: DigestType | None = None,
    confirm_checksum_mismatch: ChecksumConfirm | None = None,
) -> LoadedManifest:
    """Parse raw manifest lines (each with its original terminator)."""
    reader = _ManifestReader(source, expected_type, confirm_checksum_mismatch)
    for line_number, raw in enumerate(lines, start=1):
        reader.feed(raw, line_number)
    return reader.result()


def parse_manifest_bytes(
    data: bytes,
    source: str = "<manifest>",
    *,
    expected_type: DigestType | None = None,
    confirm_checksum_mismatch: ChecksumConfirm | None = None,
) -> LoadedManifest:
    """Parse a manifest held in memory."""
    return parse_manifest(
        _split_lines(data),
        source,
        expected_type=expected_type,
        confirm_checksum_mismatch=confirm_checksum_mismatch,
    )


def load_manifest(
    path: Path,
    *,
    expected_type: DigestType | None = None,
    confirm_checksum_mismatch: ChecksumConfirm | None = None,
) -> LoadedManifest:
    """Load a manifest file into a FileIndex and DigestIndex."""
    with path.open("rb") as handle:
        return parse_manifest(
            handle,
            str(path),
            expected_type=expected_type,
            confirm_checksum_mismatch=confirm_checksum_mismatch,
        )


def render_manifest(
    file_index: FileIndex,
    options: PersistentOptions,
    *,
    timestamp: str | None = None,
) -> tuple[bytes, int]:
    """Serialize writable records; returns the payload and the digest count."""
    stamp = timestamp or datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S %Z")
    lines = [f"# {PROGRAM_NAME} last update: {stamp}\n"]
    if options.exclude_marker:
        lines.append(f"#: option {EXCLUDE_MARKER_OPTION}{options.exclude_marker}\n")

    written = 0
    for record in file_index:
        if not record.writable:
            continue
        entry = _render_record(record)
        if entry is None:
            logger.warning("not writing %s: record has neither digest nor target.", record.path)
            continue
        lines.extend(entry)
        written += 1

    body = "".join(lines).encode("utf-8", "surrogateescape")
    crc = checksum_algorithm().digest(body)
    trailer = f"#: crc 0x{crc.hex()} eof\n".encode("ascii")
    return body + trailer, written


def write_manifest(
    path: Path,
    file_index: FileIndex,
    options: PersistentOptions,
    *,
    timestamp: str | None = None,
) -> int:
    """Atomically write the manifest; returns the number of bytes written."""
    payload, written = render_manifest(file_index, options, timestamp=timestamp)
    tmp = path.with_name(path.name + ".tmp")
    with tmp.open("wb") as handle:
        handle.write(payload)
    tmp.replace(path)
    logger.info("wrote %d digests to %s", written, path)
    return len(payload)


def _render_record(record: FileRecord) -> list[str] | None:
    metadata: list[str] = []
    if record.mtime is not None:
        metadata.append(f"mtime {record.mtime}")
    if record.size is not None:
        metadata.append(f"size {record.size}")
    name, name_escaped = escape_path(record.path)

    if record.symlink_target is not None:
        target, target_escaped = escape_path(record.symlink_target)
        metadata.append(f"target\\ {target}" if target_escaped else f"target {target}")
        keyword = "symlink\\" if name_escaped else "symlink"
        return [f"#: {' '.join(metadata)}\n", f"#: {keyword} {name}\n"]

    if record.digest is None:
        return None
    lines = [f"#: {' '.join(metadata)}\n"] if metadata else []
    prefix = "\\" if name_escaped else ""
    lines.append(f"{prefix}{record.digest.hex()}  {name}\n")
    return lines


def _split_lines(data: bytes) -> list[bytes]:
    parts = data.split(b"\n")
    lines = [part + b"\n" for part in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines
