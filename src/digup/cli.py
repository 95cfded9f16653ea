"""Command-line entrypoint: scan, report, review and write back."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import TextIO

from digup.config import CliOverrides, DigupConfig, load_effective_config
from digup.digest import DigestType, algorithm_for
from digup.index import FileStatus, StatusCounters, StatusOutcome, printable_path
from digup.logging import JsonlScanLogger, ScanEvent, configure_logging
from digup.manifest import (
    ChecksumConfirm,
    LoadedManifest,
    ManifestChoice,
    ManifestParseError,
    ManifestSelectionError,
    PersistentOptions,
    load_manifest,
    parse_manifest,
    resolve_manifest,
    write_manifest,
)
from digup.review import ReviewShell, listing, report_outcome, summary_lines
from digup.scan import ClassifierOptions, LocalFileSystem, ReconciliationSession, scan_tree

logger = logging.getLogger(__name__)

EXIT_UNCHANGED = 0
EXIT_CHANGED = 1
EXIT_FATAL = 2


class FatalError(Exception):
    """Raised for conditions that abort the run before or after the scan."""


def _digest_type_argument(value: str) -> DigestType:
    try:
        return DigestType.parse(value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(str(error)) from None


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for a digup run."""
    parser = argparse.ArgumentParser(
        prog="digup",
        description="Read, verify and update MD5 or SHA digest files.",
    )
    parser.add_argument(
        "-b",
        "--batch",
        action="store_true",
        default=None,
        help="non-interactive batch processing: print results and exit",
    )
    parser.add_argument(
        "-c",
        "--check",
        action="store_true",
        default=None,
        help="full digest check ignoring file modification times",
    )
    parser.add_argument("-d", "--directory", default=".", help="directory to scan")
    parser.add_argument("-f", "--file", default=None, help="digest file to read and update")
    parser.add_argument(
        "-l",
        "--links",
        action="store_true",
        default=None,
        help="follow symbolic links instead of saving their destination",
    )
    parser.add_argument(
        "-m",
        "--modified",
        action="store_true",
        default=None,
        help="print only new, modified, errors, moved, renamed or deleted files",
    )
    parser.add_argument("-q", "--quiet", action="count", default=0, help="print less")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="print more")
    parser.add_argument(
        "-t",
        "--type",
        type=_digest_type_argument,
        default=None,
        help="digest type for new files: md5, sha1, sha256 or sha512",
    )
    parser.add_argument(
        "-u",
        "--update",
        action="store_true",
        default=None,
        help="in batch mode, write the digest file when changes were found",
    )
    parser.add_argument(
        "-r",
        "--restrict",
        action="append",
        default=None,
        metavar="PATTERN",
        help="only check paths matching this glob pattern (repeatable)",
    )
    parser.add_argument("--exclude-marker", default=None, metavar="NAME")
    parser.add_argument("--mtime-tolerance", type=int, default=None, metavar="SECONDS")
    parser.add_argument("--audit-log", default=None, metavar="PATH")
    return parser


def overrides_from_args(args: argparse.Namespace) -> CliOverrides:
    """Translate parsed arguments into config overrides."""
    return CliOverrides(
        manifest_file=Path(args.file) if args.file is not None else None,
        digest_type=args.type,
        full_check=args.check,
        follow_symlinks=args.links,
        mtime_tolerance=args.mtime_tolerance,
        exclude_marker=args.exclude_marker,
        restrict=tuple(args.restrict) if args.restrict else None,
        verbosity_delta=args.verbose - args.quiet,
        only_modified=args.modified,
        batch=args.batch,
        update=args.update,
        audit_log=Path(args.audit_log) if args.audit_log is not None else None,
    )


def _confirm_on_terminal(in_stream: TextIO, out_stream: TextIO) -> ChecksumConfirm:
    def confirm(message: str) -> bool:
        out_stream.write(f"digup: {message}\nContinue anyway? [y/N] ")
        out_stream.flush()
        answer = in_stream.readline().strip().lower()
        return answer in ("y", "yes")

    return confirm


def open_manifest(
    choice: ManifestChoice, config: DigupConfig, in_stream: TextIO, out_stream: TextIO
) -> tuple[LoadedManifest, DigestType]:
    """Load the chosen manifest, or start an empty one, with its digest type."""
    confirm = None if config.output.batch else _confirm_on_terminal(in_stream, out_stream)
    if choice.exists:
        loaded = load_manifest(
            choice.path, expected_type=choice.digest_type, confirm_checksum_mismatch=confirm
        )
    else:
        loaded = parse_manifest((), str(choice.path), expected_type=choice.digest_type)
    if loaded.digest_type is None:
        raise FatalError("to create a new digest file specify the digest --type (see --help).")
    return loaded, loaded.digest_type


def _relative_to_root(path: Path, root: Path) -> str | None:
    absolute = Path(os.path.abspath(path))
    try:
        return absolute.relative_to(root).as_posix()
    except ValueError:
        return None


def _audit_log_path(config: DigupConfig) -> Path | None:
    if config.audit_log is None:
        return None
    if config.audit_log.is_absolute():
        return config.audit_log
    return config.root / config.audit_log


def _needs_write(counters: StatusCounters) -> bool:
    unchanged = counters[FileStatus.SEEN] + counters[FileStatus.SKIPPED]
    return unchanged != counters.total


def run(
    config: DigupConfig,
    *,
    in_stream: TextIO,
    out_stream: TextIO,
    err_stream: TextIO,
) -> int:
    """Scan ``config.root`` against its manifest and report or write back."""
    choice = resolve_manifest(config.root, config.manifest.file, config.manifest.digest_type)
    loaded, digest_type = open_manifest(choice, config, in_stream, err_stream)

    audit_path = _audit_log_path(config)
    ignored = _relative_to_root(audit_path, config.root) if audit_path is not None else None

    exclude_marker = config.scan.exclude_marker or loaded.options.exclude_marker
    options = PersistentOptions(exclude_marker=exclude_marker)
    session = ReconciliationSession.from_manifest(
        loaded,
        algorithm_for(digest_type),
        LocalFileSystem(config.root),
        ClassifierOptions(
            full_check=config.scan.full_check,
            mtime_tolerance=config.scan.mtime_tolerance,
            restrict=config.scan.restrict,
            manifest_path=_relative_to_root(choice.path, config.root),
            ignored_paths=(ignored,) if ignored is not None else (),
        ),
    )
    skipped = session.apply_restriction()
    if skipped:
        logger.info("%d manifest entries outside the restriction patterns", skipped)

    audit = JsonlScanLogger(audit_path) if audit_path is not None else None

    def observe(outcome: StatusOutcome) -> None:
        line = report_outcome(outcome, config.output.verbosity, config.output.only_modified)
        if line is not None:
            out_stream.write(line + "\n")
        if audit is not None:
            audit.append(ScanEvent.from_outcome(outcome))

    report = scan_tree(
        session,
        follow_symlinks=config.scan.follow_symlinks,
        exclude_marker=exclude_marker,
        observer=observe,
    )
    # Deleted files are listed at every verbosity.
    for line in listing(session.file_index, FileStatus.UNSEEN):
        out_stream.write(line + "\n")
    logger.info(
        "scan finished: %d paths classified, %d issues", report.classified, len(report.issues)
    )

    def save() -> str:
        written = sum(1 for record in session.file_index if record.writable)
        write_manifest(choice.path, session.file_index, options)
        return f"digup: wrote {written} digests to {printable_path(str(choice.path))}"

    if config.output.batch:
        out_stream.write("\n".join(summary_lines(session.counters)) + "\n")
        if config.output.update and _needs_write(session.counters):
            try:
                err_stream.write(save() + "\n")
            except OSError as error:
                target = printable_path(str(choice.path))
                raise FatalError(f"could not write {target}: {error.strerror or error}") from error
        if session.counters.only_unchanged():
            return EXIT_UNCHANGED
        return EXIT_CHANGED

    shell = ReviewShell(
        session.file_index,
        session.counters,
        save,
        in_stream=in_stream,
        out_stream=out_stream,
    )
    shell.run()
    return EXIT_UNCHANGED


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for the digup command."""
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    root = Path(args.directory)
    if not root.is_dir():
        sys.stderr.write(f"digup: could not change into directory {printable_path(str(root))}\n")
        return EXIT_FATAL
    try:
        config = load_effective_config(root, overrides_from_args(args))
    except ValueError as error:
        sys.stderr.write(f"digup: {error}\n")
        return EXIT_FATAL

    configure_logging(config.output.verbosity)
    try:
        return run(config, in_stream=sys.stdin, out_stream=sys.stdout, err_stream=sys.stderr)
    except (ManifestParseError, ManifestSelectionError, FatalError, OSError) as error:
        sys.stderr.write(f"digup: {printable_path(str(error))}\n")
        return EXIT_FATAL


if __name__ == "__main__":
    raise SystemExit(main())
