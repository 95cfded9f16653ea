from __future__ import annotations

import io
import json
import logging
from pathlib import Path

from digup.index import FileStatus, StatusOutcome
from digup.logging import JsonlScanLogger, ScanEvent, configure_logging, level_for_verbosity


def test_scan_log_writes_jsonl_schema(tmp_path: Path) -> None:
    scan_log = JsonlScanLogger(tmp_path / "logs" / "scan.jsonl")
    outcome = StatusOutcome(path="b.txt", status=FileStatus.RENAMED, old_path="a.txt")

    scan_log.append(ScanEvent.from_outcome(outcome, timestamp="2026-01-01T00:00:00.000Z"))

    lines = scan_log.path.read_text(encoding="utf-8").splitlines()
    event = json.loads(lines[-1])
    assert set(event.keys()) == {"error", "old_path", "path", "status", "timestamp"}
    assert event["status"] == "renamed"
    assert event["old_path"] == "a.txt"
    assert event["error"] is None


def test_scan_log_read_is_bounded_and_filtered(tmp_path: Path) -> None:
    scan_log = JsonlScanLogger(tmp_path / "scan.jsonl")
    for second in range(5):
        scan_log.append(
            ScanEvent(
                timestamp=f"2026-01-01T00:00:0{second}.000Z",
                path=f"file{second}",
                status="new",
                old_path=None,
                error=None,
            )
        )
    with scan_log.path.open("a", encoding="utf-8") as handle:
        handle.write("not json\n\n")

    assert [entry["path"] for entry in scan_log.read(limit=2)] == ["file3", "file4"]
    since = scan_log.read(since="2026-01-01T00:00:03.000Z")
    assert [entry["path"] for entry in since] == ["file3", "file4"]
    assert scan_log.read(limit=0) == []


def test_scan_log_read_missing_file(tmp_path: Path) -> None:
    assert JsonlScanLogger(tmp_path / "absent.jsonl").read() == []


def test_error_outcome_carries_message() -> None:
    outcome = StatusOutcome(path="x", status=FileStatus.ERROR, ok=False, error="Short read.")

    event = ScanEvent.from_outcome(outcome)

    assert event.status == "error"
    assert event.error == "Short read."
    assert event.timestamp.endswith("Z")


def test_configure_logging_prefixes_messages() -> None:
    stream = io.StringIO()
    configure_logging(2, stream=stream)
    child = logging.getLogger("digup.scan.traversal")

    child.warning("loop: filesystem loop detected")
    child.info("hidden at default verbosity")

    assert stream.getvalue() == "digup: loop: filesystem loop detected\n"

    configure_logging(3, stream=stream)
    child.info("shown when verbose")
    assert stream.getvalue().endswith("digup: shown when verbose\n")


def test_quiet_logging_keeps_warnings() -> None:
    stream = io.StringIO()
    configure_logging(0, stream=stream)

    logging.getLogger("digup.scan.classifier").warning("internal error: duplicate visit")

    assert level_for_verbosity(0) == logging.WARNING
    assert stream.getvalue() == "digup: internal error: duplicate visit\n"


def test_log_lines_escape_undecodable_path_bytes() -> None:
    stream = io.StringIO()
    configure_logging(2, stream=stream)

    logging.getLogger("digup.scan.traversal").warning("%s: skipping special path", "caf\udce9")

    assert stream.getvalue() == "digup: caf\\xe9: skipping special path\n"
