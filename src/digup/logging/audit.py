"""Structured JSONL scan log utilities."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime
from pathlib import Path

from digup.index import StatusOutcome


@dataclass(slots=True, frozen=True)
class ScanEvent:
    """One classified path from a reconciliation run."""

    timestamp: str
    path: str
    status: str
    old_path: str | None
    error: str | None

    @classmethod
    def from_outcome(cls, outcome: StatusOutcome, timestamp: str | None = None) -> ScanEvent:
        status = outcome.status.value if outcome.status is not None else "ignored"
        return cls(
            timestamp=timestamp or utc_timestamp(),
            path=outcome.path,
            status=status,
            old_path=outcome.old_path,
            error=outcome.error,
        )


def utc_timestamp() -> str:
    """Return an ISO-8601 UTC timestamp."""
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonlScanLogger:
    """Append-only JSONL scan logger and bounded reader."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        """Return on-disk JSONL path."""
        return self._path

    def append(self, event: ScanEvent) -> None:
        """Append an event as one JSON object per line."""
        with self._path.open("a", encoding="utf-8", errors="surrogateescape") as handle:
            handle.write(json.dumps(asdict(event), sort_keys=True))
            handle.write("\n")

    def read(self, since: str | None = None, limit: int = 50) -> list[dict[str, object]]:
        """Read recent events, optionally filtered by timestamp lower bound."""
        if limit < 1:
            return []
        entries: list[dict[str, object]] = []
        if not self._path.exists():
            return entries
        with self._path.open("r", encoding="utf-8") as handle:
            for line in handle:
                stripped = line.strip()
                if not stripped:
                    continue
                try:
                    record = json.loads(stripped)
                except json.JSONDecodeError:
                    continue
                if since is not None:
                    ts = record.get("timestamp")
                    if not isinstance(ts, str) or ts < since:
                        continue
                entries.append(record)
        if len(entries) <= limit:
            return entries
        return entries[-limit:]
