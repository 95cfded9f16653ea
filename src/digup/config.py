"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from digup.digest import DigestType

CONFIG_FILE_NAME = "digup.toml"
MAX_VERBOSITY = 3
MAX_MTIME_TOLERANCE = 24 * 60 * 60


@dataclass(slots=True, frozen=True)
class ManifestConfig:
    """Which manifest to read and which digest to write new files with."""

    file: Path | None
    digest_type: DigestType | None


@dataclass(slots=True, frozen=True)
class ScanConfig:
    """Classification and traversal settings."""

    full_check: bool
    follow_symlinks: bool
    mtime_tolerance: int
    exclude_marker: str | None
    restrict: tuple[str, ...]


@dataclass(slots=True, frozen=True)
class OutputConfig:
    """Console reporting settings."""

    verbosity: int
    only_modified: bool
    batch: bool
    update: bool


@dataclass(slots=True, frozen=True)
class DigupConfig:
    """Fully merged run configuration."""

    root: Path
    manifest: ManifestConfig
    scan: ScanConfig
    output: OutputConfig
    audit_log: Path | None

    def to_public_dict(self) -> dict[str, object]:
        """Return a serializable snapshot."""
        return {
            "root": str(self.root),
            "manifest": {
                "file": str(self.manifest.file) if self.manifest.file is not None else None,
                "type": self.manifest.digest_type.value if self.manifest.digest_type else None,
            },
            "scan": {
                "full_check": self.scan.full_check,
                "follow_symlinks": self.scan.follow_symlinks,
                "mtime_tolerance": self.scan.mtime_tolerance,
                "exclude_marker": self.scan.exclude_marker,
                "restrict": list(self.scan.restrict),
            },
            "output": {
                "verbosity": self.output.verbosity,
                "only_modified": self.output.only_modified,
                "batch": self.output.batch,
                "update": self.output.update,
            },
            "audit_log": str(self.audit_log) if self.audit_log is not None else None,
        }


@dataclass(slots=True, frozen=True)
class CliOverrides:
    """Optional command-line overrides applied at highest precedence."""

    manifest_file: Path | None = None
    digest_type: DigestType | None = None
    full_check: bool | None = None
    follow_symlinks: bool | None = None
    mtime_tolerance: int | None = None
    exclude_marker: str | None = None
    restrict: tuple[str, ...] | None = None
    verbosity_delta: int = 0
    only_modified: bool | None = None
    batch: bool | None = None
    update: bool | None = None
    audit_log: Path | None = None


def default_config(root: Path) -> DigupConfig:
    """Build default config for a scan root."""
    return DigupConfig(
        root=root.resolve(),
        manifest=ManifestConfig(file=None, digest_type=None),
        scan=ScanConfig(
            full_check=False,
            follow_symlinks=False,
            mtime_tolerance=0,
            exclude_marker=None,
            restrict=(),
        ),
        output=OutputConfig(verbosity=2, only_modified=False, batch=False, update=False),
        audit_log=None,
    )


def load_config_file(root: Path) -> dict[str, object]:
    """Load optional digup.toml from the scan root."""
    config_path = root / CONFIG_FILE_NAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILE_NAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_bool(value: object, name: str, default: bool) -> bool:
    if value is None:
        return default
    if not isinstance(value, bool):
        raise ValueError(f"Config field '{name}' must be a boolean.")
    return value


def _optional_string(value: object, name: str, default: str | None) -> str | None:
    if value is None:
        return default
    if not isinstance(value, str) or not value:
        raise ValueError(f"Config field '{name}' must be a non-empty string.")
    return value


def _optional_int_in_range(
    value: object,
    name: str,
    default: int,
    low: int,
    high: int,
) -> int:
    if value is None:
        return default
    if not isinstance(value, int) or isinstance(value, bool) or value < low:
        raise ValueError(f"Config field '{name}' must be an integer >= {low}.")
    if value > high:
        raise ValueError(f"Config field '{name}' must be <= {high}.")
    return value


def _optional_digest_type(value: object, name: str) -> DigestType | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be a string.")
    try:
        return DigestType.parse(value)
    except ValueError:
        choices = ", ".join(item.value for item in DigestType)
        raise ValueError(f"Config field '{name}' must be one of {choices}.") from None


def merge_config(
    base: DigupConfig, file_payload: dict[str, object], overrides: CliOverrides
) -> DigupConfig:
    """Merge defaults, config file, then command-line overrides."""
    manifest_payload = _get_table(file_payload, "manifest")
    scan_payload = _get_table(file_payload, "scan")
    output_payload = _get_table(file_payload, "output")
    audit_payload = _get_table(file_payload, "audit")

    manifest_file = base.manifest.file
    raw_file = _optional_string(manifest_payload.get("file"), "manifest.file", None)
    if raw_file is not None:
        manifest_file = Path(raw_file)
    digest_type = (
        _optional_digest_type(manifest_payload.get("type"), "manifest.type")
        or base.manifest.digest_type
    )

    restrict = base.scan.restrict
    if "restrict" in scan_payload:
        restrict = _tuple_of_strings(scan_payload["restrict"], "scan", "restrict")
    scan = ScanConfig(
        full_check=_optional_bool(
            scan_payload.get("full_check"), "scan.full_check", base.scan.full_check
        ),
        follow_symlinks=_optional_bool(
            scan_payload.get("follow_symlinks"), "scan.follow_symlinks", base.scan.follow_symlinks
        ),
        mtime_tolerance=_optional_int_in_range(
            scan_payload.get("mtime_tolerance"),
            "scan.mtime_tolerance",
            base.scan.mtime_tolerance,
            0,
            MAX_MTIME_TOLERANCE,
        ),
        exclude_marker=_optional_string(
            scan_payload.get("exclude_marker"), "scan.exclude_marker", base.scan.exclude_marker
        ),
        restrict=restrict,
    )

    output = OutputConfig(
        verbosity=_optional_int_in_range(
            output_payload.get("verbosity"),
            "output.verbosity",
            base.output.verbosity,
            0,
            MAX_VERBOSITY,
        ),
        only_modified=_optional_bool(
            output_payload.get("only_modified"), "output.only_modified", base.output.only_modified
        ),
        batch=base.output.batch,
        update=base.output.update,
    )

    audit_log = base.audit_log
    raw_audit = _optional_string(audit_payload.get("log"), "audit.log", None)
    if raw_audit is not None:
        audit_log = Path(raw_audit)

    merged = DigupConfig(
        root=base.root,
        manifest=ManifestConfig(file=manifest_file, digest_type=digest_type),
        scan=scan,
        output=output,
        audit_log=audit_log,
    )
    return apply_cli_overrides(merged, overrides)


def apply_cli_overrides(config: DigupConfig, overrides: CliOverrides) -> DigupConfig:
    """Apply command-line overrides at highest precedence."""
    mtime_tolerance = _optional_int_in_range(
        overrides.mtime_tolerance,
        "overrides.mtime_tolerance",
        config.scan.mtime_tolerance,
        0,
        MAX_MTIME_TOLERANCE,
    )
    scan = ScanConfig(
        full_check=_pick(overrides.full_check, config.scan.full_check),
        follow_symlinks=_pick(overrides.follow_symlinks, config.scan.follow_symlinks),
        mtime_tolerance=mtime_tolerance,
        exclude_marker=overrides.exclude_marker or config.scan.exclude_marker,
        restrict=overrides.restrict if overrides.restrict else config.scan.restrict,
    )

    batch = _pick(overrides.batch, config.output.batch)
    verbosity = config.output.verbosity + overrides.verbosity_delta
    if batch and overrides.batch:
        verbosity -= 1
    only_modified = _pick(overrides.only_modified, config.output.only_modified)
    if only_modified and verbosity >= 2:
        verbosity = 1
    output = OutputConfig(
        verbosity=max(0, min(MAX_VERBOSITY, verbosity)),
        only_modified=only_modified,
        batch=batch,
        update=_pick(overrides.update, config.output.update),
    )
    return DigupConfig(
        root=config.root,
        manifest=ManifestConfig(
            file=overrides.manifest_file or config.manifest.file,
            digest_type=overrides.digest_type or config.manifest.digest_type,
        ),
        scan=scan,
        output=output,
        audit_log=overrides.audit_log or config.audit_log,
    )


def load_effective_config(root: Path, overrides: CliOverrides | None = None) -> DigupConfig:
    """Load effective config using merge order defaults -> digup.toml -> overrides."""
    resolved_root = root.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(base, payload, overrides or CliOverrides())


def _pick(value: bool | None, default: bool) -> bool:
    return default if value is None else value
