from __future__ import annotations

from pathlib import Path

from digup.config import CliOverrides, load_effective_config
from digup.digest import DigestType


def test_defaults_without_config_file(tmp_path: Path) -> None:
    config = load_effective_config(tmp_path)

    assert config.root == tmp_path.resolve()
    assert config.manifest.file is None
    assert config.manifest.digest_type is None
    assert config.scan.full_check is False
    assert config.scan.mtime_tolerance == 0
    assert config.scan.restrict == ()
    assert config.output.verbosity == 2
    assert config.output.batch is False
    assert config.audit_log is None


def test_merge_order_defaults_then_file_then_cli(tmp_path: Path) -> None:
    (tmp_path / "digup.toml").write_text(
        "\n".join(
            [
                "[manifest]",
                'type = "SHA256"',
                "",
                "[scan]",
                "mtime_tolerance = 5",
                "full_check = true",
                'restrict = ["docs/*"]',
                'exclude_marker = ".nodigup"',
                "",
                "[audit]",
                'log = "audit.jsonl"',
            ]
        ),
        encoding="utf-8",
    )
    overrides = CliOverrides(mtime_tolerance=7, digest_type=DigestType.MD5)

    config = load_effective_config(tmp_path, overrides)

    assert config.scan.mtime_tolerance == 7
    assert config.scan.full_check is True
    assert config.scan.restrict == ("docs/*",)
    assert config.scan.exclude_marker == ".nodigup"
    assert config.manifest.digest_type is DigestType.MD5
    assert config.audit_log == Path("audit.jsonl")
    snapshot = config.to_public_dict()
    assert snapshot["manifest"]["type"] == "md5"
    assert snapshot["scan"]["restrict"] == ["docs/*"]


def test_cli_restrict_replaces_file_patterns(tmp_path: Path) -> None:
    (tmp_path / "digup.toml").write_text('[scan]\nrestrict = ["docs/*"]\n', encoding="utf-8")

    config = load_effective_config(tmp_path, CliOverrides(restrict=("src/*", "*.md")))

    assert config.scan.restrict == ("src/*", "*.md")


def test_verbosity_adjustments(tmp_path: Path) -> None:
    batch = load_effective_config(tmp_path, CliOverrides(batch=True))
    assert batch.output.verbosity == 1

    modified = load_effective_config(tmp_path, CliOverrides(only_modified=True, verbosity_delta=1))
    assert modified.output.verbosity == 1
    assert modified.output.only_modified is True

    silent = load_effective_config(tmp_path, CliOverrides(batch=True, verbosity_delta=-5))
    assert silent.output.verbosity == 0

    loud = load_effective_config(tmp_path, CliOverrides(verbosity_delta=4))
    assert loud.output.verbosity == 3
