from __future__ import annotations

from pathlib import Path

import pytest

from digup.digest import DigestType
from digup.manifest import ManifestSelectionError, resolve_manifest, select_manifest


def test_no_default_manifest(tmp_path: Path) -> None:
    assert select_manifest(tmp_path) is None


def test_single_default_manifest_implies_type(tmp_path: Path) -> None:
    (tmp_path / "sha256sum.txt").write_text("", encoding="utf-8")

    choice = select_manifest(tmp_path)

    assert choice is not None
    assert choice.path == tmp_path / "sha256sum.txt"
    assert choice.digest_type is DigestType.SHA256
    assert choice.exists is True


def test_multiple_default_manifests_are_ambiguous(tmp_path: Path) -> None:
    (tmp_path / "md5sum.txt").write_text("", encoding="utf-8")
    (tmp_path / "sha1sum.txt").write_text("", encoding="utf-8")

    with pytest.raises(ManifestSelectionError, match="multiple digest files"):
        select_manifest(tmp_path)


def test_resolve_prefers_explicit_file_then_type(tmp_path: Path) -> None:
    explicit = resolve_manifest(tmp_path, Path("custom.sums"), None)
    assert explicit.path == tmp_path / "custom.sums"
    assert explicit.digest_type is None
    assert explicit.exists is False

    typed = resolve_manifest(tmp_path, None, DigestType.MD5)
    assert typed.path == tmp_path / "md5sum.txt"
    assert typed.digest_type is DigestType.MD5


def test_resolve_falls_back_to_sha1(tmp_path: Path) -> None:
    choice = resolve_manifest(tmp_path, None, None)

    assert choice.path == tmp_path / "sha1sum.txt"
    assert choice.digest_type is DigestType.SHA1
    assert choice.exists is False
