from __future__ import annotations

import shutil
from pathlib import Path

from digup.digest import DigestType, algorithm_for
from digup.index import FileStatus
from digup.manifest import PersistentOptions, parse_manifest_bytes, render_manifest
from digup.scan import ClassifierOptions, LocalFileSystem, ReconciliationSession, scan_tree


def _session(root: Path, manifest: bytes = b"") -> ReconciliationSession:
    loaded = parse_manifest_bytes(manifest, expected_type=DigestType.SHA1)
    return ReconciliationSession.from_manifest(
        loaded, algorithm_for(DigestType.SHA1), LocalFileSystem(root), ClassifierOptions()
    )


def _snapshot(root: Path) -> bytes:
    session = _session(root)
    scan_tree(session)
    payload, _ = render_manifest(session.file_index, PersistentOptions())
    return payload


def test_moved_file_is_renamed(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_text("payload", encoding="utf-8")
    session = _session(tmp_path, _snapshot(tmp_path))
    (tmp_path / "a.txt").rename(tmp_path / "b.txt")

    scan_tree(session)

    renamed = session.file_index.find("b.txt")
    assert renamed.status is FileStatus.RENAMED
    assert renamed.old_path == "a.txt"
    assert session.file_index.find("a.txt").status is FileStatus.OLDPATH
    assert session.deleted_records() == []
    payload, written = render_manifest(session.file_index, PersistentOptions())
    assert written == 1
    assert b"a.txt" not in payload


def test_duplicated_file_is_copied(tmp_path: Path) -> None:
    (tmp_path / "a.txt").write_text("payload", encoding="utf-8")
    session = _session(tmp_path, _snapshot(tmp_path))
    shutil.copyfile(tmp_path / "a.txt", tmp_path / "c.txt")

    scan_tree(session)

    copied = session.file_index.find("c.txt")
    assert copied.status is FileStatus.COPIED
    assert copied.old_path == "a.txt"
    assert session.file_index.find("a.txt").status is FileStatus.SEEN


def test_rename_takes_first_candidate_and_retires_all(tmp_path: Path) -> None:
    (tmp_path / "x1").write_text("same", encoding="utf-8")
    (tmp_path / "x2").write_text("same", encoding="utf-8")
    session = _session(tmp_path, _snapshot(tmp_path))
    (tmp_path / "x1").rename(tmp_path / "y")
    (tmp_path / "x2").unlink()

    scan_tree(session)

    renamed = session.file_index.find("y")
    assert renamed.status is FileStatus.RENAMED
    assert renamed.old_path == "x1"
    assert session.file_index.find("x1").status is FileStatus.OLDPATH
    assert session.file_index.find("x2").status is FileStatus.OLDPATH
    assert session.counters[FileStatus.OLDPATH] == 2


def test_live_candidate_makes_copy_and_dead_one_is_retired(tmp_path: Path) -> None:
    (tmp_path / "k1").write_text("same", encoding="utf-8")
    (tmp_path / "k2").write_text("same", encoding="utf-8")
    session = _session(tmp_path, _snapshot(tmp_path))
    (tmp_path / "k1").unlink()
    (tmp_path / "new").write_text("same", encoding="utf-8")

    scan_tree(session)

    copied = session.file_index.find("new")
    assert copied.status is FileStatus.COPIED
    assert copied.old_path == "k2"
    assert session.file_index.find("k1").status is FileStatus.OLDPATH
    assert session.file_index.find("k2").status is FileStatus.SEEN


def test_identical_new_files_in_one_scan_stay_new(tmp_path: Path) -> None:
    (tmp_path / "one").write_text("twin", encoding="utf-8")
    (tmp_path / "two").write_text("twin", encoding="utf-8")
    session = _session(tmp_path)

    scan_tree(session)

    assert session.file_index.find("one").status is FileStatus.NEW
    assert session.file_index.find("two").status is FileStatus.NEW
    assert session.digest_index.is_empty()
