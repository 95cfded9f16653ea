from __future__ import annotations

import pytest

from digup.index import DuplicateKeyError, FileIndex, FileRecord, FileStatus, path_sort_key


def test_records_iterate_in_path_byte_order() -> None:
    index = FileIndex()
    for path in ("b", "a/z", "a.txt", "B", "été", "a"):
        index.add(FileRecord(path=path))

    assert index.paths() == ["B", "a", "a.txt", "a/z", "b", "été"]
    assert index.check_invariants()


def test_path_sort_key_round_trips_undecodable_bytes() -> None:
    raw = b"caf\xe9.txt"
    path = raw.decode("utf-8", "surrogateescape")

    assert path_sort_key(path) == raw


def test_duplicate_path_raises() -> None:
    index = FileIndex()
    index.add(FileRecord(path="docs/readme.md"))

    with pytest.raises(DuplicateKeyError):
        index.add(FileRecord(path="docs/readme.md", status=FileStatus.NEW))

    assert len(index) == 1
    assert index.find("docs/readme.md").status is FileStatus.UNSEEN


def test_insert_rejects_mismatched_key() -> None:
    index = FileIndex()

    with pytest.raises(ValueError, match="does not match"):
        index.insert("a", FileRecord(path="b"))


def test_records_with_status_filters_in_order() -> None:
    index = FileIndex()
    index.add(FileRecord(path="c", status=FileStatus.NEW))
    index.add(FileRecord(path="a", status=FileStatus.NEW))
    index.add(FileRecord(path="b", status=FileStatus.SEEN))

    assert [record.path for record in index.records_with_status(FileStatus.NEW)] == ["a", "c"]
    assert "b" in index
    assert "d" not in index


def test_for_each_in_order_matches_size() -> None:
    index = FileIndex()
    assert index.is_empty()
    for path in ("z", "m", "a"):
        index.add(FileRecord(path=path))
    visited: list[str] = []

    index.for_each_in_order(lambda record: visited.append(record.path))

    assert visited == ["a", "m", "z"]
    assert index.size() == len(visited)
