from __future__ import annotations

import random

import pytest

from digup.index import DuplicateKeyError, RedBlackTree


def test_random_inserts_keep_invariants_and_order() -> None:
    rng = random.Random(20240501)
    keys = rng.sample(range(100_000), 750)
    tree = RedBlackTree()
    for key in keys:
        tree.insert(key, f"value-{key}")
        assert tree.check_invariants()

    assert len(tree) == 750
    assert [key for key, _ in tree] == sorted(keys)
    assert tree.find(keys[10]).value == f"value-{keys[10]}"


def test_ascending_inserts_stay_balanced() -> None:
    tree = RedBlackTree()
    for key in range(1024):
        tree.insert(key, None)

    assert tree.check_invariants()
    assert tree.size() == 1024


def test_duplicate_insert_is_rejected_and_tree_unchanged() -> None:
    tree = RedBlackTree()
    tree.insert("b", 1)
    tree.insert("a", 2)

    with pytest.raises(DuplicateKeyError):
        tree.insert("b", 3)

    assert len(tree) == 2
    assert tree.find("b").value == 1
    assert tree.check_invariants()


def test_duplicates_allowed_keep_insertion_order() -> None:
    tree = RedBlackTree(allow_duplicates=True)
    for position, key in enumerate([3, 1, 3, 2, 3, 0, 3]):
        tree.insert(key, position)

    cursor = tree.find(3)
    values = []
    while not cursor.at_end and cursor.key == 3:
        values.append(cursor.value)
        cursor = tree.successor(cursor)

    assert values == [0, 2, 4, 6]
    assert tree.check_invariants()


def test_cursor_navigation_and_end_position() -> None:
    tree = RedBlackTree()
    assert tree.is_empty()
    assert tree.begin().at_end
    assert tree.find("missing") is None

    for key in ("m", "c", "x"):
        tree.insert(key, key.upper())

    first = tree.begin()
    assert first.key == "c"
    assert tree.predecessor(first).at_end
    last = tree.successor(tree.successor(first))
    assert last.value == "X"
    assert tree.predecessor(last).key == "m"
    end = tree.successor(last)
    assert end.at_end
    with pytest.raises(IndexError):
        _ = end.key


def test_for_each_visits_in_order() -> None:
    tree = RedBlackTree()
    for key in (5, 2, 8):
        tree.insert(key, key * 10)
    seen: list[tuple[int, int]] = []

    tree.for_each(lambda key, value: seen.append((key, value)))

    assert seen == [(2, 20), (5, 50), (8, 80)]
