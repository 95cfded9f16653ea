"""Red-black tree with a cursor API and optional duplicate keys."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any


class DuplicateKeyError(KeyError):
    """Raised when inserting an existing key into a unique tree."""


class _Node:
    __slots__ = ("key", "value", "red", "left", "right", "parent")

    def __init__(self, key: Any, value: Any, nil: _Node | None) -> None:
        self.key = key
        self.value = value
        self.red = True
        self.left = nil
        self.right = nil
        self.parent = nil


@dataclass(slots=True, frozen=True)
class Cursor:
    """Position in a tree; `at_end` marks the past-the-end position."""

    _node: _Node
    _nil: _Node

    @property
    def at_end(self) -> bool:
        return self._node is self._nil

    @property
    def key(self) -> Any:
        if self.at_end:
            raise IndexError("Cursor is past the end.")
        return self._node.key

    @property
    def value(self) -> Any:
        if self.at_end:
            raise IndexError("Cursor is past the end.")
        return self._node.value


class RedBlackTree:
    """Balanced ordered map.

    Keys must be mutually comparable with ``<``. When ``allow_duplicates`` is
    set, equal keys coexist and a newly inserted key is placed after every
    existing equal key, so runs of equal keys keep insertion order.
    """

    def __init__(self, *, allow_duplicates: bool = False) -> None:
        nil = _Node(None, None, None)
        nil.red = False
        nil.left = nil.right = nil.parent = nil
        self._nil = nil
        self._root = nil
        self._size = 0
        self._allow_duplicates = allow_duplicates

    def __len__(self) -> int:
        return self._size

    def size(self) -> int:
        return self._size

    def is_empty(self) -> bool:
        return self._size == 0

    def __iter__(self) -> Iterator[tuple[Any, Any]]:
        cursor = self.begin()
        while not cursor.at_end:
            yield cursor.key, cursor.value
            cursor = self.successor(cursor)

    def begin(self) -> Cursor:
        """Return a cursor at the smallest key (or the end when empty)."""
        node = self._root
        if node is self._nil:
            return self.end()
        while node.left is not self._nil:
            node = node.left
        return Cursor(node, self._nil)

    def end(self) -> Cursor:
        return Cursor(self._nil, self._nil)

    def find(self, key: Any) -> Cursor | None:
        """Return the first in-order node whose key equals ``key``."""
        node = self._root
        found: _Node | None = None
        while node is not self._nil:
            if key < node.key:
                node = node.left
            elif node.key < key:
                node = node.right
            else:
                found = node
                node = node.left
        if found is None:
            return None
        return Cursor(found, self._nil)

    def successor(self, cursor: Cursor) -> Cursor:
        node = cursor._node
        if node is self._nil:
            return self.end()
        if node.right is not self._nil:
            node = node.right
            while node.left is not self._nil:
                node = node.left
            return Cursor(node, self._nil)
        parent = node.parent
        while parent is not self._nil and node is parent.right:
            node = parent
            parent = parent.parent
        return Cursor(parent, self._nil)

    def predecessor(self, cursor: Cursor) -> Cursor:
        node = cursor._node
        if node is self._nil:
            return self.end()
        if node.left is not self._nil:
            node = node.left
            while node.right is not self._nil:
                node = node.right
            return Cursor(node, self._nil)
        parent = node.parent
        while parent is not self._nil and node is parent.left:
            node = parent
            parent = parent.parent
        return Cursor(parent, self._nil)

    def insert(self, key: Any, value: Any) -> Cursor:
        """Insert a key/value pair and rebalance.

        Raises DuplicateKeyError for an existing key unless duplicates are
        allowed; the tree is left unchanged in that case.
        """
        parent = self._nil
        node = self._root
        while node is not self._nil:
            parent = node
            if key < node.key:
                node = node.left
            elif node.key < key or self._allow_duplicates:
                node = node.right
            else:
                raise DuplicateKeyError(key)

        new = _Node(key, value, self._nil)
        new.parent = parent
        if parent is self._nil:
            self._root = new
        elif key < parent.key:
            parent.left = new
        else:
            parent.right = new
        self._size += 1
        self._insert_fixup(new)
        return Cursor(new, self._nil)

    def check_invariants(self) -> bool:
        """Verify ordering, colouring and black-height invariants."""
        if self._root.red:
            return False
        black_height = self._black_height(self._root)
        if black_height < 0:
            return False
        count = 0
        previous: Any = None
        for key, _ in self:
            if count and key < previous:
                return False
            if count and not self._allow_duplicates and not previous < key:
                return False
            previous = key
            count += 1
        return count == self._size

    def for_each(self, visit: Callable[[Any, Any], None]) -> None:
        for key, value in self:
            visit(key, value)

    def _black_height(self, node: _Node) -> int:
        if node is self._nil:
            return 1
        if node.red and (node.left.red or node.right.red):
            return -1
        left = self._black_height(node.left)
        right = self._black_height(node.right)
        if left < 0 or right < 0 or left != right:
            return -1
        return left + (0 if node.red else 1)

    def _rotate_left(self, x: _Node) -> None:
        y = x.right
        x.right = y.left
        if y.left is not self._nil:
            y.left.parent = x
        y.parent = x.parent
        if x.parent is self._nil:
            self._root = y
        elif x is x.parent.left:
            x.parent.left = y
        else:
            x.parent.right = y
        y.left = x
        x.parent = y

    def _rotate_right(self, x: _Node) -> None:
        y = x.left
        x.left = y.right
        if y.right is not self._nil:
            y.right.parent = x
        y.parent = x.parent
        if x.parent is self._nil:
            self._root = y
        elif x is x.parent.right:
            x.parent.right = y
        else:
            x.parent.left = y
        y.right = x
        x.parent = y

    def _insert_fixup(self, node: _Node) -> None:
        while node.parent.red:
            grandparent = node.parent.parent
            if node.parent is grandparent.left:
                uncle = grandparent.right
                if uncle.red:
                    node.parent.red = False
                    uncle.red = False
                    grandparent.red = True
                    node = grandparent
                    continue
                if node is node.parent.right:
                    node = node.parent
                    self._rotate_left(node)
                node.parent.red = False
                node.parent.parent.red = True
                self._rotate_right(node.parent.parent)
            else:
                uncle = grandparent.left
                if uncle.red:
                    node.parent.red = False
                    uncle.red = False
                    grandparent.red = True
                    node = grandparent
                    continue
                if node is node.parent.left:
                    node = node.parent
                    self._rotate_right(node)
                node.parent.red = False
                node.parent.parent.red = True
                self._rotate_left(node.parent.parent)
        self._root.red = False
