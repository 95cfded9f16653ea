"""Core digest value type and algorithm protocol."""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Protocol

_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(slots=True, frozen=True, order=False)
class Digest:
    """Fixed-length binary digest produced by one algorithm."""

    data: bytes

    def __len__(self) -> int:
        return len(self.data)

    def __lt__(self, other: Digest) -> bool:
        return compare_digests(self, other) < 0

    def __le__(self, other: Digest) -> bool:
        return compare_digests(self, other) <= 0

    def __gt__(self, other: Digest) -> bool:
        return compare_digests(self, other) > 0

    def __ge__(self, other: Digest) -> bool:
        return compare_digests(self, other) >= 0

    def hex(self) -> str:
        """Return lowercase hex encoding."""
        return self.data.hex()

    @classmethod
    def from_hex(cls, text: str) -> Digest:
        """Decode a hex string of even length (case-insensitive)."""
        if len(text) % 2 != 0:
            raise ValueError(f"Hex digest has odd length: {len(text)}")
        if any(char not in _HEX_DIGITS for char in text):
            raise ValueError("Hex digest contains non-hex characters.")
        return cls(bytes.fromhex(text))


def compare_digests(left: Digest, right: Digest) -> int:
    """Order digests by size first, then bytewise."""
    if len(left.data) != len(right.data):
        return len(left.data) - len(right.data)
    if left.data == right.data:
        return 0
    return -1 if left.data < right.data else 1


class DigestContext(Protocol):
    """Running digest computation."""

    def update(self, data: bytes) -> None:
        """Fold more bytes into the digest."""

    def finish(self) -> Digest:
        """Return the final digest."""


class DigestAlgorithm(Protocol):
    """Protocol implemented by digest algorithm variants."""

    name: str
    digest_size: int

    def new(self) -> DigestContext:
        """Return a freshly initialized context."""

    def digest(self, data: bytes) -> Digest:
        """Digest a complete buffer in one call."""
