"""CRC32 digest variant built on zlib."""

from __future__ import annotations

import zlib

from digup.digest.base import Digest


class Crc32Context:
    """Running CRC32 seeded at zero."""

    def __init__(self) -> None:
        self.value = 0

    def update(self, data: bytes) -> None:
        self.value = zlib.crc32(data, self.value)

    def finish(self) -> Digest:
        return Digest(self.value.to_bytes(4, "big"))


class Crc32Algorithm:
    """CRC32 with a 4-byte big-endian result."""

    name = "crc32"
    digest_size = 4

    def new(self) -> Crc32Context:
        """Return a fresh context."""
        return Crc32Context()

    def digest(self, data: bytes) -> Digest:
        """Digest a complete buffer."""
        return Digest(zlib.crc32(data).to_bytes(4, "big"))
