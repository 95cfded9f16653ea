"""Manifest digest types and algorithm lookup."""

from __future__ import annotations

from enum import StrEnum

from digup.digest.base import DigestAlgorithm
from digup.digest.crc32 import Crc32Algorithm
from digup.digest.hashlib_algorithms import (
    Md5Algorithm,
    Sha1Algorithm,
    Sha256Algorithm,
    Sha512Algorithm,
)


class DigestType(StrEnum):
    """Digest algorithms a manifest may be written in."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA256 = "sha256"
    SHA512 = "sha512"

    @property
    def digest_size(self) -> int:
        return _DIGEST_SIZES[self]

    @property
    def hex_length(self) -> int:
        return 2 * _DIGEST_SIZES[self]

    @classmethod
    def from_hex_length(cls, length: int) -> DigestType | None:
        """Map the length of a hex digest to its type, if any."""
        for digest_type, size in _DIGEST_SIZES.items():
            if 2 * size == length:
                return digest_type
        return None

    @classmethod
    def parse(cls, value: str) -> DigestType:
        """Parse a user-supplied type name (case-insensitive)."""
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f"Unknown digest type: {value!r}") from None


_DIGEST_SIZES: dict[DigestType, int] = {
    DigestType.MD5: 16,
    DigestType.SHA1: 20,
    DigestType.SHA256: 32,
    DigestType.SHA512: 64,
}


def algorithm_for(digest_type: DigestType) -> DigestAlgorithm:
    """Return the algorithm variant for a manifest digest type."""
    if digest_type is DigestType.MD5:
        return Md5Algorithm()
    if digest_type is DigestType.SHA1:
        return Sha1Algorithm()
    if digest_type is DigestType.SHA256:
        return Sha256Algorithm()
    if digest_type is DigestType.SHA512:
        return Sha512Algorithm()
    raise LookupError(f"No algorithm for digest type: {digest_type}")


def checksum_algorithm() -> DigestAlgorithm:
    """Return the algorithm used for the manifest integrity envelope."""
    return Crc32Algorithm()
