"""Digest algorithms backed by hashlib."""

from __future__ import annotations

import hashlib
from typing import Any

from digup.digest.base import Digest


class HashlibContext:
    """Context wrapping one hashlib hash object."""

    def __init__(self, hasher: Any) -> None:
        self._hasher = hasher

    def update(self, data: bytes) -> None:
        self._hasher.update(data)

    def finish(self) -> Digest:
        return Digest(self._hasher.digest())


class HashlibAlgorithm:
    """Generic hashlib-backed algorithm variant."""

    def __init__(self, name: str, hashlib_name: str, digest_size: int) -> None:
        self.name = name
        self.digest_size = digest_size
        self._hashlib_name = hashlib_name

    def new(self) -> HashlibContext:
        """Return a fresh context."""
        return HashlibContext(hashlib.new(self._hashlib_name))

    def digest(self, data: bytes) -> Digest:
        """Digest a complete buffer."""
        return Digest(hashlib.new(self._hashlib_name, data).digest())

    def __repr__(self) -> str:
        return f"HashlibAlgorithm({self.name!r})"


class Md5Algorithm(HashlibAlgorithm):
    def __init__(self) -> None:
        super().__init__("md5", "md5", 16)


class Sha1Algorithm(HashlibAlgorithm):
    def __init__(self) -> None:
        super().__init__("sha1", "sha1", 20)


class Sha256Algorithm(HashlibAlgorithm):
    def __init__(self) -> None:
        super().__init__("sha256", "sha256", 32)


class Sha512Algorithm(HashlibAlgorithm):
    def __init__(self) -> None:
        super().__init__("sha512", "sha512", 64)
