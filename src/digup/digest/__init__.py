"""Digest values and algorithm variants."""

from .base import Digest, DigestAlgorithm, DigestContext, compare_digests
from .crc32 import Crc32Algorithm
from .hashlib_algorithms import Md5Algorithm, Sha1Algorithm, Sha256Algorithm, Sha512Algorithm
from .registry import DigestType, algorithm_for, checksum_algorithm

__all__ = [
    "Crc32Algorithm",
    "Digest",
    "DigestAlgorithm",
    "DigestContext",
    "DigestType",
    "Md5Algorithm",
    "Sha1Algorithm",
    "Sha256Algorithm",
    "Sha512Algorithm",
    "algorithm_for",
    "checksum_algorithm",
    "compare_digests",
]
