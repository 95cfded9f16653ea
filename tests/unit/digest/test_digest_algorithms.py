from __future__ import annotations

from digup.digest import (
    Crc32Algorithm,
    DigestType,
    Md5Algorithm,
    Sha1Algorithm,
    Sha256Algorithm,
    algorithm_for,
    checksum_algorithm,
)


def test_known_vectors() -> None:
    assert Md5Algorithm().digest(b"").hex() == "d41d8cd98f00b204e9800998ecf8427e"
    assert Sha1Algorithm().digest(b"abc").hex() == "a9993e364706816aba3e25717850c26c9cd0d89d"
    assert (
        Sha256Algorithm().digest(b"abc").hex()
        == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )
    assert Crc32Algorithm().digest(b"123456789").hex() == "cbf43926"


def test_incremental_update_matches_one_shot() -> None:
    payload = b"0123456789" * 1000
    for algorithm in (Sha1Algorithm(), Crc32Algorithm()):
        context = algorithm.new()
        for start in range(0, len(payload), 333):
            context.update(payload[start : start + 333])
        assert context.finish() == algorithm.digest(payload)


def test_registry_returns_matching_sizes() -> None:
    for digest_type in DigestType:
        algorithm = algorithm_for(digest_type)
        assert algorithm.name == digest_type.value
        assert algorithm.digest_size == digest_type.digest_size
        assert len(algorithm.digest(b"x")) == digest_type.digest_size
    assert checksum_algorithm().digest_size == 4
