from __future__ import annotations

import pytest

from digup.digest import Digest, DigestType, compare_digests


def test_hex_round_trip_is_lowercase() -> None:
    digest = Digest.from_hex("ABcd09")

    assert digest.data == b"\xab\xcd\x09"
    assert digest.hex() == "abcd09"
    assert len(digest) == 3


def test_from_hex_rejects_odd_length_and_non_hex() -> None:
    with pytest.raises(ValueError, match="odd length"):
        Digest.from_hex("abc")
    with pytest.raises(ValueError, match="non-hex"):
        Digest.from_hex("zz")


def test_ordering_compares_length_before_bytes() -> None:
    short = Digest(b"\xff")
    long = Digest(b"\x00\x00")

    assert short < long
    assert compare_digests(long, short) > 0
    assert Digest(b"\x01\x02") <= Digest(b"\x01\x02")
    assert Digest(b"\x01\x03") > Digest(b"\x01\x02")
    assert Digest(b"\x01\x02") == Digest(b"\x01\x02")


def test_digest_type_lookup() -> None:
    assert DigestType.from_hex_length(32) is DigestType.MD5
    assert DigestType.from_hex_length(40) is DigestType.SHA1
    assert DigestType.from_hex_length(128) is DigestType.SHA512
    assert DigestType.from_hex_length(10) is None
    assert DigestType.parse(" SHA256 ") is DigestType.SHA256
    assert DigestType.SHA1.hex_length == 40
    with pytest.raises(ValueError, match="Unknown digest type"):
        DigestType.parse("sha3")
