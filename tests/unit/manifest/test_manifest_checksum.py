from __future__ import annotations

import pytest

from digup.digest import Sha1Algorithm
from digup.index import FileIndex, FileRecord, FileStatus
from digup.manifest import (
    ManifestChecksumError,
    ManifestParseError,
    PersistentOptions,
    parse_manifest_bytes,
    render_manifest,
)


def _payload() -> bytes:
    index = FileIndex()
    index.add(
        FileRecord(
            path="data.bin",
            status=FileStatus.NEW,
            mtime=100,
            size=5,
            digest=Sha1Algorithm().digest(b"data!"),
        )
    )
    payload, _ = render_manifest(index, PersistentOptions(), timestamp="2026-01-01 00:00:00 UTC")
    return payload


def test_untampered_manifest_verifies() -> None:
    assert parse_manifest_bytes(_payload()).crc_verified is True


def test_tampered_manifest_raises() -> None:
    tampered = _payload().replace(b"mtime 100", b"mtime 101")

    with pytest.raises(ManifestChecksumError, match="checksum mismatch") as excinfo:
        parse_manifest_bytes(tampered, "sha1sum.txt")

    assert excinfo.value.line == 4


def test_tampered_header_comment_is_detected() -> None:
    tampered = _payload().replace(b"2026-01-01", b"2026-01-02")

    with pytest.raises(ManifestChecksumError):
        parse_manifest_bytes(tampered)


def test_confirmed_mismatch_loads_with_warning() -> None:
    tampered = _payload().replace(b"mtime 100", b"mtime 101")
    prompts: list[str] = []

    def confirm(message: str) -> bool:
        prompts.append(message)
        return True

    loaded = parse_manifest_bytes(tampered, confirm_checksum_mismatch=confirm)

    assert len(prompts) == 1
    assert "modified or corrupted" in prompts[0]
    assert loaded.crc_verified is False
    assert any("checksum mismatch" in warning for warning in loaded.warnings)
    assert loaded.file_index.find("data.bin").mtime == 101


def test_declined_mismatch_raises() -> None:
    tampered = _payload().replace(b"mtime 100", b"mtime 101")

    with pytest.raises(ManifestChecksumError):
        parse_manifest_bytes(tampered, confirm_checksum_mismatch=lambda message: False)


def _content_positions() -> list[int]:
    payload = _payload()
    # The terminator before the crc line is excluded: flipping it folds the crc line into the
    # preceding file name, which leaves a manifest without a checksum.
    return list(range(payload.rindex(b"#: crc") - 1))


@pytest.mark.parametrize("position", _content_positions())
def test_any_flipped_content_byte_is_rejected(position: int) -> None:
    tampered = bytearray(_payload())
    tampered[position] ^= 0x01

    with pytest.raises(ManifestParseError):
        parse_manifest_bytes(bytes(tampered))
