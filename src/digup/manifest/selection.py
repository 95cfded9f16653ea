"""Default manifest file names and digest type selection."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from digup.digest import DigestType

DEFAULT_MANIFEST_NAMES: dict[str, DigestType] = {
    "md5sum.txt": DigestType.MD5,
    "sha1sum.txt": DigestType.SHA1,
    "sha256sum.txt": DigestType.SHA256,
    "sha512sum.txt": DigestType.SHA512,
}
FALLBACK_DIGEST_TYPE = DigestType.SHA1


class ManifestSelectionError(Exception):
    """Raised when no single manifest can be chosen."""


@dataclass(slots=True, frozen=True)
class ManifestChoice:
    """Manifest path plus the digest type implied by its name, if any."""

    path: Path
    digest_type: DigestType | None
    exists: bool


def default_manifest_name(digest_type: DigestType) -> str:
    return f"{digest_type.value}sum.txt"


def select_manifest(root: Path) -> ManifestChoice | None:
    """Find the single default-named manifest in ``root``.

    Returns None when no default manifest exists and raises
    ManifestSelectionError when more than one does.
    """
    found = [name for name in DEFAULT_MANIFEST_NAMES if (root / name).exists()]
    if len(found) > 1:
        raise ManifestSelectionError(
            f"multiple digest files found in {root}: {', '.join(found)}. Select one using --file."
        )
    if not found:
        return None
    name = found[0]
    return ManifestChoice(path=root / name, digest_type=DEFAULT_MANIFEST_NAMES[name], exists=True)


def resolve_manifest(
    root: Path,
    explicit_file: Path | None,
    digest_type: DigestType | None,
) -> ManifestChoice:
    """Decide which manifest to read and write.

    An explicit file wins. Otherwise a type-derived default name is used,
    then any existing default manifest, then ``sha1sum.txt``.
    """
    if explicit_file is not None:
        path = explicit_file if explicit_file.is_absolute() else root / explicit_file
        return ManifestChoice(path=path, digest_type=digest_type, exists=path.exists())
    if digest_type is not None:
        path = root / default_manifest_name(digest_type)
        return ManifestChoice(path=path, digest_type=digest_type, exists=path.exists())
    existing = select_manifest(root)
    if existing is not None:
        return existing
    path = root / default_manifest_name(FALLBACK_DIGEST_TYPE)
    return ManifestChoice(path=path, digest_type=FALLBACK_DIGEST_TYPE, exists=False)
