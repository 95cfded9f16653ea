"""Manifest file format."""

from .codec import (
    ChecksumConfirm,
    LoadedManifest,
    ManifestChecksumError,
    ManifestParseError,
    PersistentOptions,
    load_manifest,
    parse_manifest,
    parse_manifest_bytes,
    render_manifest,
    write_manifest,
)
from .escaping import EscapeError, escape_path, unescape_path
from .selection import (
    DEFAULT_MANIFEST_NAMES,
    ManifestChoice,
    ManifestSelectionError,
    default_manifest_name,
    resolve_manifest,
    select_manifest,
)

__all__ = [
    "ChecksumConfirm",
    "DEFAULT_MANIFEST_NAMES",
    "EscapeError",
    "LoadedManifest",
    "ManifestChecksumError",
    "ManifestChoice",
    "ManifestParseError",
    "ManifestSelectionError",
    "PersistentOptions",
    "default_manifest_name",
    "escape_path",
    "load_manifest",
    "parse_manifest",
    "parse_manifest_bytes",
    "render_manifest",
    "resolve_manifest",
    "select_manifest",
    "unescape_path",
    "write_manifest",
]
