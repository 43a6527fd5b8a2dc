"""Helpers that prepare build directories and normalize paths for cmake."""
from __future__ import annotations

from pathlib import Path
import logging

from .errors import FilesystemError

logger = logging.getLogger(__name__)

EXTENDED_LENGTH_PREFIX = "\\\\?\\"
"""Prefix Windows adds to canonical paths; GCC's linker and friends reject it."""


def ensure_directory(path: Path) -> Path:
    """Create ``path`` and any missing parents; existing directories are left alone."""

    if path.is_dir():
        return path
    logger.debug("Creating directory %s", path)
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise FilesystemError(path, f"Failed to create directory ({exc.strerror or exc})") from exc
    return path


def strip_extended_prefix(text: str) -> str:
    if text.startswith(EXTENDED_LENGTH_PREFIX):
        return text[len(EXTENDED_LENGTH_PREFIX):]
    return text


def canonical_directory(path: Path) -> str:
    """Return the absolute, symlink-free form of an existing ``path`` as a plain string."""

    try:
        resolved = path.resolve(strict=True)
    except OSError as exc:
        raise FilesystemError(path, f"Failed to canonicalize path ({exc.strerror or exc})") from exc
    return strip_extended_prefix(str(resolved))


__all__ = [
    "EXTENDED_LENGTH_PREFIX",
    "canonical_directory",
    "ensure_directory",
    "strip_extended_prefix",
]
