# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Path utilities for xbuild.

Configured paths (version file, platforms file, additional files, notes file)
are relative to the project root unless they're already absolute.
"""

from pathlib import Path


def resolve_against(path: str | Path, base_dir: Path) -> Path:
    """
    Anchor a possibly-relative path at base_dir.

    Absolute paths come back untouched. Nothing is resolved through symlinks,
    so the result reads the same way the user wrote it.
    """
    candidate = Path(path)
    if candidate.is_absolute():
        return candidate
    return base_dir / candidate


def ensure_directory(path: Path) -> Path:
    """
    Create a directory (and parents) if it doesn't exist. Returns the path for chaining.

    Args:
        path: Directory path to create.

    Returns:
        The same path, now guaranteed to exist.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path
