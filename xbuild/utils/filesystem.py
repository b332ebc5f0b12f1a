# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Filesystem helpers for xbuild.

Staging directories and raw binaries are transient: they get created for one
platform build and removed as soon as the archive is safely in the output
directory. These helpers keep that create/copy/delete logic in one place.
"""

import shutil
from pathlib import Path


def copy_with_mode(source: Path, destination: Path) -> Path:
    """
    Copy a file's bytes and its permission bits.

    Executables must stay executable inside the archive, so a plain byte copy
    is not enough. Timestamps are left alone.

    Returns:
        The destination path.

    Raises:
        OSError: If the source can't be read or the destination can't be written.
    """
    shutil.copyfile(source, destination)
    shutil.copymode(source, destination)
    return destination


def safe_delete(file_path: Path) -> bool:
    """
    Delete a file if it exists. Returns whether anything was actually deleted.

    A missing file is not an error.

    Raises:
        OSError: If the file exists but can't be deleted (permissions, etc).
    """
    if file_path.exists():
        file_path.unlink()
        return True
    return False


def remove_tree(directory: Path) -> bool:
    """Remove a directory and everything below it, if it exists."""
    if directory.is_dir():
        shutil.rmtree(directory)
        return True
    return False
