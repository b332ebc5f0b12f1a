# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release packager. Turns one freshly built binary into a versioned archive.

For every (target, platform) the pipeline hands us a binary sitting in the
project root. We:

    1. create a staging directory   <name>-<version>-<label>.d/
    2. copy the binary in, keeping its permission bits
    3. copy well-known docs that exist (README.md, LICENSE*, the platforms
       file, docs/<name>.1)
    4. copy the configured additional files, warning about missing ones
    5. archive the staging directory: .zip for Windows, .tar.gz otherwise
    6. move the archive into the output directory
    7. append its SHA256 to the target's checksum manifest
    8. remove the staging directory
    9. remove the raw binary

Both archive formats put the staging directory itself at the top level, so
extracting `mytool-1.2.0-linux-amd64.d.tar.gz` gives you a
`mytool-1.2.0-linux-amd64.d/` folder with everything inside.

If archiving fails the staging directory is left where it is, so you can look
at what was about to be packed.
"""

import logging
import os
import shutil
import tarfile
import zipfile
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from xbuild.build.exceptions import PackagingError
from xbuild.build.platforms import Platform
from xbuild.config.resolver import ResolvedBuildConfig
from xbuild.logging.logger import get_logger
from xbuild.release.checksums.integrity import append_checksum
from xbuild.utils.filesystem import copy_with_mode, remove_tree, safe_delete
from xbuild.utils.paths import ensure_directory, resolve_against

_logger: logging.Logger = get_logger(__name__)

# Picked up from the project root when present. Missing ones are fine.
AUTO_INCLUDED_DOCS: tuple[str, ...] = ("README.md", "LICENSE.txt", "LICENSE")
MAN_PAGE_DIR = "docs"

STAGING_SUFFIX = ".d"
ZIP_SUFFIX = ".zip"
TAR_GZ_SUFFIX = ".tar.gz"
WINDOWS_EXECUTABLE_SUFFIX = ".exe"


@dataclass(frozen=True)
class PackageResult:
    """One finished archive."""

    archive_path: Path
    sha256: str
    platform: str
    staged_files: tuple[str, ...]


def artifact_base_name(config: ResolvedBuildConfig, version: str, platform: Platform) -> str:
    return f"{config.project_name}-{version}-{platform.label}"


def binary_name(config: ResolvedBuildConfig, version: str, platform: Platform) -> str:
    """`<name>-<version>-<label>`, plus `.exe` for Windows."""
    name = artifact_base_name(config, version, platform)
    if platform.is_windows:
        name += WINDOWS_EXECUTABLE_SUFFIX
    return name


def staging_name(config: ResolvedBuildConfig, version: str, platform: Platform) -> str:
    return artifact_base_name(config, version, platform) + STAGING_SUFFIX


def archive_suffix(platform: Platform) -> str:
    return ZIP_SUFFIX if platform.is_windows else TAR_GZ_SUFFIX


def _discovered_docs(config: ResolvedBuildConfig) -> list[Path]:
    """Well-known documentation files for this project, whether or not they exist."""
    root = config.project_root
    candidates = [root / name for name in AUTO_INCLUDED_DOCS]
    candidates.append(config.platforms_file)
    candidates.append(root / MAN_PAGE_DIR / f"{config.project_name}.1")
    return candidates


def stage_files(binary_path: Path, staging_dir: Path, config: ResolvedBuildConfig) -> list[str]:
    """
    Fill the staging directory. Returns the staged file names in copy order.

    Raises:
        PackagingError: If the directory can't be created or a copy fails.
    """
    try:
        staging_dir.mkdir(parents=True, exist_ok=True)
    except OSError as err:
        raise PackagingError("create staging directory", staging_dir, err) from err

    staged: list[str] = []

    def _copy(source: Path, what: str) -> None:
        destination = staging_dir / source.name
        try:
            copy_with_mode(source, destination)
        except OSError as err:
            raise PackagingError(f"copy {what}", source, err) from err
        staged.append(source.name)

    _copy(binary_path, "binary")

    for doc in _discovered_docs(config):
        if doc.is_file():
            _copy(doc, "documentation file")

    for entry in config.additional_files:
        source = resolve_against(entry, config.project_root)
        if source.is_file():
            _copy(source, "additional file")
            _logger.info(
                "Including additional file",
                extra={"file": entry, "staging_dir": staging_dir.name},
            )
        else:
            _logger.warning(
                "Additional file not found or not a regular file", extra={"file": entry}
            )

    return staged


def _walk_sorted(root: Path) -> Iterator[Path]:
    """Yield root and everything below it, depth first, names sorted."""
    yield root
    if root.is_dir():
        for child in sorted(root.iterdir(), key=lambda p: p.name):
            yield from _walk_sorted(child)


def write_zip(staging_dir: Path, archive_path: Path) -> None:
    """
    Zip a staging directory with deflated entries.

    Entry names are relative to the staging directory's parent and always use
    forward slashes; directories get a trailing slash.
    """
    parent = staging_dir.parent
    with zipfile.ZipFile(archive_path, mode="w", compression=zipfile.ZIP_DEFLATED) as archive:
        for path in _walk_sorted(staging_dir):
            arcname = path.relative_to(parent).as_posix()
            # ZipFile.write appends the trailing slash and stores directories uncompressed.
            archive.write(path, arcname=arcname)


def write_tar_gz(staging_dir: Path, archive_path: Path) -> None:
    """Tar and gzip a staging directory with the directory itself at the top."""
    with tarfile.open(archive_path, mode="w:gz") as archive:
        for path in _walk_sorted(staging_dir):
            arcname = path.relative_to(staging_dir.parent).as_posix()
            archive.add(path, arcname=arcname, recursive=False)


def create_archive(staging_dir: Path, platform: Platform) -> Path:
    """
    Archive a staging directory next to it and return the archive path.

    A partially written archive is deleted on failure; the staging directory
    is not touched.

    Raises:
        PackagingError: If writing the archive fails.
    """
    archive_path = staging_dir.parent / (staging_dir.name + archive_suffix(platform))
    try:
        if platform.is_windows:
            write_zip(staging_dir, archive_path)
        else:
            write_tar_gz(staging_dir, archive_path)
    except (OSError, tarfile.TarError, zipfile.LargeZipFile) as err:
        try:
            safe_delete(archive_path)
        except OSError:
            _logger.warning("Could not remove partial archive", extra={"path": str(archive_path)})
        raise PackagingError("create archive", archive_path, err) from err
    return archive_path


def package_binary(
    binary_path: Path,
    staging: str,
    platform: Platform,
    config: ResolvedBuildConfig,
    version: str,
) -> PackageResult:
    """
    Stage, archive, checksum and clean up one built binary.

    Args:
        binary_path: The binary the toolchain just produced.
        staging: Staging directory name, created under the project root.
        platform: Decides the archive format.
        config: The target's resolved configuration.
        version: Version string, used for the manifest name.

    Returns:
        PackageResult describing the archive in the output directory.

    Raises:
        PackagingError: On any filesystem failure along the way.
    """
    staging_dir = config.project_root / staging
    staged = stage_files(binary_path, staging_dir, config)

    built_archive = create_archive(staging_dir, platform)

    final_archive = config.output_dir / built_archive.name
    try:
        ensure_directory(config.output_dir)
        shutil.move(os.fspath(built_archive), os.fspath(final_archive))
    except OSError as err:
        raise PackagingError("move archive to", config.output_dir, err) from err

    manifest_path = config.checksum_manifest_path(version)
    try:
        digest = append_checksum(manifest_path, final_archive)
    except OSError as err:
        raise PackagingError("record checksum in", manifest_path, err) from err

    try:
        remove_tree(staging_dir)
    except OSError as err:
        raise PackagingError("remove staging directory", staging_dir, err) from err

    try:
        safe_delete(binary_path)
    except OSError as err:
        raise PackagingError("remove binary", binary_path, err) from err

    _logger.info(
        "Packaged",
        extra={
            "archive": final_archive.name,
            "files": len(staged),
            "sha256": digest[:16] + "...",
        },
    )

    return PackageResult(
        archive_path=final_archive,
        sha256=digest,
        platform=str(platform),
        staged_files=tuple(staged),
    )
