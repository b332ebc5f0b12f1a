# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Publish built archives as a GitHub release through the `gh` CLI.

Publishing is a separate run from building. It only looks at what's on disk
in the output directory (archives and checksum manifests from an earlier
build) and never at any in-memory build state.

Two steps:
  1. `gh release create <version>` with release notes
  2. `gh release upload <version> <files...>` in batches of 10

Release notes come from, in order of precedence: literal text, a notes file,
or release_notes.md in the project root.

Environment:
  GITHUB_TOKEN   required, used by gh itself
  GH_CLI_PATH    optional path or name of the gh executable
"""

import logging
import os
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from xbuild.build.toolchain import CommandRunner
from xbuild.logging.logger import get_logger
from xbuild.release.exceptions import (
    AssetUploadError,
    NoAssetsError,
    ReleaseCreateError,
    ReleasePreconditionError,
)
from xbuild.utils.paths import resolve_against

_logger: logging.Logger = get_logger(__name__)

TOKEN_ENV_VAR = "GITHUB_TOKEN"
CLI_PATH_ENV_VAR = "GH_CLI_PATH"
DEFAULT_CLI = "gh"
DEFAULT_WINDOWS_CLI = "gh.exe"
DEFAULT_NOTES_FILE = "release_notes.md"
UPLOAD_BATCH_SIZE = 10


@dataclass(frozen=True)
class PublishResult:
    """What got published."""

    version: str
    asset_count: int
    batch_count: int


def hosting_command(environ: Mapping[str, str], os_name: str = os.name) -> str:
    """
    Name or path of the gh executable.

    GH_CLI_PATH wins. On Windows, gh.exe is used when it's on PATH.
    """
    override = environ.get(CLI_PATH_ENV_VAR)
    if override:
        return override
    if os_name == "nt" and shutil.which(DEFAULT_WINDOWS_CLI, path=environ.get("PATH")):
        return DEFAULT_WINDOWS_CLI
    return DEFAULT_CLI


def check_preconditions(output_dir: Path, environ: Mapping[str, str]) -> str:
    """
    Verify publishing can start. Returns the resolved hosting command.

    Raises:
        ReleasePreconditionError: If gh isn't found, the token is unset, or
            the output directory is missing or empty.
    """
    command = hosting_command(environ)
    if shutil.which(command, path=environ.get("PATH")) is None:
        raise ReleasePreconditionError(
            f"GitHub CLI ({command}) is not installed or not in PATH"
        )

    if not environ.get(TOKEN_ENV_VAR):
        raise ReleasePreconditionError(f"{TOKEN_ENV_VAR} environment variable is not set")

    if not output_dir.is_dir():
        raise ReleasePreconditionError(f"output directory does not exist: {output_dir}")

    if not any(output_dir.iterdir()):
        raise ReleasePreconditionError(f"output directory is empty: {output_dir}")

    return command


def notes_arguments(
    note: Optional[str],
    note_file: Optional[str],
    project_root: Path,
) -> list[str]:
    """
    The `gh release create` arguments that attach release notes.

    Raises:
        ReleasePreconditionError: If a notes file is named but missing, or
            nothing was given and release_notes.md doesn't exist.
    """
    if note:
        return ["--notes", note]

    if note_file:
        path = resolve_against(note_file, project_root)
        if not path.is_file():
            raise ReleasePreconditionError(f"release notes file not found: {path}")
        return ["--notes-file", str(path)]

    default = project_root / DEFAULT_NOTES_FILE
    if default.is_file():
        return ["--notes-file", str(default)]

    raise ReleasePreconditionError(
        f"no release notes specified, and {DEFAULT_NOTES_FILE} not found"
    )


def collect_assets(output_dir: Path) -> list[Path]:
    """Every non-directory entry of the output directory, sorted by name."""
    return sorted(
        (entry for entry in output_dir.iterdir() if not entry.is_dir()),
        key=lambda p: p.name,
    )


def batched(items: list[Path], size: int = UPLOAD_BATCH_SIZE) -> list[list[Path]]:
    return [items[start:start + size] for start in range(0, len(items), size)]


def publish_release(
    output_dir: Path,
    version: str,
    runner: CommandRunner,
    note: Optional[str] = None,
    note_file: Optional[str] = None,
    project_root: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> PublishResult:
    """
    Create a tagged GitHub release and upload every file in output_dir.

    Args:
        output_dir: Directory of finished archives and checksum manifests.
        version: Release tag.
        runner: Executes gh.
        note: Literal release notes text.
        note_file: Path to a release notes file.
        project_root: Where relative notes paths and release_notes.md live.
        environ: Environment to read GITHUB_TOKEN / GH_CLI_PATH from.

    Raises:
        ReleasePreconditionError: Nothing was run because a precondition failed.
        ReleaseCreateError: `gh release create` failed.
        NoAssetsError: There were no files to upload.
        AssetUploadError: An upload batch failed; later batches were not sent.
    """
    if environ is None:
        environ = os.environ
    if project_root is None:
        project_root = Path.cwd()

    command = check_preconditions(output_dir, environ)
    create_args = ["release", "create", version, *notes_arguments(note, note_file, project_root)]

    _logger.info("Creating GitHub release", extra={"version": version, "cli": command})
    result = runner.run(command, create_args, cwd=project_root)
    if not result.success:
        raise ReleaseCreateError(
            f"failed to create GitHub release {version}: {command} exited with status "
            f"{result.exit_code}",
            exit_code=result.exit_code,
        )

    assets = collect_assets(output_dir)
    if not assets:
        raise NoAssetsError(f"no assets to upload in {output_dir}")

    batches = batched(assets)
    for index, batch in enumerate(batches, start=1):
        _logger.info(
            "Uploading batch",
            extra={"batch": f"{index}/{len(batches)}", "files": len(batch)},
        )
        upload_args = ["release", "upload", version, *(str(path) for path in batch)]
        result = runner.run(command, upload_args, cwd=project_root)
        if not result.success:
            raise AssetUploadError(
                f"failed to upload assets batch {index}/{len(batches)}: {command} exited "
                f"with status {result.exit_code}",
                exit_code=result.exit_code,
            )

    _logger.info(
        "GitHub release created with all assets",
        extra={"version": version, "assets": len(assets)},
    )
    return PublishResult(version=version, asset_count=len(assets), batch_count=len(batches))
