# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build plan resolution.

Turns the project root, the optional multi-target project file, and the
command line options into one ResolvedBuildConfig per target. Everything the
pipeline stages need travels on that object, including the Raspberry Pi
switch, so no stage reads process-wide state.

Two modes:
  - single-target: no project file. The project directory name is the binary
    name and the package in the project root is built.
  - multi-target: one configuration per target in the project file, derived
    from a shared base.

Each configuration is independent. Its list fields are always newly built
lists, never views onto the base or the project file, so changing one
target's additional files can't leak into another target.
"""

import dataclasses
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from xbuild.config.schema import BuildTarget, ProjectConfig
from xbuild.utils.paths import resolve_against

DEFAULT_OUTPUT_DIR = "bin"
DEFAULT_VERSION_FILE = "VERSION"
DEFAULT_PLATFORMS_FILE = "platforms.txt"
DEFAULT_CHECKSUMS_SUFFIX = "checksums.txt"
DEFAULT_LDFLAGS = "-s -w"
DEFAULT_BUILD_FLAGS = "-trimpath"
CURRENT_DIRECTORY = "."


@dataclass(frozen=True)
class ResolvedBuildConfig:
    """Everything needed to build, package and checksum one target."""

    project_name: str
    project_root: Path
    output_dir: Path
    version_file: Path
    platforms_file: Path
    checksums_suffix: str = DEFAULT_CHECKSUMS_SUFFIX
    ld_flags: str = DEFAULT_LDFLAGS
    build_flags: str = DEFAULT_BUILD_FLAGS
    additional_files: list[str] = field(default_factory=list)
    extra_build_args: list[str] = field(default_factory=list)
    source_path: str = CURRENT_DIRECTORY
    target_name: Optional[str] = None
    build_for_pi: bool = True
    version_override: Optional[str] = None

    def checksum_manifest_name(self, version: str) -> str:
        return f"{self.project_name}-{version}-{self.checksums_suffix}"

    def checksum_manifest_path(self, version: str) -> Path:
        return self.output_dir / self.checksum_manifest_name(version)

    @property
    def display_name(self) -> str:
        return self.target_name or self.project_name


def base_config(
    project_root: Path,
    project: Optional[ProjectConfig] = None,
    platforms_file: Optional[str] = None,
    additional_files: Sequence[str] = (),
    extra_build_args: Sequence[str] = (),
    build_for_pi: bool = True,
) -> ResolvedBuildConfig:
    """
    Build the configuration every target starts from.

    Without a project file this is the complete single-target configuration.
    A platforms file given on the command line wins over the project file's.
    """
    project_root = project_root.resolve()

    project_name = project_root.name
    version_file = DEFAULT_VERSION_FILE
    configured_platforms = DEFAULT_PLATFORMS_FILE
    ld_flags = DEFAULT_LDFLAGS
    build_flags = DEFAULT_BUILD_FLAGS
    version_override = None

    if project is not None:
        if project.project_name:
            project_name = project.project_name
        version_file = project.version_file
        configured_platforms = project.platforms_file
        ld_flags = project.default_ldflags
        build_flags = project.default_build_flags
        version_override = project.version

    if platforms_file:
        configured_platforms = platforms_file

    return ResolvedBuildConfig(
        project_name=project_name,
        project_root=project_root,
        output_dir=project_root / DEFAULT_OUTPUT_DIR,
        version_file=resolve_against(version_file, project_root),
        platforms_file=resolve_against(configured_platforms, project_root),
        ld_flags=ld_flags,
        build_flags=build_flags,
        additional_files=list(additional_files),
        extra_build_args=list(extra_build_args),
        build_for_pi=build_for_pi,
        version_override=version_override,
    )


def resolve_target(
    base: ResolvedBuildConfig,
    project: ProjectConfig,
    target: BuildTarget,
) -> ResolvedBuildConfig:
    """
    Derive a target's own configuration from the shared base.

    Additional files are the project's global files, then the target's, then
    the ones given on the command line. Duplicates are kept as given.
    """
    additional_files = [
        *project.global_additional_files,
        *target.additional_files,
        *base.additional_files,
    ]

    return dataclasses.replace(
        base,
        project_name=target.output_name or target.name,
        ld_flags=target.ldflags if target.ldflags else project.default_ldflags,
        build_flags=target.build_flags if target.build_flags else project.default_build_flags,
        additional_files=additional_files,
        extra_build_args=list(base.extra_build_args),
        source_path=target.path,
        target_name=target.name,
    )


def resolve_plan(
    project_root: Path,
    project: Optional[ProjectConfig] = None,
    platforms_file: Optional[str] = None,
    additional_files: Sequence[str] = (),
    extra_build_args: Sequence[str] = (),
    build_for_pi: bool = True,
) -> list[ResolvedBuildConfig]:
    """
    Produce the ordered list of configurations a build run works through.

    Returns one configuration in single-target mode, one per target otherwise.
    """
    base = base_config(
        project_root,
        project=project,
        platforms_file=platforms_file,
        additional_files=additional_files,
        extra_build_args=extra_build_args,
        build_for_pi=build_for_pi,
    )
    if project is None:
        return [base]
    return [resolve_target(base, project, target) for target in project.targets]


def split_file_list(value: Optional[str]) -> list[str]:
    """Split a comma-separated --additional-files value, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]
