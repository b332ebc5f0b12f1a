# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Build pipeline: platforms -> toolchain -> packager, once per target.

Everything runs in order on one thread. A target finishes every platform
(and its Raspberry Pi variants) before the next target starts, and the first
failure anywhere stops the run. There is no partial-success mode: a release
with half its platforms missing is worse than no release.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

from xbuild.build.platforms import RASPBERRY_PI_VARIANTS, Platform, PlatformSource
from xbuild.build.toolchain import (
    TOOLCHAIN_COMMAND,
    CommandRunner,
    build_command,
    invoke_toolchain,
    toolchain_environment,
)
from xbuild.config.exceptions import ConfigError
from xbuild.config.resolver import ResolvedBuildConfig
from xbuild.logging.logger import get_logger
from xbuild.release.checksums.integrity import reset_manifest
from xbuild.release.packaging.packager import (
    PackageResult,
    binary_name,
    package_binary,
    staging_name,
)
from xbuild.utils.paths import ensure_directory

_logger = get_logger(__name__)


@dataclass(frozen=True)
class TargetResult:
    """Archives produced for one target."""

    name: str
    version: str
    manifest: Path
    packages: tuple[PackageResult, ...]


@dataclass
class BuildSummary:
    """Everything a build run produced, in build order."""

    targets: list[TargetResult] = field(default_factory=list)

    @property
    def archive_count(self) -> int:
        return sum(len(target.packages) for target in self.targets)


@dataclass(frozen=True)
class PlannedBuild:
    """One toolchain invocation a run would perform."""

    target: str
    platform: str
    argv: tuple[str, ...]
    env: tuple[tuple[str, str], ...]


def read_version(config: ResolvedBuildConfig) -> str:
    """
    The version string: an inline override, or the trimmed version file.

    Raises:
        ConfigError: If the file can't be read or holds only whitespace.
    """
    if config.version_override:
        return config.version_override.strip()

    try:
        version = config.version_file.read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError) as err:
        raise ConfigError(f"failed to read version file {config.version_file}: {err}") from err

    if not version:
        raise ConfigError(f"version file is empty: {config.version_file}")
    return version


def check_inputs(config: ResolvedBuildConfig) -> None:
    """
    Raises:
        ConfigError: If the version file or platforms file is missing.
    """
    if config.version_override is None and not config.version_file.is_file():
        raise ConfigError(f"version file not found: {config.version_file}")
    if not config.platforms_file.is_file():
        raise ConfigError(f"platforms file not found: {config.platforms_file}")


def prepare(config: ResolvedBuildConfig) -> None:
    """
    Check required inputs exist and create the output directory.

    Raises:
        ConfigError: Missing version or platforms file, or an output
            directory that can't be created.
    """
    check_inputs(config)
    try:
        ensure_directory(config.output_dir)
    except OSError as err:
        raise ConfigError(f"could not create output directory {config.output_dir}: {err}") from err


def _platforms_for(config: ResolvedBuildConfig) -> list[Platform]:
    platforms = list(PlatformSource(config.platforms_file))
    if config.build_for_pi:
        platforms.extend(RASPBERRY_PI_VARIANTS)
    return platforms


def build_platform(
    config: ResolvedBuildConfig,
    version: str,
    platform: Platform,
    runner: CommandRunner,
) -> PackageResult:
    """Compile and package one (target, platform) combination."""
    output = binary_name(config, version, platform)
    binary_path = invoke_toolchain(config, platform, output, runner)
    return package_binary(
        binary_path,
        staging_name(config, version, platform),
        platform,
        config,
        version,
    )


def build_target(config: ResolvedBuildConfig, runner: CommandRunner) -> TargetResult:
    """
    Build and package every platform for one target.

    The target's previous manifest for this version is removed first, so the
    manifest afterwards lists exactly this run's archives.
    """
    prepare(config)
    version = read_version(config)

    manifest = config.checksum_manifest_path(version)
    reset_manifest(manifest)

    _logger.info(
        "Building target",
        extra={"target": config.display_name, "version": version, "source": config.source_path},
    )

    packages = [
        build_platform(config, version, platform, runner)
        for platform in _platforms_for(config)
    ]

    _logger.info(
        "Target build complete",
        extra={"target": config.display_name, "archives": len(packages)},
    )
    return TargetResult(
        name=config.display_name,
        version=version,
        manifest=manifest,
        packages=tuple(packages),
    )


def run_build(plan: Sequence[ResolvedBuildConfig], runner: CommandRunner) -> BuildSummary:
    """Build every target in the plan, one after another."""
    summary = BuildSummary()
    for config in plan:
        summary.targets.append(build_target(config, runner))

    if plan:
        _logger.info(
            "All targets build complete",
            extra={
                "targets": len(summary.targets),
                "archives": summary.archive_count,
                "output_dir": str(plan[0].output_dir),
            },
        )
    return summary


def describe_plan(plan: Sequence[ResolvedBuildConfig]) -> list[PlannedBuild]:
    """
    The toolchain invocations a run would perform, without running anything.

    Still reads the version and platforms files, so a dry run catches the
    same configuration errors a real one would.
    """
    planned: list[PlannedBuild] = []
    for config in plan:
        check_inputs(config)
        version = read_version(config)
        for platform in _platforms_for(config):
            args = build_command(config, binary_name(config, version, platform))
            planned.append(
                PlannedBuild(
                    target=config.display_name,
                    platform=str(platform),
                    argv=(TOOLCHAIN_COMMAND, *args),
                    env=tuple(sorted(toolchain_environment(platform).items())),
                )
            )
    return planned
