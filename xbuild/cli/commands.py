# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Subcommand handlers for the xbuild CLI.

Each function here corresponds to one CLI subcommand, takes the parsed
argparse namespace, and returns an exit code. The project root is the current
working directory.

No print() calls. Everything goes through the structured logger, and errors
land on stderr.
"""

import argparse
import logging
from pathlib import Path

from xbuild.build.arguments import parse_arguments
from xbuild.build.exceptions import PackagingError, ParseError, ToolchainError
from xbuild.build.pipeline import describe_plan, read_version, run_build
from xbuild.build.toolchain import SubprocessRunner
from xbuild.cli.exit_codes import FAILURE, SUCCESS
from xbuild.config.exceptions import ConfigError
from xbuild.config.loader import load_project_config
from xbuild.config.resolver import ResolvedBuildConfig, resolve_plan, split_file_list
from xbuild.config.schema import ProjectConfig
from xbuild.logging.logger import get_logger
from xbuild.release.checksums.integrity import find_manifests, verify_manifest
from xbuild.release.exceptions import ReleaseError, ReleasePreconditionError
from xbuild.release.publisher.github import publish_release

# Errors we expect and report without a traceback.
_FATAL_ERRORS = (
    ConfigError,
    ParseError,
    ToolchainError,
    PackagingError,
    ReleasePreconditionError,
    ReleaseError,
)


def _project_root() -> Path:
    return Path.cwd()


def _load_project(args: argparse.Namespace, project_root: Path) -> ProjectConfig | None:
    if args.config is None:
        return None
    return load_project_config(Path(args.config), base_dir=project_root)


def _resolve(args: argparse.Namespace) -> tuple[list[ResolvedBuildConfig], ProjectConfig | None]:
    """Load the optional project file and resolve the build plan from the CLI options."""
    project_root = _project_root()
    project = _load_project(args, project_root)

    extra_args: list[str] = []
    build_args = getattr(args, "build_args", None)
    if build_args:
        extra_args = parse_arguments(build_args)

    plan = resolve_plan(
        project_root,
        project=project,
        platforms_file=args.platforms_file,
        additional_files=split_file_list(args.additional_files),
        extra_build_args=extra_args,
        build_for_pi=getattr(args, "pi", True),
    )
    return plan, project


def _report_failure(logger: logging.Logger, message: str, err: Exception) -> int:
    if isinstance(err, _FATAL_ERRORS):
        logger.error(message, extra={"error": str(err), "error_type": type(err).__name__})
    else:
        logger.error(message, extra={"error": str(err)}, exc_info=True)
    return FAILURE


def handle_build(args: argparse.Namespace) -> int:
    """Cross-compile and package every target for every platform."""
    logger = get_logger("xbuild.cli.build", log_level=args.log_level)

    try:
        plan, project = _resolve(args)
        logger.info(
            "Starting build",
            extra={
                "mode": "multi-target" if project is not None else "single-target",
                "targets": len(plan),
                "pi": plan[0].build_for_pi,
                "dry_run": args.dry_run,
            },
        )

        if args.dry_run:
            for planned in describe_plan(plan):
                logger.info(
                    "Dry run, would build",
                    extra={
                        "target": planned.target,
                        "platform": planned.platform,
                        "command": " ".join(planned.argv),
                        "env": dict(planned.env),
                    },
                )
            return SUCCESS

        summary = run_build(plan, SubprocessRunner())
        logger.info(
            "Build finished",
            extra={"targets": len(summary.targets), "archives": summary.archive_count},
        )
        return SUCCESS

    except Exception as err:
        return _report_failure(logger, "Build failed", err)


def handle_release(args: argparse.Namespace) -> int:
    """Publish the archives in the output directory as a GitHub release."""
    logger = get_logger("xbuild.cli.release", log_level=args.log_level)

    try:
        plan, _ = _resolve(args)
        config = plan[0]
        version = read_version(config)

        if args.dry_run:
            logger.info(
                "Dry run, would publish release",
                extra={"version": version, "output_dir": str(config.output_dir)},
            )
            return SUCCESS

        result = publish_release(
            config.output_dir,
            version,
            SubprocessRunner(),
            note=args.notes,
            note_file=args.notes_file,
            project_root=config.project_root,
        )
        logger.info(
            "Release published",
            extra={"version": result.version, "assets": result.asset_count},
        )
        return SUCCESS

    except Exception as err:
        return _report_failure(logger, "Release failed", err)


def handle_targets(args: argparse.Namespace) -> int:
    """List the targets a build would produce."""
    logger = get_logger("xbuild.cli.targets", log_level=args.log_level)

    try:
        plan, project = _resolve(args)
        for config in plan:
            logger.info(
                "Target",
                extra={
                    "target": config.display_name,
                    "output_name": config.project_name,
                    "path": config.source_path,
                    "additional_files": config.additional_files,
                },
            )
        logger.info(
            "Targets listed",
            extra={
                "count": len(plan),
                "mode": "multi-target" if project is not None else "single-target",
            },
        )
        return SUCCESS

    except Exception as err:
        return _report_failure(logger, "Listing targets failed", err)


def handle_verify(args: argparse.Namespace) -> int:
    """Re-check every checksum manifest in the output directory."""
    logger = get_logger("xbuild.cli.verify", log_level=args.log_level)

    try:
        plan, _ = _resolve(args)
        output_dir = plan[0].output_dir
        manifests = find_manifests(output_dir) if output_dir.is_dir() else []
        if not manifests:
            logger.error("No checksum manifests found", extra={"output_dir": str(output_dir)})
            return FAILURE

        results = [verify_manifest(manifest) for manifest in manifests]
        failed = [result for result in results if not result.is_valid]
        for result in failed:
            logger.error(
                "Manifest verification failed",
                extra={
                    "manifest": result.manifest,
                    "mismatches": result.mismatches,
                    "missing": result.missing_files,
                    "errors": result.errors,
                },
            )
        if failed:
            return FAILURE

        logger.info(
            "Verification complete",
            extra={
                "manifests": len(results),
                "archives": sum(result.checked_count for result in results),
            },
        )
        return SUCCESS

    except Exception as err:
        return _report_failure(logger, "Verification failed", err)


def handle_info(args: argparse.Namespace) -> int:
    """Display environment and tool availability."""
    logger = get_logger("xbuild.cli.info", log_level=args.log_level)

    from xbuild import __version__
    from xbuild.runtime.environment import get_system_info

    system_info = get_system_info()

    logger.info(
        "System information",
        extra={
            "xbuild_version": __version__,
            "python_version": system_info.python_version,
            "platform": system_info.platform,
            "architecture": system_info.architecture,
            "go": system_info.toolchain,
            "gh": system_info.hosting_cli,
            "config": args.config,
        },
    )
    return SUCCESS
