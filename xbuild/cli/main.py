# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI entrypoint for xbuild.

This is the single root command; every operation is a subcommand of
`xbuild`. Run it from the root of the Go project you want to build.

The global options (--config, --platforms-file, --additional-files,
--log-level, --dry-run) are inherited by every subcommand through argparse's
parent parser mechanism, and are accepted before the subcommand as well.

Usage:
    xbuild build                          # single-target: build the package in .
    xbuild build --config build.yaml      # multi-target project file
    xbuild --config build.yaml build      # global options also work up front
    xbuild build --no-pi --build-args '-tags "netgo osusergo"'
    xbuild release --notes "Bug fixes"
    xbuild targets --config build.yaml
    xbuild verify

Setup:
    - put platforms.txt in the project root, one os/arch per line
    - put the version (e.g. v1.0.1) in a VERSION file
    - archives and checksums land in ./bin

Environment (release):
    GITHUB_TOKEN   GitHub API token, required
    GH_CLI_PATH    custom path to the GitHub CLI executable, optional
"""

import argparse
import sys

from xbuild import __version__
from xbuild.cli.commands import (
    handle_build,
    handle_info,
    handle_release,
    handle_targets,
    handle_verify,
)
from xbuild.cli.exit_codes import FAILURE
from xbuild.logging.logger import set_package_level
from xbuild.runtime.environment import check_minimum_python


def _build_global_parser(suppress_defaults: bool = False) -> argparse.ArgumentParser:
    """
    Build the parent parser with global options.

    These options get inherited by every subcommand. We use a separate parent
    parser (with add_help=False) so that help text doesn't collide between the
    parent and the subcommand parsers.

    The root parser gets the real defaults. Subcommands get a copy with
    suppressed defaults, so an option given before the subcommand is never
    overwritten by the subcommand's default.
    """

    def _default(value: object) -> object:
        return argparse.SUPPRESS if suppress_defaults else value

    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--config",
        type=str,
        default=_default(None),
        help="Path to a multi-target project file (YAML or JSON).",
    )
    parent.add_argument(
        "--platforms-file",
        type=str,
        default=_default(None),
        dest="platforms_file",
        help="Platforms file to use instead of platforms.txt or the project file's.",
    )
    parent.add_argument(
        "--additional-files",
        type=str,
        default=_default(None),
        dest="additional_files",
        help="Comma-separated list of additional files to include in archives.",
    )
    parent.add_argument(
        "--log-level",
        type=str,
        default=_default("INFO"),
        dest="log_level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging verbosity level.",
    )
    parent.add_argument(
        "--dry-run",
        action="store_true",
        default=_default(False),
        dest="dry_run",
        help="Show what would run without building or publishing.",
    )
    return parent


def _register_subcommands(
    subparsers: argparse._SubParsersAction,  # type: ignore[type-arg]
    parent: argparse.ArgumentParser,
) -> None:
    """
    Register all subcommands with their handler functions.

    Each subcommand gets the global options from the parent parser and sets
    its handler function via set_defaults(func=...).
    """
    commands = [
        ("build", "Cross-compile and package every target.", handle_build),
        ("release", "Publish archives in the output directory as a GitHub release.", handle_release),
        ("targets", "List the configured build targets.", handle_targets),
        ("verify", "Check archives against their checksum manifests.", handle_verify),
        ("info", "Display environment and tool information.", handle_info),
    ]

    for name, help_text, handler in commands:
        parser = subparsers.add_parser(name, parents=[parent], help=help_text)
        parser.set_defaults(func=handler)

    build_parser = subparsers.choices["build"]
    build_parser.add_argument(
        "--build-args",
        type=str,
        default=None,
        dest="build_args",
        help="Extra arguments appended to every go build invocation (quotes allowed).",
    )
    build_parser.add_argument(
        "--pi",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Also build Raspberry Pi (arm7 and arm6/jessie) archives.",
    )

    release_parser = subparsers.choices["release"]
    release_parser.add_argument(
        "--notes",
        type=str,
        default=None,
        help="Release notes text; takes precedence over --notes-file.",
    )
    release_parser.add_argument(
        "--notes-file",
        type=str,
        default=None,
        dest="notes_file",
        help="File containing release notes (default: release_notes.md).",
    )


def main() -> None:
    """
    Main CLI entrypoint. This is what pyproject.toml's [project.scripts] points to.

    If no subcommand is given, we show help and exit with FAILURE.
    """
    check_minimum_python()

    root_parser = argparse.ArgumentParser(
        prog="xbuild",
        description="xbuild: cross-compile Go programs, package them, and publish releases.",
        parents=[_build_global_parser()],
    )
    root_parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s v{__version__}",
    )
    subparsers = root_parser.add_subparsers(dest="command")
    _register_subcommands(subparsers, _build_global_parser(suppress_defaults=True))

    args = root_parser.parse_args()
    set_package_level(args.log_level)

    if not hasattr(args, "func") or args.func is None:
        root_parser.print_help()
        sys.exit(FAILURE)

    exit_code = args.func(args)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
