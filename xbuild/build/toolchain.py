# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Runs `go build` for one target on one platform.

The command line is built deterministically in this order:

    go build [-ldflags=<ld flags>] [<build flags>...] [<extra args>...] -o <output> [<package>]

Cross compilation is selected purely through the environment: GOOS and
GOARCH, plus GOARM for the Raspberry Pi builds. Those overrides sit on top of
the inherited environment so PATH, GOPATH, GOFLAGS and friends still apply.

Process spawning goes through the CommandRunner protocol. SubprocessRunner is
the real thing; tests pass a fake that records invocations instead.
"""

import os
import subprocess
import sys
from collections import deque
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from xbuild.build.arguments import parse_arguments
from xbuild.build.exceptions import ToolchainError
from xbuild.build.platforms import Platform
from xbuild.config.resolver import CURRENT_DIRECTORY, ResolvedBuildConfig
from xbuild.logging.logger import get_logger

_logger = get_logger(__name__)

TOOLCHAIN_COMMAND = "go"
BUILD_SUBCOMMAND = "build"
STDERR_TAIL_LINES = 20
COMMAND_NOT_FOUND = 127


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external command."""

    exit_code: int
    stderr_tail: str = ""

    @property
    def success(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    """Anything that can run an external command and report its exit code."""

    def run(
        self,
        command: str,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> CommandResult: ...


class SubprocessRunner:
    """
    Runs commands for real, with the console streams passed through.

    stdout is inherited as-is. stderr is read line by line and echoed to our
    own stderr unchanged, keeping the last few lines so a failure can say what
    went wrong. No timeout: a build runs for as long as it takes.
    """

    def __init__(self, tail_lines: int = STDERR_TAIL_LINES) -> None:
        self._tail_lines = tail_lines

    def run(
        self,
        command: str,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> CommandResult:
        full_env = dict(os.environ)
        if env:
            full_env.update(env)

        try:
            process = subprocess.Popen(
                [command, *args],
                env=full_env,
                cwd=str(cwd) if cwd is not None else None,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except FileNotFoundError:
            return CommandResult(
                exit_code=COMMAND_NOT_FOUND,
                stderr_tail=f"{command}: executable not found",
            )

        tail: deque[str] = deque(maxlen=self._tail_lines)
        if process.stderr is not None:
            with process.stderr:
                for line in process.stderr:
                    sys.stderr.write(line)
                    sys.stderr.flush()
                    tail.append(line.rstrip("\n"))

        exit_code = process.wait()
        return CommandResult(exit_code=exit_code, stderr_tail="\n".join(tail))


def toolchain_environment(platform: Platform) -> dict[str, str]:
    """Environment overrides that select the target platform."""
    env = {"GOOS": platform.os, "GOARCH": platform.arch}
    if platform.arm is not None:
        env["GOARM"] = platform.arm
    return env


def build_command(
    config: ResolvedBuildConfig,
    output_name: str,
    source_path: Optional[str] = None,
) -> list[str]:
    """
    Assemble the arguments for `go`, without the executable itself.

    Args:
        config: The target's resolved configuration.
        output_name: File name passed to -o.
        source_path: Package to build; defaults to the target's source path.

    Raises:
        ParseError: If the build flags contain an unterminated quote.
    """
    if source_path is None:
        source_path = config.source_path

    args = [BUILD_SUBCOMMAND]
    if config.ld_flags:
        args.append(f"-ldflags={config.ld_flags}")
    if config.build_flags:
        args.extend(parse_arguments(config.build_flags))
    args.extend(config.extra_build_args)
    args.extend(["-o", output_name])
    if source_path and source_path != CURRENT_DIRECTORY:
        args.append(source_path)
    return args


def invoke_toolchain(
    config: ResolvedBuildConfig,
    platform: Platform,
    output_name: str,
    runner: CommandRunner,
) -> Path:
    """
    Build one binary and return where it landed.

    The toolchain runs in the project root, so the binary appears there under
    output_name.

    Raises:
        ToolchainError: If the build exits non-zero.
        ParseError: If the build flags can't be parsed.
    """
    args = build_command(config, output_name)
    env = toolchain_environment(platform)

    _logger.info(
        "Building",
        extra={
            "target": config.display_name,
            "platform": str(platform),
            "output": output_name,
            "command": " ".join([TOOLCHAIN_COMMAND, *args]),
        },
    )

    result = runner.run(TOOLCHAIN_COMMAND, args, env=env, cwd=config.project_root)
    if not result.success:
        raise ToolchainError(
            exit_code=result.exit_code,
            stderr_tail=result.stderr_tail,
            target=config.display_name,
            platform=str(platform),
        )

    return config.project_root / output_name
