# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for xbuild tests.

Fixtures here are available to every test file automatically. The important
ones are `go_project`, a throwaway project root with the files a build needs,
and `fake_runner`, a CommandRunner that records invocations instead of
spawning go or gh.
"""

import textwrap
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import pytest

from xbuild.build.toolchain import CommandResult


@dataclass
class RecordedCall:
    command: str
    args: list[str]
    env: dict[str, str]
    cwd: Optional[Path]


@dataclass
class FakeRunner:
    """
    Records every call. For `go build ... -o <name>` it writes a fake binary
    into cwd so the packager has something to pack.

    Set `fail_at` to the zero-based index of a call that should exit with
    `fail_exit_code`.
    """

    calls: list[RecordedCall] = field(default_factory=list)
    fail_at: Optional[int] = None
    fail_exit_code: int = 2

    def run(
        self,
        command: str,
        args: Sequence[str],
        env: Optional[Mapping[str, str]] = None,
        cwd: Optional[Path] = None,
    ) -> CommandResult:
        index = len(self.calls)
        self.calls.append(RecordedCall(command, list(args), dict(env or {}), cwd))

        if self.fail_at == index:
            return CommandResult(exit_code=self.fail_exit_code, stderr_tail="build failed: boom")

        if command == "go" and "-o" in args:
            output = args[list(args).index("-o") + 1]
            binary = (cwd or Path.cwd()) / output
            binary.write_bytes(b"\x7fELF fake binary " + output.encode())
            binary.chmod(0o755)

        return CommandResult(exit_code=0)

    def go_calls(self) -> list[RecordedCall]:
        return [call for call in self.calls if call.command == "go"]


@pytest.fixture()
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture()
def go_project(tmp_path: Path) -> Path:
    """
    A project root named `mytool` with VERSION, platforms.txt, README.md and
    LICENSE. The platforms file mixes comments, a blank line and a malformed
    line around two real platforms.
    """
    root = tmp_path / "mytool"
    root.mkdir()
    (root / "VERSION").write_text("v1.2.3\n", encoding="utf-8")
    (root / "platforms.txt").write_text(
        "#comment\n\nlinux/amd64\nwindows/amd64\nbadline\n",
        encoding="utf-8",
    )
    (root / "README.md").write_text("# mytool\n", encoding="utf-8")
    (root / "LICENSE").write_text("MIT License\n", encoding="utf-8")
    return root.resolve()


@pytest.fixture()
def project_file(go_project: Path) -> Path:
    """A two-target project file inside go_project."""
    (go_project / "CHANGELOG.md").write_text("changes\n", encoding="utf-8")
    (go_project / "server.conf").write_text("port = 80\n", encoding="utf-8")
    content = textwrap.dedent("""\
        project_name: mytool
        global_additional_files:
          - CHANGELOG.md
        targets:
          - name: cli
            path: ./cmd/cli
          - name: server
            path: ./cmd/server
            output_name: mytool-server
            ldflags: "-X main.mode=server"
            build_flags: "-tags 'netgo osusergo'"
            additional_files:
              - server.conf
    """)
    path = go_project / "build.yaml"
    path.write_text(content, encoding="utf-8")
    return path
