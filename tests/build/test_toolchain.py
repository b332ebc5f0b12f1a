# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for go build command construction and invocation.

Nothing here spawns go. Command lines are checked directly, and invocation
goes through the recording fake runner from conftest.
"""

import dataclasses
import sys
from pathlib import Path

import pytest

from xbuild.build.exceptions import ToolchainError, UnterminatedQuote
from xbuild.build.platforms import RASPBERRY_PI_VARIANTS, Platform
from xbuild.build.toolchain import (
    SubprocessRunner,
    build_command,
    invoke_toolchain,
    toolchain_environment,
)
from xbuild.config.resolver import base_config


@pytest.fixture()
def config(go_project: Path):  # type: ignore[no-untyped-def]
    return base_config(go_project)


class TestBuildCommand:
    def test_default_single_target_command(self, config) -> None:  # type: ignore[no-untyped-def]
        assert build_command(config, "mytool-v1-linux-amd64") == [
            "build",
            "-ldflags=-s -w",
            "-trimpath",
            "-o",
            "mytool-v1-linux-amd64",
        ]

    def test_full_argument_order(self, config) -> None:  # type: ignore[no-untyped-def]
        config = dataclasses.replace(
            config,
            ld_flags="-X main.version=1.0",
            build_flags="-tags 'netgo osusergo' -race",
            extra_build_args=["-gcflags", "all=-N -l"],
            source_path="./cmd/cli",
        )
        assert build_command(config, "out") == [
            "build",
            "-ldflags=-X main.version=1.0",
            "-tags",
            "netgo osusergo",
            "-race",
            "-gcflags",
            "all=-N -l",
            "-o",
            "out",
            "./cmd/cli",
        ]

    def test_empty_flags_are_omitted(self, config) -> None:  # type: ignore[no-untyped-def]
        config = dataclasses.replace(config, ld_flags="", build_flags="")
        assert build_command(config, "out") == ["build", "-o", "out"]

    def test_extra_args_are_not_reparsed(self, config) -> None:  # type: ignore[no-untyped-def]
        config = dataclasses.replace(config, build_flags="", extra_build_args=['"quoted"'])
        assert build_command(config, "out") == ["build", "-ldflags=-s -w", '"quoted"', "-o", "out"]

    @pytest.mark.parametrize("source", ["", "."])
    def test_current_directory_source_is_omitted(self, config, source: str) -> None:  # type: ignore[no-untyped-def]
        assert build_command(config, "out", source)[-2:] == ["-o", "out"]

    def test_bad_build_flags_raise(self, config) -> None:  # type: ignore[no-untyped-def]
        config = dataclasses.replace(config, build_flags='-tags "oops')
        with pytest.raises(UnterminatedQuote):
            build_command(config, "out")


class TestEnvironment:
    def test_regular_platform(self) -> None:
        env = toolchain_environment(Platform(os="darwin", arch="arm64"))
        assert env == {"GOOS": "darwin", "GOARCH": "arm64"}

    def test_raspberry_pi_sets_goarm(self) -> None:
        env = toolchain_environment(RASPBERRY_PI_VARIANTS[1])
        assert env == {"GOOS": "linux", "GOARCH": "arm", "GOARM": "6"}


class TestInvokeToolchain:
    def test_runs_go_in_project_root(self, config, fake_runner, go_project: Path) -> None:  # type: ignore[no-untyped-def]
        binary = invoke_toolchain(config, Platform("linux", "amd64"), "out", fake_runner)

        assert binary == go_project / "out"
        assert binary.is_file()
        (call,) = fake_runner.calls
        assert call.command == "go"
        assert call.cwd == go_project
        assert call.env == {"GOOS": "linux", "GOARCH": "amd64"}

    def test_nonzero_exit_raises_toolchain_error(self, config, fake_runner) -> None:  # type: ignore[no-untyped-def]
        fake_runner.fail_at = 0
        with pytest.raises(ToolchainError) as excinfo:
            invoke_toolchain(config, Platform("linux", "amd64"), "out", fake_runner)

        assert excinfo.value.exit_code == 2
        assert excinfo.value.platform == "linux/amd64"
        assert "boom" in excinfo.value.stderr_tail


class TestSubprocessRunner:
    def test_exit_code_and_stderr_tail(self, tmp_path: Path) -> None:
        script = "import sys; sys.stderr.write('first\\nlast\\n'); sys.exit(3)"
        result = SubprocessRunner(tail_lines=1).run(sys.executable, ["-c", script], cwd=tmp_path)

        assert result.exit_code == 3
        assert result.stderr_tail == "last"

    def test_stderr_is_echoed(self, tmp_path: Path, capfd: pytest.CaptureFixture[str]) -> None:
        script = "import sys; sys.stderr.write('cannot find package\\n'); sys.exit(1)"
        result = SubprocessRunner().run(sys.executable, ["-c", script], cwd=tmp_path)

        assert result.stderr_tail == "cannot find package"
        assert "cannot find package" in capfd.readouterr().err

    def test_env_overrides_are_layered(self, tmp_path: Path) -> None:
        script = "import os, sys; sys.exit(0 if os.environ['GOOS'] == 'plan9' and os.environ.get('PATH') else 1)"
        result = SubprocessRunner().run(sys.executable, ["-c", script], env={"GOOS": "plan9"})

        assert result.success

    def test_missing_executable(self, tmp_path: Path) -> None:
        result = SubprocessRunner().run(str(tmp_path / "no-such-go"), ["build"])
        assert result.exit_code == 127
        assert not result.success
