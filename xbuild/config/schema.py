# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Type-safe schema for multi-target project files.

A project file describes one or more named build targets plus the defaults
they share. The models are frozen: once a project file is loaded it never
changes for the rest of the process. Per-target settings are derived from it
by xbuild.config.resolver, which builds brand new objects instead of mutating
these.

The models use pydantic v2's ConfigDict with:
  - frozen=True: immutability after construction
  - extra="forbid": unknown fields cause immediate failure
  - validate_default=True: even defaults get type-checked

Example (YAML; the equivalent JSON document loads the same way):

    project_name: mytool
    default_ldflags: "-s -w"
    global_additional_files: [CHANGELOG.md]
    targets:
      - name: cli
        path: ./cmd/cli
      - name: server
        path: ./cmd/server
        output_name: mytool-server
        build_flags: "-tags netgo"
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BuildTarget(BaseModel):
    """
    One buildable unit: a Go main package that becomes one binary per platform.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    name: str = Field(description="Target identifier, also the default binary name")
    path: str = Field(description="Package path handed to the toolchain, e.g. ./cmd/cli")
    output_name: Optional[str] = Field(
        default=None,
        description="Binary base name to use instead of `name`",
    )
    ldflags: Optional[str] = Field(
        default=None,
        description="Linker flags replacing the project default for this target",
    )
    build_flags: Optional[str] = Field(
        default=None,
        description="Build flags replacing the project default for this target",
    )
    additional_files: list[str] = Field(
        default_factory=list,
        description="Extra files packed only into this target's archives",
    )

    @field_validator("name", "path")
    @classmethod
    def _must_not_be_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class ProjectConfig(BaseModel):
    """
    Top-level project file. Paths are relative to the project root.

    The flag defaults match what single-target mode uses, so a project file
    that only lists targets behaves like running xbuild without one.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    project_name: Optional[str] = Field(
        default=None,
        description="Human-readable project name; defaults to the project directory name",
    )
    version: Optional[str] = Field(
        default=None,
        description="Inline version string; takes precedence over version_file",
    )
    version_file: str = Field(default="VERSION", description="File holding the version string")
    platforms_file: str = Field(
        default="platforms.txt",
        description="Line-oriented list of os/arch pairs to build for",
    )
    default_ldflags: str = Field(default="-s -w", description="Linker flags for every target")
    default_build_flags: str = Field(
        default="-trimpath",
        description="Build flags for every target, quoted substrings allowed",
    )
    global_additional_files: list[str] = Field(
        default_factory=list,
        description="Extra files packed into every target's archives",
    )
    targets: list[BuildTarget] = Field(description="Targets to build, in order")

    @field_validator("version", mode="before")
    @classmethod
    def _version_as_text(cls, value: object) -> object:
        # YAML reads `version: 1.10` as the float 1.1; quote it to keep the zero.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("targets")
    @classmethod
    def _at_least_one_target(cls, value: list[BuildTarget]) -> list[BuildTarget]:
        if not value:
            raise ValueError("no build targets specified")
        return value
