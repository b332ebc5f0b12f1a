# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for the project file loader.

We test:
  1. Valid YAML and JSON load into a frozen, correct config object
  2. Missing/blank target fields and empty target lists raise ConfigValidationError
  3. Unknown fields raise ConfigValidationError (extra="forbid")
  4. Broken documents and missing files raise ConfigLoadError
  5. Loaded config is truly immutable
"""

import json
import textwrap
from pathlib import Path

import pytest

from xbuild.config.exceptions import ConfigError, ConfigLoadError, ConfigValidationError
from xbuild.config.loader import load_project_config


def _write(tmp_path: Path, name: str, content: str) -> Path:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadValidConfig:
    def test_loads_yaml_project(self, project_file: Path) -> None:
        config = load_project_config(project_file)

        assert config.project_name == "mytool"
        assert [t.name for t in config.targets] == ["cli", "server"]
        assert config.targets[1].output_name == "mytool-server"
        assert config.targets[1].additional_files == ["server.conf"]
        assert config.global_additional_files == ["CHANGELOG.md"]

    def test_loads_json_project(self, tmp_path: Path) -> None:
        document = {
            "project_name": "proj",
            "version_file": "VERSION",
            "platforms_file": "platforms.txt",
            "default_ldflags": "-s -w",
            "default_build_flags": "",
            "global_additional_files": ["NOTICE"],
            "targets": [{"name": "cli", "path": "./cmd/cli", "output_name": "proj-cli"}],
        }
        config_file = _write(tmp_path, "build-config.json", json.dumps(document))

        config = load_project_config(config_file)
        assert config.default_build_flags == ""
        assert config.targets[0].output_name == "proj-cli"

    def test_loads_tab_indented_json(self, tmp_path: Path) -> None:
        document = {"project_name": "suite", "targets": [{"name": "cli", "path": "./cmd/cli"}]}
        config_file = _write(tmp_path, "build-config.json", json.dumps(document, indent="\t"))

        config = load_project_config(config_file)
        assert config.project_name == "suite"
        assert config.targets[0].path == "./cmd/cli"

    def test_unquoted_numeric_version_becomes_text(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, "p.yaml", "version: 1.5\ntargets:\n  - {name: a, path: .}\n")
        assert load_project_config(config_file).version == "1.5"

    def test_relative_path_uses_base_dir(self, go_project: Path, project_file: Path) -> None:
        config = load_project_config(Path(project_file.name), base_dir=go_project)
        assert len(config.targets) == 2

    def test_defaults(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, "p.yaml", "targets:\n  - {name: a, path: .}\n")
        config = load_project_config(config_file)

        assert config.project_name is None
        assert config.version is None
        assert config.version_file == "VERSION"
        assert config.platforms_file == "platforms.txt"
        assert config.default_ldflags == "-s -w"
        assert config.default_build_flags == "-trimpath"
        assert config.targets[0].additional_files == []


class TestLoadInvalidConfig:
    def test_empty_targets_rejected(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, "p.yaml", "project_name: x\ntargets: []\n")
        with pytest.raises(ConfigValidationError, match="no build targets"):
            load_project_config(config_file)

    def test_missing_targets_rejected(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, "p.yaml", "project_name: x\n")
        with pytest.raises(ConfigValidationError):
            load_project_config(config_file)

    @pytest.mark.parametrize(
        "target",
        ["{path: ./cmd/a}", "{name: a}", "{name: '', path: ./cmd/a}", "{name: a, path: '  '}"],
    )
    def test_target_without_name_or_path_rejected(self, tmp_path: Path, target: str) -> None:
        config_file = _write(tmp_path, "p.yaml", f"targets:\n  - {target}\n")
        with pytest.raises(ConfigValidationError):
            load_project_config(config_file)

    def test_unknown_field_rejected(self, tmp_path: Path) -> None:
        content = textwrap.dedent("""\
            targets:
              - name: a
                path: .
                some_nonsense_field: true
        """)
        with pytest.raises(ConfigValidationError):
            load_project_config(_write(tmp_path, "p.yaml", content))

    def test_broken_json_raises_load_error(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, "build-config.json", "{\"targets\": [}")
        with pytest.raises(ConfigLoadError, match="Failed to parse"):
            load_project_config(config_file)

    def test_broken_document_raises_load_error(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, "broken.yaml", "{{not: yaml: at: all:::")
        with pytest.raises(ConfigLoadError):
            load_project_config(config_file)

    def test_non_mapping_raises_load_error(self, tmp_path: Path) -> None:
        config_file = _write(tmp_path, "list.yaml", "- a\n- b\n")
        with pytest.raises(ConfigLoadError, match="mapping"):
            load_project_config(config_file)

    def test_nonexistent_file_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_project_config(tmp_path / "does_not_exist.yaml")

    def test_directory_path_raises_load_error(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigLoadError):
            load_project_config(tmp_path)

    def test_all_failures_are_config_errors(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError):
            load_project_config(tmp_path / "missing.json")


class TestConfigImmutability:
    def test_cannot_mutate_frozen_config(self, project_file: Path) -> None:
        config = load_project_config(project_file)
        with pytest.raises(Exception):
            config.project_name = "other"  # type: ignore[misc]

    def test_cannot_mutate_targets(self, project_file: Path) -> None:
        config = load_project_config(project_file)
        with pytest.raises(Exception):
            config.targets[0].path = "/elsewhere"  # type: ignore[misc]
