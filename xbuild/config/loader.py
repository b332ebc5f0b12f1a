# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Project file loader. Reads YAML or JSON from disk and produces a validated,
frozen ProjectConfig.

The loading pipeline is simple and linear:
  1. Read raw text from the file
  2. Parse it: json.loads for .json files, yaml.safe_load for everything else
  3. Hand the dict to pydantic for schema validation
  4. Return the frozen, immutable config object

If anything goes wrong at any step, we fail immediately with a clear error.
There is no retry logic and no fallback defaults.
"""

import json
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from xbuild.config.exceptions import ConfigLoadError, ConfigValidationError
from xbuild.config.schema import ProjectConfig
from xbuild.logging.logger import get_logger
from xbuild.utils.paths import resolve_against

_logger = get_logger(__name__)

JSON_SUFFIX = ".json"


def _read_document(config_path: Path) -> dict[str, Any]:
    """
    Read a YAML/JSON file and return the parsed mapping.

    Raises:
        ConfigLoadError: If the file doesn't exist, isn't readable, or isn't a
            valid document containing a mapping.
    """
    if not config_path.exists():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    if not config_path.is_file():
        raise ConfigLoadError(f"Config path is not a file: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        if config_path.suffix.lower() == JSON_SUFFIX:
            parsed = json.loads(raw_text)
        else:
            parsed = yaml.safe_load(raw_text)
    except (json.JSONDecodeError, yaml.YAMLError) as err:
        raise ConfigLoadError(f"Failed to parse config file {config_path}: {err}") from err

    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a mapping, got {type(parsed).__name__}"
        )

    return parsed


def load_project_config(config_path: Path, base_dir: Optional[Path] = None) -> ProjectConfig:
    """
    Load, validate, and freeze a multi-target project file.

    Args:
        config_path: Path to the project file. Relative paths are taken
            relative to base_dir when it is given.
        base_dir: The project root.

    Returns:
        A fully validated, frozen ProjectConfig.

    Raises:
        ConfigLoadError: File I/O or parse failures.
        ConfigValidationError: Schema violations (no targets, target without a
            name or path, wrong types, unknown keys).
    """
    if base_dir is not None:
        config_path = resolve_against(config_path, base_dir)

    raw_data = _read_document(config_path)

    try:
        config = ProjectConfig.model_validate(raw_data)
    except ValidationError as err:
        raise ConfigValidationError(
            f"Config validation failed for {config_path}:\n{err}"
        ) from err

    _logger.debug(
        "Loaded project config",
        extra={"path": str(config_path), "targets": len(config.targets)},
    )
    return config
