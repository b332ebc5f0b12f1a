# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Custom exceptions for the configuration system.

We keep these separate so that CLI and other layers can catch config-specific
failures without importing the entire config machinery.
"""


class ConfigError(Exception):
    """Base for all configuration errors, including missing required files."""


class ConfigLoadError(ConfigError):
    """Raised when a project file cannot be read from disk or parsed."""


class ConfigValidationError(ConfigError):
    """
    Raised when a project file parses fine but fails schema validation.
    This covers an empty target list, targets without a name or path, type
    mismatches, and unknown keys.
    """
