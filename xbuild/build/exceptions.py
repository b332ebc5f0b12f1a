# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised by the build pipeline.

Each one carries enough context (target, platform, path) for the CLI to print
a useful message. None of them is retried: the first failure aborts the run.
"""

from typing import Optional

from xbuild.config.exceptions import ConfigError


class ParseError(Exception):
    """Raised when a flag string cannot be split into arguments."""


class UnterminatedQuote(ParseError):
    """The input ended while a quoted span was still open."""

    def __init__(self, text: str, quote: str, position: int) -> None:
        self.text = text
        self.quote = quote
        self.position = position
        super().__init__(
            f"unclosed quote {quote} opened at position {position} in arguments: {text!r}"
        )


class SourceUnreadable(ConfigError):
    """The platforms file could not be opened."""


class ScanError(ConfigError):
    """Reading the platforms file failed part way through."""


class ToolchainError(Exception):
    """The build subprocess exited with a non-zero status."""

    def __init__(
        self,
        exit_code: int,
        stderr_tail: str = "",
        target: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> None:
        self.exit_code = exit_code
        self.stderr_tail = stderr_tail
        self.target = target
        self.platform = platform

        message = f"toolchain exited with status {exit_code}"
        if target is not None:
            message += f" while building target {target}"
        if platform is not None:
            message += f" for {platform}"
        if stderr_tail:
            message += f":\n{stderr_tail}"
        super().__init__(message)


class PackagingError(Exception):
    """A filesystem operation failed while staging, archiving or checksumming."""

    def __init__(self, step: str, path: object, reason: object) -> None:
        self.step = step
        self.path = path
        super().__init__(f"failed to {step} {path}: {reason}")
