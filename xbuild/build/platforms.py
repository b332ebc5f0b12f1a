# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Platform enumeration from a platforms file.

The file lists one `<os>/<arch>` pair per line, e.g.:

    # uncomment what you want to build
    linux/amd64
    darwin/arm64
    #freebsd/386
    windows/amd64

Comment lines and blank lines are ignored, and so is any line that doesn't
split into at least two parts on `/`. Reading is lazy: a PlatformSource
opens the file each time it is iterated, so the same source can be walked
once per target and always gives the same platforms in the same order.
"""

from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from xbuild.build.exceptions import ScanError, SourceUnreadable
from xbuild.logging.logger import get_logger

_logger = get_logger(__name__)

WINDOWS_OS = "windows"


@dataclass(frozen=True)
class Platform:
    """An operating system / architecture pair the toolchain can target."""

    os: str
    arch: str
    arm: Optional[str] = None
    name: Optional[str] = None

    @property
    def label(self) -> str:
        """Name used in binary, staging directory and archive file names."""
        if self.name is not None:
            return self.name
        return f"{self.os}-{self.arch}"

    @property
    def is_windows(self) -> bool:
        return self.os == WINDOWS_OS

    def __str__(self) -> str:
        if self.name is not None:
            return f"{self.name} ({self.os}/{self.arch}, arm{self.arm})"
        return f"{self.os}/{self.arch}"


# Raspberry Pi builds don't come from the platforms file. They are fixed
# linux/arm builds with a pinned ARM revision and their own archive label.
RASPBERRY_PI_VARIANTS: tuple[Platform, ...] = (
    Platform(os="linux", arch="arm", arm="7", name="raspberry-pi"),
    Platform(os="linux", arch="arm", arm="6", name="raspberry-pi-jessie"),
)


def parse_platform_line(line: str) -> Optional[Platform]:
    """
    Turn one line of a platforms file into a Platform.

    Returns None for comments, blank lines and malformed lines.
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    parts = stripped.split("/")
    if len(parts) < 2:
        _logger.debug("Skipping malformed platform line", extra={"line": stripped})
        return None

    return Platform(os=parts[0].strip(), arch=parts[1].strip())


class PlatformSource:
    """
    Restartable, lazy sequence of platforms read from a file.

    Usage:
        for platform in PlatformSource(Path("platforms.txt")):
            ...

    Raises (during iteration):
        SourceUnreadable: The file can't be opened.
        ScanError: Reading fails part way (I/O error, invalid UTF-8).
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def __iter__(self) -> Iterator[Platform]:
        try:
            handle = open(self.path, encoding="utf-8")
        except OSError as err:
            raise SourceUnreadable(f"failed to open platforms file {self.path}: {err}") from err

        with handle:
            line_number = 0
            try:
                for line_number, line in enumerate(handle, start=1):
                    platform = parse_platform_line(line)
                    if platform is not None:
                        yield platform
            except (OSError, UnicodeDecodeError) as err:
                raise ScanError(
                    f"failed reading platforms file {self.path} after line {line_number}: {err}"
                ) from err

    def __repr__(self) -> str:
        return f"PlatformSource({str(self.path)!r})"


def read_platforms(path: Path) -> list[Platform]:
    """Read every platform from a platforms file eagerly."""
    return list(PlatformSource(path))
