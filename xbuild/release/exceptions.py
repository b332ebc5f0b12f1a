# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Exceptions raised while publishing a release.

Preconditions are checked before anything is sent to the hosting service.
Once the release exists, a failed upload batch stops the run; there is no
resume, rerun the upload by hand.
"""


class ReleasePreconditionError(Exception):
    """
    Raised before any hosting command runs: hosting CLI not found, token not
    set, output directory missing or empty, or no release notes available.
    """


class ReleaseError(Exception):
    """Base for failures of the hosting CLI itself."""

    def __init__(self, message: str, exit_code: int | None = None) -> None:
        self.exit_code = exit_code
        super().__init__(message)


class ReleaseCreateError(ReleaseError):
    """`release create` exited non-zero."""


class NoAssetsError(ReleaseError):
    """The output directory holds no files to upload."""


class AssetUploadError(ReleaseError):
    """An upload batch exited non-zero."""
