# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
xbuild: cross-compile Go programs, package them, and publish releases.
"""

__version__ = "1.1.0"
