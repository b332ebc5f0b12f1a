# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
CLI exit codes.

Any fatal error exits with FAILURE, whether it came from configuration,
the toolchain or an upload. The error message itself is on stderr.
"""

SUCCESS: int = 0
FAILURE: int = 1
