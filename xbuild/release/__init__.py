# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Release subsystem for xbuild.

Provides staging and archiving of built binaries, checksum manifests, and
publishing of finished archives to a hosting service. No compilation happens
here; that is the toolchain's job in xbuild.build.
"""
