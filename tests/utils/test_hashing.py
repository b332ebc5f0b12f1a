# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for hashing utilities.

SHA256 should produce identical output for identical input, every single time,
and the chunked file hash must agree with hashing the bytes in one go.
"""

import hashlib
from pathlib import Path

import pytest

from xbuild.utils.hashing import HASH_BUFFER_SIZE, compute_sha256, compute_sha256_bytes


class TestSha256:
    def test_empty_bytes_has_known_hash(self) -> None:
        # SHA256 of empty input is a well-known constant.
        expected = "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        assert compute_sha256_bytes(b"") == expected

    def test_file_hash_matches_bytes_hash(self, tmp_path: Path) -> None:
        data = b"x" * (HASH_BUFFER_SIZE * 3 + 17)
        path = tmp_path / "archive.tar.gz"
        path.write_bytes(data)

        assert compute_sha256(path) == compute_sha256_bytes(data)
        assert compute_sha256(path) == hashlib.sha256(data).hexdigest()

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            compute_sha256(tmp_path / "missing")
