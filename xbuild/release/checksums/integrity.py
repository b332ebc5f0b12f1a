# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Checksum manifests for built archives.

Every target+version gets one manifest in the output directory, named
`<name>-<version>-checksums.txt`. It is append-only while a build runs: one
line per archive, written right after the archive lands in the output
directory. A new build run starts by deleting the previous manifest for the
same target and version, so lines never accumulate across runs.

Manifest format, identical to GNU coreutils sha256sum:
    <sha256hex>  <archive filename>
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from xbuild.logging.logger import get_logger
from xbuild.utils.filesystem import safe_delete
from xbuild.utils.hashing import SHA256_HEX_LENGTH, compute_sha256

_logger: logging.Logger = get_logger(__name__)

MANIFEST_GLOB = "*-checksums.txt"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of checking one manifest against the archives next to it."""

    manifest: str
    is_valid: bool
    checked_count: int
    mismatches: list[str] = field(default_factory=list)
    missing_files: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def reset_manifest(manifest_path: Path) -> bool:
    """
    Delete a stale manifest before a build run begins.

    Returns:
        True if an old manifest was removed.
    """
    removed = safe_delete(manifest_path)
    if removed:
        _logger.info("Removed old checksums file", extra={"path": str(manifest_path)})
    return removed


def format_checksum_line(digest: str, filename: str) -> str:
    return f"{digest}  {filename}\n"


def append_checksum(manifest_path: Path, archive_path: Path) -> str:
    """
    Hash a finished archive and append its line to the manifest.

    The manifest is opened in append mode and created if it doesn't exist yet.

    Returns:
        The archive's SHA256 hex digest.

    Raises:
        OSError: If the archive can't be read or the manifest can't be written.
    """
    digest = compute_sha256(archive_path)
    with open(manifest_path, "a", encoding="utf-8") as manifest:
        manifest.write(format_checksum_line(digest, archive_path.name))

    _logger.debug(
        "Checksum recorded",
        extra={"archive": archive_path.name, "sha256": digest[:16] + "..."},
    )
    return digest


def parse_checksum_file(checksum_path: Path) -> dict[str, str]:
    """
    Parse a manifest into a dict of {filename: sha256_hex}.

    Raises:
        FileNotFoundError: If file doesn't exist.
        ValueError: If a line isn't `<sha256>  <filename>`.
    """
    if not checksum_path.is_file():
        raise FileNotFoundError(f"Checksum file not found: {checksum_path}")

    checksums: dict[str, str] = {}
    content = checksum_path.read_text(encoding="utf-8")

    for line_num, line in enumerate(content.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        parts = line.split("  ", maxsplit=1)
        if len(parts) != 2:
            raise ValueError(
                f"Invalid checksum format at line {line_num}: expected "
                f"'<sha256>  <filename>', got: {line!r}"
            )
        sha256_hex, filename = parts
        if len(sha256_hex) != SHA256_HEX_LENGTH:
            raise ValueError(
                f"Invalid SHA256 hash length at line {line_num}: "
                f"expected {SHA256_HEX_LENGTH} chars, got {len(sha256_hex)}"
            )
        checksums[filename] = sha256_hex.lower()

    return checksums


def verify_manifest(manifest_path: Path) -> VerificationResult:
    """
    Recompute the hash of every archive listed in a manifest.

    Archives are looked up in the manifest's own directory. All mismatches and
    missing files are reported, not just the first.
    """
    try:
        expected = parse_checksum_file(manifest_path)
    except (OSError, ValueError) as err:
        return VerificationResult(
            manifest=manifest_path.name,
            is_valid=False,
            checked_count=0,
            errors=[f"Failed to parse {manifest_path.name}: {err}"],
        )

    mismatches: list[str] = []
    missing_files: list[str] = []
    checked = 0

    for filename, expected_hash in sorted(expected.items()):
        file_path = manifest_path.parent / filename
        if not file_path.is_file():
            missing_files.append(filename)
            _logger.error("Archive missing during verification", extra={"file": filename})
            continue

        actual_hash = compute_sha256(file_path)
        checked += 1

        if actual_hash != expected_hash:
            mismatches.append(filename)
            _logger.error(
                "Checksum mismatch",
                extra={
                    "file": filename,
                    "expected": expected_hash[:16] + "...",
                    "actual": actual_hash[:16] + "...",
                },
            )

    is_valid = not mismatches and not missing_files

    if is_valid:
        _logger.info(
            "All checksums verified",
            extra={"manifest": manifest_path.name, "checked_count": checked},
        )

    return VerificationResult(
        manifest=manifest_path.name,
        is_valid=is_valid,
        checked_count=checked,
        mismatches=mismatches,
        missing_files=missing_files,
    )


def find_manifests(output_dir: Path) -> list[Path]:
    """All checksum manifests in an output directory, sorted by name."""
    return sorted(p for p in output_dir.glob(MANIFEST_GLOB) if p.is_file())
