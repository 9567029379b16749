"""Whole-file checksum used to skip unchanged sources."""

from __future__ import annotations

import hashlib


def compute_checksum(content: bytes) -> str:
    return hashlib.md5(content, usedforsecurity=False).hexdigest()


def should_skip(new_checksum: str | None, last_checksum: str | None) -> bool:
    """Return whether a run can be skipped because the file did not change."""

    if not new_checksum or not last_checksum:
        return False
    return new_checksum == last_checksum
