"""Deterministic record fingerprints."""

from __future__ import annotations

import hashlib
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from csvsync.domain.model import Fingerprint


def fingerprint(values: Mapping[str, object], columns: Sequence[str | None]) -> Fingerprint:
    """Hash the values of ``columns`` in the given order.

    Values are concatenated without a separator, so adjacent short values can
    alias with a different split. Missing values count as empty strings.
    """

    payload = "".join(_as_text(values.get(column)) for column in columns if column is not None)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return str(value)
