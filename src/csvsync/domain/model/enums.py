"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class SourceType(StrEnum):
    CSV = "CSV"


class Classification(StrEnum):
    """Outcome of comparing one business key against the reconciliation index."""

    CREATED = "created"
    CHANGED = "changed"
    UNCHANGED = "unchanged"
    DELETED = "deleted"
    FAILED = "failed"


class RunState(StrEnum):
    INIT = "init"
    SCANNING = "scanning"
    FINALIZING = "finalizing"
    DONE = "done"
