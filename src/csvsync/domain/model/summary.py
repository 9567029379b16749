"""Run summaries."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True, kw_only=True)
class RunSummary:
    """Counters of one reconciliation run plus the checksum of the imported file."""

    total: int = 0
    created: int = 0
    updated: int = 0
    deleted: int = 0
    failed: int = 0
    unchanged: int = 0
    skipped: int = 0
    checksum: str | None = None
    checksum_skipped: bool = False

    @classmethod
    def unchanged_source(cls, checksum: str) -> RunSummary:
        return cls(checksum=checksum, checksum_skipped=True)

    @property
    def changes(self) -> int:
        return self.created + self.updated + self.deleted

    def __str__(self) -> str:
        if self.checksum_skipped:
            return "...no data changes since last import"
        return (
            f"...{self.total} entries read -> {self.created} new entries - "
            f"{self.updated} updates - {self.deleted} deletions - {self.failed} errors"
        )
