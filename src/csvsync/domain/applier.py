"""Default change applier: optional workflow processing, then a plain save."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from csvsync.domain.errors import ApplyError, PersistenceError, ProcessingError

if TYPE_CHECKING:
    from uuid import UUID

    from csvsync.domain.model import ImportSource, StoredRecord
    from csvsync.domain.ports.applying import RecordProcessor
    from csvsync.domain.ports.persistence import RecordStore

log = getLogger(__name__)

type FlushHook = Callable[[], None]


def _noop() -> None:
    return None


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(slots=True, kw_only=True)
class WorkflowChangeApplier:
    """Apply created/changed records and removals against a record store.

    When ``event_id`` and a ``processor`` are set, each record is processed first.
    A :class:`ProcessingError` falls back to saving the unprocessed record.
    """

    store: RecordStore
    processor: RecordProcessor | None = None
    on_flush: FlushHook = _noop
    task_id: int | None = None
    event_id: int | None = None
    model_version: str | None = None
    workflow_group: str | None = None

    @classmethod
    def for_source(
        cls,
        source: ImportSource,
        *,
        store: RecordStore,
        processor: RecordProcessor | None = None,
        on_flush: FlushHook = _noop,
    ) -> WorkflowChangeApplier:
        return cls(
            store=store,
            processor=processor,
            on_flush=on_flush,
            task_id=source.task_id,
            event_id=source.event_id,
            model_version=source.model_version,
            workflow_group=source.workflow_group,
        )

    def apply(self, record: StoredRecord, *, is_new: bool) -> UUID:
        if is_new and self.task_id:
            record.task_id = self.task_id
        if self.model_version:
            record.model_version = self.model_version
        if self.workflow_group:
            record.workflow_group = self.workflow_group
        record.modified_at = _utcnow()

        target = self._process(record)
        try:
            self.store.add(target)
        except PersistenceError as exc:
            raise ApplyError(
                f"Failed to save record {record.business_key!r}: {exc}",
            ) from exc
        return target.id

    def remove(self, identity: UUID) -> None:
        try:
            self.store.remove(identity)
        except PersistenceError as exc:
            raise ApplyError(f"Failed to remove record {identity}: {exc}") from exc

    def flush(self) -> None:
        self.on_flush()

    def _process(self, record: StoredRecord) -> StoredRecord:
        if not self.event_id or self.processor is None:
            return record
        try:
            return self.processor(record, event_id=self.event_id)
        except ProcessingError as exc:
            log.warning("Processing failed for %r: %s", record.business_key, exc)
            return record
