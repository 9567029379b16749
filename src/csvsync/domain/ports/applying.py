"""Ports for applying reconciliation outcomes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from uuid import UUID

    from csvsync.domain.model import StoredRecord


@runtime_checkable
class RecordApplier(Protocol):
    """Receives created, changed and deleted records from the reconciler.

    Failures are reported as :class:`~csvsync.domain.errors.ApplyError`.
    """

    def apply(self, record: StoredRecord, *, is_new: bool) -> UUID: ...

    def remove(self, identity: UUID) -> None: ...

    def flush(self) -> None: ...


@runtime_checkable
class RecordProcessor(Protocol):
    """Event-driven update path run before a record is saved.

    Implementations raise :class:`~csvsync.domain.errors.ProcessingError` for
    operational failures; the record is then saved without processing.
    """

    def __call__(self, record: StoredRecord, *, event_id: int) -> StoredRecord: ...
