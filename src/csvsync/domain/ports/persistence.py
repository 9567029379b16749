"""Ports for persisting imported records and source state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from csvsync.domain.model import ImportSource, StoredRecord

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from csvsync.domain.index import IndexCriteria
    from csvsync.domain.model import ProjectedRecord


@runtime_checkable
class Repository[TEntity](Protocol):
    """Minimal repository contract for a persistent aggregate store."""

    def add(self, entity: TEntity) -> None: ...


@runtime_checkable
class RecordStore(Repository[StoredRecord], Protocol):
    """Persistence contract for imported records.

    ``add`` and ``remove`` raise :class:`~csvsync.domain.errors.PersistenceError`
    when the write fails; the failure must not affect other pending records.
    """

    def find_existing(
        self,
        criteria: IndexCriteria,
        *,
        page: int,
        page_size: int,
    ) -> Sequence[ProjectedRecord]: ...

    def get(self, identity: UUID) -> StoredRecord | None: ...

    def remove(self, identity: UUID) -> None: ...


@runtime_checkable
class ImportSourceRepository(Repository[ImportSource], Protocol):
    """Persistence contract for import source configurations."""

    def get_by_name(self, name: str) -> ImportSource | None: ...

    def list_all(self) -> Sequence[ImportSource]: ...
