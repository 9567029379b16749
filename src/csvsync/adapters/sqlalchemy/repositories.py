"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from csvsync.adapters.sqlalchemy.mappings import import_source_table, record_table
from csvsync.domain.errors import PersistenceError
from csvsync.domain.model import ImportSource, ProjectedRecord, StoredRecord

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from sqlalchemy.orm import Session

    from csvsync.domain.index import IndexCriteria


class SqlAlchemyRecordRepository:
    """Record store whose writes run in a SAVEPOINT each.

    A failing write rolls back only its own savepoint, so records applied earlier in
    the same session stay pending for the next commit.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: StoredRecord) -> None:
        if entity.created_at is None:
            entity.created_at = datetime.now(UTC)
        try:
            with self.session.begin_nested():
                self.session.add(entity)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    def get(self, identity: UUID) -> StoredRecord | None:
        return self.session.get(StoredRecord, identity)

    def remove(self, identity: UUID) -> None:
        entity = self.get(identity)
        if entity is None:
            return
        try:
            with self.session.begin_nested():
                self.session.delete(entity)
        except SQLAlchemyError as exc:
            raise PersistenceError(str(exc)) from exc

    def find_existing(
        self,
        criteria: IndexCriteria,
        *,
        page: int,
        page_size: int,
    ) -> Sequence[ProjectedRecord]:
        group, version = criteria.scope()
        stmt = select(
            record_table.c.id,
            record_table.c.business_key,
            record_table.c.fields,
        ).where(record_table.c.record_type == criteria.record_type)
        if group:
            stmt = stmt.where(record_table.c.workflow_group == group)
        elif version:
            stmt = stmt.where(record_table.c.model_version == version)
        stmt = (
            stmt.order_by(record_table.c.created_at, record_table.c.id)
            .offset(page * page_size)
            .limit(page_size)
        )
        return [
            ProjectedRecord(identity=row.id, business_key=row.business_key, fields=row.fields)
            for row in self.session.execute(stmt)
        ]


class SqlAlchemyImportSourceRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: ImportSource) -> None:
        self.session.add(entity)

    def get_by_name(self, name: str) -> ImportSource | None:
        stmt = select(ImportSource).where(import_source_table.c.name == name)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_all(self) -> Sequence[ImportSource]:
        stmt = select(ImportSource).order_by(import_source_table.c.name)
        return list(self.session.execute(stmt).scalars())


if TYPE_CHECKING:
    from csvsync.domain.ports.persistence import ImportSourceRepository, RecordStore

    def _check_records(session: Session) -> RecordStore:
        return SqlAlchemyRecordRepository(session)

    def _check_sources(session: Session) -> ImportSourceRepository:
        return SqlAlchemyImportSourceRepository(session)
