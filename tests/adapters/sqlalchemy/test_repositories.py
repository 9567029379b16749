"""Tests for SQLAlchemy repositories."""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session  # noqa: TC002

from csvsync.adapters.sqlalchemy.repositories import (
    SqlAlchemyImportSourceRepository,
    SqlAlchemyRecordRepository,
)
from csvsync.domain.errors import PersistenceError
from csvsync.domain.index import IndexCriteria
from csvsync.domain.model import StoredRecord
from tests.helpers.records import make_source, make_stored


def test_record_repository_round_trips_fields(sqlite_session: Session) -> None:
    repository = SqlAlchemyRecordRepository(sqlite_session)
    record = make_stored("A", name="Müller", extra={"document.import.type": "CSV"})

    repository.add(record)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.get(record.id)
    assert loaded is not None
    assert loaded.fields == {"_id": "A", "_name": "Müller", "document.import.type": "CSV"}
    assert loaded.created_at is not None
    assert loaded.created_at.tzinfo is not None


def test_find_existing_pages_in_creation_order(sqlite_session: Session) -> None:
    repository = SqlAlchemyRecordRepository(sqlite_session)
    records = [make_stored(str(key)) for key in range(5)]
    for record in records:
        repository.add(record)
    sqlite_session.commit()
    criteria = IndexCriteria("workitem", workflow_group="group-1")

    pages = [repository.find_existing(criteria, page=page, page_size=2) for page in range(3)]

    assert [len(page) for page in pages] == [2, 2, 1]
    keys = {projected.business_key for page in pages for projected in page}
    assert keys == {"0", "1", "2", "3", "4"}
    assert pages[0][0].fields["_id"] in keys


def test_find_existing_filters_by_type_and_scope(sqlite_session: Session) -> None:
    repository = SqlAlchemyRecordRepository(sqlite_session)
    repository.add(make_stored("group"))
    repository.add(make_stored("other-group", workflow_group="group-2"))
    repository.add(make_stored("version", workflow_group=None, model_version="v1"))
    repository.add(make_stored("contact", record_type="contact", workflow_group=None))
    sqlite_session.commit()

    def keys(criteria: IndexCriteria) -> set[str]:
        return {
            projected.business_key
            for projected in repository.find_existing(criteria, page=0, page_size=10)
        }

    assert keys(IndexCriteria("workitem", workflow_group="group-1")) == {"group"}
    assert keys(IndexCriteria("workitem", model_version="v1")) == {"version"}
    assert keys(IndexCriteria("workitem", workflow_group="group-1", model_version="v1")) == {
        "group"
    }
    assert keys(IndexCriteria("contact")) == {"contact"}


def test_update_after_merge_is_persisted(sqlite_session: Session) -> None:
    repository = SqlAlchemyRecordRepository(sqlite_session)
    record = make_stored("A", name="old")
    repository.add(record)
    sqlite_session.commit()

    stored = repository.get(record.id)
    assert stored is not None
    stored.fields = {**stored.fields, "_name": "new"}
    repository.add(stored)
    sqlite_session.commit()
    sqlite_session.expunge_all()

    reloaded = repository.get(record.id)
    assert reloaded is not None
    assert reloaded.fields["_name"] == "new"


def test_remove_deletes_record(sqlite_session: Session) -> None:
    repository = SqlAlchemyRecordRepository(sqlite_session)
    keep = make_stored("keep")
    drop = make_stored("drop")
    repository.add(keep)
    repository.add(drop)
    sqlite_session.commit()

    repository.remove(drop.id)
    repository.remove(drop.id)
    sqlite_session.commit()

    assert repository.get(drop.id) is None
    assert repository.get(keep.id) is not None


def test_failed_write_raises_persistence_error_and_keeps_earlier_records(
    sqlite_session: Session,
) -> None:
    repository = SqlAlchemyRecordRepository(sqlite_session)
    good = make_stored("good")
    repository.add(good)
    bad = StoredRecord(record_type="workitem", business_key=None)  # pyright: ignore[reportArgumentType]

    with pytest.raises(PersistenceError):
        repository.add(bad)

    sqlite_session.commit()
    assert repository.get(good.id) is not None


def test_import_source_repository(sqlite_session: Session) -> None:
    repository = SqlAlchemyImportSourceRepository(sqlite_session)
    repository.add(make_source(name="b-source", checksum="abc"))
    repository.add(make_source(name="a-source"))
    sqlite_session.commit()
    sqlite_session.expunge_all()

    loaded = repository.get_by_name("b-source")
    assert loaded is not None
    assert loaded.checksum == "abc"
    assert loaded.options == "type=workitem\nkey=id"
    assert loaded.task_id == 10
    assert repository.get_by_name("missing") is None
    assert [source.name for source in repository.list_all()] == ["a-source", "b-source"]
