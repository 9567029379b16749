"""Reusable fakes and helpers for import-run tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Self

from csvsync.domain.errors import PersistenceError, ProcessingError, TransferError
from csvsync.domain.model import ImportSource, ProjectedRecord, StoredRecord
from csvsync.domain.ports.fetching import SourceFile
from csvsync.domain.ports.unit_of_work import ImportRepositories

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from types import TracebackType
    from uuid import UUID

    from csvsync.domain.index import IndexCriteria

_BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


def make_source(**overrides: object) -> ImportSource:
    values: dict[str, object] = {
        "name": "items",
        "selector": "/data/items.csv",
        "options": "type=workitem\nkey=id",
        "workflow_group": "group-1",
        "task_id": 10,
        "event_id": 20,
    }
    values.update(overrides)
    return ImportSource(**values)  # pyright: ignore[reportArgumentType]


def make_stored(
    key: str,
    *,
    name: str = "x",
    record_type: str = "workitem",
    workflow_group: str | None = "group-1",
    model_version: str | None = None,
    extra: dict[str, str] | None = None,
) -> StoredRecord:
    fields = {"_id": key, "_name": name}
    fields.update(extra or {})
    return StoredRecord(
        record_type=record_type,
        business_key=key,
        fields=fields,
        workflow_group=workflow_group,
        model_version=model_version,
    )


def csv_lines(*rows: str, header: str = "id;name") -> list[str]:
    return [f"{header}\n", *(f"{row}\n" for row in rows)]


def csv_bytes(*rows: str, header: str = "id;name", encoding: str = "utf-8") -> bytes:
    return "".join(csv_lines(*rows, header=header)).encode(encoding)


class FakeRecordStore:
    """In-memory record store; ``fail_keys`` make writes for those keys fail."""

    def __init__(self, records: Iterable[StoredRecord] = ()) -> None:
        self.records: dict[UUID, StoredRecord] = {}
        self.fail_keys: set[str] = set()
        self.page_calls: list[int] = []
        self.saved: list[str] = []
        self.removed: list[str] = []
        for offset, record in enumerate(records):
            record.created_at = record.created_at or _BASE_TIME + timedelta(seconds=offset)
            self.records[record.id] = record

    def add(self, entity: StoredRecord) -> None:
        if entity.business_key in self.fail_keys:
            raise PersistenceError(f"write rejected for {entity.business_key}")
        if entity.created_at is None:
            entity.created_at = _BASE_TIME + timedelta(seconds=len(self.records))
        self.records[entity.id] = entity
        self.saved.append(entity.business_key)

    def get(self, identity: UUID) -> StoredRecord | None:
        return self.records.get(identity)

    def remove(self, identity: UUID) -> None:
        record = self.records.get(identity)
        if record is None:
            return
        if record.business_key in self.fail_keys:
            raise PersistenceError(f"delete rejected for {record.business_key}")
        del self.records[identity]
        self.removed.append(record.business_key)

    def find_existing(
        self,
        criteria: IndexCriteria,
        *,
        page: int,
        page_size: int,
    ) -> Sequence[ProjectedRecord]:
        self.page_calls.append(page)
        group, version = criteria.scope()
        matching = [
            record
            for record in self.records.values()
            if record.record_type == criteria.record_type
            and (group is None or record.workflow_group == group)
            and (group is not None or version is None or record.model_version == version)
        ]
        matching.sort(key=lambda record: (record.created_at or _BASE_TIME, str(record.id)))
        window = matching[page * page_size : (page + 1) * page_size]
        return [
            ProjectedRecord(
                identity=record.id,
                business_key=record.business_key,
                fields=dict(record.fields),
            )
            for record in window
        ]

    def by_key(self, key: str) -> StoredRecord:
        for record in self.records.values():
            if record.business_key == key:
                return record
        raise KeyError(key)

    def keys(self) -> set[str]:
        return {record.business_key for record in self.records.values()}


class FakeSourceRepository:
    def __init__(self, sources: Iterable[ImportSource] = ()) -> None:
        self.sources: dict[str, ImportSource] = {source.name: source for source in sources}

    def add(self, entity: ImportSource) -> None:
        self.sources[entity.name] = entity

    def get_by_name(self, name: str) -> ImportSource | None:
        return self.sources.get(name)

    def list_all(self) -> Sequence[ImportSource]:
        return [self.sources[name] for name in sorted(self.sources)]


class FakeImportUnitOfWork:
    def __init__(
        self,
        records: FakeRecordStore | None = None,
        sources: FakeSourceRepository | None = None,
    ) -> None:
        self._repositories = ImportRepositories(
            records=records or FakeRecordStore(),
            sources=sources or FakeSourceRepository(),
        )
        self.commits = 0
        self.rollbacks = 0

    @property
    def repositories(self) -> ImportRepositories:
        return self._repositories

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> bool:
        if exc_type is not None:
            self.rollback()
        return False

    def commit(self) -> None:
        self.commits += 1

    def rollback(self) -> None:
        self.rollbacks += 1


@dataclass
class FakeFetcher:
    content: bytes = b""
    name: str = "items.csv"
    error: Exception | None = None
    calls: list[str] = field(default_factory=list[str])

    def __call__(self, source: ImportSource) -> SourceFile:
        self.calls.append(source.name)
        if self.error is not None:
            raise self.error
        return SourceFile(name=self.name, content=self.content)


class FailingFetcher(FakeFetcher):
    def __init__(self, message: str = "connection refused") -> None:
        super().__init__(error=TransferError(message))


@dataclass
class FakeProcessor:
    """Records processed keys; ``fail_keys`` raise ProcessingError, ``crash_keys`` crash."""

    fail_keys: set[str] = field(default_factory=set[str])
    crash_keys: set[str] = field(default_factory=set[str])
    calls: list[tuple[str, int]] = field(default_factory=list[tuple[str, int]])

    def __call__(self, record: StoredRecord, *, event_id: int) -> StoredRecord:
        self.calls.append((record.business_key, event_id))
        if record.business_key in self.crash_keys:
            raise RuntimeError(f"workflow engine crashed on {record.business_key}")
        if record.business_key in self.fail_keys:
            raise ProcessingError(f"event {event_id} rejected")
        record.fields["_processed"] = "yes"
        return record


@dataclass
class RecordingApplier:
    """Applier that only records calls; used where the store is not of interest."""

    applied: list[tuple[str, bool]] = field(default_factory=list[tuple[str, bool]])
    removed: list[UUID] = field(default_factory=list)
    flushes: int = 0

    def apply(self, record: StoredRecord, *, is_new: bool) -> UUID:
        self.applied.append((record.business_key, is_new))
        return record.id

    def remove(self, identity: UUID) -> None:
        self.removed.append(identity)

    def flush(self) -> None:
        self.flushes += 1
