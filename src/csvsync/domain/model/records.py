"""Imported and persisted record types."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

type Fingerprint = str

KEY_PREFIX = "_"
IMPORT_TYPE_ITEM = "document.import.type"
IMPORT_SELECTOR_ITEM = "document.import.selector"
IMPORT_OPTIONS_ITEM = "document.import.options"

_DROPPED_CHARS = str.maketrans("", "", "\"'.")
_SEPARATOR_CHARS = re.compile(r"[^\w-]+")


def new_id() -> UUID:
    return uuid4()


def to_item_name(text: str) -> str | None:
    """Normalize free text to an item name; ``None`` when nothing usable remains."""

    name = text.strip().translate(_DROPPED_CHARS).strip()
    if name.startswith(KEY_PREFIX):
        name = name[len(KEY_PREFIX) :]
    if not name:
        return None
    return KEY_PREFIX + _SEPARATOR_CHARS.sub("_", name)


@dataclass(slots=True, kw_only=True)
class ImportRecord:
    """One parsed data line: field name to raw text value."""

    record_type: str
    business_key: str
    fields: dict[str, str] = field(default_factory=dict[str, str])
    line: int | None = None

    def value(self, name: str) -> str:
        return self.fields.get(name, "")

    def stamp(self, items: Mapping[str, str]) -> None:
        """Attach import bookkeeping items that are not part of the fingerprint."""

        self.fields.update(items)


@dataclass(eq=False, kw_only=True)
class StoredRecord:
    """Persisted form of an imported record."""

    id: UUID = field(default_factory=new_id)
    record_type: str
    business_key: str
    fields: dict[str, str] = field(default_factory=dict[str, str])
    workflow_group: str | None = None
    model_version: str | None = None
    task_id: int | None = None
    created_at: datetime | None = None
    modified_at: datetime | None = None

    @classmethod
    def from_import(cls, record: ImportRecord) -> StoredRecord:
        return cls(
            record_type=record.record_type,
            business_key=record.business_key,
            fields=dict(record.fields),
        )

    def merge(self, record: ImportRecord) -> None:
        """Overwrite and extend fields with the incoming values; keep everything else."""

        merged = dict(self.fields)
        merged.update(record.fields)
        # reassign so the JSON column sees the change
        self.fields = merged
        self.business_key = record.business_key


@dataclass(frozen=True, slots=True)
class ProjectedRecord:
    """Lightweight read model of a stored record used to build the index."""

    identity: UUID
    business_key: str
    fields: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class IndexEntry:
    business_key: str
    fingerprint: Fingerprint
    identity: UUID


type ReconciliationIndex = dict[str, IndexEntry]
