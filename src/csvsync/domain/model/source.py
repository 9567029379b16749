"""Import source configuration consumed by an import run."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from csvsync.domain.model.enums import SourceType
from csvsync.domain.model.records import (
    IMPORT_OPTIONS_ITEM,
    IMPORT_SELECTOR_ITEM,
    IMPORT_TYPE_ITEM,
    to_item_name,
)

if TYPE_CHECKING:
    from collections.abc import Mapping
    from datetime import datetime

log = getLogger(__name__)

WORKITEM_TYPE = "workitem"
DEFAULT_ENCODING = "UTF-8"
DEFAULT_DELIMITER = ";"


def parse_properties(text: str | None) -> dict[str, str]:
    """Parse ``key=value`` lines; blank lines and ``#``/``!`` comments are ignored."""

    properties: dict[str, str] = {}
    if not text:
        return properties
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith(("#", "!")):
            continue
        separator = min(
            (index for index in (line.find("="), line.find(":")) if index >= 0),
            default=-1,
        )
        if separator < 0:
            properties[line] = ""
            continue
        properties[line[:separator].strip()] = line[separator + 1 :].strip()
    return properties


def normalize_key_field(name: str) -> str | None:
    """Return the item name of a configured key field; a missing ``_`` prefix is added."""

    return to_item_name(name)


def _delimiter(value: str | None) -> str:
    if not value:
        return DEFAULT_DELIMITER
    if value.lower() in {"tab", "\\t"}:
        return "\t"
    return value


@dataclass(frozen=True, slots=True)
class SourceOptions:
    """Typed view over the free-form options of a source."""

    record_type: str = WORKITEM_TYPE
    key_field: str | None = None
    encoding: str = DEFAULT_ENCODING
    delimiter: str = DEFAULT_DELIMITER
    raw: Mapping[str, str] = field(default_factory=dict[str, str])

    @classmethod
    def parse(cls, text: str | None) -> SourceOptions:
        raw = parse_properties(text)
        record_type = raw.get("type") or ""
        if not record_type:
            log.info("Missing property 'type' - using default '%s'", WORKITEM_TYPE)
            record_type = WORKITEM_TYPE
        key = raw.get("key") or ""
        return cls(
            record_type=record_type,
            key_field=normalize_key_field(key),
            encoding=raw.get("encoding") or DEFAULT_ENCODING,
            delimiter=_delimiter(raw.get("delimiter")),
            raw=raw,
        )

    def flag(self, name: str, *, default: bool = False) -> bool:
        value = self.raw.get(name)
        if value is None or not value.strip():
            return default
        return value.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(eq=False, kw_only=True)
class ImportSource:
    """A registered external source and the state kept between its runs."""

    id: UUID = field(default_factory=uuid4)
    name: str
    type: SourceType = SourceType.CSV
    selector: str
    server: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    options: str | None = None
    model_version: str | None = None
    workflow_group: str | None = None
    task_id: int | None = None
    event_id: int | None = None
    checksum: str | None = None
    last_log: str | None = None
    last_run_at: datetime | None = None

    def parsed_options(self) -> SourceOptions:
        return SourceOptions.parse(self.options)

    def import_stamp(self) -> dict[str, str]:
        return {
            IMPORT_TYPE_ITEM: str(self.type),
            IMPORT_SELECTOR_ITEM: self.selector,
            IMPORT_OPTIONS_ITEM: self.options or "",
        }

    def invalidate_checksum(self) -> None:
        self.checksum = None
