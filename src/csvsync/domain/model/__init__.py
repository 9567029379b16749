"""Public domain model surface."""

from __future__ import annotations

from csvsync.domain.model.enums import Classification, RunState, SourceType
from csvsync.domain.model.records import (
    IMPORT_OPTIONS_ITEM,
    IMPORT_SELECTOR_ITEM,
    IMPORT_TYPE_ITEM,
    KEY_PREFIX,
    Fingerprint,
    ImportRecord,
    IndexEntry,
    ProjectedRecord,
    ReconciliationIndex,
    StoredRecord,
    to_item_name,
)
from csvsync.domain.model.source import (
    DEFAULT_DELIMITER,
    DEFAULT_ENCODING,
    WORKITEM_TYPE,
    ImportSource,
    SourceOptions,
    normalize_key_field,
    parse_properties,
)
from csvsync.domain.model.summary import RunSummary

__all__ = [
    "DEFAULT_DELIMITER",
    "DEFAULT_ENCODING",
    "IMPORT_OPTIONS_ITEM",
    "IMPORT_SELECTOR_ITEM",
    "IMPORT_TYPE_ITEM",
    "KEY_PREFIX",
    "WORKITEM_TYPE",
    "Classification",
    "Fingerprint",
    "ImportRecord",
    "ImportSource",
    "IndexEntry",
    "ProjectedRecord",
    "ReconciliationIndex",
    "RunState",
    "RunSummary",
    "SourceOptions",
    "SourceType",
    "StoredRecord",
    "normalize_key_field",
    "parse_properties",
    "to_item_name",
]
