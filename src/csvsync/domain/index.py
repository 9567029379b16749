"""Build the reconciliation index from persisted records."""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from csvsync.domain.errors import ScopeConfigurationError
from csvsync.domain.fingerprint import fingerprint
from csvsync.domain.model import WORKITEM_TYPE, IndexEntry

if TYPE_CHECKING:
    from collections.abc import Sequence

    from csvsync.domain.model import ProjectedRecord, ReconciliationIndex
    from csvsync.domain.ports.persistence import RecordStore

log = getLogger(__name__)

DEFAULT_PAGE_SIZE = 100


@dataclass(frozen=True, slots=True)
class IndexCriteria:
    """Selects the persisted records that one source owns."""

    record_type: str
    workflow_group: str | None = None
    model_version: str | None = None

    def validate(self) -> None:
        if not self.record_type.strip():
            raise ScopeConfigurationError("Missing record type to import entities")
        if self.record_type.lower() == WORKITEM_TYPE and not (
            self.workflow_group or self.model_version
        ):
            raise ScopeConfigurationError(
                f"Either a workflow group or a model version must be set for type "
                f"'{self.record_type}'"
            )

    def scope(self) -> tuple[str | None, str | None]:
        """Return ``(workflow_group, model_version)``; a group takes precedence."""

        if self.workflow_group:
            return self.workflow_group, None
        return None, self.model_version or None


def project(record: ProjectedRecord, columns: Sequence[str | None]) -> IndexEntry:
    return IndexEntry(
        business_key=record.business_key,
        fingerprint=fingerprint(record.fields, columns),
        identity=record.identity,
    )


def build_index(
    store: RecordStore,
    criteria: IndexCriteria,
    columns: Sequence[str | None],
    *,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> ReconciliationIndex:
    """Page through all records matching ``criteria`` and index them by business key.

    Fingerprints are computed with the columns of the current file so they compare
    against freshly parsed records. A page shorter than ``page_size`` ends the scan.
    """

    criteria.validate()
    if page_size <= 0:
        raise ValueError("Page size must be positive")

    group, version = criteria.scope()
    log.info(
        "Reading existing records: type=%s, group=%s, version=%s",
        criteria.record_type,
        group,
        version,
    )

    index: ReconciliationIndex = {}
    page = 0
    total = 0
    while True:
        records = store.find_existing(criteria, page=page, page_size=page_size)
        for record in records:
            total += 1
            entry = project(record, columns)
            if entry.business_key in index:
                log.warning("Duplicate stored record for key %r", entry.business_key)
            index[entry.business_key] = entry
        if len(records) < page_size:
            break
        page += 1
        log.info("%s entries read", total)

    log.info("Index built: %s stored entries", total)
    return index
