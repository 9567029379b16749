"""Reconcile a source snapshot against the persisted records of one scope.

A run walks ``INIT -> SCANNING -> FINALIZING -> DONE``:

- INIT parses the header and builds the :data:`ReconciliationIndex`.
- SCANNING streams the data lines. Each business key is classified once as
  created, changed or unchanged; created and changed records go to the applier.
- FINALIZING removes every indexed key that did not occur in the file.
- DONE freezes the counters into a :class:`RunSummary`.

Per-line problems (parse errors, blank or duplicate keys, apply failures) are
logged and counted; the run continues. Any other failure while scanning aborts
the run with :class:`ImportAbortedError` before anything is deleted.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from csvsync.domain.errors import (
    ApplyError,
    ConfigurationError,
    DuplicateKeyError,
    ImportAbortedError,
    MalformedHeaderError,
    RecordParseError,
)
from csvsync.domain.fingerprint import fingerprint
from csvsync.domain.index import DEFAULT_PAGE_SIZE, build_index
from csvsync.domain.model import (
    DEFAULT_DELIMITER,
    Classification,
    RunState,
    RunSummary,
    StoredRecord,
)
from csvsync.domain.parsing import columns_of, parse_header, parse_record, printable

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

    from csvsync.domain.index import IndexCriteria
    from csvsync.domain.model import ImportRecord, IndexEntry, ReconciliationIndex
    from csvsync.domain.ports.applying import RecordApplier
    from csvsync.domain.ports.persistence import RecordStore

log = getLogger(__name__)

DEFAULT_FLUSH_INTERVAL = 100


@dataclass(slots=True)
class _Counters:
    total: int = 0
    created: int = 0
    updated: int = 0
    deleted: int = 0
    failed: int = 0
    unchanged: int = 0
    skipped: int = 0


class Reconciler:
    """State of a single reconciliation run. Instances are not reusable."""

    def __init__(
        self,
        *,
        store: RecordStore,
        applier: RecordApplier,
        criteria: IndexCriteria,
        key_field: str,
        delimiter: str = DEFAULT_DELIMITER,
        page_size: int = DEFAULT_PAGE_SIZE,
        flush_interval: int = DEFAULT_FLUSH_INTERVAL,
        stamp: Mapping[str, str] | None = None,
        label: str = "import",
    ) -> None:
        if flush_interval <= 0:
            raise ValueError("Flush interval must be positive")
        self._store = store
        self._applier = applier
        self._criteria = criteria
        self._key_field = key_field
        self._delimiter = delimiter
        self._page_size = page_size
        self._flush_interval = flush_interval
        self._stamp = dict(stamp or {})
        self._label = label

        self._state = RunState.INIT
        self._fields: list[str | None] = []
        self._columns: list[str] = []
        self._index: ReconciliationIndex = {}
        self._seen: dict[str, Classification] = {}
        self._deleted: set[str] = set()
        self._counters = _Counters()
        self._pending = 0

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def columns(self) -> tuple[str, ...]:
        return tuple(self._columns)

    @property
    def classifications(self) -> dict[str, Classification]:
        """Classification per business key seen in the file or removed at the end."""

        result = dict(self._seen)
        result.update(dict.fromkeys(self._deleted, Classification.DELETED))
        return result

    @property
    def seen_keys(self) -> frozenset[str]:
        return frozenset(self._seen)

    @property
    def deleted_keys(self) -> frozenset[str]:
        return frozenset(self._deleted)

    @property
    def index_keys(self) -> frozenset[str]:
        return frozenset(self._index)

    def run(self, lines: Iterable[str], *, checksum: str | None = None) -> RunSummary:
        if self._state is not RunState.INIT:
            raise RuntimeError("Reconciler instances can only run once")
        iterator = iter(lines)
        self._initialise(iterator)
        self._state = RunState.SCANNING
        self._scan(iterator)
        self._state = RunState.FINALIZING
        self._finalize()
        self._state = RunState.DONE
        summary = self._summary(checksum)
        log.info("%s: %s", self._label, summary)
        return summary

    # INIT ------------------------------------------------------------------

    def _initialise(self, lines: Iterator[str]) -> None:
        try:
            header = next(lines, None)
        except UnicodeDecodeError as exc:
            raise MalformedHeaderError(f"Cannot decode file: {exc}", line=1) from exc
        if header is None:
            raise MalformedHeaderError("File is empty, first line must contain the item names")
        self._fields = parse_header(header, self._delimiter)
        self._columns = columns_of(self._fields)
        if self._key_field not in self._columns:
            raise ConfigurationError(
                f"Key field '{self._key_field}' not found in header: {', '.join(self._columns)}"
            )
        log.info(
            "%s: type=%s, key field=%s, %s columns",
            self._label,
            self._criteria.record_type,
            self._key_field,
            len(self._columns),
        )
        self._index = build_index(
            self._store,
            self._criteria,
            self._columns,
            page_size=self._page_size,
        )

    # SCANNING --------------------------------------------------------------

    def _scan(self, lines: Iterator[str]) -> None:
        line_number = 1
        line: str | None = None
        try:
            for line_number, raw in enumerate(lines, start=2):
                line = raw.rstrip("\r\n")
                if not line.strip():
                    continue
                self._counters.total += 1
                self._process_line(line, line_number)
                self._pending += 1
                if self._pending >= self._flush_interval:
                    self._flush_batch()
        except Exception as exc:
            counters = self._counters
            log.error(
                "%s: import error at line %s: %s (created=%s, updated=%s so far)",
                self._label,
                line_number,
                exc,
                counters.created,
                counters.updated,
            )
            raise ImportAbortedError(
                f"Import aborted: {exc}",
                line=line_number,
                data=printable(line) if line is not None else None,
            ) from exc
        self._applier.flush()
        self._pending = 0

    def _process_line(self, line: str, line_number: int) -> None:
        try:
            record = parse_record(
                line,
                self._fields,
                record_type=self._criteria.record_type,
                key_field=self._key_field,
                delimiter=self._delimiter,
                line_number=line_number,
            )
        except RecordParseError as exc:
            log.warning("Incorrect data line: %s", exc)
            self._counters.failed += 1
            return

        key = record.business_key
        if not key.strip():
            log.warning("Key field '%s' is empty - line %s", self._key_field, line_number)
            self._counters.skipped += 1
            return
        if key in self._seen:
            log.warning("%s", DuplicateKeyError(self._key_field, key, line=line_number))
            self._counters.skipped += 1
            return

        entry = self._index.get(key)
        record_fingerprint = fingerprint(record.fields, self._columns)
        if entry is not None and entry.fingerprint == record_fingerprint:
            self._seen[key] = Classification.UNCHANGED
            self._counters.unchanged += 1
            return

        record.stamp(self._stamp)
        try:
            if entry is None:
                self._create(record)
            else:
                self._update(record, entry)
        except ApplyError as exc:
            log.warning("%s=%s not applied (line %s): %s", self._key_field, key, line_number, exc)
            self._seen[key] = Classification.FAILED
            self._counters.failed += 1

    def _create(self, record: ImportRecord) -> None:
        self._applier.apply(StoredRecord.from_import(record), is_new=True)
        self._seen[record.business_key] = Classification.CREATED
        self._counters.created += 1

    def _update(self, record: ImportRecord, entry: IndexEntry) -> None:
        existing = self._store.get(entry.identity)
        if existing is None:
            raise ApplyError(f"Stored record {entry.identity} no longer exists")
        existing.merge(record)
        self._applier.apply(existing, is_new=False)
        self._seen[record.business_key] = Classification.CHANGED
        self._counters.updated += 1

    def _flush_batch(self) -> None:
        counters = self._counters
        log.info(
            "%s: %s entries read (%s imports, %s updates)",
            self._label,
            counters.total,
            counters.created,
            counters.updated,
        )
        self._applier.flush()
        self._pending = 0

    # FINALIZING ------------------------------------------------------------

    def _finalize(self) -> None:
        for key, entry in self._index.items():
            if key in self._seen:
                continue
            try:
                self._applier.remove(entry.identity)
            except ApplyError as exc:
                log.warning("Failed to remove %s=%s: %s", self._key_field, key, exc)
                self._counters.failed += 1
                continue
            self._deleted.add(key)
            self._counters.deleted += 1
        self._applier.flush()

    # DONE ------------------------------------------------------------------

    def _summary(self, checksum: str | None) -> RunSummary:
        counters = self._counters
        return RunSummary(
            total=counters.total,
            created=counters.created,
            updated=counters.updated,
            deleted=counters.deleted,
            failed=counters.failed,
            unchanged=counters.unchanged,
            skipped=counters.skipped,
            checksum=checksum,
        )
