"""Application services for importing external source files."""

from __future__ import annotations

import codecs
import io
from dataclasses import dataclass
from datetime import UTC, datetime
from logging import getLogger
from typing import TYPE_CHECKING

from csvsync.domain.applier import WorkflowChangeApplier
from csvsync.domain.checksum import compute_checksum, should_skip
from csvsync.domain.errors import (
    ConfigurationError,
    ImportRunError,
    MissingConfigurationError,
)
from csvsync.domain.index import DEFAULT_PAGE_SIZE, IndexCriteria
from csvsync.domain.model import WORKITEM_TYPE, RunSummary
from csvsync.domain.reconciliation import DEFAULT_FLUSH_INTERVAL, Reconciler

if TYPE_CHECKING:
    from collections.abc import Callable

    from csvsync.domain.model import ImportSource, SourceOptions
    from csvsync.domain.ports.applying import RecordProcessor
    from csvsync.domain.ports.fetching import SourceFetcher
    from csvsync.domain.ports.unit_of_work import ImportUnitOfWork

log = getLogger(__name__)


@dataclass(slots=True, kw_only=True)
class ImportRequest:
    """Parameters of one import run."""

    source_name: str
    force: bool = False
    page_size: int = DEFAULT_PAGE_SIZE
    flush_interval: int = DEFAULT_FLUSH_INTERVAL


@dataclass(frozen=True, slots=True)
class ImportSettings:
    """Validated settings derived from a source and its options."""

    criteria: IndexCriteria
    key_field: str
    encoding: str
    delimiter: str


def resolve_settings(source: ImportSource) -> ImportSettings:
    """Validate the configuration of ``source`` before any data is read."""

    options: SourceOptions = source.parsed_options()
    if options.key_field is None:
        raise MissingConfigurationError("Missing property 'key' to import entities")
    if options.record_type.lower() == WORKITEM_TYPE and not (source.task_id and source.event_id):
        raise MissingConfigurationError(
            f"Task and event ids must be set for type '{options.record_type}'"
        )
    try:
        codecs.lookup(options.encoding)
    except LookupError as exc:
        raise ConfigurationError(f"Unknown encoding: {options.encoding}") from exc

    criteria = IndexCriteria(
        record_type=options.record_type,
        workflow_group=source.workflow_group,
        model_version=source.model_version,
    )
    criteria.validate()
    return ImportSettings(
        criteria=criteria,
        key_field=options.key_field,
        encoding=options.encoding,
        delimiter=options.delimiter,
    )


def sync_import_source(
    request: ImportRequest,
    *,
    fetcher: SourceFetcher,
    unit_of_work_factory: Callable[[], ImportUnitOfWork],
    processor: RecordProcessor | None = None,
) -> RunSummary:
    """Fetch the file of a source and reconcile it, returning the run summary.

    The stored checksum is only replaced after a complete run. When a run aborts
    part-way, records applied before the failure are kept and the error is raised.
    """

    with unit_of_work_factory() as uow:
        source = uow.repositories.sources.get_by_name(request.source_name)
        if source is None:
            raise MissingConfigurationError(f"Unknown import source: {request.source_name}")
        settings = resolve_settings(source)
        if request.force:
            source.invalidate_checksum()

        source_file = fetcher(source)
        log.info("File '%s' processing: %s bytes", source_file.name, source_file.size)
        checksum = compute_checksum(source_file.content)
        log.info("checksum=%s", checksum)

        if should_skip(checksum, source.checksum):
            summary = RunSummary.unchanged_source(checksum)
            log.info("%s: no data changes since last import", source.name)
            _record_run(source, summary)
            uow.commit()
            return summary

        applier = WorkflowChangeApplier.for_source(
            source,
            store=uow.repositories.records,
            processor=processor,
            on_flush=uow.commit,
        )
        reconciler = Reconciler(
            store=uow.repositories.records,
            applier=applier,
            criteria=settings.criteria,
            key_field=settings.key_field,
            delimiter=settings.delimiter,
            page_size=request.page_size,
            flush_interval=request.flush_interval,
            stamp=source.import_stamp(),
            label=source.name,
        )
        lines = io.TextIOWrapper(
            io.BytesIO(source_file.content),
            encoding=settings.encoding,
            errors="surrogateescape",
        )
        try:
            summary = reconciler.run(lines, checksum=checksum)
        except ImportRunError:
            # records applied before the failure stand
            uow.commit()
            raise

        source.checksum = checksum
        _record_run(source, summary)
        uow.commit()

    return summary


def _record_run(source: ImportSource, summary: RunSummary) -> None:
    source.last_log = str(summary)
    source.last_run_at = datetime.now(UTC)
