"""Application orchestration entry points."""

from __future__ import annotations

from collections.abc import Callable
from logging import getLogger
from typing import TYPE_CHECKING

from csvsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyImportUnitOfWork,
    is_started,
    startup,
)
from csvsync.adapters.transfer import SourceFileFetcher
from csvsync.config.sync import get_sync_config
from csvsync.domain.data_integration import ImportRequest, sync_import_source
from csvsync.domain.model import ImportSource, SourceType
from csvsync.domain.ports.unit_of_work import ImportUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path

    from csvsync.config.sync import SyncConfig
    from csvsync.domain.model import RunSummary
    from csvsync.domain.ports.applying import RecordProcessor
    from csvsync.domain.ports.fetching import SourceFetcher

UnitOfWorkFactory = Callable[[], ImportUnitOfWork]


log = getLogger(__name__)


def _resolve_uow(unit_of_work_factory: UnitOfWorkFactory | None) -> UnitOfWorkFactory:
    if unit_of_work_factory is not None:
        return unit_of_work_factory
    if not is_started():
        startup()
    return SqlAlchemyImportUnitOfWork


def import_source(
    name: str,
    *,
    force: bool = False,
    fetcher: SourceFetcher | None = None,
    processor: RecordProcessor | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> RunSummary:
    """Run the import of one registered source using the configured adapters."""

    effective_uow = _resolve_uow(unit_of_work_factory)
    effective_fetcher = fetcher or SourceFileFetcher()
    config = sync_config or get_sync_config()
    log.info(
        "Starting import: source=%s, force=%s, page_size=%s, flush_interval=%s",
        name,
        force,
        config.page_size,
        config.flush_interval,
    )

    summary = sync_import_source(
        ImportRequest(
            source_name=name,
            force=force,
            page_size=config.page_size,
            flush_interval=config.flush_interval,
        ),
        fetcher=effective_fetcher,
        unit_of_work_factory=effective_uow,
        processor=processor,
    )

    log.info(
        "Finished import %s: created=%s, updated=%s, deleted=%s, failed=%s, skipped=%s",
        name,
        summary.created,
        summary.updated,
        summary.deleted,
        summary.failed,
        summary.checksum_skipped,
    )
    return summary


def register_source(
    *,
    name: str,
    selector: str,
    options: str | None = None,
    server: str | None = None,
    port: int | None = None,
    user: str | None = None,
    password: str | None = None,
    model_version: str | None = None,
    workflow_group: str | None = None,
    task_id: int | None = None,
    event_id: int | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> ImportSource:
    """Create the named source or update its settings.

    Settings passed as ``None`` keep their stored value. Passing either scope
    argument replaces the whole scope, so switching from a group to a version does
    not leave the old group behind. Changing anything that affects how the file is
    read or scoped clears the stored checksum, so the next run is not skipped.
    """

    effective_uow = _resolve_uow(unit_of_work_factory)
    with effective_uow() as uow:
        sources = uow.repositories.sources
        source = sources.get_by_name(name)
        if source is None:
            source = ImportSource(name=name, type=SourceType.CSV, selector=selector)
            sources.add(source)
            log.info("Registered source %s", name)
        else:
            log.info("Updating source %s", name)

        before = _run_settings(source)
        source.selector = selector
        updates = {
            "options": options,
            "server": server,
            "port": port,
            "user": user,
            "password": password,
            "task_id": task_id,
            "event_id": event_id,
        }
        for attribute, value in updates.items():
            if value is not None:
                setattr(source, attribute, value)
        if model_version is not None or workflow_group is not None:
            source.model_version = model_version
            source.workflow_group = workflow_group
        if source.checksum and _run_settings(source) != before:
            log.info("Settings of %s changed, clearing stored checksum", name)
            source.invalidate_checksum()
        uow.commit()
    return source


def _run_settings(source: ImportSource) -> tuple[object, ...]:
    return (
        source.selector,
        source.options,
        source.server,
        source.model_version,
        source.workflow_group,
        source.task_id,
        source.event_id,
    )


def list_sources(
    *,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
) -> Sequence[ImportSource]:
    effective_uow = _resolve_uow(unit_of_work_factory)
    with effective_uow() as uow:
        return list(uow.repositories.sources.list_all())


def build_file_options(
    *,
    record_type: str,
    key: str,
    delimiter: str | None = None,
    encoding: str | None = None,
) -> str:
    """Render source options for an ad-hoc file run."""

    lines = [f"type={record_type}", f"key={key}"]
    if delimiter:
        lines.append(f"delimiter={delimiter}")
    if encoding:
        lines.append(f"encoding={encoding}")
    return "\n".join(lines)


def run_file(
    path: Path,
    *,
    record_type: str,
    key: str,
    workflow_group: str | None = None,
    model_version: str | None = None,
    task_id: int | None = None,
    event_id: int | None = None,
    delimiter: str | None = None,
    encoding: str | None = None,
    force: bool = False,
    processor: RecordProcessor | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    sync_config: SyncConfig | None = None,
) -> RunSummary:
    """Import a local file, registering it as a source named after its absolute path."""

    resolved = path.expanduser().resolve()
    name = str(resolved)
    effective_uow = _resolve_uow(unit_of_work_factory)
    register_source(
        name=name,
        selector=name,
        options=build_file_options(
            record_type=record_type,
            key=key,
            delimiter=delimiter,
            encoding=encoding,
        ),
        model_version=model_version,
        workflow_group=workflow_group,
        task_id=task_id,
        event_id=event_id,
        unit_of_work_factory=effective_uow,
    )
    return import_source(
        name,
        force=force,
        processor=processor,
        unit_of_work_factory=effective_uow,
        sync_config=sync_config,
    )
