from __future__ import annotations

import pytest

from csvsync.domain.applier import WorkflowChangeApplier
from csvsync.domain.errors import ApplyError
from tests.helpers.records import FakeProcessor, FakeRecordStore, make_source, make_stored


def test_apply_new_record_sets_task_and_scope() -> None:
    store = FakeRecordStore()
    applier = WorkflowChangeApplier.for_source(
        make_source(model_version="v3"),
        store=store,
    )
    record = make_stored("1", workflow_group=None)

    identity = applier.apply(record, is_new=True)

    assert identity == record.id
    saved = store.records[identity]
    assert saved.task_id == 10
    assert saved.workflow_group == "group-1"
    assert saved.model_version == "v3"
    assert saved.modified_at is not None
    assert saved.created_at is not None


def test_apply_existing_record_keeps_task() -> None:
    record = make_stored("1")
    record.task_id = 3
    store = FakeRecordStore([record])
    applier = WorkflowChangeApplier(store=store, task_id=10)

    applier.apply(record, is_new=False)

    assert store.records[record.id].task_id == 3


def test_apply_runs_processor_when_event_is_configured() -> None:
    store = FakeRecordStore()
    processor = FakeProcessor()
    applier = WorkflowChangeApplier(store=store, processor=processor, event_id=20)

    identity = applier.apply(make_stored("1"), is_new=True)

    assert processor.calls == [("1", 20)]
    assert store.records[identity].fields["_processed"] == "yes"


def test_apply_skips_processor_without_event() -> None:
    processor = FakeProcessor()
    applier = WorkflowChangeApplier(store=FakeRecordStore(), processor=processor)

    applier.apply(make_stored("1"), is_new=True)

    assert processor.calls == []


def test_processing_failure_falls_back_to_plain_save() -> None:
    store = FakeRecordStore()
    processor = FakeProcessor(fail_keys={"1"})
    applier = WorkflowChangeApplier(store=store, processor=processor, event_id=20)

    identity = applier.apply(make_stored("1"), is_new=True)

    assert "_processed" not in store.records[identity].fields
    assert store.saved == ["1"]


def test_persistence_failure_becomes_apply_error() -> None:
    store = FakeRecordStore()
    store.fail_keys.add("1")
    applier = WorkflowChangeApplier(store=store)

    with pytest.raises(ApplyError, match="Failed to save"):
        applier.apply(make_stored("1"), is_new=True)


def test_remove_deletes_and_wraps_failures() -> None:
    keep = make_stored("keep")
    drop = make_stored("drop")
    store = FakeRecordStore([keep, drop])
    applier = WorkflowChangeApplier(store=store)

    applier.remove(drop.id)
    store.fail_keys.add("keep")

    with pytest.raises(ApplyError):
        applier.remove(keep.id)
    assert store.keys() == {"keep"}


def test_flush_calls_hook() -> None:
    calls: list[str] = []
    applier = WorkflowChangeApplier(store=FakeRecordStore(), on_flush=lambda: calls.append("f"))

    applier.flush()
    applier.flush()

    assert calls == ["f", "f"]
