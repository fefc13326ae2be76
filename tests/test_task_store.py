# tests/test_task_store.py

from __future__ import annotations

import json
from datetime import datetime, timezone

import pytest

from donelist.core.events import TaskEventKind
from donelist.core.projector import EmptyReason, TaskFilter
from donelist.core.storage import MemoryStorage
from donelist.core.task_store import TaskStore, deserialize_tasks

from .fakes import FailingStorage, Recorder, SequentialIds


def _stored(storage: MemoryStorage, key: str = "tasks") -> list[dict]:
    return json.loads(storage.slots[key].decode("utf-8"))


def test_add_appends_persists_and_announces(store, storage, recorder: Recorder) -> None:
    task = store.add("  Buy milk  ")

    assert task is not None
    assert task.text == "Buy milk"
    assert task.completed is False
    assert task.created_at == datetime(2024, 1, 5, 9, 30, tzinfo=timezone.utc)
    assert store.tasks == (task,)
    assert _stored(storage) == [
        {
            "id": task.id,
            "text": "Buy milk",
            "completed": False,
            "createdAt": "2024-01-05T09:30:00+00:00",
        }
    ]
    assert recorder.kinds() == [TaskEventKind.ADDED]
    assert recorder.views[-1].total == 1


@pytest.mark.parametrize("text", ["", "   ", "\t\n"])
def test_add_rejects_blank_text(store, storage, recorder: Recorder, text: str) -> None:
    assert store.add(text) is None

    assert store.tasks == ()
    assert "tasks" not in storage.slots
    assert recorder.kinds() == [TaskEventKind.INPUT_REJECTED]
    assert recorder.views == []


def test_ids_are_unique_and_order_is_insertion_order(storage) -> None:
    store = TaskStore(storage)
    texts = ["one", "two", "three", "four"]
    for text in texts:
        store.add(text)

    assert [task.text for task in store.tasks] == texts
    assert len({task.id for task in store.tasks}) == len(texts)


def test_toggle_flips_and_replaces_task(store, storage) -> None:
    task = store.add("Walk dog")
    assert task is not None
    snapshot = store.tasks

    assert store.toggle(task.id) is True
    assert store.get(task.id).completed is True
    # Earlier snapshots are never mutated behind the caller's back.
    assert snapshot[0].completed is False
    assert _stored(storage)[0]["completed"] is True

    assert store.toggle(task.id) is False
    assert store.get(task.id).completed is False


def test_toggle_unknown_id_changes_nothing(store, storage, recorder: Recorder) -> None:
    for text in ("a", "b", "c"):
        store.add(text)
    store.toggle(store.tasks[1].id)
    before = store.tasks
    stored_before = storage.slots["tasks"]
    recorder.views.clear()
    recorder.events.clear()

    assert store.toggle(9999) is None  # type: ignore[arg-type]
    assert store.toggle("missing") is None

    assert store.tasks == before
    assert storage.slots["tasks"] == stored_before
    assert recorder.views == []
    assert recorder.events == []


def test_completed_all_fires_only_when_every_task_is_done(store, recorder: Recorder) -> None:
    first = store.add("first")
    second = store.add("second")
    assert first is not None and second is not None

    store.toggle(first.id)
    assert recorder.count(TaskEventKind.COMPLETED_ALL) == 0

    store.toggle(second.id)
    assert recorder.count(TaskEventKind.COMPLETED_ALL) == 1

    store.toggle(second.id)
    assert recorder.count(TaskEventKind.COMPLETED_ALL) == 1


def test_edit_replaces_trimmed_text(store, storage, recorder: Recorder) -> None:
    task = store.add("draft")
    assert task is not None

    updated = store.edit(task.id, "  final  ")

    assert updated is not None
    assert updated.text == "final"
    assert updated.id == task.id
    assert updated.created_at == task.created_at
    assert _stored(storage)[0]["text"] == "final"
    assert recorder.kinds()[-1] is TaskEventKind.EDITED


def test_edit_with_blank_text_is_a_cancellation(store, storage, recorder: Recorder) -> None:
    task = store.add("keep me")
    assert task is not None
    stored_before = storage.slots["tasks"]

    assert store.edit(task.id, "   ") is None

    assert store.get(task.id).text == "keep me"
    assert storage.slots["tasks"] == stored_before
    assert recorder.kinds()[-1] is TaskEventKind.INPUT_REJECTED


def test_edit_unknown_id_is_ignored(store, recorder: Recorder) -> None:
    store.add("only")
    recorder.events.clear()

    assert store.edit("nope", "changed") is None
    assert [task.text for task in store.tasks] == ["only"]
    assert recorder.events == []


def test_delete_removes_task_and_persists(store, storage, recorder: Recorder) -> None:
    keep = store.add("keep")
    drop = store.add("drop")
    assert keep is not None and drop is not None

    store.delete(drop.id)

    assert store.tasks == (keep,)
    assert [record["id"] for record in _stored(storage)] == [keep.id]
    assert recorder.kinds()[-1] is TaskEventKind.DELETED

    recorder.events.clear()
    store.delete(drop.id)
    assert store.tasks == (keep,)
    assert recorder.events == []


def test_set_filter_does_not_persist(store, storage, recorder: Recorder) -> None:
    store.add("x")
    stored_before = storage.slots["tasks"]
    recorder.views.clear()

    assert store.set_filter("completed") is TaskFilter.COMPLETED
    assert store.filter is TaskFilter.COMPLETED
    assert storage.slots["tasks"] == stored_before
    assert len(recorder.views) == 1

    # Unknown values fall back to "all".
    assert store.set_filter("bogus") is TaskFilter.ALL
    # Setting the same filter again is silent.
    store.set_filter(TaskFilter.ALL)
    assert len(recorder.views) == 2


def test_filter_resets_on_new_process(storage) -> None:
    first = TaskStore(storage)
    first.add("persisted")
    first.set_filter(TaskFilter.COMPLETED)

    second = TaskStore(storage)

    assert second.filter is TaskFilter.ALL
    assert [task.text for task in second.tasks] == ["persisted"]


def test_round_trip_through_storage(store, storage) -> None:
    for text in ("alpha", "beta", "gamma"):
        store.add(text)
    store.toggle(store.tasks[1].id)

    reloaded = TaskStore(storage)

    assert reloaded.tasks == store.tasks


@pytest.mark.parametrize(
    "blob",
    [
        b"not json",
        b'{"id": 1}',
        b"\xff\xfe\x00",
        b'"tasks"',
        pytest.param(b"[" * 100000 + b"]" * 100000, id="deeply-nested"),
    ],
)
def test_malformed_storage_starts_empty(blob: bytes) -> None:
    store = TaskStore(MemoryStorage({"tasks": blob}))

    assert store.tasks == ()
    assert store.load_error is not None
    assert store.load_error.severity == "warning"


def test_read_failure_starts_empty() -> None:
    store = TaskStore(FailingStorage(fail_reads=True))

    assert store.tasks == ()
    assert store.load_error is not None
    assert store.load_error.code == "tasks_unreadable"


def test_missing_slot_is_not_an_error(store) -> None:
    assert store.tasks == ()
    assert store.load_error is None


def test_write_failure_keeps_memory_state_and_warns() -> None:
    storage = FailingStorage()
    store = TaskStore(storage, id_factory=SequentialIds())
    rec = Recorder()
    store.subscribe_events(rec.on_event)

    task = store.add("survives")

    assert task is not None
    assert store.tasks == (task,)
    assert rec.kinds() == [TaskEventKind.PERSIST_FAILED, TaskEventKind.ADDED]
    failure = rec.events[0]
    assert failure.error is not None
    assert failure.error.severity == "warning"

    # Next successful write carries the whole list.
    storage.fail_writes = False
    store.add("second")
    assert [record["text"] for record in json.loads(storage.data)] == ["survives", "second"]


def test_lone_surrogate_text_is_saved_escaped() -> None:
    storage = MemoryStorage()
    store = TaskStore(storage, id_factory=SequentialIds())
    rec = Recorder()
    store.subscribe_events(rec.on_event)

    task = store.add("note \ud83d")

    assert task is not None
    assert rec.kinds() == [TaskEventKind.ADDED]
    assert b"\\ud83d" in storage.slots["tasks"]
    assert TaskStore(storage).tasks == store.tasks


def test_browser_escaped_surrogate_survives_later_writes() -> None:
    storage = MemoryStorage(
        {"tasks": b'[{"id": 1, "text": "emoji \\ud83d", "completed": false}]'}
    )
    store = TaskStore(storage, id_factory=SequentialIds())
    rec = Recorder()
    store.subscribe_events(rec.on_event)

    store.add("Buy milk")

    assert rec.kinds() == [TaskEventKind.ADDED]
    assert [record["text"] for record in _stored(storage)] == ["emoji \ud83d", "Buy milk"]


def test_serialization_failure_is_reported_as_persist_failed(monkeypatch) -> None:
    def refuse(tasks):
        raise ValueError("cannot encode")

    monkeypatch.setattr("donelist.core.task_store.serialize_tasks", refuse)
    storage = MemoryStorage()
    store = TaskStore(storage, id_factory=SequentialIds())
    rec = Recorder()
    store.subscribe_events(rec.on_event)

    task = store.add("kept in memory")

    assert store.tasks == (task,)
    assert "tasks" not in storage.slots
    assert rec.kinds() == [TaskEventKind.PERSIST_FAILED, TaskEventKind.ADDED]
    assert rec.events[0].error.code == "tasks_write_failed"
    assert rec.events[0].error.severity == "warning"


def test_legacy_browser_records_are_accepted() -> None:
    blob = json.dumps(
        [
            {"id": 1704447000000, "text": "Buy milk", "completed": True,
             "timestamp": "2024-01-05T09:30:00.000Z"},
            {"id": 1704447060000, "text": "   ", "completed": False},
            {"id": 1704447000000, "text": "dup", "completed": False},
            "garbage",
        ]
    ).encode("utf-8")

    tasks = deserialize_tasks(blob)

    assert [task.text for task in tasks] == ["Buy milk", "dup"]
    assert tasks[0].id == "1704447000000"
    assert tasks[0].completed is True
    assert tasks[0].created_at == datetime(2024, 1, 5, 9, 30, tzinfo=timezone.utc)
    assert tasks[1].id != tasks[0].id


def test_subscribe_delivers_current_view_immediately(store) -> None:
    store.add("present")
    rec = Recorder()

    store.subscribe(rec.on_view)

    assert len(rec.views) == 1
    assert rec.views[0].total == 1

    store.unsubscribe(rec.on_view)
    store.add("unseen")
    assert len(rec.views) == 1


def test_scenario_buy_milk_walk_dog(store, recorder: Recorder) -> None:
    milk = store.add("Buy milk")
    assert milk is not None
    view = store.view()
    assert (view.total, view.completed_count) == (1, 0)
    assert milk.completed is False

    assert store.toggle(milk.id) is True
    view = store.view()
    assert view.completed_count == 1
    assert recorder.count(TaskEventKind.COMPLETED_ALL) == 1

    store.add("Walk dog")
    view = store.view()
    assert (view.total, view.completed_count) == (2, 1)
    assert recorder.count(TaskEventKind.COMPLETED_ALL) == 1

    store.set_filter(TaskFilter.COMPLETED)
    assert [task.text for task in store.view().tasks] == ["Buy milk"]

    store.delete(milk.id)
    view = store.view()
    assert view.total == 1
    assert view.tasks == ()
    assert view.empty_reason is EmptyReason.COMPLETED_FILTER_EMPTY


def test_counts_invariant_holds_across_mutations(store) -> None:
    def check() -> None:
        view = store.view()
        assert view.total == len(store)
        assert 0 <= view.completed_count <= view.total

    check()
    ids = [store.add(f"task {n}").id for n in range(5)]
    check()
    for task_id in ids[::2]:
        store.toggle(task_id)
        check()
    store.delete(ids[0])
    check()
    store.edit(ids[1], "renamed")
    check()
