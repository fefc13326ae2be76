# tests/conftest.py

from __future__ import annotations

import pytest

from donelist.core.storage import MemoryStorage
from donelist.core.task_store import TaskStore

from .fakes import Recorder, SequentialIds, SteppingClock


@pytest.fixture()
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture()
def clock() -> SteppingClock:
    return SteppingClock()


@pytest.fixture()
def store(storage: MemoryStorage, clock: SteppingClock) -> TaskStore:
    """Empty store over in-memory storage with deterministic ids and times."""
    return TaskStore(storage, clock=clock, id_factory=SequentialIds())


@pytest.fixture()
def recorder(store: TaskStore) -> Recorder:
    rec = Recorder()
    store.subscribe(rec.on_view)
    store.subscribe_events(rec.on_event)
    rec.views.clear()
    return rec
