from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable, Iterable

from donelist.core.errors import DoneListError, wrap_error
from donelist.core.events import TaskEvent, TaskEventKind
from donelist.core.logging import get_logger, log_event
from donelist.core.projector import TaskFilter, TaskView, project
from donelist.core.protocols import KeyValueStorage

logger = get_logger(__name__)

DEFAULT_STORAGE_KEY = "tasks"

ViewListener = Callable[[TaskView], None]
EventListener = Callable[[TaskEvent], None]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True, slots=True)
class Task:
    id: str
    text: str
    completed: bool = False
    created_at: datetime = field(default_factory=_utcnow)

    def to_json(self) -> dict[str, object]:
        return {
            "id": self.id,
            "text": self.text,
            "completed": self.completed,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_json(
        cls, payload: dict[str, object], *, fallback_time: datetime
    ) -> Task | None:
        """Build a task from a stored record, or ``None`` if it has no text.

        ``timestamp`` is accepted in place of ``createdAt`` for lists saved
        by the browser version.
        """
        text = str(payload.get("text") or "").strip()
        if not text:
            return None
        raw_id = payload.get("id")
        if isinstance(raw_id, bool) or raw_id is None or raw_id == "":
            task_id = _new_id()
        else:
            task_id = str(raw_id)
        created_raw = payload.get("createdAt", payload.get("timestamp"))
        return cls(
            id=task_id,
            text=text,
            completed=payload.get("completed") is True,
            created_at=_parse_timestamp(created_raw) or fallback_time,
        )


def _parse_timestamp(raw: object) -> datetime | None:
    if not isinstance(raw, str):
        return None
    try:
        # "Z" suffix as written by JavaScript's toISOString().
        stamp = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        return None
    if stamp.tzinfo is None:
        stamp = stamp.replace(tzinfo=timezone.utc)
    return stamp


def serialize_tasks(tasks: Iterable[Task]) -> bytes:
    payload = [task.to_json() for task in tasks]
    return json.dumps(payload, indent=2).encode("utf-8")


def deserialize_tasks(
    data: bytes, *, fallback_time: datetime | None = None
) -> list[Task]:
    """Decode a stored task list.

    Raises ``ValueError`` (including ``json.JSONDecodeError`` and
    ``UnicodeDecodeError``) when the blob is not a JSON array. Individual
    records that cannot be used are skipped, and duplicate ids are
    reassigned so every id stays unique.
    """
    raw = json.loads(data.decode("utf-8"))
    if not isinstance(raw, list):
        raise ValueError("Stored tasks must be a JSON array.")

    now = fallback_time or _utcnow()
    tasks: list[Task] = []
    seen: set[str] = set()
    for record in raw:
        if not isinstance(record, dict):
            continue
        task = Task.from_json(record, fallback_time=now)
        if task is None:
            continue
        if task.id in seen:
            task = replace(task, id=_new_id())
        seen.add(task.id)
        tasks.append(task)
    return tasks


class TaskStore:
    """Ordered task list persisted to a single key-value slot.

    Every mutation rewrites the whole slot, then notifies view listeners
    with a fresh projection. Discrete notifications (rejected input,
    everything completed, write failures) go to event listeners.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] | None = None,
        id_factory: Callable[[], str] | None = None,
    ) -> None:
        self._storage = storage
        self._key = key
        self._clock = clock or _utcnow
        self._id_factory = id_factory or _new_id
        self._tasks: list[Task] = []
        self._filter = TaskFilter.ALL
        self._listeners: set[ViewListener] = set()
        self._event_listeners: set[EventListener] = set()
        self.load_error: DoneListError | None = None
        self.load()

    @property
    def tasks(self) -> tuple[Task, ...]:
        return tuple(self._tasks)

    @property
    def filter(self) -> TaskFilter:
        return self._filter

    def __len__(self) -> int:
        return len(self._tasks)

    def get(self, task_id: str) -> Task | None:
        index = self._index_of(task_id)
        return None if index is None else self._tasks[index]

    def view(self) -> TaskView:
        return project(self._tasks, self._filter)

    def load(self) -> list[Task]:
        self.load_error = None
        try:
            data = self._storage.get(self._key)
            tasks = deserialize_tasks(data, fallback_time=self._clock()) if data else []
        except (OSError, ValueError, RecursionError) as exc:
            self.load_error = wrap_error(
                exc,
                code="tasks_unreadable",
                message="Saved tasks could not be read; starting with an empty list",
                severity="warning",
            )
            logger.warning("Failed to load tasks from %r: %s", self._key, exc)
            tasks = []
        self._tasks = tasks
        log_event(logger, "tasks.loaded", count=len(tasks), key=self._key)
        return list(self._tasks)

    def save(self) -> bool:
        try:
            data = serialize_tasks(self._tasks)
        except (TypeError, ValueError) as exc:
            self._persist_failed(
                wrap_error(
                    exc,
                    code="tasks_write_failed",
                    message="Could not save tasks",
                    severity="warning",
                )
            )
            return False
        ok = self._storage.set(self._key, data)
        if not ok:
            error = getattr(self._storage, "last_error", None)
            if not isinstance(error, DoneListError):
                error = DoneListError(
                    code="tasks_write_failed",
                    message="Could not save tasks",
                    severity="warning",
                )
            self._persist_failed(error)
        return ok

    def _persist_failed(self, error: DoneListError) -> None:
        log_event(logger, "tasks.persist_failed", key=self._key, error=str(error))
        self._emit_event(TaskEvent(TaskEventKind.PERSIST_FAILED, error=error))

    def subscribe(self, callback: ViewListener) -> None:
        self._listeners.add(callback)
        callback(self.view())

    def unsubscribe(self, callback: ViewListener) -> None:
        self._listeners.discard(callback)

    def subscribe_events(self, callback: EventListener) -> None:
        self._event_listeners.add(callback)

    def unsubscribe_events(self, callback: EventListener) -> None:
        self._event_listeners.discard(callback)

    def _emit(self) -> None:
        snapshot = self.view()
        for callback in list(self._listeners):
            callback(snapshot)

    def _emit_event(self, event: TaskEvent) -> None:
        for callback in list(self._event_listeners):
            callback(event)

    def _index_of(self, task_id: str) -> int | None:
        for index, task in enumerate(self._tasks):
            if task.id == task_id:
                return index
        return None

    def _reject_input(self, task_id: str | None = None) -> None:
        log_event(logger, "task.rejected", id=task_id)
        self._emit_event(TaskEvent(TaskEventKind.INPUT_REJECTED, task_id=task_id))

    def add(self, text: str) -> Task | None:
        normalized = text.strip()
        if not normalized:
            self._reject_input()
            return None
        new_task = Task(
            id=self._id_factory(),
            text=normalized,
            completed=False,
            created_at=self._clock(),
        )
        self._tasks.append(new_task)
        self.save()
        log_event(logger, "task.added", id=new_task.id)
        self._emit()
        self._emit_event(TaskEvent(TaskEventKind.ADDED, task_id=new_task.id))
        return new_task

    def toggle(self, task_id: str) -> bool | None:
        index = self._index_of(task_id)
        if index is None:
            logger.debug("Ignoring toggle of unknown task %r", task_id)
            return None
        updated = replace(self._tasks[index], completed=not self._tasks[index].completed)
        self._tasks[index] = updated
        self.save()
        log_event(logger, "task.toggled", id=task_id, completed=updated.completed)
        self._emit()
        if updated.completed and all(task.completed for task in self._tasks):
            self._emit_event(TaskEvent(TaskEventKind.COMPLETED_ALL, task_id=task_id))
        return updated.completed

    def edit(self, task_id: str, new_text: str) -> Task | None:
        index = self._index_of(task_id)
        if index is None:
            logger.debug("Ignoring edit of unknown task %r", task_id)
            return None
        normalized = new_text.strip()
        if not normalized:
            self._reject_input(task_id)
            return None
        updated = replace(self._tasks[index], text=normalized)
        self._tasks[index] = updated
        self.save()
        log_event(logger, "task.edited", id=task_id)
        self._emit()
        self._emit_event(TaskEvent(TaskEventKind.EDITED, task_id=task_id))
        return updated

    def delete(self, task_id: str) -> None:
        index = self._index_of(task_id)
        if index is None:
            logger.debug("Ignoring delete of unknown task %r", task_id)
            return
        del self._tasks[index]
        self.save()
        log_event(logger, "task.deleted", id=task_id)
        self._emit()
        self._emit_event(TaskEvent(TaskEventKind.DELETED, task_id=task_id))

    def set_filter(self, value: TaskFilter | str) -> TaskFilter:
        selected = TaskFilter.parse(value)
        if selected is not self._filter:
            self._filter = selected
            self._emit()
        return selected
