from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from donelist.core.errors import DoneListError


class TaskEventKind(str, Enum):
    INPUT_REJECTED = "input-rejected"
    COMPLETED_ALL = "task-completed-all"
    ADDED = "task-added"
    DELETED = "task-deleted"
    EDITED = "task-edited"
    PERSIST_FAILED = "persist-failed"


@dataclass(frozen=True, slots=True)
class TaskEvent:
    """One-shot notification emitted by the task store.

    Events carry no state of their own; the current list is always read
    from the store's view.
    """

    kind: TaskEventKind
    task_id: str | None = None
    error: DoneListError | None = None
