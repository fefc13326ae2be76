"""Derive the render-ready view of the task list.

Everything here is pure: the projector never touches the store, storage,
or listeners, so it can be called as often as the UI likes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from donelist.core.task_store import Task


class TaskFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: object) -> TaskFilter:
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            try:
                return cls(raw.strip().lower())
            except ValueError:
                return cls.ALL
        return cls.ALL


class EmptyReason(str, Enum):
    COMPLETED_FILTER_EMPTY = "completed-filter-empty"
    NO_TASKS = "no-tasks-at-all"


EMPTY_MESSAGES: dict[EmptyReason, str] = {
    EmptyReason.COMPLETED_FILTER_EMPTY: "No completed tasks yet!",
    EmptyReason.NO_TASKS: "Your list is empty. Add a task to get started!",
}


@dataclass(frozen=True, slots=True)
class TaskView:
    tasks: tuple[Task, ...]
    filter: TaskFilter
    total: int
    completed_count: int
    empty_reason: EmptyReason | None = None

    @property
    def active_count(self) -> int:
        return self.total - self.completed_count

    @property
    def is_empty(self) -> bool:
        return not self.tasks


def project(tasks: Sequence[Task], task_filter: TaskFilter | str | None) -> TaskView:
    """Filter ``tasks`` for display and count them.

    Counts are always taken over the unfiltered sequence. Unknown filter
    values fall back to ``TaskFilter.ALL``.
    """
    selected = TaskFilter.parse(task_filter)
    if selected is TaskFilter.ACTIVE:
        visible = tuple(task for task in tasks if not task.completed)
    elif selected is TaskFilter.COMPLETED:
        visible = tuple(task for task in tasks if task.completed)
    else:
        visible = tuple(tasks)

    empty_reason = None
    if not visible:
        empty_reason = _empty_reason(selected)

    return TaskView(
        tasks=visible,
        filter=selected,
        total=len(tasks),
        completed_count=sum(1 for task in tasks if task.completed),
        empty_reason=empty_reason,
    )


def _empty_reason(task_filter: TaskFilter) -> EmptyReason:
    if task_filter is TaskFilter.COMPLETED:
        return EmptyReason.COMPLETED_FILTER_EMPTY
    return EmptyReason.NO_TASKS


def empty_message(reason: EmptyReason | None) -> str:
    if reason is None:
        return ""
    return EMPTY_MESSAGES[reason]
