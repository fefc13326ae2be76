from .filter_bar import FilterBar
from .task_capture import TaskCaptureBar
from .task_list import TaskEditModal, TaskListItem, TaskListPanel
from .task_status import TaskStatusIndicator
from .top_bar import TopBar

__all__ = [
    "FilterBar",
    "TaskCaptureBar",
    "TaskEditModal",
    "TaskListItem",
    "TaskListPanel",
    "TaskStatusIndicator",
    "TopBar",
]
