from textual.message import Message

from donelist.core.projector import TaskFilter


class AddTaskRequest(Message):
    def __init__(self, text: str) -> None:
        super().__init__()
        self.text = text


class FilterChangeRequest(Message):
    def __init__(self, task_filter: TaskFilter) -> None:
        super().__init__()
        self.task_filter = task_filter


class ToggleTaskRequest(Message):
    def __init__(self, task_id: str) -> None:
        super().__init__()
        self.task_id = task_id


class EditTaskRequest(Message):
    def __init__(self, task_id: str) -> None:
        super().__init__()
        self.task_id = task_id


class DeleteTaskRequest(Message):
    def __init__(self, task_id: str) -> None:
        super().__init__()
        self.task_id = task_id
