from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button

from donelist.core.messages import FilterChangeRequest
from donelist.core.projector import TaskFilter

FILTER_LABELS: dict[TaskFilter, str] = {
    TaskFilter.ALL: "All",
    TaskFilter.ACTIVE: "Active",
    TaskFilter.COMPLETED: "Completed",
}


class FilterBar(Horizontal):
    """Row of buttons selecting which tasks are listed."""

    def compose(self) -> ComposeResult:
        for task_filter, label in FILTER_LABELS.items():
            button = Button(
                label,
                id=f"filter_{task_filter.value}",
                classes="filter_button",
            )
            button.can_focus = False
            yield button

    def on_mount(self) -> None:
        self.set_active(TaskFilter.ALL)

    @on(Button.Pressed, ".filter_button")
    def _handle_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        button_id = event.button.id or ""
        self.post_message(
            FilterChangeRequest(TaskFilter.parse(button_id.removeprefix("filter_")))
        )

    def set_active(self, task_filter: TaskFilter) -> None:
        for button in self.query(".filter_button").results(Button):
            button.set_class(button.id == f"filter_{task_filter.value}", "-active")
