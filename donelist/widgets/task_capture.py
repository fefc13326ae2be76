from __future__ import annotations

from textual import on
from textual.app import ComposeResult
from textual.containers import Horizontal
from textual.widgets import Button, Input

from donelist.core.messages import AddTaskRequest


class TaskCaptureBar(Horizontal):
    """Input row used to add new tasks."""

    def compose(self) -> ComposeResult:
        yield Input(id="task_input", placeholder="What needs to be done?")
        yield Button("Add", id="add_button", variant="primary")

    @property
    def input(self) -> Input:
        return self.query_one("#task_input", Input)

    @on(Input.Submitted, "#task_input")
    def _handle_submit(self, event: Input.Submitted) -> None:
        event.stop()
        self.post_message(AddTaskRequest(event.value))

    @on(Button.Pressed, "#add_button")
    def _handle_add_pressed(self, event: Button.Pressed) -> None:
        event.stop()
        self.post_message(AddTaskRequest(self.input.value))

    def clear(self) -> None:
        self.input.value = ""

    def reject(self) -> None:
        """Flag the input after an empty submission."""
        field = self.input
        field.add_class("-rejected")
        field.focus()
        self.set_timer(0.6, lambda: field.remove_class("-rejected"))
