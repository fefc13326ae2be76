from __future__ import annotations

from datetime import datetime

from rich.markup import escape
from textual import on
from textual.app import ComposeResult
from textual.binding import Binding
from textual.containers import Container, Horizontal, Vertical
from textual.screen import ModalScreen
from textual.widgets import Footer, Input, Label, ListItem, ListView, Static

from donelist.core.messages import DeleteTaskRequest, EditTaskRequest, ToggleTaskRequest
from donelist.core.projector import TaskView, empty_message
from donelist.core.task_store import Task


def format_created_at(stamp: datetime) -> str:
    """Render a creation time as e.g. ``Jan 5, 2024`` in local time."""
    local = stamp.astimezone()
    return f"{local:%b} {local.day}, {local.year}"


class TaskEditModal(ModalScreen[str | None]):
    """Modal editor used for updating an existing task.

    Dismisses with the entered text (possibly blank) or ``None`` when
    cancelled; the store decides whether blank text is acceptable.
    """

    BINDINGS = [
        Binding("escape", "close", "Cancel", show=True),
    ]

    def __init__(self, initial_text: str) -> None:
        super().__init__()
        self._initial_text = initial_text

    def compose(self) -> ComposeResult:
        yield Container(
            Vertical(
                Input(id="task_edit_input", placeholder="Edit your task"),
                Static("[dim]enter to save, escape to cancel[/dim]", classes="task_edit_hint"),
                Footer(),
            ),
            id="task_edit_modal",
        )

    def on_mount(self) -> None:
        area = self.query_one("#task_edit_input", Input)
        container = self.query_one("#task_edit_modal", Container)
        container.border_title = "Edit Task"
        area.value = self._initial_text
        area.focus()

    @on(Input.Submitted, "#task_edit_input")
    def _handle_submit(self, event: Input.Submitted) -> None:
        event.stop()
        self.dismiss(event.value)

    def action_close(self) -> None:
        self.dismiss(None)


class TaskListItem(ListItem):
    """Visual row representing a task."""

    def __init__(self, task: Task) -> None:
        self._task_model = task
        self._check_widget = Label("", classes="task_item_check")
        self._text_widget = Label("", classes="task_item_text", markup=True)
        self._meta_widget = Label("", classes="task_item_meta")
        super().__init__(
            Horizontal(
                self._check_widget,
                self._text_widget,
                self._meta_widget,
            ),
            classes="task_item",
        )

    def on_mount(self) -> None:
        self._render_task()

    def update_task(self, task: Task) -> None:
        if task == self._task_model:
            return
        self._task_model = task
        self._render_task()

    @property
    def task_model(self) -> Task:
        return self._task_model

    def _render_task(self) -> None:
        task = self._task_model
        self.set_class(task.completed, "task_item--completed")
        self._check_widget.update(
            "[$success]✓[/]" if task.completed else "[dim]○[/]"
        )
        self._text_widget.update(self._render_text_markup(task))
        self._meta_widget.update(format_created_at(task.created_at))

    @staticmethod
    def _render_text_markup(task: Task) -> str:
        safe = escape(task.text)
        if task.completed:
            return f"[strike dim]{safe}[/]"
        return safe


class TaskListPanel(Vertical):
    """Scrollable task list driven by :class:`TaskView` snapshots.

    Rows are tracked by task id so an update only touches the rows whose
    task changed; the list is rebuilt only when the visible ids change.
    """

    BINDINGS = [
        Binding("space", "toggle_task", "Toggle", show=True),
        Binding("e", "edit_task", "Edit", show=True),
        Binding("delete", "delete_task", "Delete", show=True),
        Binding("d", "delete_task", "Delete", show=False),
        Binding("j", "cursor_down", "Next", show=False),
        Binding("k", "cursor_up", "Previous", show=False),
    ]

    def __init__(self, id: str | None = None) -> None:
        super().__init__(id=id or "task_list_panel")
        self._items: dict[str, TaskListItem] = {}
        self._order: tuple[str, ...] = ()
        self._index_assignment_token = 0

    def compose(self) -> ComposeResult:
        yield ListView(id="task_list_view")
        yield Label("", id="task_list_empty")

    def on_mount(self) -> None:
        self.border_title = "Tasks"

    @property
    def list_view(self) -> ListView:
        return self.query_one("#task_list_view", ListView)

    def item_for(self, task_id: str) -> TaskListItem | None:
        return self._items.get(task_id)

    @property
    def visible_ids(self) -> tuple[str, ...]:
        return self._order

    def selected_task_id(self) -> str | None:
        item = self.list_view.highlighted_child
        if isinstance(item, TaskListItem):
            return item.task_model.id
        return None

    def update_view(self, view: TaskView) -> None:
        list_view = self.list_view
        empty_label = self.query_one("#task_list_empty", Label)
        empty_label.update(empty_message(view.empty_reason))
        empty_label.display = view.is_empty
        list_view.display = not view.is_empty

        new_order = tuple(task.id for task in view.tasks)
        if new_order == self._order:
            for task in view.tasks:
                self._items[task.id].update_task(task)
            return

        previous_id = self.selected_task_id()
        previous_index = list_view.index
        list_view.index = None
        list_view.clear()
        self._items = {}
        for task in view.tasks:
            item = TaskListItem(task)
            self._items[task.id] = item
            list_view.append(item)
        self._order = new_order

        if not new_order:
            self._queue_index_assignment(None)
        elif previous_id in self._items:
            self._queue_index_assignment(new_order.index(previous_id))
        else:
            self._queue_index_assignment(previous_index or 0)

    def _queue_index_assignment(self, target: int | None) -> None:
        self._index_assignment_token += 1
        token = self._index_assignment_token
        list_view = self.list_view

        def assign(idx=target, token=token) -> None:
            if token != self._index_assignment_token:
                return
            if idx is None or not list_view.children:
                list_view.index = None
                return
            list_view.index = max(0, min(idx, len(list_view.children) - 1))

        list_view.call_after_refresh(assign)

    def action_cursor_down(self) -> None:
        self.list_view.action_cursor_down()

    def action_cursor_up(self) -> None:
        self.list_view.action_cursor_up()

    def action_toggle_task(self) -> None:
        task_id = self.selected_task_id()
        if task_id is not None:
            self.post_message(ToggleTaskRequest(task_id))

    def action_edit_task(self) -> None:
        task_id = self.selected_task_id()
        if task_id is not None:
            self.post_message(EditTaskRequest(task_id))

    def action_delete_task(self) -> None:
        task_id = self.selected_task_id()
        if task_id is not None:
            self.post_message(DeleteTaskRequest(task_id))

    @on(ListView.Selected, "#task_list_view")
    def _handle_selected(self, event: ListView.Selected) -> None:
        event.stop()
        if isinstance(event.item, TaskListItem):
            self.post_message(ToggleTaskRequest(event.item.task_model.id))
