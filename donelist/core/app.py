from __future__ import annotations

from pathlib import Path
from typing import Any

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.theme import Theme
from textual.widgets import Footer

from donelist import __version__
from donelist.core.config import get_runtime_config
from donelist.core.errors import format_error
from donelist.core.events import TaskEvent, TaskEventKind
from donelist.core.logging import configure_logging, get_logger
from donelist.core.messages import (
    AddTaskRequest,
    DeleteTaskRequest,
    EditTaskRequest,
    FilterChangeRequest,
    ToggleTaskRequest,
)
from donelist.core.notify import NotifyTimeouts
from donelist.core.paths import AppPaths, prepare_paths
from donelist.core.projector import TaskFilter, TaskView
from donelist.core.protocols import KeyValueStorage
from donelist.core.settings_store import SettingsStore
from donelist.core.storage import JsonFileStorage, MemoryStorage
from donelist.core.task_store import TaskStore
from donelist.themes.themes import ALL_THEMES, DEFAULT_THEME
from donelist.widgets import (
    FilterBar,
    TaskCaptureBar,
    TaskEditModal,
    TaskListPanel,
    TaskStatusIndicator,
    TopBar,
)

logger = get_logger(__name__)


class DoneList(App):
    TITLE = "donelist"
    CSS_PATH = Path(__file__).parent.parent / "styles" / "index.tcss"

    BINDINGS = [
        Binding("1", "set_filter('all')", "All", show=True),
        Binding("2", "set_filter('active')", "Active", show=True),
        Binding("3", "set_filter('completed')", "Completed", show=True),
        Binding("n", "focus_input", "New task", show=True),
        Binding("ctrl+q", "quit", "Quit", show=True),
    ]

    def __init__(
        self,
        task_store: TaskStore,
        *,
        settings_store: SettingsStore | None = None,
    ) -> None:
        super().__init__()
        self.task_store = task_store
        self.settings_store = settings_store
        self.settings: dict[str, Any] = (
            settings_store.load() if settings_store is not None else {}
        )
        self.notify_timeouts = NotifyTimeouts()
        self.last_view: TaskView | None = None

    def compose(self) -> ComposeResult:
        with Vertical(id="app_main_container"):
            yield TopBar(app_title=DoneList.TITLE, app_version=__version__)
            yield TaskCaptureBar(id="task_capture_bar")
            yield FilterBar(id="filter_bar")
            yield TaskListPanel()
            yield TaskStatusIndicator()
        yield Footer()

    def on_mount(self) -> None:
        for theme in ALL_THEMES:
            self.register_theme(theme)
        theme_name = DEFAULT_THEME
        if self.settings_store is not None:
            theme_name = self.settings_store.theme(self.settings) or DEFAULT_THEME
        if theme_name not in self.available_themes:
            theme_name = DEFAULT_THEME
        self.theme = theme_name
        self.theme_changed_signal.subscribe(self, self.on_theme_changed)

        self.task_store.subscribe_events(self._handle_task_event)
        self.task_store.subscribe(self._handle_view_update)
        self.query_one("#task_input").focus()

        if self.task_store.load_error is not None:
            message, severity = format_error(self.task_store.load_error)
            self.notify(message, severity=severity, timeout=self.notify_timeouts.long)

    def on_unmount(self) -> None:
        self.task_store.unsubscribe(self._handle_view_update)
        self.task_store.unsubscribe_events(self._handle_task_event)

    def on_theme_changed(self, theme: Theme) -> None:
        if self.settings_store is not None:
            self.settings_store.update_theme(self.settings, theme.name)

    def _handle_view_update(self, view: TaskView) -> None:
        self.last_view = view
        self.query_one(TaskListPanel).update_view(view)
        self.query_one(TaskStatusIndicator).update_counts(view.completed_count, view.total)
        self.query_one(FilterBar).set_active(view.filter)
        self.query_one(TopBar).active_filter = view.filter

    def _handle_task_event(self, event: TaskEvent) -> None:
        if event.kind is TaskEventKind.INPUT_REJECTED:
            self.bell()
            self.notify(
                "Task text can't be empty.",
                severity="warning",
                timeout=self.notify_timeouts.quick,
            )
        elif event.kind is TaskEventKind.COMPLETED_ALL:
            self.notify(
                "🎉 All tasks completed!",
                title="Nice work",
                timeout=self.notify_timeouts.normal,
            )
        elif event.kind is TaskEventKind.PERSIST_FAILED and event.error is not None:
            message, severity = format_error(event.error)
            self.notify(message, severity=severity, timeout=self.notify_timeouts.long)

    @on(AddTaskRequest)
    def handle_add_task(self, event: AddTaskRequest) -> None:
        capture = self.query_one(TaskCaptureBar)
        if self.task_store.add(event.text) is None:
            capture.reject()
            return
        capture.clear()

    @on(ToggleTaskRequest)
    def handle_toggle_task(self, event: ToggleTaskRequest) -> None:
        self.task_store.toggle(event.task_id)

    @on(DeleteTaskRequest)
    def handle_delete_task(self, event: DeleteTaskRequest) -> None:
        self.task_store.delete(event.task_id)

    @on(EditTaskRequest)
    def handle_edit_task(self, event: EditTaskRequest) -> None:
        task = self.task_store.get(event.task_id)
        if task is None:
            return
        task_id = task.id

        def after(result: str | None) -> None:
            if result is None:
                return
            self.task_store.edit(task_id, result)

        self.push_screen(TaskEditModal(task.text), after)

    @on(FilterChangeRequest)
    def handle_filter_change(self, event: FilterChangeRequest) -> None:
        self.task_store.set_filter(event.task_filter)

    def action_set_filter(self, value: str) -> None:
        self.task_store.set_filter(TaskFilter.parse(value))

    def action_focus_input(self) -> None:
        self.query_one("#task_input").focus()


def build_storage(paths: AppPaths, *, ephemeral: bool = False) -> KeyValueStorage:
    if ephemeral:
        return MemoryStorage()
    return JsonFileStorage(paths.data_dir)


def main(
    *,
    data_dir: Path | None = None,
    ephemeral: bool = False,
) -> None:
    config = get_runtime_config()
    if data_dir is not None:
        config = config.model_copy(update={"data_dir": data_dir})
    paths = prepare_paths(config.data_dir)
    configure_logging(
        level=config.log_level,
        format_name=config.log_format,
        log_dir=paths.logs_dir,
    )
    storage = build_storage(paths, ephemeral=ephemeral)
    task_store = TaskStore(storage, key=config.storage_key)
    app = DoneList(task_store, settings_store=SettingsStore(paths.settings_file))
    app.run()
