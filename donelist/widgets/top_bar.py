from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.reactive import reactive
from textual.widgets import Label

from donelist.core.projector import TaskFilter


class TopBar(Container):
    """Custom application title bar."""

    active_filter = reactive(TaskFilter.ALL, always_update=True)

    def __init__(self, *, app_title: str | None, app_version: str) -> None:
        super().__init__()
        self.title_label = Horizontal(
            Label(f"{app_title}", id="topbar_app_name"),
            Label(f"v{app_version}", id="topbar_app_version"),
            id="app_meta_container",
        )
        self.filter_label = Label("", id="topbar_filter")

    def watch_active_filter(self) -> None:
        self.filter_label.update(
            f"[dim]Showing:[/dim] {self.active_filter.value.capitalize()}"
        )

    def compose(self) -> ComposeResult:
        yield self.title_label
        yield self.filter_label
