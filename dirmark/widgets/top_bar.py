from textual.app import ComposeResult
from textual.containers import Container, Horizontal
from textual.reactive import reactive
from textual.widgets import Label

from dirmark.core.state import SessionSnapshot, SessionStateStore


class TopBar(Container):
    """Application title bar showing location, filter and mark count."""

    DEFAULT_CSS = """
    TopBar {
        height: 1;
        layout: horizontal;
    }
    TopBar #app_meta_container {
        width: auto;
        padding-right: 2;
    }
    TopBar #topbar_location {
        width: 1fr;
    }
    TopBar #topbar_marks {
        width: auto;
    }
    """

    current_path = reactive("", always_update=True)
    filter_pattern = reactive("", always_update=True)
    mark_count = reactive(0, always_update=True)

    def __init__(
        self,
        *,
        app_title: str | None,
        app_version: str,
        state_store: SessionStateStore,
    ) -> None:
        super().__init__()
        self._state_store = state_store
        self._state_subscription = self._handle_state_update

        self.title_label = Horizontal(
            Label(f"{app_title}", id="topbar_app_name"),
            Label(f" v{app_version}", id="topbar_app_version"),
            id="app_meta_container",
        )
        self.location_label = Label("", id="topbar_location")
        self.marks_label = Label("", id="topbar_marks")

    def on_mount(self) -> None:
        self._state_store.subscribe(self._state_subscription)

    def on_unmount(self) -> None:
        self._state_store.unsubscribe(self._state_subscription)

    def watch_current_path(self) -> None:
        self._update_location()

    def watch_filter_pattern(self) -> None:
        self._update_location()

    def watch_mark_count(self) -> None:
        self.marks_label.update(f"Marked: {self.mark_count}")

    def _update_location(self) -> None:
        if not self.filter_pattern:
            self.location_label.update(self.current_path)
            return
        self.location_label.update(f'{self.current_path}  (filter: "{self.filter_pattern}")')

    def _handle_state_update(self, state: SessionSnapshot) -> None:
        self.current_path = state.current_path
        self.filter_pattern = state.filter_pattern
        self.mark_count = state.mark_count

    def compose(self) -> ComposeResult:
        yield self.title_label
        yield self.location_label
        yield self.marks_label
