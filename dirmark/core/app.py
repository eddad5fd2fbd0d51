from __future__ import annotations

from pathlib import Path

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Footer
from textual.worker import Worker, WorkerState

from dirmark import __version__
from dirmark.core.commands import CopyReportResponse, SessionCommands
from dirmark.core.config import RuntimeConfig, get_runtime_config
from dirmark.core.errors import AtRootError, DirmarkError, format_error
from dirmark.core.logging import configure_logging, get_logger, log_event
from dirmark.core.messages import (
    NavigateIntoRequest,
    NavigateParentRequest,
    PreviewRequest,
    ToggleMarkRequest,
)
from dirmark.core.session import SessionState
from dirmark.core.worker_groups import WorkerGroup
from dirmark.widgets import FileList, InputDialog, PreviewPanel, TopBar

logger = get_logger(__name__)


class DirmarkApp(App):
    TITLE = "dirmark"
    CSS = """
    #main_pane {
        height: 1fr;
    }
    #file_list {
        width: 2fr;
        border: round $primary;
    }
    #preview_panel {
        width: 1fr;
        border: round $secondary;
    }
    """

    BINDINGS = [
        Binding("slash", "filter_entries", "Filter", key_display="/", show=True),
        Binding("escape", "clear_filter", "Clear filter", show=False),
        Binding("g", "go_to_path", "Go to", show=True),
        Binding("c", "copy_marked", "Copy marked", show=True),
        Binding("m", "toggle_marked_view", "Marked", show=True),
        Binding("A", "clear_marks", "Clear marks", key_display="Shift+A", show=False),
        Binding("r", "refresh_listing", "Refresh", show=False),
    ]

    def __init__(self, commands: SessionCommands) -> None:
        super().__init__()
        self.commands = commands
        self.session = commands.session
        self.marked_view = False

    def compose(self) -> ComposeResult:
        with Vertical(id="app_main_container"):
            yield TopBar(
                app_title=DirmarkApp.TITLE,
                app_version=__version__,
                state_store=self.session.store,
            )
            yield Horizontal(
                FileList(id="file_list"),
                PreviewPanel(),
                id="main_pane",
            )
        yield Footer()

    def on_mount(self) -> None:
        self.refresh_listing()
        self.query_one(FileList).focus()

    def refresh_listing(self) -> None:
        file_list = self.query_one(FileList)
        if self.marked_view:
            file_list.show_listing(self.commands.list_marked_files(), marked_view=True)
            file_list.border_title = "Marked files"
            return
        file_list.show_listing(self.commands.list_files())
        file_list.border_title = self.commands.get_current_path()
        error = self.session.store.state.listing_error
        if error and not file_list.rows:
            file_list.show_error(f"Unable to load directory: {error}")

    def _after_command(self) -> None:
        self._report_command_error()
        self.refresh_listing()

    def show_error(self, error: BaseException) -> None:
        message, severity = format_error(error)
        self.notify(message, severity=severity)

    def _report_command_error(self) -> None:
        error = self.commands.last_error
        if error is not None:
            self.show_error(error)

    @on(NavigateIntoRequest)
    def handle_navigate_into(self, event: NavigateIntoRequest) -> None:
        self.commands.navigate_into(event.index, event.generation)
        self._after_command()

    @on(NavigateParentRequest)
    def handle_navigate_parent(self, _: NavigateParentRequest) -> None:
        try:
            self.commands.navigate_parent()
        except AtRootError as exc:
            self.show_error(exc)
            return
        self._after_command()

    @on(ToggleMarkRequest)
    def handle_toggle_mark(self, event: ToggleMarkRequest) -> None:
        self.commands.mark_file(event.index, event.generation)
        self._after_command()

    @on(PreviewRequest)
    def handle_preview(self, event: PreviewRequest) -> None:
        if event.marked_view:
            preview = self.commands.get_marked_preview(event.index, event.generation)
        else:
            preview = self.commands.get_preview(event.index, event.generation)
        self.query_one(PreviewPanel).show_preview(preview)
        self._report_command_error()

    def action_filter_entries(self) -> None:
        def after(value: str | None) -> None:
            if value is None:
                return
            self.commands.filter_by_pattern(value)
            self._after_command()

        self.push_screen(
            InputDialog(
                "Filter by pattern (empty clears)",
                default=self.session.active_filter.pattern,
            ),
            after,
        )

    def action_clear_filter(self) -> None:
        self.commands.filter_by_pattern("")
        self._after_command()

    def action_go_to_path(self) -> None:
        def after(value: str | None) -> None:
            if not value:
                return
            self.marked_view = False
            self.commands.navigate_to_path(value)
            self._after_command()

        self.push_screen(
            InputDialog("Go to path", default=str(self.session.current_location)),
            after,
        )

    def action_copy_marked(self) -> None:
        def after(value: str | None) -> None:
            if not value:
                return
            self.run_worker(
                lambda destination=value: self.commands.copy_marked_to(destination),
                group=WorkerGroup.COPY_MARKED,
                thread=True,
            )

        self.push_screen(InputDialog("Copy marked files to"), after)

    def action_toggle_marked_view(self) -> None:
        self.marked_view = not self.marked_view
        self.refresh_listing()

    def action_clear_marks(self) -> None:
        self.commands.clear_marks()
        self._after_command()

    def action_refresh_listing(self) -> None:
        self.commands.refresh()
        self._after_command()

    def _render_copy_report(self, report: CopyReportResponse) -> None:
        copied = len(report.copied)
        if not report.failed:
            self.notify(f"Copied {copied} file(s) to {report.destination}")
            return
        lines = [f"Copied {copied}, failed {len(report.failed)}:"]
        lines.extend(
            f"{Path(failure.path).name}: {failure.error}" for failure in report.failed[:5]
        )
        self.notify("\n".join(lines), severity="warning")

    @on(Worker.StateChanged)
    def _on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        worker = event.worker
        if worker.group != WorkerGroup.COPY_MARKED:
            return
        if event.state is WorkerState.SUCCESS:
            result = worker.result
            if isinstance(result, CopyReportResponse):
                self._render_copy_report(result)
            else:
                self._report_command_error()
            self.refresh_listing()
        elif event.state is WorkerState.ERROR:
            error = worker.error or RuntimeError("Copy failed.")
            self.show_error(error)


def build_commands(config: RuntimeConfig | None = None) -> SessionCommands:
    config = config or get_runtime_config()
    return SessionCommands(SessionState.create(config))


def main(start_path: Path | None = None) -> None:
    config = get_runtime_config()
    if start_path is not None:
        config = config.model_copy(update={"start_path": start_path})
    configure_logging(
        level=config.log_level,
        format_name=config.log_format,
        log_dir=config.log_dir,
    )
    try:
        commands = build_commands(config)
    except DirmarkError as exc:
        raise SystemExit(str(exc)) from exc
    log_event(logger, "app_start", version=__version__, path=commands.get_current_path())
    DirmarkApp(commands).run()
