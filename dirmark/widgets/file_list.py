from __future__ import annotations

from rich.text import Text
from textual import on
from textual.binding import Binding
from textual.widgets import OptionList
from textual.widgets.option_list import Option

from dirmark.core.commands import FileListResponse, FileRow
from dirmark.core.messages import (
    NavigateIntoRequest,
    NavigateParentRequest,
    PreviewRequest,
    ToggleMarkRequest,
)

MARK_GLYPH = "*"


def _render_row_text(row: FileRow) -> Text:
    marker = MARK_GLYPH if row.marked else " "
    name = f"{row.name}/" if row.is_dir else row.name
    text = Text(f"{marker} {name}")
    if row.is_dir:
        text.stylize("bold")
    if row.marked:
        text.stylize("reverse", 0, 1)
    if row.location:
        text.append(f"  {row.location}", style="dim")
    return text


class FileList(OptionList):
    """Displayed listing of the current location or of the marked files."""

    BINDINGS = [
        Binding("enter", "activate_item", "Open", show=True),
        Binding("u,backspace", "go_parent", "Parent", show=True),
        Binding("space", "toggle_mark", "Mark", show=True),
        Binding("j", "cursor_down", "Cursor down", show=False),
        Binding("k", "cursor_up", "Cursor up", show=False),
    ]

    def __init__(self, *args, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.generation = 0
        self.marked_view = False
        self.rows: list[FileRow] = []

    def show_listing(self, response: FileListResponse, *, marked_view: bool = False) -> None:
        previous = self.highlighted
        same_view = marked_view == self.marked_view
        self.generation = response.generation
        self.marked_view = marked_view
        self.rows = list(response.files)
        if self.rows:
            self.set_options(Option(_render_row_text(row)) for row in self.rows)
        else:
            empty = "No marked files" if marked_view else "Empty directory"
            self.set_options([Option(empty, disabled=True)])
            return
        if same_view and previous is not None and previous < len(self.rows):
            self.highlighted = previous
        else:
            self.highlighted = 0

    def show_error(self, message: str) -> None:
        self.rows = []
        self.set_options([Option(message, disabled=True)])

    def _current_index(self) -> int | None:
        index = self.highlighted
        if index is None or index >= len(self.rows):
            return None
        return index

    @on(OptionList.OptionHighlighted)
    def emit_preview(self, event: OptionList.OptionHighlighted) -> None:
        event.stop()
        index = self._current_index()
        if index is None:
            return
        self.post_message(
            PreviewRequest(index, self.generation, marked_view=self.marked_view)
        )

    def action_activate_item(self) -> None:
        index = self._current_index()
        if index is None or self.marked_view:
            return
        self.post_message(NavigateIntoRequest(index, self.generation))

    def action_go_parent(self) -> None:
        if self.marked_view:
            return
        self.post_message(NavigateParentRequest())

    def action_toggle_mark(self) -> None:
        index = self._current_index()
        if index is None or self.marked_view:
            return
        self.post_message(ToggleMarkRequest(index, self.generation))
