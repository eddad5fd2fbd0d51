from __future__ import annotations

from textual.containers import VerticalScroll
from textual.widgets import Static

from dirmark.core.commands import PreviewResponse


def describe_preview(preview: PreviewResponse | None) -> tuple[str, str]:
    """Return a (title, body) pair suitable for a text panel."""
    if preview is None:
        return "Preview", "Nothing to preview."
    if preview.Directory is not None:
        return "Directory", preview.Directory
    if preview.File is not None and preview.File.kind == "Image":
        size = len(preview.File.content)
        return "Image", f"Image data ({size} base64 characters)"
    if preview.File is not None:
        return "File", preview.File.content
    return "Preview", "Nothing to preview."


class PreviewPanel(VerticalScroll):
    def __init__(self) -> None:
        super().__init__(id="preview_panel")
        self._content = Static("Select a file to preview.", id="preview_panel_content")
        self.border_title = "Preview"

    def compose(self):
        yield self._content

    def show_preview(self, preview: PreviewResponse | None) -> None:
        title, body = describe_preview(preview)
        self._content.update(body)
        self.border_title = title
        self.scroll_to(y=0, animate=False)
