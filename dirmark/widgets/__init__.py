from .dialogs import InputDialog
from .file_list import FileList
from .preview_panel import PreviewPanel
from .top_bar import TopBar

__all__ = [
    "FileList",
    "InputDialog",
    "PreviewPanel",
    "TopBar",
]
