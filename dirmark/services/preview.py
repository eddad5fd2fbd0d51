from __future__ import annotations

import base64
from dataclasses import dataclass
from typing import Literal, Union

from dirmark.core.errors import IoError
from dirmark.services.file_listing import FileEntry

PreviewKind = Literal["image", "other"]

# Matched case-sensitively, so "PHOTO.JPG" gets the placeholder.
IMAGE_EXTENSIONS: frozenset[str] = frozenset({"jpg", "png", "gif"})

PREVIEW_PLACEHOLDER = "No preview available"


@dataclass(frozen=True)
class FilePreview:
    kind: PreviewKind
    content: str

    @property
    def is_image(self) -> bool:
        return self.kind == "image"


@dataclass(frozen=True)
class DirectoryPreview:
    path: str


@dataclass(frozen=True)
class NoPreview:
    pass


PreviewResult = Union[FilePreview, DirectoryPreview, NoPreview]

NO_PREVIEW = NoPreview()


def classify_extension(name: str) -> PreviewKind:
    _stem, dot, extension = name.rpartition(".")
    if not dot or not _stem:
        return "other"
    return "image" if extension in IMAGE_EXTENSIONS else "other"


def generate_preview(entry: FileEntry) -> PreviewResult:
    """Build a preview for ``entry``.

    Image files are read whole and base64-encoded on the calling thread, so a
    large image blocks until the read finishes. Raises ``IoError`` when the
    file can no longer be read.
    """
    if entry.is_dir:
        return DirectoryPreview(path=str(entry.path))

    if classify_extension(entry.name) != "image":
        return FilePreview(kind="other", content=PREVIEW_PLACEHOLDER)

    try:
        data = entry.path.read_bytes()
    except OSError as exc:
        raise IoError(entry.path, exc) from exc
    return FilePreview(kind="image", content=base64.b64encode(data).decode("ascii"))
