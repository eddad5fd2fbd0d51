from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from dirmark.core.errors import IoError

SortMode = Literal["name", "natural", "extension", "modified", "size"]

SORT_MODE_LABELS: dict[SortMode, str] = {
    "name": "Name",
    "natural": "Natural",
    "extension": "Extension",
    "modified": "Modified",
    "size": "Size",
}

HIDDEN_PREFIX = "."


@dataclass(frozen=True, slots=True)
class FileEntry:
    """A directory child classified as file or directory when it was read."""

    path: Path
    name: str
    is_dir: bool

    @classmethod
    def from_path(cls, path: Path) -> FileEntry:
        return cls(path=path, name=path.name, is_dir=path.is_dir())

    @property
    def display_name(self) -> str:
        return f"{self.name}/" if self.is_dir else self.name


def normalize_sort_mode(value: object) -> SortMode:
    text = str(value or "").strip().lower()
    if text in SORT_MODE_LABELS:
        return text  # type: ignore[return-value]
    return "name"


def is_entry_visible(name: str) -> bool:
    return not name.startswith(HIDDEN_PREFIX)


def _natural_key(value: str) -> tuple[tuple[int, int | str], ...]:
    parts = re.split(r"(\d+)", value)
    return tuple(
        (0, int(part)) if part.isdigit() else (1, part.casefold())
        for part in parts
        if part
    )


def _safe_stat(entry: os.DirEntry[str]) -> os.stat_result | None:
    try:
        return entry.stat()
    except OSError:
        return None


def _entry_sort_key(
    entry: os.DirEntry[str],
    sort_by: SortMode,
    *,
    is_dir: bool,
) -> tuple[object, ...]:
    name = entry.name

    if sort_by == "natural":
        return (_natural_key(name),)

    if sort_by == "extension":
        suffix = "" if is_dir else Path(name).suffix.lstrip(".").casefold()
        return (suffix, name.casefold())

    if sort_by in {"modified", "size"}:
        stat_result = _safe_stat(entry)
        if stat_result is None:
            metric = float("-inf")
        elif sort_by == "modified":
            metric = stat_result.st_mtime
        else:
            metric = float(stat_result.st_size)
        return (metric, name.casefold())

    return (name.casefold(), name)


def collect_directory_listing(
    directory: Path,
    *,
    sort_by: SortMode | str = "name",
    sort_descending: bool = False,
) -> list[FileEntry]:
    """Read the visible direct children of ``directory``.

    Names starting with a dot are skipped. Raises ``IoError`` when the
    directory cannot be read (missing, not a directory, permission denied).
    """
    mode = normalize_sort_mode(sort_by)
    try:
        with os.scandir(directory) as scan:
            visible: list[tuple[os.DirEntry[str], bool]] = []
            for entry in scan:
                if not is_entry_visible(entry.name):
                    continue
                try:
                    is_dir = entry.is_dir()
                except OSError:
                    is_dir = False
                visible.append((entry, is_dir))
            ordered = sorted(
                visible,
                key=lambda item: _entry_sort_key(item[0], mode, is_dir=item[1]),
                reverse=sort_descending,
            )
    except OSError as exc:
        raise IoError(directory, exc) from exc

    return [
        FileEntry(path=Path(entry.path), name=entry.name, is_dir=is_dir)
        for entry, is_dir in ordered
    ]
