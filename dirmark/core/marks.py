from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator


class MarkSet:
    """Absolute paths of marked files, independent of the current location."""

    def __init__(self, paths: Iterable[Path] = ()) -> None:
        self._paths: set[Path] = set(paths)
        self.version = 0

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __len__(self) -> int:
        return len(self._paths)

    def __iter__(self) -> Iterator[Path]:
        return iter(self.sorted())

    def toggle(self, path: Path) -> bool:
        """Flip membership of ``path``; returns True when it is now marked."""
        self.version += 1
        if path in self._paths:
            self._paths.remove(path)
            return False
        self._paths.add(path)
        return True

    def clear(self) -> None:
        if self._paths:
            self.version += 1
        self._paths.clear()

    def sorted(self) -> list[Path]:
        return sorted(self._paths, key=lambda path: str(path))
