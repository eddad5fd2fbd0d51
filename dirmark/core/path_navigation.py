from __future__ import annotations

import os
from pathlib import Path, PurePath
from typing import Callable, TypeVar

from dirmark.core.errors import StartupError

_PathT = TypeVar("_PathT", bound=PurePath)


def parent_directory(path: _PathT) -> _PathT | None:
    parent = path.parent
    if parent == path:
        return None
    return parent


def can_navigate_up(path: PurePath) -> bool:
    return parent_directory(path) is not None


def is_navigable_directory(path: Path) -> bool:
    return path.exists() and path.is_dir()


def render_location(path: PurePath) -> str:
    if not can_navigate_up(path):
        return "/"
    return str(path)


def normalize_location(path: Path) -> Path:
    """Collapse ``.`` and ``..`` lexically; symlinks are left alone."""
    return Path(os.path.normpath(path))


def absolute_location(value: Path | str, base: Path) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = base / path
    return normalize_location(path)


def resolve_start_location(
    start_path: Path | str | None = None,
    *,
    cwd: Callable[[], Path] = Path.cwd,
    home: Callable[[], Path] = Path.home,
) -> Path:
    """Pick the first usable start location.

    An explicit ``start_path`` wins when it is an existing directory, then the
    working directory, then the home directory. Raises ``StartupError`` when
    none of them can be determined.
    """
    if start_path is not None:
        try:
            candidate = normalize_location(Path(start_path).expanduser().absolute())
        except (TypeError, ValueError, OSError, RuntimeError):
            candidate = None
        if candidate is not None and is_navigable_directory(candidate):
            return candidate

    try:
        return normalize_location(cwd())
    except OSError:
        pass

    try:
        return normalize_location(home())
    except (OSError, RuntimeError, KeyError) as exc:
        raise StartupError(f"home directory unavailable: {exc}") from exc
