from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Pattern

from dirmark.core.errors import InvalidPatternError
from dirmark.services.file_listing import FileEntry


@dataclass(frozen=True)
class NameFilter:
    """Regular-expression predicate over entry names.

    ``NameFilter.disabled()`` is the "no filter" state: it matches everything
    and tells the session to forget any previous pattern.
    """

    pattern: str = ""
    matcher: Pattern[str] | None = None

    @classmethod
    def disabled(cls) -> NameFilter:
        return cls()

    @classmethod
    def compile(cls, pattern: str | None, *, ignore_case: bool = False) -> NameFilter:
        if not pattern:
            return cls.disabled()
        flags = re.IGNORECASE if ignore_case else 0
        try:
            matcher = re.compile(pattern, flags)
        except re.error as exc:
            raise InvalidPatternError(pattern, exc) from exc
        return cls(pattern=pattern, matcher=matcher)

    @property
    def is_active(self) -> bool:
        return self.matcher is not None

    def matches(self, entry: FileEntry) -> bool:
        if self.matcher is None:
            return True
        return self.matcher.search(entry.name) is not None

    def apply(self, entries: Iterable[FileEntry]) -> list[FileEntry]:
        return [entry for entry in entries if self.matches(entry)]
