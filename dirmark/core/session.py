from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Iterable

from dirmark.core.config import RuntimeConfig
from dirmark.core.errors import AtRootError, IndexOutOfRange, IoError, StaleListingError
from dirmark.core.logging import get_logger, log_error, log_event
from dirmark.core.marks import MarkSet
from dirmark.core.path_navigation import (
    absolute_location,
    normalize_location,
    parent_directory,
    render_location,
    resolve_start_location,
)
from dirmark.core.state import Guarded, SessionStateStore
from dirmark.services.copy_ops import CopyReport, copy_marked
from dirmark.services.file_listing import (
    FileEntry,
    SortMode,
    collect_directory_listing,
    normalize_sort_mode,
)
from dirmark.services.name_filter import NameFilter
from dirmark.services.preview import NO_PREVIEW, PreviewResult, generate_preview

logger = get_logger(__name__)

Lister = Callable[..., list[FileEntry]]
Previewer = Callable[[FileEntry], PreviewResult]
Copier = Callable[[Iterable[Path], Path], CopyReport]


@dataclass(frozen=True, slots=True)
class ListingRow:
    name: str
    marked: bool
    is_dir: bool = False
    # parent directory; set on marked-view rows only
    location: str | None = None


@dataclass(frozen=True, slots=True)
class ListingSnapshot:
    generation: int
    rows: tuple[ListingRow, ...] = ()

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True, slots=True)
class _ListingCache:
    entries: tuple[FileEntry, ...] = ()
    generation: int = 0
    error: str | None = None

    def bump(self, **changes: object) -> _ListingCache:
        return replace(self, generation=self.generation + 1, **changes)


@dataclass
class SessionOptions:
    sort_by: SortMode = "name"
    sort_descending: bool = False
    filter_ignore_case: bool = False
    lock_timeout: float = 1.0

    @classmethod
    def from_config(cls, config: RuntimeConfig) -> SessionOptions:
        return cls(
            sort_by=normalize_sort_mode(config.sort_by),
            sort_descending=config.sort_descending,
            filter_ignore_case=config.filter_ignore_case,
            lock_timeout=config.lock_timeout,
        )


class SessionState:
    """Browsing state for one UI session.

    Location, cached listing, active filter and marks each live behind their
    own guard. Guards are always taken in that order. Index arguments address
    the displayed listing: the cached listing with the active filter applied.
    """

    def __init__(
        self,
        start_location: Path,
        *,
        options: SessionOptions | None = None,
        lister: Lister = collect_directory_listing,
        previewer: Previewer = generate_preview,
        copier: Copier = copy_marked,
        store: SessionStateStore | None = None,
    ) -> None:
        self.options = options or SessionOptions()
        timeout = self.options.lock_timeout
        self._lister = lister
        self._previewer = previewer
        self._copier = copier
        self.store = store or SessionStateStore()

        self._location: Guarded[Path] = Guarded(
            "location", normalize_location(start_location), timeout=timeout
        )
        self._listing: Guarded[_ListingCache] = Guarded(
            "listing", _ListingCache(), timeout=timeout
        )
        self._filter: Guarded[NameFilter] = Guarded(
            "filter", NameFilter.disabled(), timeout=timeout
        )
        self._marks: Guarded[MarkSet] = Guarded("marks", MarkSet(), timeout=timeout)

        try:
            self.refresh()
        except IoError as exc:
            log_error(
                logger,
                "initial_listing_failed",
                path=str(start_location),
                detail=exc.detail,
            )

    @classmethod
    def create(cls, config: RuntimeConfig, **kwargs) -> SessionState:
        start = resolve_start_location(config.start_path)
        log_event(logger, "session_start", path=str(start))
        return cls(start, options=SessionOptions.from_config(config), **kwargs)

    # -- queries -----------------------------------------------------------

    @property
    def current_location(self) -> Path:
        return self._location.get()

    @property
    def generation(self) -> int:
        return self._listing.get().generation

    @property
    def active_filter(self) -> NameFilter:
        return self._filter.get()

    def current_path(self) -> str:
        return render_location(self.current_location)

    def cached_listing(self) -> list[FileEntry]:
        return list(self._listing.get().entries)

    def displayed_entries(self) -> list[FileEntry]:
        with self._listing.hold() as listing, self._filter.hold() as name_filter:
            return name_filter.value.apply(listing.value.entries)

    def list_current(self, with_marks: bool = True) -> ListingSnapshot:
        with self._listing.hold() as listing, self._filter.hold() as name_filter:
            generation = listing.value.generation
            displayed = name_filter.value.apply(listing.value.entries)
        with self._marks.hold() as marks:
            rows = tuple(
                ListingRow(
                    name=entry.name,
                    marked=with_marks and entry.path in marks.value,
                    is_dir=entry.is_dir,
                )
                for entry in displayed
            )
        return ListingSnapshot(generation=generation, rows=rows)

    def list_marked(self) -> ListingSnapshot:
        with self._marks.hold() as marks:
            version = marks.value.version
            paths = marks.value.sorted()
        rows = tuple(
            ListingRow(name=path.name, marked=True, location=str(path.parent))
            for path in paths
        )
        return ListingSnapshot(generation=version, rows=rows)

    def marked_paths(self) -> list[Path]:
        with self._marks.hold() as marks:
            return marks.value.sorted()

    # -- navigation ----------------------------------------------------------

    def refresh(self) -> None:
        """Re-read the current location into the cached listing.

        On failure the cached listing is emptied and ``IoError`` propagates.
        """
        location = self._location.get()
        try:
            entries = self._lister(
                location,
                sort_by=self.options.sort_by,
                sort_descending=self.options.sort_descending,
            )
        except IoError as exc:
            with self._listing.hold() as listing:
                listing.value = listing.value.bump(entries=(), error=str(exc))
            self._publish()
            raise
        with self._listing.hold() as listing:
            listing.value = listing.value.bump(entries=tuple(entries), error=None)
        self._publish()

    def navigate_into(self, index: int, *, generation: int | None = None) -> bool:
        entry = self._resolve(index, generation)
        if entry is None or not entry.is_dir:
            return False
        self._move_to(entry.path)
        return True

    def navigate_parent(self) -> None:
        with self._location.hold() as location:
            parent = parent_directory(location.value)
            if parent is None:
                raise AtRootError(location.value)
            location.value = parent
        self._after_move(parent)

    def navigate_to(self, path: Path | str) -> None:
        target = absolute_location(path, self.current_location)
        self._move_to(target)

    def _move_to(self, target: Path) -> None:
        self._location.set(target)
        self._after_move(target)

    def _after_move(self, target: Path) -> None:
        self._filter.set(NameFilter.disabled())
        log_event(logger, "navigate", path=str(target))
        self.refresh()

    # -- marks ---------------------------------------------------------------

    def toggle_mark(self, index: int, *, generation: int | None = None) -> bool | None:
        """Toggle the file at ``index``.

        Returns the new marked state, or None when the index is out of range
        or addresses a directory.
        """
        entry = self._resolve(index, generation)
        if entry is None or entry.is_dir:
            return None
        with self._marks.hold() as marks:
            marked = marks.value.toggle(entry.path)
        self._publish()
        return marked

    def clear_marks(self) -> None:
        with self._marks.hold() as marks:
            marks.value.clear()
        self._publish()

    # -- previews ------------------------------------------------------------

    def preview_at(self, index: int, *, generation: int | None = None) -> PreviewResult:
        entry = self._resolve(index, generation)
        if entry is None:
            return NO_PREVIEW
        return self._preview(entry)

    def preview_marked_at(self, index: int, *, generation: int | None = None) -> PreviewResult:
        with self._marks.hold() as marks:
            _check_generation(generation, marks.value.version)
            paths = marks.value.sorted()
        if not 0 <= index < len(paths):
            return NO_PREVIEW
        return self._preview(FileEntry.from_path(paths[index]))

    def _preview(self, entry: FileEntry) -> PreviewResult:
        try:
            return self._previewer(entry)
        except IoError as exc:
            log_error(logger, "preview_failed", path=str(entry.path), detail=exc.detail)
            return NO_PREVIEW

    # -- filtering -----------------------------------------------------------

    def set_filter(self, pattern: str | None) -> NameFilter:
        """Replace the active filter; an empty pattern disables it.

        Raises ``InvalidPatternError`` and keeps the previous filter when the
        pattern does not compile.
        """
        compiled = NameFilter.compile(pattern, ignore_case=self.options.filter_ignore_case)
        with self._listing.hold() as listing, self._filter.hold() as name_filter:
            name_filter.value = compiled
            listing.value = listing.value.bump()
        self._publish()
        return compiled

    # -- copy ----------------------------------------------------------------

    def plan_copy(self, destination: Path | str) -> tuple[list[Path], Path]:
        """Snapshot the marked paths and the resolved destination directory."""
        target = absolute_location(destination, self.current_location)
        return self.marked_paths(), target

    def copy_paths(self, sources: Iterable[Path], destination: Path) -> CopyReport:
        return self._copier(sources, destination)

    def copy_marked_to(self, destination: Path | str) -> CopyReport:
        return self.copy_paths(*self.plan_copy(destination))

    # -- internals -----------------------------------------------------------

    def entry_at(self, index: int, *, generation: int | None = None) -> FileEntry:
        """Entry at ``index`` of the displayed listing.

        Raises ``IndexOutOfRange`` or ``StaleListingError``.
        """
        with self._listing.hold() as listing, self._filter.hold() as name_filter:
            _check_generation(generation, listing.value.generation)
            displayed = name_filter.value.apply(listing.value.entries)
        if not 0 <= index < len(displayed):
            raise IndexOutOfRange(index, len(displayed))
        return displayed[index]

    def _resolve(self, index: int, generation: int | None) -> FileEntry | None:
        try:
            return self.entry_at(index, generation=generation)
        except IndexOutOfRange:
            return None

    def _publish(self) -> None:
        location = self._location.get()
        with self._listing.hold() as listing, self._filter.hold() as name_filter:
            generation = listing.value.generation
            error = listing.value.error
            pattern = name_filter.value.pattern
            visible = len(name_filter.value.apply(listing.value.entries))
        with self._marks.hold() as marks:
            mark_count = len(marks.value)
        self.store.update(
            current_path=render_location(location),
            generation=generation,
            filter_pattern=pattern,
            visible_count=visible,
            mark_count=mark_count,
            listing_error=error,
        )


def _check_generation(requested: int | None, current: int) -> None:
    if requested is not None and requested != current:
        raise StaleListingError(requested, current)
