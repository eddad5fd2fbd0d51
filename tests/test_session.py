from __future__ import annotations

import logging
from pathlib import Path

import pytest

from dirmark.core.errors import (
    AtRootError,
    IndexOutOfRange,
    InvalidPatternError,
    IoError,
    StaleListingError,
)
from dirmark.core.session import SessionOptions, SessionState
from dirmark.services.preview import NO_PREVIEW, DirectoryPreview, FilePreview


def _names(session: SessionState) -> list[str]:
    return [row.name for row in session.list_current().rows]


class TestListing:
    def test_initial_listing_excludes_hidden(self, session: SessionState) -> None:
        assert _names(session) == ["alpha.txt", "Beta.txt", "docs", "empty", "photo.png"]

    def test_rows_report_directories(self, session: SessionState) -> None:
        rows = {row.name: row for row in session.list_current().rows}

        assert rows["docs"].is_dir
        assert not rows["alpha.txt"].is_dir

    def test_without_marks_flags_everything_unmarked(
        self, session: SessionState, index_of
    ) -> None:
        session.toggle_mark(index_of("alpha.txt"))

        assert any(row.marked for row in session.list_current(with_marks=True).rows)
        assert not any(row.marked for row in session.list_current(with_marks=False).rows)

    def test_unreadable_start_location_yields_empty_listing(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.ERROR):
            session = SessionState(tmp_path / "missing")

        assert session.list_current().rows == ()
        assert session.store.state.listing_error
        assert any("initial_listing_failed" in record.getMessage() for record in caplog.records)

    def test_current_path_renders_root_as_slash(self, tmp_path: Path) -> None:
        session = SessionState(Path(tmp_path.anchor), lister=lambda *_args, **_kw: [])

        assert session.current_path() == "/"


class TestNavigation:
    def test_navigate_into_directory(self, session: SessionState, tree: Path, index_of) -> None:
        assert session.navigate_into(index_of("docs")) is True

        assert session.current_location == tree / "docs"
        assert _names(session) == ["readme.md"]

    def test_navigate_into_file_is_noop(self, session: SessionState, tree: Path, index_of) -> None:
        generation = session.generation

        assert session.navigate_into(index_of("alpha.txt")) is False

        assert session.current_location == tree
        assert session.generation == generation

    @pytest.mark.parametrize("index", [-1, 5, 99])
    def test_navigate_into_out_of_range_is_noop(
        self, session: SessionState, tree: Path, index: int
    ) -> None:
        assert session.navigate_into(index) is False
        assert session.current_location == tree

    def test_navigate_into_uses_filtered_indices(
        self, session: SessionState, tree: Path
    ) -> None:
        session.set_filter("^e")

        assert _names(session) == ["empty"]
        session.navigate_into(0)

        assert session.current_location == tree / "empty"

    def test_navigation_clears_filter(self, session: SessionState) -> None:
        session.set_filter("doc")
        session.navigate_into(0)

        assert not session.active_filter.is_active
        session.navigate_parent()
        assert not session.active_filter.is_active
        assert "alpha.txt" in _names(session)

    def test_navigate_parent(self, session: SessionState, tree: Path) -> None:
        session.navigate_parent()

        assert session.current_location == tree.parent
        assert "root" in _names(session)

    def test_navigate_parent_reaches_root(self, session: SessionState) -> None:
        for _ in range(256):
            try:
                session.navigate_parent()
            except AtRootError:
                break
            except IoError:
                continue
        else:
            pytest.fail("never reached a root")

        root = session.current_location
        with pytest.raises(AtRootError):
            session.navigate_parent()
        assert session.current_location == root
        assert session.current_path() == "/"

    def test_navigate_to_absolute_path(self, session: SessionState, tree: Path) -> None:
        session.navigate_to(str(tree / "docs"))

        assert session.current_location == tree / "docs"

    def test_navigate_to_relative_path_resolves_against_location(
        self, session: SessionState, tree: Path
    ) -> None:
        session.navigate_to("docs")

        assert session.current_location == tree / "docs"

    def test_navigate_to_dotdot_is_normalized(self, session: SessionState, tree: Path) -> None:
        session.navigate_to("docs")
        session.navigate_to("..")

        assert session.current_location == tree
        assert session.current_path() == str(tree)

        session.navigate_parent()

        assert session.current_location == tree.parent

    def test_navigate_to_invalid_path_surfaces_io_error(
        self, session: SessionState, tree: Path
    ) -> None:
        with pytest.raises(IoError):
            session.navigate_to(tree / "alpha.txt")

        assert session.current_location == tree / "alpha.txt"
        assert session.list_current().rows == ()


class TestMarks:
    def test_double_toggle_restores_marks(self, session: SessionState, index_of) -> None:
        session.toggle_mark(index_of("Beta.txt"))
        before = session.marked_paths()
        index = index_of("alpha.txt")

        assert session.toggle_mark(index) is True
        assert session.toggle_mark(index) is False

        assert session.marked_paths() == before

    def test_directories_cannot_be_marked(self, session: SessionState, index_of) -> None:
        assert session.toggle_mark(index_of("docs")) is None
        assert session.marked_paths() == []

    def test_out_of_range_mark_is_noop(self, session: SessionState) -> None:
        assert session.toggle_mark(42) is None
        assert session.marked_paths() == []

    def test_entry_at_reports_out_of_range(self, session: SessionState, tree: Path) -> None:
        assert session.entry_at(0).path == tree / "alpha.txt"

        with pytest.raises(IndexOutOfRange) as excinfo:
            session.entry_at(5)

        assert (excinfo.value.index, excinfo.value.size) == (5, 5)
        with pytest.raises(IndexOutOfRange):
            session.entry_at(-1)

    def test_marks_survive_navigation(self, session: SessionState, tree: Path, index_of) -> None:
        session.toggle_mark(index_of("alpha.txt"))
        session.navigate_into(index_of("docs"))
        session.toggle_mark(0)

        marked = session.list_marked()
        assert [row.name for row in marked.rows] == ["alpha.txt", "readme.md"]
        assert all(row.marked for row in marked.rows)

        session.navigate_parent()
        rows = {row.name: row.marked for row in session.list_current().rows}
        assert rows["alpha.txt"] is True
        assert rows["Beta.txt"] is False

    def test_marked_rows_carry_their_directory(
        self, session: SessionState, tree: Path, index_of
    ) -> None:
        (tree / "docs" / "alpha.txt").write_text("other alpha", encoding="utf-8")
        session.toggle_mark(index_of("alpha.txt"))
        session.navigate_into(index_of("docs"))
        session.toggle_mark(index_of("alpha.txt"))

        rows = session.list_marked().rows

        assert [(row.name, row.location) for row in rows] == [
            ("alpha.txt", str(tree)),
            ("alpha.txt", str(tree / "docs")),
        ]
        assert all(row.location is None for row in session.list_current().rows)

    def test_mark_shown_after_dotdot_round_trip(
        self, session: SessionState, tree: Path, index_of
    ) -> None:
        session.navigate_into(index_of("docs"))
        session.toggle_mark(0)
        session.navigate_to("..")
        session.navigate_into(index_of("docs"))

        assert session.current_location == tree / "docs"
        assert [(row.name, row.marked) for row in session.list_current().rows] == [
            ("readme.md", True)
        ]

    def test_mark_uses_filtered_indices(self, session: SessionState, tree: Path) -> None:
        session.set_filter(r"\.png$")
        session.toggle_mark(0)

        assert session.marked_paths() == [tree / "photo.png"]

    def test_clear_marks(self, session: SessionState, index_of) -> None:
        session.toggle_mark(index_of("alpha.txt"))
        session.clear_marks()

        assert session.list_marked().rows == ()
        assert session.store.state.mark_count == 0


class TestFilter:
    def test_filter_narrows_and_clear_restores(self, session: SessionState) -> None:
        unfiltered = _names(session)

        session.set_filter("txt")
        filtered = _names(session)
        assert set(filtered) <= set(unfiltered)
        assert filtered == ["alpha.txt", "Beta.txt"]

        session.set_filter("")
        assert _names(session) == unfiltered
        assert not session.active_filter.is_active

    def test_space_pattern_matches_names_with_spaces(
        self, session: SessionState, tree: Path
    ) -> None:
        (tree / "my file.txt").write_text("spaced", encoding="utf-8")
        session.refresh()

        session.set_filter(" ")

        assert session.active_filter.is_active
        assert _names(session) == ["my file.txt"]

    def test_invalid_pattern_keeps_previous_filter(self, session: SessionState) -> None:
        session.set_filter("txt")
        generation = session.generation

        with pytest.raises(InvalidPatternError):
            session.set_filter("(")

        assert session.active_filter.pattern == "txt"
        assert session.generation == generation

    def test_filter_survives_refresh(self, session: SessionState, tree: Path) -> None:
        session.set_filter("txt")
        (tree / "gamma.txt").write_text("g", encoding="utf-8")
        (tree / "gamma.md").write_text("g", encoding="utf-8")

        session.refresh()

        assert _names(session) == ["alpha.txt", "Beta.txt", "gamma.txt"]

    def test_cached_listing_stays_unfiltered(self, session: SessionState) -> None:
        session.set_filter("png")

        assert len(session.cached_listing()) == 5
        assert [entry.name for entry in session.displayed_entries()] == ["photo.png"]

    def test_ignore_case_option(self, tree: Path) -> None:
        session = SessionState(tree, options=SessionOptions(filter_ignore_case=True))

        session.set_filter("BETA")

        assert _names(session) == ["Beta.txt"]


class TestPreview:
    def test_image_preview(self, session: SessionState, index_of) -> None:
        preview = session.preview_at(index_of("photo.png"))

        assert isinstance(preview, FilePreview)
        assert preview.kind == "image"

    def test_other_preview(self, session: SessionState, index_of) -> None:
        preview = session.preview_at(index_of("alpha.txt"))

        assert isinstance(preview, FilePreview)
        assert preview.kind == "other"

    def test_directory_preview(self, session: SessionState, tree: Path, index_of) -> None:
        assert session.preview_at(index_of("docs")) == DirectoryPreview(str(tree / "docs"))

    def test_out_of_range_preview(self, session: SessionState) -> None:
        assert session.preview_at(5) is NO_PREVIEW
        assert session.preview_marked_at(0) is NO_PREVIEW

    def test_vanished_image_yields_no_preview(
        self, session: SessionState, tree: Path, index_of, caplog: pytest.LogCaptureFixture
    ) -> None:
        index = index_of("photo.png")
        (tree / "photo.png").unlink()

        with caplog.at_level(logging.ERROR):
            assert session.preview_at(index) is NO_PREVIEW

        assert sum("preview_failed" in record.getMessage() for record in caplog.records) == 1

    def test_marked_preview_is_independent_of_location(
        self, session: SessionState, index_of
    ) -> None:
        session.toggle_mark(index_of("photo.png"))
        session.navigate_into(index_of("empty"))

        preview = session.preview_marked_at(0)

        assert isinstance(preview, FilePreview)
        assert preview.is_image


class TestGeneration:
    def test_stale_generation_is_rejected(self, session: SessionState, tree: Path) -> None:
        snapshot = session.list_current()
        session.set_filter("docs")

        with pytest.raises(StaleListingError):
            session.toggle_mark(0, generation=snapshot.generation)
        with pytest.raises(StaleListingError):
            session.navigate_into(0, generation=snapshot.generation)

        assert session.marked_paths() == []
        assert session.current_location == tree

    def test_current_generation_is_accepted(self, session: SessionState, tree: Path) -> None:
        snapshot = session.list_current()

        assert session.toggle_mark(0, generation=snapshot.generation) is True
        assert session.marked_paths() == [tree / "alpha.txt"]

    def test_marked_generation_tracks_toggles(self, session: SessionState, index_of) -> None:
        session.toggle_mark(index_of("alpha.txt"))
        marked = session.list_marked()
        session.toggle_mark(index_of("Beta.txt"))

        with pytest.raises(StaleListingError):
            session.preview_marked_at(0, generation=marked.generation)


class TestCopy:
    def test_copy_marked_round_trip(
        self, session: SessionState, tree: Path, tmp_path: Path, index_of
    ) -> None:
        destination = tmp_path / "out"
        destination.mkdir()
        session.toggle_mark(index_of("photo.png"))
        session.navigate_into(index_of("docs"))
        session.toggle_mark(0)

        report = session.copy_marked_to(destination)

        assert report.ok
        assert (destination / "photo.png").read_bytes() == (tree / "photo.png").read_bytes()
        assert (destination / "readme.md").read_text(encoding="utf-8") == "# docs"
        assert len(session.marked_paths()) == 2
