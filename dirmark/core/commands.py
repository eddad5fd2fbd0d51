from __future__ import annotations

import threading
from typing import Callable, Literal, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from dirmark.core.errors import (
    AtRootError,
    DirmarkError,
    InvalidPatternError,
    IoError,
    LockError,
    StaleListingError,
)
from dirmark.core.logging import get_logger, log_error, log_event
from dirmark.core.session import ListingSnapshot, SessionState
from dirmark.services.copy_ops import CopyReport
from dirmark.services.preview import DirectoryPreview, FilePreview, PreviewResult

logger = get_logger(__name__)

R = TypeVar("R")

RECOVERABLE_ERRORS = (IoError, InvalidPatternError, LockError, StaleListingError)


class FileRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    marked: bool
    is_dir: bool = False
    location: str | None = None


class FileListResponse(BaseModel):
    generation: int = 0
    files: list[FileRow] = Field(default_factory=list)

    @classmethod
    def from_snapshot(cls, snapshot: ListingSnapshot) -> FileListResponse:
        return cls(
            generation=snapshot.generation,
            files=[
                FileRow(
                    name=row.name,
                    marked=row.marked,
                    is_dir=row.is_dir,
                    location=row.location,
                )
                for row in snapshot.rows
            ],
        )


class FilePreviewPayload(BaseModel):
    kind: Literal["Image", "Other"]
    content: str


class PreviewResponse(BaseModel):
    """Tagged preview: exactly one of ``File`` or ``Directory`` is set."""

    File: FilePreviewPayload | None = None
    Directory: str | None = None

    @classmethod
    def from_result(cls, result: PreviewResult) -> PreviewResponse | None:
        if isinstance(result, FilePreview):
            kind: Literal["Image", "Other"] = "Image" if result.is_image else "Other"
            return cls(File=FilePreviewPayload(kind=kind, content=result.content))
        if isinstance(result, DirectoryPreview):
            return cls(Directory=result.path)
        return None

    def payload(self) -> dict[str, object]:
        return self.model_dump(exclude_none=True)


class CopyFailure(BaseModel):
    path: str
    error: str


class CopyReportResponse(BaseModel):
    destination: str
    copied: list[str] = Field(default_factory=list)
    failed: list[CopyFailure] = Field(default_factory=list)

    @classmethod
    def from_report(cls, report: CopyReport) -> CopyReportResponse:
        return cls(
            destination=str(report.destination_dir),
            copied=[str(outcome.destination) for outcome in report.copied],
            failed=[
                CopyFailure(path=str(outcome.source), error=str(outcome.error))
                for outcome in report.failed
            ],
        )


class SessionCommands:
    """Command surface a UI talks to.

    Commands run one at a time, except the body of a copy batch. Recoverable
    failures are logged once and turned into a safe default; ``AtRootError``
    is raised to the caller.
    """

    def __init__(self, session: SessionState) -> None:
        self.session = session
        self._lock = threading.RLock()
        self._last_error: DirmarkError | None = None

    @property
    def last_error(self) -> DirmarkError | None:
        return self._last_error

    def _run(self, event: str, operation: Callable[[], R], default: R, **fields: object) -> R:
        with self._lock:
            self._last_error = None
            try:
                return operation()
            except RECOVERABLE_ERRORS as exc:
                self._last_error = exc
                log_error(
                    logger,
                    event,
                    code=exc.code,
                    message=exc.message,
                    detail=exc.detail,
                    **fields,
                )
                return default

    def list_files(self) -> FileListResponse:
        return self._run(
            "list_files_failed",
            lambda: FileListResponse.from_snapshot(self.session.list_current(with_marks=True)),
            FileListResponse(),
        )

    def list_marked_files(self) -> FileListResponse:
        return self._run(
            "list_marked_files_failed",
            lambda: FileListResponse.from_snapshot(self.session.list_marked()),
            FileListResponse(),
        )

    def get_preview(self, index: int, generation: int | None = None) -> PreviewResponse | None:
        return self._run(
            "get_preview_failed",
            lambda: PreviewResponse.from_result(
                self.session.preview_at(index, generation=generation)
            ),
            None,
            index=index,
        )

    def get_marked_preview(
        self, index: int, generation: int | None = None
    ) -> PreviewResponse | None:
        return self._run(
            "get_marked_preview_failed",
            lambda: PreviewResponse.from_result(
                self.session.preview_marked_at(index, generation=generation)
            ),
            None,
            index=index,
        )

    def mark_file(self, index: int, generation: int | None = None) -> None:
        self._run(
            "mark_file_failed",
            lambda: self.session.toggle_mark(index, generation=generation),
            None,
            index=index,
        )

    def navigate_into(self, index: int, generation: int | None = None) -> None:
        self._run(
            "navigate_into_failed",
            lambda: self.session.navigate_into(index, generation=generation),
            False,
            index=index,
        )

    def navigate_parent(self) -> None:
        with self._lock:
            try:
                self._run("navigate_parent_failed", self.session.navigate_parent, None)
            except AtRootError as exc:
                self._last_error = exc
                log_event(logger, "navigate_parent_at_root", path=str(exc.path))
                raise

    def navigate_to_path(self, path: str) -> None:
        self._run(
            "navigate_to_path_failed",
            lambda: self.session.navigate_to(path),
            None,
            path=path,
        )

    def get_current_path(self) -> str:
        return self._run("get_current_path_failed", self.session.current_path, "")

    def filter_by_pattern(self, pattern: str) -> None:
        self._run(
            "filter_by_pattern_failed",
            lambda: self.session.set_filter(pattern),
            None,
            pattern=pattern,
        )

    def copy_marked_to(self, destination: str) -> CopyReportResponse | None:
        """Copy every marked file into ``destination``.

        Marks are snapshotted under the command lock and the batch runs
        outside it.
        """
        plan = self._run(
            "copy_marked_to_failed",
            lambda: self.session.plan_copy(destination),
            None,
            destination=destination,
        )
        if plan is None:
            return None
        sources, target = plan
        return CopyReportResponse.from_report(self.session.copy_paths(sources, target))

    def clear_marks(self) -> None:
        self._run("clear_marks_failed", self.session.clear_marks, None)

    def refresh(self) -> None:
        self._run("refresh_failed", self.session.refresh, None)
