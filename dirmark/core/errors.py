from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

Severity = Literal["error", "warning", "information"]

DEFAULT_SEVERITY_BY_CODE: dict[str, Severity] = {
    "at_root": "information",
    "stale_listing": "warning",
}


@dataclass
class DirmarkError(Exception):
    code: str
    message: str
    detail: str | None = None
    severity: Severity = "error"

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class IoError(DirmarkError):
    """A filesystem read failed for ``path``."""

    def __init__(self, path: Path, cause: BaseException | str) -> None:
        self.path = path
        self.cause = cause
        super().__init__(
            code="io_error",
            message=f"Unable to read {path}",
            detail=_describe(cause),
        )


class InvalidPatternError(DirmarkError):
    def __init__(self, pattern: str, cause: BaseException | str) -> None:
        self.pattern = pattern
        self.cause = cause
        super().__init__(
            code="invalid_pattern",
            message=f"Invalid filter pattern: {pattern!r}",
            detail=_describe(cause),
            severity="warning",
        )


class AtRootError(DirmarkError):
    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(
            code="at_root",
            message=f"{path} has no parent directory",
        )


class LockError(DirmarkError):
    """A session field could not be acquired in time."""

    def __init__(self, field: str, timeout: float | None = None) -> None:
        self.field = field
        self.timeout = timeout
        detail = f"timed out after {timeout}s" if timeout is not None else None
        super().__init__(
            code="lock_error",
            message=f"Session field '{field}' is busy",
            detail=detail,
        )


class IndexOutOfRange(DirmarkError):
    def __init__(self, index: int, size: int) -> None:
        self.index = index
        self.size = size
        super().__init__(
            code="index_out_of_range",
            message=f"Index {index} is outside a listing of {size} entries",
        )


class StaleListingError(DirmarkError):
    """The caller addressed a listing generation that is no longer displayed."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            code="stale_listing",
            message="Listing changed since it was last displayed",
            detail=f"requested generation {expected}, current {actual}",
        )


class CopyError(DirmarkError):
    def __init__(self, path: Path, cause: BaseException | str) -> None:
        self.path = path
        self.cause = cause
        super().__init__(
            code="copy_failed",
            message=f"Failed to copy {path.name or path}",
            detail=_describe(cause),
        )


class StartupError(DirmarkError):
    def __init__(self, detail: str) -> None:
        super().__init__(
            code="startup_failed",
            message="Unable to determine a start location",
            detail=detail,
        )


def _describe(cause: BaseException | str) -> str:
    if isinstance(cause, OSError) and cause.strerror:
        return cause.strerror
    return str(cause)


def format_error(error: BaseException) -> tuple[str, Severity]:
    if isinstance(error, DirmarkError):
        prefix = f"[{error.code}] " if error.code else ""
        severity = DEFAULT_SEVERITY_BY_CODE.get(error.code, error.severity)
        return f"{prefix}{error}", severity
    return f"{error}", "error"


def wrap_error(
    error: BaseException,
    *,
    code: str,
    message: str,
    severity: Severity = "error",
) -> DirmarkError:
    if isinstance(error, DirmarkError):
        return error
    detail = str(error)
    return DirmarkError(code=code, message=message, detail=detail, severity=severity)
