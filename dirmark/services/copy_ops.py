from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from dirmark.core.errors import CopyError, wrap_error
from dirmark.core.logging import get_logger, log_error, log_event

logger = get_logger(__name__)


@dataclass(frozen=True)
class CopyOutcome:
    source: Path
    destination: Path
    error: CopyError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class CopyReport:
    destination_dir: Path
    outcomes: tuple[CopyOutcome, ...]

    @property
    def copied(self) -> list[CopyOutcome]:
        return [outcome for outcome in self.outcomes if outcome.ok]

    @property
    def failed(self) -> list[CopyOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


def copy_file(source: Path, destination_dir: Path) -> Path:
    """Copy ``source`` into ``destination_dir`` under its own name.

    Never overwrites: an existing destination name is a ``CopyError``, as is a
    missing destination directory or an unreadable source.
    """
    target = destination_dir / source.name
    if not destination_dir.is_dir():
        raise CopyError(source, f"destination {destination_dir} is not a directory")
    if not source.is_file():
        if source.exists():
            raise CopyError(source, "source is not a regular file")
        raise CopyError(source, "source no longer exists")

    created = False
    try:
        with source.open("rb") as src:
            with target.open("xb") as dst:
                created = True
                shutil.copyfileobj(src, dst)
    except FileExistsError as exc:
        raise CopyError(source, f"{target.name} already exists in destination") from exc
    except OSError as exc:
        if created:
            target.unlink(missing_ok=True)
        raise CopyError(source, exc) from exc

    try:
        shutil.copystat(source, target)
    except OSError as exc:
        warning = wrap_error(
            exc,
            code="copystat_failed",
            message=f"Copied {target.name} without its timestamps",
            severity="warning",
        )
        logger.warning("[%s] %s", warning.code, warning)
    return target


def copy_marked(sources: Iterable[Path], destination_dir: Path) -> CopyReport:
    """Copy every path in ``sources`` into ``destination_dir``.

    A failing file is recorded in the report and the batch carries on.
    """
    outcomes: list[CopyOutcome] = []
    for source in sources:
        target = destination_dir / source.name
        try:
            copied = copy_file(source, destination_dir)
        except CopyError as exc:
            log_error(
                logger,
                "copy_failed",
                source=str(source),
                destination=str(target),
                detail=exc.detail,
            )
            outcomes.append(CopyOutcome(source=source, destination=target, error=exc))
            continue
        outcomes.append(CopyOutcome(source=source, destination=copied))

    report = CopyReport(destination_dir=destination_dir, outcomes=tuple(outcomes))
    log_event(
        logger,
        "copy_marked",
        destination=str(destination_dir),
        copied=len(report.copied),
        failed=len(report.failed),
    )
    return report
