from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any


def get_logger(name: str = "dirmark") -> logging.Logger:
    return logging.getLogger(name)


def configure_logging(
    *,
    level: str = "info",
    format_name: str = "json",
    stream=None,
    log_dir: Path | None = None,
    filename: str = "session.log",
) -> None:
    normalized = level.strip().upper()
    level_value = getattr(logging, normalized, logging.INFO)
    if format_name == "json":
        formatter = logging.Formatter("%(message)s")
    else:
        formatter = logging.Formatter("%(levelname)s %(name)s %(message)s")
    if stream is None:
        env_dir = os.environ.get("DIRMARK_LOG_DIR")
        if env_dir:
            log_dir = Path(env_dir)
        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            stream = open(log_dir / filename, "a", encoding="utf-8")
        else:
            handler = logging.NullHandler()
            root = logging.getLogger()
            root.setLevel(level_value)
            if not root.handlers:
                root.addHandler(handler)
            return
    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)
    root = logging.getLogger()
    root.setLevel(level_value)
    if not root.handlers:
        root.addHandler(handler)


def _payload(event: str, fields: dict[str, Any]) -> str:
    return json.dumps({"event": event, **fields}, sort_keys=True, default=str)


def log_event(logger: logging.Logger, event: str, **fields: Any) -> None:
    logger.info(_payload(event, fields))


def log_error(logger: logging.Logger, event: str, **fields: Any) -> None:
    """Record a recovered failure as one error-level structured event."""
    logger.error(_payload(event, fields))
