"""Shared fixtures for the dirmark test suite.

The ``pytest`` console script can run with a sys.path that excludes the
repository root, so the local package is put first.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
PROJECT_ROOT_STR = str(PROJECT_ROOT)

if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)

from dirmark.core.commands import SessionCommands  # noqa: E402
from dirmark.core.session import SessionOptions, SessionState  # noqa: E402

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR fake image payload"


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """A small directory tree::

        root/
          .hidden
          alpha.txt
          Beta.txt
          photo.png
          docs/
            readme.md
            .secret
          empty/
    """
    root = tmp_path / "root"
    root.mkdir()
    (root / ".hidden").write_text("hidden", encoding="utf-8")
    (root / "alpha.txt").write_text("alpha", encoding="utf-8")
    (root / "Beta.txt").write_text("beta", encoding="utf-8")
    (root / "photo.png").write_bytes(PNG_BYTES)
    docs = root / "docs"
    docs.mkdir()
    (docs / "readme.md").write_text("# docs", encoding="utf-8")
    (docs / ".secret").write_text("s", encoding="utf-8")
    (root / "empty").mkdir()
    return root


@pytest.fixture
def session(tree: Path) -> SessionState:
    return SessionState(tree, options=SessionOptions(lock_timeout=0.05))


@pytest.fixture
def commands(session: SessionState) -> SessionCommands:
    return SessionCommands(session)


@pytest.fixture
def index_of(session: SessionState):
    def find(name: str) -> int:
        names = [row.name for row in session.list_current().rows]
        return names.index(name)

    return find
