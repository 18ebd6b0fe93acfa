"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

import logging
import os
from collections.abc import Callable, Iterator
from datetime import UTC, datetime
from pathlib import Path
from unittest.mock import patch

import pytest
from nulsweep.sweeper.models import DeletionOutcome, DeletionStatus, FoundFile


class FakeDeleter:
    """Bypass deleter returning scripted statuses.

    Each call pops the next status from the script (the last one repeats).
    When a status is DELETED the file is really removed, so the engine's
    existence check sees it gone.
    """

    def __init__(self, *statuses: DeletionStatus, remove_file: bool = True) -> None:
        self._script = list(statuses) or [DeletionStatus.DELETED]
        self._remove_file = remove_file
        self.calls: list[tuple[str, bool]] = []

    def force_delete(self, path: str, *, force_read_only: bool) -> DeletionOutcome:
        self.calls.append((path, force_read_only))
        status = self._script.pop(0) if len(self._script) > 1 else self._script[0]
        if status == DeletionStatus.DELETED:
            if self._remove_file and os.path.lexists(path):
                os.remove(path)
            return DeletionOutcome(status=status)
        return DeletionOutcome(status=status, error=f"scripted {status.value}")


@pytest.fixture(autouse=True)
def isolated_app_dirs(tmp_path: Path) -> Iterator[Path]:
    """Point config and state directories at a temporary location."""
    base = tmp_path / "appdirs"
    with patch.dict(
        os.environ,
        {
            "NULSWEEP_CONFIG_HOME": str(base / "config"),
            "NULSWEEP_STATE_HOME": str(base / "state"),
        },
    ):
        yield base


@pytest.fixture(autouse=True)
def reset_package_logger() -> Iterator[None]:
    """Undo handlers attached by CLI runs so caplog sees package records."""
    yield
    logger = logging.getLogger("nulsweep")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_found_file() -> Callable[..., FoundFile]:
    """Factory for FoundFile snapshots that need no file on disk."""

    def _make(
        path: str = "/data/project/nul",
        *,
        size_bytes: int = 0,
        is_read_only: bool = False,
    ) -> FoundFile:
        return FoundFile(
            name=os.path.basename(path),
            full_path=path,
            directory=os.path.dirname(path),
            size_bytes=size_bytes,
            last_modified=datetime(2026, 1, 15, 12, 0, tzinfo=UTC),
            is_read_only=is_read_only,
            attributes="ReadOnly" if is_read_only else "Normal",
        )

    return _make


@pytest.fixture
def reserved_tree(tmp_path: Path) -> Path:
    """Create a directory with reserved-name files at several depths.

    Layout::

        tree/nul            (5 bytes)
        tree/con.txt
        tree/readme.md
        tree/sub/COM1       (3 bytes)
        tree/sub/deep/aux
    """
    root = tmp_path / "tree"
    (root / "sub" / "deep").mkdir(parents=True)
    (root / "nul").write_text("hello")
    (root / "con.txt").write_text("not reserved")
    (root / "readme.md").write_text("# readme")
    (root / "sub" / "COM1").write_text("abc")
    (root / "sub" / "deep" / "aux").write_text("")
    return root


@pytest.fixture
def fake_deleter_factory() -> Callable[..., FakeDeleter]:
    """Factory for scripted bypass deleters."""
    return FakeDeleter
