"""Unit tests for the layered deletion engine."""

import os
import re
import threading
from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from nulsweep.sweeper.engine import BypassDeleteStrategy, DeletionEngine, RecycleBinStrategy
from nulsweep.sweeper.models import DeletionOptions, DeletionStatus, FoundFile
from nulsweep.sweeper.scanner import build_found_file

BACKUP_NAME = re.compile(r"^NUL_\d{8}_\d{6}_[0-9a-f]{8}\.bak$")


@pytest.fixture
def nul_file(tmp_path: Path) -> FoundFile:
    """Create a real file named nul and return its snapshot."""
    target = tmp_path / "work" / "nul"
    target.parent.mkdir()
    target.write_text("payload")
    found = build_found_file(str(target))
    assert found is not None
    return found


class _FakeRecycleBin:
    def __init__(self, accept: bool, remove_file: bool = True) -> None:
        self.accept = accept
        self.remove_file = remove_file
        self.sent: list[str] = []

    def send(self, path: str) -> bool:
        self.sent.append(path)
        if self.accept and self.remove_file:
            os.remove(path)
        return self.accept


class TestDeletionEngineBasics:
    """Tests for straightforward removals."""

    def test_default_options(self) -> None:
        """Engine falls back to default options."""
        assert DeletionEngine().options == DeletionOptions()

    def test_deletes_file(self, nul_file: FoundFile, fake_deleter_factory: Callable) -> None:
        """A deletable file ends up DELETED and gone."""
        deleter = fake_deleter_factory(DeletionStatus.DELETED)

        outcome = DeletionEngine(deleter=deleter).remove(nul_file)

        assert outcome.status == DeletionStatus.DELETED
        assert outcome.success is True
        assert outcome.backup_path is None
        assert not os.path.exists(nul_file.full_path)
        assert deleter.calls == [(nul_file.full_path, False)]

    def test_native_deleter_by_default(self, nul_file: FoundFile) -> None:
        """Without a deleter the real bypass delete is used."""
        outcome = DeletionEngine().remove(nul_file)

        assert outcome.status == DeletionStatus.DELETED
        assert not os.path.exists(nul_file.full_path)

    def test_read_only_flag_is_passed(
        self, nul_file: FoundFile, fake_deleter_factory: Callable
    ) -> None:
        """Read-only files are deleted with force_read_only."""
        deleter = fake_deleter_factory(DeletionStatus.DELETED)
        read_only = FoundFile(
            name=nul_file.name,
            full_path=nul_file.full_path,
            directory=nul_file.directory,
            size_bytes=nul_file.size_bytes,
            last_modified=nul_file.last_modified,
            is_read_only=True,
            attributes="ReadOnly",
        )

        DeletionEngine(deleter=deleter).remove(read_only)

        assert deleter.calls == [(nul_file.full_path, True)]

    def test_second_remove_fails_validation(
        self, nul_file: FoundFile, fake_deleter_factory: Callable
    ) -> None:
        """Removing the same snapshot twice fails validation the second time."""
        engine = DeletionEngine(deleter=fake_deleter_factory(DeletionStatus.DELETED))

        first = engine.remove(nul_file)
        second = engine.remove(nul_file)

        assert first.status == DeletionStatus.DELETED
        assert second.status == DeletionStatus.VALIDATION_FAILED
        assert second.error is not None
        assert "does not exist" in second.error

    def test_still_exists_after_reported_success(
        self, nul_file: FoundFile, fake_deleter_factory: Callable
    ) -> None:
        """A delete that reports success but leaves the file is STILL_EXISTS."""
        deleter = fake_deleter_factory(DeletionStatus.DELETED, remove_file=False)

        outcome = DeletionEngine(deleter=deleter).remove(nul_file)

        assert outcome.status == DeletionStatus.STILL_EXISTS
        assert outcome.success is False
        assert os.path.exists(nul_file.full_path)

    def test_access_denied_is_not_retried(
        self, nul_file: FoundFile, fake_deleter_factory: Callable
    ) -> None:
        """Only locked files are retried."""
        deleter = fake_deleter_factory(DeletionStatus.ACCESS_DENIED)
        options = DeletionOptions(retry_count=3, retry_delay_seconds=0)

        outcome = DeletionEngine(options, deleter=deleter).remove(nul_file)

        assert outcome.status == DeletionStatus.ACCESS_DENIED
        assert len(deleter.calls) == 1

    def test_unexpected_exception_is_contained(self, nul_file: FoundFile) -> None:
        """Errors raised by the deleter become an EXCEPTION outcome."""
        deleter = MagicMock()
        deleter.force_delete.side_effect = RuntimeError("kaboom")

        outcome = DeletionEngine(deleter=deleter).remove(nul_file)

        assert outcome.status == DeletionStatus.EXCEPTION
        assert outcome.error is not None
        assert "kaboom" in outcome.error


class TestRetries:
    """Tests for bounded retries of locked files."""

    @pytest.mark.parametrize("retry_count", [0, 1, 3])
    def test_attempts_retry_count_plus_one(
        self, nul_file: FoundFile, fake_deleter_factory: Callable, retry_count: int
    ) -> None:
        """A file locked throughout is attempted exactly retry_count + 1 times."""
        deleter = fake_deleter_factory(DeletionStatus.LOCKED)
        options = DeletionOptions(retry_count=retry_count, retry_delay_seconds=0)

        outcome = DeletionEngine(options, deleter=deleter).remove(nul_file)

        assert outcome.status == DeletionStatus.LOCKED
        assert len(deleter.calls) == retry_count + 1

    def test_succeeds_after_lock_released(
        self, nul_file: FoundFile, fake_deleter_factory: Callable
    ) -> None:
        """A file unlocked during the retries is deleted."""
        deleter = fake_deleter_factory(DeletionStatus.LOCKED, DeletionStatus.DELETED)
        options = DeletionOptions(retry_count=2, retry_delay_seconds=0)

        outcome = DeletionEngine(options, deleter=deleter).remove(nul_file)

        assert outcome.status == DeletionStatus.DELETED
        assert len(deleter.calls) == 2

    def test_waits_between_attempts(
        self, nul_file: FoundFile, fake_deleter_factory: Callable
    ) -> None:
        """The configured delay is waited between attempts, not after the last."""
        cancel_event = MagicMock()
        cancel_event.wait.return_value = False
        options = DeletionOptions(retry_count=2, retry_delay_seconds=7)

        DeletionEngine(
            options,
            deleter=fake_deleter_factory(DeletionStatus.LOCKED),
            cancel_event=cancel_event,
        ).remove(nul_file)

        assert [c.args for c in cancel_event.wait.call_args_list] == [(7,), (7,)]

    def test_cancel_stops_retrying(
        self, nul_file: FoundFile, fake_deleter_factory: Callable
    ) -> None:
        """A cancelled wait ends the retries early."""
        deleter = fake_deleter_factory(DeletionStatus.LOCKED)
        engine = DeletionEngine(
            DeletionOptions(retry_count=5, retry_delay_seconds=30),
            deleter=deleter,
        )
        engine.cancel()

        outcome = engine.remove(nul_file)

        assert outcome.status == DeletionStatus.LOCKED
        assert len(deleter.calls) == 1


class TestBackup:
    """Tests for backups before removal."""

    def test_backup_copy_is_made(
        self, nul_file: FoundFile, fake_deleter_factory: Callable, tmp_path: Path
    ) -> None:
        """The file is copied into the backup directory first."""
        backup_dir = tmp_path / "backup"
        options = DeletionOptions(backup_dir=backup_dir)

        outcome = DeletionEngine(
            options, deleter=fake_deleter_factory(DeletionStatus.DELETED)
        ).remove(nul_file)

        assert outcome.status == DeletionStatus.DELETED
        assert outcome.backup_path is not None
        backup = Path(outcome.backup_path)
        assert backup.parent == backup_dir
        assert BACKUP_NAME.match(backup.name)
        assert backup.read_text() == "payload"

    def test_backup_names_are_unique(
        self, tmp_path: Path, fake_deleter_factory: Callable
    ) -> None:
        """Two files with the same name never share a backup file."""
        files = []
        for folder in ("a", "b"):
            target = tmp_path / folder / "nul"
            target.parent.mkdir()
            target.write_text(folder)
            found = build_found_file(str(target))
            assert found is not None
            files.append(found)
        engine = DeletionEngine(
            DeletionOptions(backup_dir=tmp_path / "backup"),
            deleter=fake_deleter_factory(DeletionStatus.DELETED),
        )

        outcomes = [engine.remove(f) for f in files]

        paths = {o.backup_path for o in outcomes}
        assert len(paths) == 2
        assert sorted(Path(p).read_text() for p in paths if p) == ["a", "b"]

    def test_backup_failure_keeps_file(
        self, nul_file: FoundFile, fake_deleter_factory: Callable, tmp_path: Path
    ) -> None:
        """If the backup fails nothing is deleted."""
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("")
        deleter = fake_deleter_factory(DeletionStatus.DELETED)

        outcome = DeletionEngine(
            DeletionOptions(backup_dir=blocker / "backup"), deleter=deleter
        ).remove(nul_file)

        assert outcome.status == DeletionStatus.BACKUP_FAILED
        assert deleter.calls == []
        assert os.path.exists(nul_file.full_path)

    def test_backup_path_kept_on_failure(
        self, nul_file: FoundFile, fake_deleter_factory: Callable, tmp_path: Path
    ) -> None:
        """The backup location is reported even when the delete fails."""
        outcome = DeletionEngine(
            DeletionOptions(backup_dir=tmp_path / "backup"),
            deleter=fake_deleter_factory(DeletionStatus.FAILED),
        ).remove(nul_file)

        assert outcome.status == DeletionStatus.FAILED
        assert outcome.backup_path is not None


class TestRecycleBin:
    """Tests for the Recycle Bin step of the chain."""

    def test_recycled(self, nul_file: FoundFile, fake_deleter_factory: Callable) -> None:
        """A successful recycle skips the bypass delete."""
        recycle_bin = _FakeRecycleBin(accept=True)
        deleter = fake_deleter_factory(DeletionStatus.DELETED)

        outcome = DeletionEngine(
            DeletionOptions(use_recycle_bin=True), deleter=deleter, recycle_bin=recycle_bin
        ).remove(nul_file)

        assert outcome.status == DeletionStatus.RECYCLED
        assert outcome.success is True
        assert deleter.calls == []

    def test_refused_falls_back(self, nul_file: FoundFile, fake_deleter_factory: Callable) -> None:
        """A refused recycle falls back to the bypass delete silently."""
        recycle_bin = _FakeRecycleBin(accept=False)
        deleter = fake_deleter_factory(DeletionStatus.DELETED)

        outcome = DeletionEngine(
            DeletionOptions(use_recycle_bin=True), deleter=deleter, recycle_bin=recycle_bin
        ).remove(nul_file)

        assert outcome.status == DeletionStatus.DELETED
        assert outcome.error is None
        assert recycle_bin.sent == [nul_file.full_path]
        assert len(deleter.calls) == 1

    def test_reported_success_but_present_falls_back(
        self, nul_file: FoundFile, fake_deleter_factory: Callable
    ) -> None:
        """A recycle that leaves the file in place does not count."""
        recycle_bin = _FakeRecycleBin(accept=True, remove_file=False)
        deleter = fake_deleter_factory(DeletionStatus.DELETED)

        outcome = DeletionEngine(
            DeletionOptions(use_recycle_bin=True), deleter=deleter, recycle_bin=recycle_bin
        ).remove(nul_file)

        assert outcome.status == DeletionStatus.DELETED
        assert len(deleter.calls) == 1

    def test_not_used_when_disabled(
        self, nul_file: FoundFile, fake_deleter_factory: Callable
    ) -> None:
        """The Recycle Bin is only tried when enabled."""
        recycle_bin = _FakeRecycleBin(accept=True)

        DeletionEngine(
            deleter=fake_deleter_factory(DeletionStatus.DELETED), recycle_bin=recycle_bin
        ).remove(nul_file)

        assert recycle_bin.sent == []


class TestStrategies:
    """Tests for the individual strategies."""

    def test_recycle_strategy_returns_none_on_refusal(self, nul_file: FoundFile) -> None:
        """RecycleBinStrategy hands off with None."""
        strategy = RecycleBinStrategy(_FakeRecycleBin(accept=False))

        assert strategy.attempt(nul_file) is None

    def test_bypass_strategy_locked_message(
        self, nul_file: FoundFile, fake_deleter_factory: Callable
    ) -> None:
        """The last lock error is kept in the outcome."""
        strategy = BypassDeleteStrategy(
            fake_deleter_factory(DeletionStatus.LOCKED),
            retry_count=0,
            retry_delay_seconds=0,
            cancel_event=threading.Event(),
        )

        outcome = strategy.attempt(nul_file)

        assert outcome.status == DeletionStatus.LOCKED
        assert outcome.error == "scripted locked"
