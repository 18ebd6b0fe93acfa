"""Layered deletion engine.

Removes one found file at a time:

1. Re-validate the path (the scan snapshot may be stale).
2. Back the file up when a backup directory is configured.
3. Run the strategy chain: Recycle Bin (optional, best-effort), then the
   bypass delete with bounded retries for locked files.
4. Verify the file is really gone.

No failure of a single file escapes ``remove()``.
"""

import logging
import secrets
import shutil
import threading
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Protocol

from nulsweep.core.longpath import literal_exists, to_extended_path
from nulsweep.core.validator import PathValidationError, validate_path
from nulsweep.sweeper.bypass import BypassDeleter, NativeBypassDeleter
from nulsweep.sweeper.models import DeletionOptions, DeletionOutcome, DeletionStatus, FoundFile
from nulsweep.sweeper.recycle import PowerShellRecycleBin, RecycleBin

logger = logging.getLogger(__name__)


class DeletionStrategy(Protocol):
    """One link of the removal chain.

    Returns a definitive outcome, or None to hand the file to the next
    strategy.
    """

    name: str

    def attempt(self, file: FoundFile) -> DeletionOutcome | None: ...


class RecycleBinStrategy:
    """Tries the Recycle Bin; never reports an error of its own."""

    name = "recycle_bin"

    def __init__(self, recycle_bin: RecycleBin) -> None:
        self._recycle_bin = recycle_bin

    def attempt(self, file: FoundFile) -> DeletionOutcome | None:
        if self._recycle_bin.send(file.full_path) and not literal_exists(file.full_path):
            logger.info("Recycled %s", file.full_path)
            return DeletionOutcome(status=DeletionStatus.RECYCLED)

        logger.debug("Recycle Bin could not take %s, falling back to bypass delete", file.full_path)
        return None


class BypassDeleteStrategy:
    """Deletes through the bypass capability, retrying while the file is locked.

    Args:
        deleter: Bypass capability performing each attempt.
        retry_count: Extra attempts after the first one for locked files.
        retry_delay_seconds: Wait between attempts.
        cancel_event: Setting it ends a pending wait and stops retrying.
    """

    name = "bypass_delete"

    def __init__(
        self,
        deleter: BypassDeleter,
        *,
        retry_count: int,
        retry_delay_seconds: float,
        cancel_event: threading.Event,
    ) -> None:
        self._deleter = deleter
        self._retry_count = retry_count
        self._retry_delay = retry_delay_seconds
        self._cancel_event = cancel_event

    def attempt(self, file: FoundFile) -> DeletionOutcome:
        max_attempts = self._retry_count + 1
        outcome = DeletionOutcome(status=DeletionStatus.FAILED, error="No delete attempted")

        for attempt in range(1, max_attempts + 1):
            outcome = self._deleter.force_delete(
                file.full_path,
                force_read_only=file.is_read_only,
            )
            if outcome.status != DeletionStatus.LOCKED:
                return outcome

            if attempt == max_attempts:
                break

            logger.warning(
                "%s is locked by another process, retrying in %ss (attempt %d of %d)",
                file.full_path,
                self._retry_delay,
                attempt,
                max_attempts,
            )
            if self._cancel_event.wait(self._retry_delay):
                logger.info("Retry cancelled for %s", file.full_path)
                break

        return DeletionOutcome(
            status=DeletionStatus.LOCKED,
            error=outcome.error or "File is locked by another process",
        )


class DeletionEngine:
    """Removes found files one at a time using the layered strategy.

    Args:
        options: Retry, recycle and backup settings.
        deleter: Bypass capability. Defaults to NativeBypassDeleter.
        recycle_bin: Recycle Bin capability. Defaults to PowerShellRecycleBin.
        cancel_event: Event that interrupts retry waits when set.
    """

    def __init__(
        self,
        options: DeletionOptions | None = None,
        *,
        deleter: BypassDeleter | None = None,
        recycle_bin: RecycleBin | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        self._options = options or DeletionOptions()
        self._cancel_event = cancel_event or threading.Event()

        strategies: list[DeletionStrategy] = []
        if self._options.use_recycle_bin:
            strategies.append(RecycleBinStrategy(recycle_bin or PowerShellRecycleBin()))
        strategies.append(
            BypassDeleteStrategy(
                deleter or NativeBypassDeleter(),
                retry_count=self._options.retry_count,
                retry_delay_seconds=self._options.retry_delay_seconds,
                cancel_event=self._cancel_event,
            )
        )
        self._strategies: tuple[DeletionStrategy, ...] = tuple(strategies)

    @property
    def options(self) -> DeletionOptions:
        return self._options

    def cancel(self) -> None:
        """Interrupt any pending retry wait."""
        self._cancel_event.set()

    def remove(self, file: FoundFile) -> DeletionOutcome:
        """Remove a single found file.

        Args:
            file: File to remove.

        Returns:
            DeletionOutcome for the whole attempt-cycle. Never raises.
        """
        try:
            return self._remove(file)
        except Exception as e:
            logger.exception("Unexpected error removing %s", file.full_path)
            return DeletionOutcome(status=DeletionStatus.EXCEPTION, error=f"Unexpected error: {e}")

    def _remove(self, file: FoundFile) -> DeletionOutcome:
        try:
            validate_path(file.full_path)
        except PathValidationError as e:
            return DeletionOutcome(status=DeletionStatus.VALIDATION_FAILED, error=str(e))

        backup_path: str | None = None
        if self._options.backup_dir is not None:
            try:
                backup_path = self._backup(file, self._options.backup_dir)
            except OSError as e:
                logger.error("Backup of %s failed: %s", file.full_path, e)
                return DeletionOutcome(
                    status=DeletionStatus.BACKUP_FAILED,
                    error=f"Backup failed, file left in place: {e}",
                )

        outcome: DeletionOutcome | None = None
        for strategy in self._strategies:
            outcome = strategy.attempt(file)
            if outcome is not None:
                break

        if outcome is None:
            outcome = DeletionOutcome(
                status=DeletionStatus.FAILED,
                error="No strategy removed the file",
            )

        if outcome.status == DeletionStatus.DELETED and literal_exists(file.full_path):
            outcome = DeletionOutcome(
                status=DeletionStatus.STILL_EXISTS,
                error="Delete reported success but the file still exists",
            )

        if outcome.success:
            logger.info("Removed %s (%s)", file.full_path, outcome.status.value)
        else:
            logger.warning("Could not remove %s: %s", file.full_path, outcome.error)

        return replace(outcome, backup_path=backup_path)

    @staticmethod
    def _backup(file: FoundFile, backup_dir: Path) -> str:
        """Copy a file into the backup directory under a unique name.

        The name combines the original name, a timestamp and a random
        suffix: ``NUL_20260101_120000_1a2b3c4d.bak``.

        Args:
            file: File to copy.
            backup_dir: Destination directory, created if missing.

        Returns:
            Path of the backup copy.

        Raises:
            OSError: If the directory cannot be created or the copy fails.
        """
        backup_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        while True:
            dest = backup_dir / f"{file.name.upper()}_{stamp}_{secrets.token_hex(4)}.bak"
            if not dest.exists():
                break
        shutil.copy2(to_extended_path(file.full_path), to_extended_path(str(dest)))
        logger.debug("Backed up %s to %s", file.full_path, dest)
        return str(dest)
