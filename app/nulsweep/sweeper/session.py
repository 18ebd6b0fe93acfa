"""Run bookkeeping: counters collected across the scan and delete phases."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from nulsweep.sweeper.models import DeletionOutcome, DeletionStatus, FoundFile


class RunOutcome(str, Enum):
    """Overall result of a run, mapped to the process exit code.

    Attributes:
        SUCCESS: Nothing failed (including nothing found or nothing attempted).
        TOTAL_FAILURE: Deletions were attempted and none succeeded.
        PARTIAL_SUCCESS: Some files were removed, some failed.
    """

    SUCCESS = "success"
    TOTAL_FAILURE = "total_failure"
    PARTIAL_SUCCESS = "partial_success"

    @property
    def exit_code(self) -> int:
        """Process exit code for this outcome."""
        return {
            RunOutcome.SUCCESS: 0,
            RunOutcome.TOTAL_FAILURE: 1,
            RunOutcome.PARTIAL_SUCCESS: 2,
        }[self]


@dataclass(frozen=True, slots=True)
class SessionError:
    """A per-file failure recorded during a run."""

    path: str
    status: DeletionStatus
    message: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "status": self.status.value, "message": self.message}


@dataclass(frozen=True, slots=True)
class RunSummary:
    """Immutable end-of-run summary handed to reporting.

    Attributes:
        total: Number of reserved-name files found.
        deleted: Files removed (deleted or recycled).
        failed: Files whose removal failed.
        skipped: Files not attempted (declined, quit, cancelled).
        bytes_freed: Total size of removed files.
        duration_seconds: Wall time from scan start to finish.
        files_scanned: Regular files inspected while scanning.
        errors: Per-file failures in the order they happened.
    """

    total: int
    deleted: int
    failed: int
    skipped: int
    bytes_freed: int
    duration_seconds: float
    files_scanned: int = 0
    errors: tuple[SessionError, ...] = ()

    @property
    def outcome(self) -> RunOutcome:
        """Classify the run for the exit code."""
        if self.failed == 0:
            return RunOutcome.SUCCESS
        if self.deleted == 0:
            return RunOutcome.TOTAL_FAILURE
        return RunOutcome.PARTIAL_SUCCESS

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a dictionary for JSON output and history."""
        return {
            "total": self.total,
            "deleted": self.deleted,
            "failed": self.failed,
            "skipped": self.skipped,
            "bytes_freed": self.bytes_freed,
            "duration_seconds": round(self.duration_seconds, 3),
            "files_scanned": self.files_scanned,
            "outcome": self.outcome.value,
            "errors": [e.to_dict() for e in self.errors],
        }


@dataclass(slots=True)
class ScanSession:
    """Mutable counters for one run.

    Created when scanning starts, passed explicitly to the scanner and the
    selection controller, and turned into a RunSummary by ``finish()``.
    """

    start_time: datetime = field(default_factory=lambda: datetime.now(UTC))
    end_time: datetime | None = None
    files_scanned: int = 0
    files_found: int = 0
    files_deleted: int = 0
    files_failed: int = 0
    files_skipped: int = 0
    bytes_freed: int = 0
    errors: list[SessionError] = field(default_factory=lambda: [])

    def record_outcome(self, file: FoundFile, outcome: DeletionOutcome) -> None:
        """Count a deletion outcome for a file."""
        if outcome.success:
            self.files_deleted += 1
            self.bytes_freed += file.size_bytes
            return

        self.files_failed += 1
        self.errors.append(
            SessionError(
                path=file.full_path,
                status=outcome.status,
                message=outcome.error or outcome.status.value,
            )
        )

    def record_skipped(self, count: int = 1) -> None:
        """Count files that were not attempted."""
        self.files_skipped += count

    @property
    def duration_seconds(self) -> float:
        """Seconds elapsed between start and end (or now, while running)."""
        end = self.end_time or datetime.now(UTC)
        return (end - self.start_time).total_seconds()

    def finish(self) -> RunSummary:
        """Stamp the end time and build the summary."""
        if self.end_time is None:
            self.end_time = datetime.now(UTC)
        return RunSummary(
            total=self.files_found,
            deleted=self.files_deleted,
            failed=self.files_failed,
            skipped=self.files_skipped,
            bytes_freed=self.bytes_freed,
            duration_seconds=self.duration_seconds,
            files_scanned=self.files_scanned,
            errors=tuple(self.errors),
        )
