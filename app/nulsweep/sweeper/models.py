"""Sweeper domain models.

Defines the records produced by scanning (FoundFile) and by the deletion
engine (DeletionOutcome), plus the options that drive a deletion.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

MAX_RETRY_COUNT = 10


class DeletionStatus(str, Enum):
    """Result classification of one deletion attempt-cycle.

    Attributes:
        DELETED: File removed and verified gone.
        RECYCLED: File moved to the Recycle Bin.
        VALIDATION_FAILED: Path no longer valid (moved, deleted, unsafe).
        LOCKED: File held open by another process after all retries.
        ACCESS_DENIED: Insufficient privileges; elevation may help.
        FAILED: Delete reported an unclassified error.
        STILL_EXISTS: Delete reported success but the file is still there.
        BACKUP_FAILED: Backup copy failed, so nothing was deleted.
        EXCEPTION: Unexpected error while processing the file.
    """

    DELETED = "deleted"
    RECYCLED = "recycled"
    VALIDATION_FAILED = "validation_failed"
    LOCKED = "locked"
    ACCESS_DENIED = "access_denied"
    FAILED = "failed"
    STILL_EXISTS = "still_exists"
    BACKUP_FAILED = "backup_failed"
    EXCEPTION = "exception"

    @property
    def is_success(self) -> bool:
        """Check if the status means the file is gone."""
        return self in (DeletionStatus.DELETED, DeletionStatus.RECYCLED)


@dataclass(frozen=True, slots=True)
class FoundFile:
    """A reserved-name file discovered during scanning.

    Snapshot taken at scan time; the file may have changed or moved by the
    time it is deleted.

    Attributes:
        name: Base name as found on disk (e.g., "nul", "Con").
        full_path: Absolute path of the file.
        directory: Absolute path of the containing directory.
        size_bytes: Size in bytes.
        last_modified: Last modification time (timezone-aware, UTC).
        is_read_only: Whether the read-only attribute is set.
        attributes: Comma-separated attribute names (e.g., "ReadOnly, Archive").
    """

    name: str
    full_path: str
    directory: str
    size_bytes: int
    last_modified: datetime
    is_read_only: bool
    attributes: str

    def __post_init__(self) -> None:
        """Validate found file data after initialization."""
        if not self.full_path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the flat export record."""
        return {
            "name": self.name,
            "path": self.full_path,
            "size": self.size_bytes,
            "modified": self.last_modified.isoformat(),
            "read_only": self.is_read_only,
            "attributes": self.attributes,
        }


@dataclass(frozen=True, slots=True)
class DeletionOutcome:
    """Result of removing a single found file.

    Attributes:
        status: Final classification of the attempt-cycle.
        error: Error message if the removal failed, None otherwise.
        backup_path: Path of the backup copy, None if no backup was made.
    """

    status: DeletionStatus
    error: str | None = None
    backup_path: str | None = None

    @property
    def success(self) -> bool:
        """Check if the file was removed (deleted or recycled)."""
        return self.status.is_success


@dataclass(frozen=True, slots=True)
class DeletionOptions:
    """Options controlling how the engine removes each file.

    Attributes:
        retry_count: Extra attempts for locked files (0-10).
        retry_delay_seconds: Wait between attempts for locked files.
        use_recycle_bin: Try the Recycle Bin before the bypass delete.
        backup_dir: Directory receiving a copy of each file before removal.
    """

    retry_count: int = 0
    retry_delay_seconds: float = 1.0
    use_recycle_bin: bool = False
    backup_dir: Path | None = None

    def __post_init__(self) -> None:
        """Validate option ranges after initialization."""
        if not (0 <= self.retry_count <= MAX_RETRY_COUNT):
            msg = f"Retry count must be between 0 and {MAX_RETRY_COUNT}, got {self.retry_count}"
            raise ValueError(msg)
        if self.retry_delay_seconds < 0:
            msg = f"Retry delay cannot be negative, got {self.retry_delay_seconds}"
            raise ValueError(msg)
