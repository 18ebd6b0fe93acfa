"""Run history record.

Each ``nulsweep clean`` run appends one RunRecord to the history file.
"""

import json
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any


@dataclass(frozen=True, slots=True)
class RunRecord:
    """Record of one completed clean run.

    Attributes:
        id: Unique identifier (12-character hex string from UUID).
        timestamp: When the run finished (ISO 8601 with timezone).
        command: Command line that triggered the run.
        mode: Selection mode used (force, interactive, ...).
        roots: Scan roots.
        summary: Serialized RunSummary.
        deleted_paths: Paths that were removed.
    """

    id: str
    timestamp: str
    command: str
    mode: str
    roots: tuple[str, ...]
    summary: dict[str, Any] = field(default_factory=lambda: {})
    deleted_paths: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        """Validate record data after initialization."""
        if not self.id:
            msg = "Record ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "command": self.command,
            "mode": self.mode,
            "roots": list(self.roots),
            "summary": self.summary,
            "deleted_paths": list(self.deleted_paths),
        }

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (no trailing newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunRecord":
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If field values are invalid.
        """
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            command=data.get("command", ""),
            mode=data["mode"],
            roots=tuple(data.get("roots", [])),
            summary=dict(data.get("summary", {})),
            deleted_paths=tuple(data.get("deleted_paths", [])),
        )

    @classmethod
    def from_json_line(cls, line: str) -> "RunRecord":
        """Deserialize from a JSON line.

        Raises:
            json.JSONDecodeError: If the line is not valid JSON.
            KeyError: If required fields are missing.
        """
        return cls.from_dict(json.loads(line))


def create_run_record(
    *,
    command: str,
    mode: str,
    roots: list[str],
    summary: dict[str, Any],
    deleted_paths: list[str],
) -> RunRecord:
    """Create a RunRecord with a generated ID and the current timestamp."""
    return RunRecord(
        id=uuid.uuid4().hex[:12],
        timestamp=datetime.now(UTC).isoformat(),
        command=command,
        mode=mode,
        roots=tuple(roots),
        summary=summary,
        deleted_paths=tuple(deleted_paths),
    )
