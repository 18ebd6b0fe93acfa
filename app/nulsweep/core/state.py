"""State management for run history.

This module provides the StateManager class for persisting and querying
run records in a JSONL file.
"""

import json
import logging
from pathlib import Path

from nulsweep.core.paths import ensure_dir, get_state_dir
from nulsweep.models.history import RunRecord

logger = logging.getLogger(__name__)


class StateManager:
    """Manages run history in a JSONL file.

    Storage location: <state dir>/history.jsonl. Each line is one complete
    RunRecord, which keeps writes append-only.
    """

    HISTORY_FILENAME = "history.jsonl"

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize StateManager.

        Args:
            state_dir: Optional override for the state directory.
        """
        self._state_dir = state_dir if state_dir is not None else get_state_dir()

    @property
    def history_path(self) -> Path:
        """Path to the history file."""
        return self._state_dir / self.HISTORY_FILENAME

    def record_run(self, record: RunRecord) -> None:
        """Append a run record to the history file.

        Args:
            record: The run record to store.

        Raises:
            RuntimeError: If the state directory cannot be created.
            OSError: If the file cannot be written.
        """
        ensure_dir(self._state_dir, "state")

        with self.history_path.open(mode="a", encoding="utf-8") as f:
            f.write(record.to_json_line() + "\n")
            f.flush()

    def get_history(self, limit: int | None = None) -> list[RunRecord]:
        """Read run records, newest first.

        Corrupt lines are skipped with a warning.

        Args:
            limit: Maximum number of records to return (None = all).

        Returns:
            List of RunRecord, newest first. Empty if there is no history.
        """
        if not self.history_path.exists():
            return []

        records: list[RunRecord] = []

        with self.history_path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue

                try:
                    records.append(RunRecord.from_json_line(line))
                except (json.JSONDecodeError, KeyError, ValueError, TypeError) as e:
                    logger.warning("Skipping corrupt history line %d: %s", line_num, e)

        records.reverse()

        if limit is not None:
            return records[:limit]
        return records
