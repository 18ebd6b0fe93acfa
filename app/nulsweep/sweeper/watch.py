"""Watch mode: remove reserved-name files as they appear.

Polls each root on an interval and hands every new or changed
reserved-name file to the same engine used by ``clean``. Files are
processed one at a time; a file whose removal failed is retried only
after it changes.
"""

import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

from nulsweep.sweeper.engine import DeletionEngine
from nulsweep.sweeper.models import DeletionOutcome, FoundFile
from nulsweep.sweeper.scanner import ReservedFileScanner
from nulsweep.sweeper.session import ScanSession

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _RootState:
    """Per-root memory of files already handled (path -> mtime timestamp)."""

    root: str
    handled: dict[str, float] = field(default_factory=lambda: {})


class ReservedFileWatcher:
    """Polls roots and removes reserved-name files as they show up.

    Args:
        roots: Directories to watch; each is tracked independently.
        scanner: Scanner carrying the exclusion and depth settings.
        engine: Engine removing each detected file.
        interval_seconds: Pause between polls.
        cancel_event: Setting it stops the loop after the current file.
        on_outcome: Called after each file is processed.
    """

    def __init__(
        self,
        roots: Iterable[str],
        scanner: ReservedFileScanner,
        engine: DeletionEngine,
        *,
        interval_seconds: float = 5.0,
        cancel_event: threading.Event | None = None,
        on_outcome: Callable[[FoundFile, DeletionOutcome], None] | None = None,
    ) -> None:
        self._states = [_RootState(root=r) for r in roots]
        self._scanner = scanner
        self._engine = engine
        self._interval = interval_seconds
        self._cancel_event = cancel_event or threading.Event()
        self._on_outcome = on_outcome
        self.session = ScanSession()

    def stop(self) -> None:
        """Ask the loop to stop."""
        self._cancel_event.set()

    def run(self, max_cycles: int | None = None) -> ScanSession:
        """Poll until stopped (or for max_cycles polls).

        Args:
            max_cycles: Number of polls before returning; None runs until stopped.

        Returns:
            The watch session with accumulated counters.
        """
        cycles = 0
        logger.info("Watching %d root(s) every %ss", len(self._states), self._interval)

        while not self._cancel_event.is_set():
            self.poll_once()
            cycles += 1
            if max_cycles is not None and cycles >= max_cycles:
                break
            if self._cancel_event.wait(self._interval):
                break

        return self.session

    def poll_once(self) -> list[tuple[FoundFile, DeletionOutcome]]:
        """Scan every root once and remove new reserved-name files.

        Returns:
            (file, outcome) pairs for the files processed in this poll.
        """
        processed: list[tuple[FoundFile, DeletionOutcome]] = []

        for state in self._states:
            if self._cancel_event.is_set():
                break
            processed.extend(self._poll_root(state))

        return processed

    def _poll_root(self, state: _RootState) -> list[tuple[FoundFile, DeletionOutcome]]:
        processed: list[tuple[FoundFile, DeletionOutcome]] = []
        present: set[str] = set()
        poll_counters = ScanSession()

        for file in self._scanner.scan([state.root], poll_counters):
            present.add(file.full_path)
            stamp = file.last_modified.timestamp()
            if state.handled.get(file.full_path) == stamp:
                continue

            self.session.files_found += 1
            outcome = self._engine.remove(file)
            self.session.record_outcome(file, outcome)
            if outcome.success:
                state.handled.pop(file.full_path, None)
            else:
                state.handled[file.full_path] = stamp

            if self._on_outcome is not None:
                self._on_outcome(file, outcome)
            processed.append((file, outcome))

            if self._cancel_event.is_set():
                break

        self.session.files_scanned += poll_counters.files_scanned

        for path in list(state.handled):
            if path not in present:
                del state.handled[path]

        return processed
