"""Selection of which found files are handed to the deletion engine.

One mode is chosen per run. Prompting goes through the Prompter protocol
so the console layer and tests can supply their own.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from nulsweep.sweeper.engine import DeletionEngine
from nulsweep.sweeper.models import DeletionOutcome, FoundFile
from nulsweep.sweeper.session import ScanSession

logger = logging.getLogger(__name__)

OutcomeCallback = Callable[[FoundFile, DeletionOutcome], None]


class SelectionMode(str, Enum):
    """How found files are selected for deletion.

    Attributes:
        LIST_ONLY: Report only, delete nothing (also used for dry-run).
        FORCE: Delete everything without asking.
        INTERACTIVE: Ask per file (yes/no/all/quit).
        BATCH_CONFIRM: Ask once for the whole set.
    """

    LIST_ONLY = "list_only"
    FORCE = "force"
    INTERACTIVE = "interactive"
    BATCH_CONFIRM = "batch_confirm"


class PromptChoice(str, Enum):
    """Answers accepted by the per-file prompt."""

    YES = "y"
    NO = "n"
    ALL = "a"
    QUIT = "q"

    @classmethod
    def parse(cls, response: str) -> "PromptChoice | None":
        """Parse a raw answer ("y", "Yes", "A", ...), None if unrecognized."""
        text = response.strip().lower()
        if not text:
            return None
        aliases = {"yes": cls.YES, "no": cls.NO, "all": cls.ALL, "quit": cls.QUIT}
        if text in aliases:
            return aliases[text]
        try:
            return cls(text)
        except ValueError:
            return None


class Prompter(Protocol):
    """Asks the user what to delete."""

    def confirm_batch(self, files: Sequence[FoundFile]) -> bool:
        """Ask once whether to delete all files."""
        ...

    def ask(self, file: FoundFile, index: int, total: int) -> str:
        """Ask about one file; returns the raw answer."""
        ...


@dataclass(frozen=True, slots=True)
class SelectionResult:
    """What the controller did.

    Attributes:
        mode: Mode that was applied.
        attempted: Number of files handed to the engine.
        cancelled: True if the user declined or quit.
    """

    mode: SelectionMode
    attempted: int
    cancelled: bool = False


def resolve_mode(
    *,
    list_only: bool = False,
    force: bool = False,
    interactive: bool = False,
) -> SelectionMode:
    """Pick the selection mode; list-only beats force beats interactive."""
    if list_only:
        return SelectionMode.LIST_ONLY
    if force:
        return SelectionMode.FORCE
    if interactive:
        return SelectionMode.INTERACTIVE
    return SelectionMode.BATCH_CONFIRM


class SelectionController:
    """Drives the deletion engine according to the selection mode.

    Args:
        engine: Engine removing the selected files.
        prompter: Source of user answers (interactive and batch modes).
        on_outcome: Called after each file is processed, for per-file reporting.
    """

    def __init__(
        self,
        engine: DeletionEngine,
        prompter: Prompter | None = None,
        *,
        on_outcome: OutcomeCallback | None = None,
    ) -> None:
        self._engine = engine
        self._prompter = prompter
        self._on_outcome = on_outcome

    def run(
        self,
        mode: SelectionMode,
        files: Sequence[FoundFile],
        session: ScanSession,
    ) -> SelectionResult:
        """Apply a selection mode to the found files.

        Args:
            mode: Selection mode for this run.
            files: Files found by the scanner.
            session: Session receiving deleted/failed/skipped counts.

        Returns:
            SelectionResult describing what happened.

        Raises:
            ValueError: If a prompting mode is used without a prompter.
        """
        if mode == SelectionMode.LIST_ONLY or not files:
            return SelectionResult(mode=mode, attempted=0)

        if mode == SelectionMode.FORCE:
            return SelectionResult(mode=mode, attempted=self._remove_all(files, session))

        prompter = self._require_prompter()

        if mode == SelectionMode.INTERACTIVE:
            return self._run_interactive(prompter, files, session)

        if not prompter.confirm_batch(files):
            logger.info("Deletion of %d file(s) declined", len(files))
            session.record_skipped(len(files))
            return SelectionResult(mode=mode, attempted=0, cancelled=True)

        return SelectionResult(mode=mode, attempted=self._remove_all(files, session))

    def _require_prompter(self) -> Prompter:
        if self._prompter is None:
            msg = "A prompter is required for interactive and batch-confirm modes"
            raise ValueError(msg)
        return self._prompter

    def _remove_all(self, files: Sequence[FoundFile], session: ScanSession) -> int:
        for file in files:
            self._remove(file, session)
        return len(files)

    def _remove(self, file: FoundFile, session: ScanSession) -> None:
        outcome = self._engine.remove(file)
        session.record_outcome(file, outcome)
        if self._on_outcome is not None:
            self._on_outcome(file, outcome)

    def _run_interactive(
        self,
        prompter: Prompter,
        files: Sequence[FoundFile],
        session: ScanSession,
    ) -> SelectionResult:
        total = len(files)
        attempted = 0
        auto_confirm = False
        deleted_before = session.files_deleted
        failed_before = session.files_failed
        skipped_before = session.files_skipped

        for index, file in enumerate(files, start=1):
            if not auto_confirm:
                choice = PromptChoice.parse(prompter.ask(file, index, total))

                if choice == PromptChoice.QUIT:
                    handled = (session.files_deleted - deleted_before) + (
                        session.files_failed - failed_before
                    )
                    session.files_skipped = skipped_before + total - handled
                    logger.info("Interactive deletion stopped after %d file(s)", index - 1)
                    return SelectionResult(
                        mode=SelectionMode.INTERACTIVE,
                        attempted=attempted,
                        cancelled=True,
                    )

                if choice == PromptChoice.ALL:
                    auto_confirm = True
                elif choice != PromptChoice.YES:
                    session.record_skipped()
                    continue

            self._remove(file, session)
            attempted += 1

        return SelectionResult(mode=SelectionMode.INTERACTIVE, attempted=attempted)
