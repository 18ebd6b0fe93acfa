"""Reserved-name file discovery and removal.

This package provides the scanner, the layered deletion engine, the
selection controller that decides what gets deleted, run bookkeeping,
watch mode, and export of scan results.
"""

from nulsweep.sweeper.bypass import (
    BypassDeleter,
    BypassMethod,
    CommandBypassDeleter,
    NativeBypassDeleter,
    classify_error_text,
    create_bypass_deleter,
)
from nulsweep.sweeper.engine import DeletionEngine
from nulsweep.sweeper.models import DeletionOptions, DeletionOutcome, DeletionStatus, FoundFile
from nulsweep.sweeper.scanner import ReservedFileScanner, default_scan_roots
from nulsweep.sweeper.selection import (
    PromptChoice,
    Prompter,
    SelectionController,
    SelectionMode,
    SelectionResult,
    resolve_mode,
)
from nulsweep.sweeper.session import RunOutcome, RunSummary, ScanSession
from nulsweep.sweeper.watch import ReservedFileWatcher

__all__ = [
    "BypassDeleter",
    "BypassMethod",
    "CommandBypassDeleter",
    "DeletionEngine",
    "DeletionOptions",
    "DeletionOutcome",
    "DeletionStatus",
    "FoundFile",
    "NativeBypassDeleter",
    "PromptChoice",
    "Prompter",
    "ReservedFileScanner",
    "ReservedFileWatcher",
    "RunOutcome",
    "RunSummary",
    "ScanSession",
    "SelectionController",
    "SelectionMode",
    "SelectionResult",
    "classify_error_text",
    "create_bypass_deleter",
    "default_scan_roots",
    "resolve_mode",
]
