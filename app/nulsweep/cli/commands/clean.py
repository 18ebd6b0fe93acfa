"""Clean command implementation.

Scans for reserved-name files and removes the selected ones through the
deletion engine. Exit code: 0 nothing failed, 1 nothing removed despite
attempts, 2 partial success.
"""

import logging
import sys
import threading
from pathlib import Path
from typing import Annotated

import typer

from nulsweep.cli.display import create_found_files_table, print_outcome, print_summary
from nulsweep.cli.types import (
    BackupDirOption,
    BypassMethodOption,
    ConsolePrompter,
    ExcludeOption,
    MaxDepthOption,
    PathsArgument,
    RecycleBinOption,
    RetryCountOption,
    RetryDelayOption,
    build_bypass_deleter,
    build_deletion_options,
    build_scanner,
    export_found_files,
    get_settings,
    resolve_roots,
)
from nulsweep.core.state import StateManager
from nulsweep.models.history import create_run_record
from nulsweep.sweeper.bypass import ELEVATION_HINT
from nulsweep.sweeper.engine import DeletionEngine
from nulsweep.sweeper.models import DeletionOutcome, DeletionStatus, FoundFile
from nulsweep.sweeper.selection import SelectionController, SelectionMode, resolve_mode
from nulsweep.sweeper.session import RunSummary, ScanSession
from nulsweep.utils.formatting import console, print_error, print_info, print_success, print_warning
from nulsweep.utils.shell import is_elevated, relaunch_elevated

logger = logging.getLogger(__name__)


def clean(
    ctx: typer.Context,
    paths: PathsArgument = None,
    exclude: ExcludeOption = None,
    max_depth: MaxDepthOption = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "--list-only", "-n", help="Show what would be deleted."),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Delete without asking."),
    ] = False,
    interactive: Annotated[
        bool,
        typer.Option("--interactive", "-i", help="Ask for each file (yes/no/all/quit)."),
    ] = False,
    backup_dir: BackupDirOption = None,
    recycle_bin: RecycleBinOption = None,
    retry_count: RetryCountOption = None,
    retry_delay: RetryDelayOption = None,
    bypass_method: BypassMethodOption = None,
    export_path: Annotated[
        Path | None,
        typer.Option("--export", "-e", help="Export found files to a CSV or JSON file."),
    ] = None,
    elevate: Annotated[
        bool,
        typer.Option("--elevate", help="Re-run with administrator rights (one UAC prompt)."),
    ] = False,
    no_history: Annotated[
        bool,
        typer.Option("--no-history", help="Do not record this run in the history file."),
    ] = False,
) -> None:
    """Find and delete files named after reserved device names.

    Asks once before deleting unless --force, --interactive or --dry-run
    is given (precedence: dry-run, force, interactive).
    """
    if elevate and not is_elevated():
        _relaunch_elevated()

    settings = get_settings(ctx)
    roots = resolve_roots(paths, settings)
    scanner = build_scanner(settings, exclude, max_depth)
    options = build_deletion_options(
        settings,
        backup_dir=backup_dir,
        recycle_bin=recycle_bin,
        retry_count=retry_count,
        retry_delay=retry_delay,
    )
    mode = resolve_mode(list_only=dry_run, force=force, interactive=interactive)

    session = ScanSession()
    files = list(scanner.scan(roots, session))

    if export_path is not None:
        export_found_files(files, export_path)

    if not files:
        print_success("No reserved-name files found.")
        return

    console.print(create_found_files_table(files, dry_run=mode == SelectionMode.LIST_ONLY))

    if mode == SelectionMode.LIST_ONLY:
        print_info(f"Dry-run: {len(files)} file(s) would be deleted.")
        return

    cancel_event = threading.Event()
    engine = DeletionEngine(
        options,
        deleter=build_bypass_deleter(settings, bypass_method),
        cancel_event=cancel_event,
    )
    deleted_paths: list[str] = []

    def _on_outcome(file: FoundFile, outcome: DeletionOutcome) -> None:
        print_outcome(file, outcome)
        if outcome.success:
            deleted_paths.append(file.full_path)

    controller = SelectionController(engine, ConsolePrompter(), on_outcome=_on_outcome)
    logger.debug("Selection mode %s for %d file(s)", mode.value, len(files))

    result = controller.run(mode, files, session)
    summary = session.finish()

    if result.cancelled and result.attempted == 0:
        print_info("Aborted.")
        return

    console.print()
    print_summary(summary)

    if any(e.status == DeletionStatus.ACCESS_DENIED for e in summary.errors) and not is_elevated():
        print_warning(ELEVATION_HINT)

    if settings.record_history and not no_history:
        _record_history(mode, roots, deleted_paths, summary)

    raise typer.Exit(code=summary.outcome.exit_code)


def _relaunch_elevated() -> None:
    """Re-run the current command elevated and exit with its exit code."""
    args = [a for a in sys.argv[1:] if a != "--elevate"]
    print_info("Requesting administrator rights...")
    exit_code = relaunch_elevated(args)
    if exit_code is None:
        print_error("Elevation was declined or is not available on this platform.")
        raise typer.Exit(code=1)
    raise typer.Exit(code=exit_code)


def _record_history(
    mode: SelectionMode,
    roots: list[str],
    deleted_paths: list[str],
    summary: RunSummary,
) -> None:
    """Append the run to the history file; failures only warn."""
    record = create_run_record(
        command="nulsweep clean",
        mode=mode.value,
        roots=roots,
        summary=summary.to_dict(),
        deleted_paths=deleted_paths,
    )
    try:
        StateManager().record_run(record)
    except (OSError, RuntimeError) as e:
        print_warning(f"Could not record to history: {e}")
