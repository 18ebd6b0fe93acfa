"""Watch command implementation.

Keeps polling the given roots and removes reserved-name files as soon as
they appear, without prompting.
"""

import threading
from typing import Annotated

import typer

from nulsweep.cli.display import print_outcome
from nulsweep.cli.types import (
    BackupDirOption,
    BypassMethodOption,
    ExcludeOption,
    MaxDepthOption,
    PathsArgument,
    RecycleBinOption,
    RetryCountOption,
    RetryDelayOption,
    build_bypass_deleter,
    build_deletion_options,
    build_scanner,
    get_settings,
    resolve_roots,
)
from nulsweep.sweeper.engine import DeletionEngine
from nulsweep.sweeper.watch import ReservedFileWatcher
from nulsweep.utils.formatting import console, format_size, print_info


def watch(
    ctx: typer.Context,
    paths: PathsArgument = None,
    exclude: ExcludeOption = None,
    max_depth: MaxDepthOption = None,
    interval: Annotated[
        int | None,
        typer.Option("--interval", "-t", min=1, help="Seconds between polls."),
    ] = None,
    backup_dir: BackupDirOption = None,
    recycle_bin: RecycleBinOption = None,
    retry_count: RetryCountOption = None,
    retry_delay: RetryDelayOption = None,
    bypass_method: BypassMethodOption = None,
    max_cycles: Annotated[
        int | None,
        typer.Option("--max-cycles", min=1, help="Stop after this many polls."),
    ] = None,
) -> None:
    """Watch directories and delete reserved-name files as they appear."""
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

    cancel_event = threading.Event()
    engine = DeletionEngine(
        options,
        deleter=build_bypass_deleter(settings, bypass_method),
        cancel_event=cancel_event,
    )
    watcher = ReservedFileWatcher(
        roots,
        scanner,
        engine,
        interval_seconds=interval or settings.watch_interval_seconds,
        cancel_event=cancel_event,
        on_outcome=print_outcome,
    )

    print_info(f"Watching {len(roots)} path(s) for reserved-name files. Press Ctrl+C to stop.")
    try:
        session = watcher.run(max_cycles=max_cycles)
    except KeyboardInterrupt:
        watcher.stop()
        session = watcher.session

    summary = session.finish()
    console.print(
        f"\n[dim]Watch stopped: {summary.deleted} removed, {summary.failed} failed, "
        f"{format_size(summary.bytes_freed)} freed[/dim]"
    )
    raise typer.Exit(code=summary.outcome.exit_code)
