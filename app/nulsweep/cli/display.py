"""Shared Rich display functions for found files and run results."""

import json
from collections.abc import Sequence

from rich.table import Table

from nulsweep.sweeper.export import files_to_records
from nulsweep.sweeper.models import DeletionOutcome, DeletionStatus, FoundFile
from nulsweep.sweeper.session import RunOutcome, RunSummary
from nulsweep.utils.formatting import (
    console,
    format_size,
    print_error,
    print_success,
    print_warning,
)

_STATUS_STYLES: dict[DeletionStatus, str] = {
    DeletionStatus.DELETED: "success",
    DeletionStatus.RECYCLED: "success",
    DeletionStatus.LOCKED: "warning",
    DeletionStatus.VALIDATION_FAILED: "warning",
}


def create_found_files_table(files: Sequence[FoundFile], dry_run: bool = False) -> Table:
    """Create a Rich table listing found files.

    Args:
        files: Files to list.
        dry_run: Whether this is a dry-run (changes table title).

    Returns:
        Rich Table with Name, Path, Size, Modified and Attributes columns.
    """
    title = "Reserved-Name Files (Dry Run)" if dry_run else "Reserved-Name Files"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Name", no_wrap=True)
    table.add_column("Directory", overflow="fold")
    table.add_column("Size", style="info", justify="right")
    table.add_column("Modified", style="muted")
    table.add_column("Attributes", style="muted")

    for f in files:
        name_style = "read_only" if f.is_read_only else "reserved_name"
        table.add_row(
            f"[{name_style}]{f.name}[/{name_style}]",
            f.directory,
            format_size(f.size_bytes),
            f.last_modified.strftime("%Y-%m-%d %H:%M"),
            f.attributes,
        )

    return table


def print_found_files_json(files: Sequence[FoundFile]) -> None:
    """Print found files as a JSON array."""
    console.print_json(json.dumps(files_to_records(files)))


def print_outcome(file: FoundFile, outcome: DeletionOutcome) -> None:
    """Print a one-line status for a processed file."""
    style = _STATUS_STYLES.get(outcome.status, "error")
    label = outcome.status.value.replace("_", " ")
    line = f"[{style}]{label:>17}[/{style}]  {file.full_path}"
    if outcome.error and not outcome.success:
        line += f"\n{'':>19}[muted]{outcome.error}[/muted]"
    if outcome.backup_path:
        line += f"\n{'':>19}[muted]backup: {outcome.backup_path}[/muted]"
    console.print(line, highlight=False)


def print_summary(summary: RunSummary) -> None:
    """Print the end-of-run summary."""
    table = Table(title="Summary", show_header=False, border_style="border")
    table.add_column("Metric", style="muted")
    table.add_column("Value", justify="right")
    table.add_row("Found", str(summary.total))
    table.add_row("Deleted", f"[success]{summary.deleted}[/success]")
    table.add_row("Failed", f"[error]{summary.failed}[/error]" if summary.failed else "0")
    table.add_row("Skipped", str(summary.skipped))
    table.add_row("Freed", format_size(summary.bytes_freed))
    table.add_row("Duration", f"{summary.duration_seconds:.1f}s")
    console.print(table)

    if summary.outcome == RunOutcome.SUCCESS:
        print_success("Done. Nothing failed.")
    elif summary.outcome == RunOutcome.PARTIAL_SUCCESS:
        print_warning(f"{summary.deleted} removed, {summary.failed} failed")
    else:
        print_error(f"No files removed, {summary.failed} failed")
