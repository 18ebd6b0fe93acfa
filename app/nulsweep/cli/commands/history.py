"""History command for viewing past clean runs."""

import json
from datetime import datetime
from typing import Annotated

import typer
from rich.table import Table

from nulsweep.core.state import StateManager
from nulsweep.models.history import RunRecord
from nulsweep.utils.formatting import console, format_size, print_info


def history(
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", min=1, help="Maximum number of runs to show."),
    ] = 20,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON."),
    ] = False,
) -> None:
    """Show recent clean runs, newest first."""
    records = StateManager().get_history(limit=limit)

    if json_output:
        console.print_json(json.dumps([r.to_dict() for r in records]))
        return

    if not records:
        print_info("No runs recorded yet.")
        return

    console.print(_create_history_table(records))


def _create_history_table(records: list[RunRecord]) -> Table:
    table = Table(
        title="Run History",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", style="muted", no_wrap=True)
    table.add_column("When", no_wrap=True)
    table.add_column("Mode")
    table.add_column("Found", justify="right")
    table.add_column("Deleted", justify="right", style="success")
    table.add_column("Failed", justify="right")
    table.add_column("Freed", justify="right", style="info")
    table.add_column("Outcome")

    for record in records:
        summary = record.summary
        failed = int(summary.get("failed", 0))
        table.add_row(
            record.id,
            _format_timestamp(record.timestamp),
            record.mode,
            str(summary.get("total", 0)),
            str(summary.get("deleted", 0)),
            f"[error]{failed}[/error]" if failed else "0",
            format_size(int(summary.get("bytes_freed", 0))),
            str(summary.get("outcome", "-")),
        )

    return table


def _format_timestamp(timestamp: str) -> str:
    try:
        return datetime.fromisoformat(timestamp).astimezone().strftime("%Y-%m-%d %H:%M")
    except ValueError:
        return timestamp
