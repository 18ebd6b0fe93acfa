"""Scan command implementation.

Lists reserved-name files without deleting anything.
"""

from pathlib import Path
from typing import Annotated

import typer

from nulsweep.cli.display import create_found_files_table, print_found_files_json
from nulsweep.cli.types import (
    ExcludeOption,
    MaxDepthOption,
    OutputFormat,
    PathsArgument,
    build_scanner,
    export_found_files,
    get_settings,
    resolve_roots,
)
from nulsweep.sweeper.export import render_csv
from nulsweep.sweeper.session import ScanSession
from nulsweep.utils.formatting import console, format_size, print_success


def scan(
    ctx: typer.Context,
    paths: PathsArgument = None,
    exclude: ExcludeOption = None,
    max_depth: MaxDepthOption = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option(
            "--format",
            "-f",
            help="Output format.",
            case_sensitive=False,
        ),
    ] = OutputFormat.TABLE,
    export_path: Annotated[
        Path | None,
        typer.Option(
            "--export",
            "-e",
            help="Export results to a CSV or JSON file (by extension).",
        ),
    ] = None,
) -> None:
    """List files named after reserved device names (NUL, CON, COM1...)."""
    settings = get_settings(ctx)
    roots = resolve_roots(paths, settings)
    scanner = build_scanner(settings, exclude, max_depth)

    session = ScanSession()
    files = list(scanner.scan(roots, session))
    session.finish()

    if export_path is not None:
        export_found_files(files, export_path)

    if output_format == OutputFormat.JSON:
        print_found_files_json(files)
        return
    if output_format == OutputFormat.CSV:
        typer.echo(render_csv(files), nl=False)
        return

    if not files:
        print_success("No reserved-name files found.")
        console.print(f"[dim]Scanned {session.files_scanned} file(s) in {len(roots)} path(s)[/dim]")
        return

    console.print(create_found_files_table(files))
    total_size = sum(f.size_bytes for f in files)
    console.print(
        f"\n[dim]Found {len(files)} reserved-name file(s) ({format_size(total_size)}) "
        f"among {session.files_scanned} scanned in {session.duration_seconds:.1f}s[/dim]"
    )
