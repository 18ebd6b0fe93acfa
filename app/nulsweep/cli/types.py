"""Shared types and helpers for CLI commands.

Holds the option definitions reused by scan, clean and watch, the console
prompter, and the helpers that merge settings with command-line flags.
"""

from collections.abc import Sequence
from dataclasses import replace
from enum import Enum
from pathlib import Path
from typing import Annotated, Any

import typer

from nulsweep.core.settings import SettingsError, SweepSettings, load_settings
from nulsweep.core.validator import NoValidPathsError, PathValidationError, resolve_scan_roots
from nulsweep.sweeper.bypass import BypassDeleter, BypassMethod, create_bypass_deleter
from nulsweep.sweeper.export import export_files
from nulsweep.sweeper.models import MAX_RETRY_COUNT, DeletionOptions, FoundFile
from nulsweep.sweeper.scanner import ReservedFileScanner, default_scan_roots
from nulsweep.utils.formatting import err_console, print_error, print_warning


class OutputFormat(str, Enum):
    """Output format options for scan results."""

    TABLE = "table"
    JSON = "json"
    CSV = "csv"


PathsArgument = Annotated[
    list[str] | None,
    typer.Argument(
        help="Directories to scan. Defaults to configured roots, then all fixed drives.",
        show_default=False,
    ),
]
ExcludeOption = Annotated[
    list[str] | None,
    typer.Option(
        "--exclude",
        "-x",
        help="Skip paths containing this text (repeatable, case-insensitive).",
    ),
]
MaxDepthOption = Annotated[
    int | None,
    typer.Option(
        "--max-depth",
        "-d",
        min=0,
        help="Maximum directory depth to scan (0 = unlimited).",
    ),
]
BackupDirOption = Annotated[
    Path | None,
    typer.Option(
        "--backup-dir",
        "-b",
        help="Copy each file here before removing it.",
    ),
]
RecycleBinOption = Annotated[
    bool | None,
    typer.Option(
        "--recycle-bin/--no-recycle-bin",
        help="Try the Recycle Bin before the bypass delete.",
        show_default=False,
    ),
]
RetryCountOption = Annotated[
    int | None,
    typer.Option(
        "--retry-count",
        "-r",
        min=0,
        max=MAX_RETRY_COUNT,
        help="Extra attempts for locked files (0-10).",
    ),
]
RetryDelayOption = Annotated[
    int | None,
    typer.Option(
        "--retry-delay",
        min=1,
        max=60,
        help="Seconds between attempts for locked files (1-60).",
    ),
]
BypassMethodOption = Annotated[
    BypassMethod | None,
    typer.Option(
        "--bypass-method",
        help="Delete through os.remove (native) or cmd del (command).",
        show_default=False,
    ),
]


class ConsolePrompter:
    """Prompter asking on the terminal through Typer."""

    def confirm_batch(self, files: Sequence[FoundFile]) -> bool:
        return typer.confirm(
            f"\nDelete {len(files)} reserved-name file(s)?",
            default=False,
        )

    def ask(self, file: FoundFile, index: int, total: int) -> str:
        return typer.prompt(
            f"[{index}/{total}] Delete {file.full_path}? [y]es/[n]o/[a]ll/[q]uit",
            default="n",
            show_default=False,
        )


def get_settings(ctx: typer.Context) -> SweepSettings:
    """Get the settings loaded by the main callback (or load them now)."""
    obj = ctx.find_root().obj
    if not isinstance(obj, dict):
        obj = {}
    if isinstance(obj.get("settings"), SweepSettings):
        return obj["settings"]
    try:
        return load_settings(obj.get("config_path"))
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def resolve_roots(paths: list[str] | None, settings: SweepSettings) -> list[str]:
    """Pick scan roots (arguments, then settings, then defaults) and validate them.

    Invalid roots are reported as warnings; the command exits with code 1
    if none is left.
    """
    candidates = paths or settings.roots or default_scan_roots()

    def _warn(error: PathValidationError) -> None:
        print_warning(f"Skipping {error}")

    try:
        return resolve_scan_roots(candidates, on_invalid=_warn)
    except NoValidPathsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def build_scanner(
    settings: SweepSettings,
    exclude: list[str] | None,
    max_depth: int | None,
) -> ReservedFileScanner:
    """Build a scanner from settings plus command-line overrides.

    Exclusions from the command line are added to the configured ones.
    """
    return ReservedFileScanner(
        exclude=[*settings.exclude, *(exclude or [])],
        max_depth=max_depth if max_depth is not None else settings.max_depth,
    )


def build_deletion_options(
    settings: SweepSettings,
    *,
    backup_dir: Path | None,
    recycle_bin: bool | None,
    retry_count: int | None,
    retry_delay: int | None,
) -> DeletionOptions:
    """Build engine options from settings plus command-line overrides."""
    overrides: dict[str, Any] = {}
    if retry_count is not None:
        overrides["retry_count"] = retry_count
    if retry_delay is not None:
        overrides["retry_delay_seconds"] = float(retry_delay)
    if recycle_bin is not None:
        overrides["use_recycle_bin"] = recycle_bin
    if backup_dir is not None:
        overrides["backup_dir"] = backup_dir
    return replace(settings.deletion_options(), **overrides)


def build_bypass_deleter(
    settings: SweepSettings,
    bypass_method: BypassMethod | None,
) -> BypassDeleter:
    """Build the bypass deleter from settings plus a command-line override."""
    return create_bypass_deleter(bypass_method or settings.bypass_method)


def export_found_files(files: Sequence[FoundFile], export_path: Path) -> None:
    """Export found files, exiting with code 1 if the file cannot be written.

    The confirmation goes to stderr so JSON/CSV on stdout stays clean.
    """
    try:
        written = export_files(files, export_path)
    except OSError as e:
        print_error(f"Failed to export: {e}")
        raise typer.Exit(code=1) from e
    err_console.print(f"[info]Results exported to {written}[/]")
