"""Config command implementation.

Shows, creates and locates the settings file.
"""

from pathlib import Path
from typing import Annotated

import tomli_w
import typer

from nulsweep.cli.types import get_settings
from nulsweep.core.paths import get_settings_path
from nulsweep.core.settings import SettingsError, SweepSettings, save_settings, settings_to_dict
from nulsweep.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and create the settings file.",
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the effective settings as TOML."""
    settings = get_settings(ctx)
    console.print(f"[dim]# {_settings_path(ctx)}[/dim]")
    console.print(tomli_w.dumps(settings_to_dict(settings)), highlight=False, markup=False)


@app.command()
def init(
    ctx: typer.Context,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing settings file."),
    ] = False,
) -> None:
    """Write a settings file with default values."""
    path = _settings_path(ctx)
    if path.exists() and not force:
        print_info(f"Settings file already exists: {path} (use --force to overwrite)")
        return

    try:
        written = save_settings(SweepSettings(), path)
    except SettingsError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Settings written to {written}")


@app.command()
def path(ctx: typer.Context) -> None:
    """Print the settings file location."""
    typer.echo(str(_settings_path(ctx)))


def _settings_path(ctx: typer.Context) -> Path:
    obj = ctx.find_root().obj
    if isinstance(obj, dict) and obj.get("config_path") is not None:
        return obj["config_path"]
    return get_settings_path()
