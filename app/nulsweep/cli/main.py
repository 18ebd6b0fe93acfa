"""Main CLI application entry point.

Defines the Typer application and global options.
"""

from pathlib import Path
from typing import Annotated

import typer

from nulsweep import __version__
from nulsweep.cli.commands import clean, config, history, scan, watch
from nulsweep.core.log import configure_logging
from nulsweep.core.settings import SettingsError, load_settings
from nulsweep.utils.formatting import print_error, print_warning

# Create main Typer app
app = typer.Typer(
    name="nulsweep",
    help="Find and remove files named after Windows reserved device names.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"nulsweep version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose output.",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress non-essential output.",
        ),
    ] = False,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Also write a debug log to this file.",
        ),
    ] = None,
    config_path: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Settings file to use instead of the default one.",
        ),
    ] = None,
) -> None:
    """nulsweep - Remove NUL, CON, COM1 and other reserved-name files.

    Such files are usually left behind by tools that treat Windows like
    POSIX (``> nul`` in a bash shell). Explorer and ``del`` cannot remove
    them; nulsweep deletes them through the extended path form.
    """
    # Store options in context for subcommands
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = config_path

    try:
        configure_logging(verbose=verbose, quiet=quiet, log_file=log_file)
    except OSError as e:
        print_error(f"Cannot open log file: {e}")
        raise typer.Exit(code=1) from e

    try:
        ctx.obj["settings"] = load_settings(config_path)
    except SettingsError as e:
        # config init --force must still be able to replace a broken file
        if ctx.invoked_subcommand == "config":
            print_warning(str(e))
            return
        print_error(str(e))
        raise typer.Exit(code=1) from e


# Register commands
app.command("scan")(scan.scan)
app.command("clean")(clean.clean)
app.command("watch")(watch.watch)
app.command("history")(history.history)
app.add_typer(config.app, name="config")


if __name__ == "__main__":
    app()
