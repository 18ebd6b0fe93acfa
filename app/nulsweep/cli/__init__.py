"""CLI package for nulsweep.

This package contains the Typer application and all subcommands.
"""

from nulsweep.cli.main import app

__all__ = ["app"]
