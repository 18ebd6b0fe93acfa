"""CLI commands for nulsweep.

This package contains all subcommand implementations.
"""

from nulsweep.cli.commands import clean, config, history, scan, watch

__all__ = ["clean", "config", "history", "scan", "watch"]
