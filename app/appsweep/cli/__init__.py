"""CLI package for appsweep.

This package contains the Typer application and all subcommands.
"""

from appsweep.cli.main import app

__all__ = ["app"]
