"""CLI commands for appsweep."""

from appsweep.cli.commands import config, guard, residue, shred

__all__ = ["config", "guard", "residue", "shred"]
