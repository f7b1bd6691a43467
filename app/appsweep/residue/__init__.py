"""Residual file discovery.

Finds the files and directories an application leaves behind in the
user's ``~/Library`` and measures their size.
"""

from appsweep.residue.models import ApplicationIdentity, FileCategory, ResidualFile
from appsweep.residue.scanner import ResidualFileScanner, matches_identity
from appsweep.residue.sizing import compute_size

__all__ = [
    "ApplicationIdentity",
    "FileCategory",
    "ResidualFile",
    "ResidualFileScanner",
    "compute_size",
    "matches_identity",
]
