"""Secure deletion of files and directories.

Overwrites content with zeros, obscures file names and removes the
entries, reporting per-item outcomes and reclaimed bytes.
"""

from appsweep.shredder.engine import DEFAULT_BLOCK_SIZE, Shredder
from appsweep.shredder.models import (
    ShredItem,
    ShredProgress,
    ShredReport,
    ShredRequest,
    ShredResult,
    ShredStatus,
)

__all__ = [
    "DEFAULT_BLOCK_SIZE",
    "ShredItem",
    "ShredProgress",
    "ShredReport",
    "ShredRequest",
    "ShredResult",
    "ShredStatus",
    "Shredder",
]
