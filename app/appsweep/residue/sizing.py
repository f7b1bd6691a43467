"""On-disk size measurement for residual files."""

import logging
import os
import stat
from pathlib import Path

logger = logging.getLogger(__name__)


def compute_size(path: str | Path) -> int:
    """Return the size of a file or directory tree in bytes.

    Regular files report their length. Directories report the recursive
    sum of the regular files they contain. Symlinks are never followed and
    count as zero, as do entries that cannot be read. A missing path
    measures zero.

    Args:
        path: File or directory to measure.

    Returns:
        Size in bytes.
    """
    try:
        st = os.lstat(path)
    except OSError:
        return 0

    if stat.S_ISREG(st.st_mode):
        return st.st_size
    if not stat.S_ISDIR(st.st_mode):
        return 0

    total = 0
    for root, _dirs, files in os.walk(path, onerror=_log_walk_error):
        for name in files:
            try:
                child = os.lstat(os.path.join(root, name))
            except OSError:
                continue
            if stat.S_ISREG(child.st_mode):
                total += child.st_size
    return total


def _log_walk_error(error: OSError) -> None:
    logger.debug("Skipping unreadable entry while sizing: %s", error)
