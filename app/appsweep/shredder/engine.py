"""Secure deletion engine.

Destroys files and directory trees so that their content is not trivially
recoverable: every regular file is overwritten with zeros from offset 0
to its end, renamed to a random name and then removed. This is a single
zero pass, not a forensic-grade or cryptographic erase.

Items are processed strictly one at a time, in input order. A failure
marks that item FAILED and the batch moves on.
"""

import logging
import os
import shutil
import stat
import threading
import time
import uuid
from collections.abc import Callable, Iterable
from pathlib import Path

from appsweep.residue.sizing import compute_size
from appsweep.safety.guard import SafetyGuard
from appsweep.shredder.models import (
    ShredItem,
    ShredProgress,
    ShredReport,
    ShredRequest,
    ShredResult,
    ShredStatus,
)

logger = logging.getLogger(__name__)

DEFAULT_BLOCK_SIZE: int = 1024 * 1024

ProgressCallback = Callable[[ShredProgress], None]


class ShredCancelledError(Exception):
    """Raised inside the overwrite loop once cancellation was requested."""


class ShredRefusedError(Exception):
    """Raised when a path is refused: protected, or not a file, directory or link."""


class Shredder:
    """Overwrites, renames and removes files and directories.

    The shredder keeps the state of one session: the queued items, the
    name of the item currently being shredded and the running total of
    reclaimed bytes. Observers receive a ShredProgress after every item
    state change and after every block written.

    Args:
        block_size: Size of each zero block written, in bytes.
        guard: If given, every path is re-checked with
            ``guard.is_safe_to_delete`` and refused paths are left untouched.
        on_progress: Callback receiving progress snapshots.
        cancel_event: Event that stops the batch once set. A block already
            being written completes; no further block or item starts.
    """

    def __init__(
        self,
        *,
        block_size: int = DEFAULT_BLOCK_SIZE,
        guard: SafetyGuard | None = None,
        on_progress: ProgressCallback | None = None,
        cancel_event: threading.Event | None = None,
    ) -> None:
        if block_size <= 0:
            msg = f"Block size must be positive, got {block_size}"
            raise ValueError(msg)
        self._block_size = block_size
        self._guard = guard
        self._on_progress = on_progress
        self._cancel_event = cancel_event if cancel_event is not None else threading.Event()

        self._items: list[ShredItem] = []
        self._is_processing = False
        self._current_item_name = ""
        self._completed = 0
        self._bytes_reclaimed = 0

    @property
    def items(self) -> list[ShredItem]:
        """Queued items with their current status."""
        return list(self._items)

    @property
    def is_processing(self) -> bool:
        """True while a batch is running."""
        return self._is_processing

    @property
    def current_item_name(self) -> str:
        """Name of the item being shredded, "" when idle."""
        return self._current_item_name

    @property
    def bytes_reclaimed(self) -> int:
        """Bytes reclaimed so far in the current or last batch."""
        return self._bytes_reclaimed

    @property
    def progress(self) -> ShredProgress:
        """Current progress snapshot."""
        return ShredProgress(
            current_item_name=self._current_item_name,
            completed=self._completed,
            total=len(self._items),
            bytes_reclaimed=self._bytes_reclaimed,
        )

    def add(self, path: str | Path) -> ShredItem | None:
        """Queue a path, measuring its size now.

        Args:
            path: File or directory to shred; ``~`` is expanded.

        Returns:
            The new item, or None if the path is already queued.
        """
        full = os.path.abspath(os.path.expanduser(str(path)))
        if any(item.request.path == full for item in self._items):
            return None

        item = ShredItem(ShredRequest(path=full, size_bytes=compute_size(full)))
        self._items.append(item)
        return item

    def remove(self, path: str | Path) -> bool:
        """Remove a queued path. Returns True if it was queued."""
        full = os.path.abspath(os.path.expanduser(str(path)))
        before = len(self._items)
        self._items = [item for item in self._items if item.request.path != full]
        return len(self._items) != before

    def reset(self) -> None:
        """Clear the queue, counters and any pending cancellation."""
        self._items = []
        self._is_processing = False
        self._current_item_name = ""
        self._completed = 0
        self._bytes_reclaimed = 0
        self._cancel_event.clear()

    def cancel(self) -> None:
        """Request cancellation of the running batch."""
        self._cancel_event.set()

    def shred(self, requests: Iterable[ShredRequest] | None = None) -> ShredReport:
        """Destroy all pending items, one at a time.

        Args:
            requests: Replaces the queue when given; otherwise the items
                queued with add() are processed.

        Returns:
            ShredReport with one result per item that reached a terminal
            state and the total of bytes reclaimed by successful items.
        """
        if requests is not None:
            self._items = [ShredItem(request) for request in requests]

        self._is_processing = True
        self._completed = sum(1 for item in self._items if item.status.is_terminal)
        self._bytes_reclaimed = 0
        results: list[ShredResult] = []
        cancelled = False

        try:
            for item in self._items:
                if item.status != ShredStatus.PENDING:
                    continue
                if self._cancel_event.is_set():
                    cancelled = True
                    break

                try:
                    result = self._process(item)
                except ShredCancelledError:
                    logger.info("Shredding cancelled during %s", item.request.path)
                    results.append(self._fail(item, "cancelled"))
                    self._completed += 1
                    cancelled = True
                    break

                results.append(result)
                self._completed += 1
                self._bytes_reclaimed += result.bytes_reclaimed
                self._notify()
        finally:
            self._is_processing = False
            self._current_item_name = ""
            self._notify()

        return ShredReport(
            results=results,
            bytes_reclaimed=self._bytes_reclaimed,
            cancelled=cancelled,
        )

    def _process(self, item: ShredItem) -> ShredResult:
        request = item.request
        self._current_item_name = request.name
        item.status = ShredStatus.SHREDDING
        self._notify()

        try:
            self._destroy(request.path)
        except ShredCancelledError:
            raise
        except ShredRefusedError as e:
            return self._fail(item, str(e), protected=True)
        except OSError as e:
            logger.warning("Failed to shred %s: %s", request.path, e)
            return self._fail(item, str(e))
        except Exception as e:
            logger.exception("Unexpected error while shredding %r", request.path)
            return self._fail(item, str(e) or type(e).__name__)

        item.status = ShredStatus.DONE
        return ShredResult(path=request.path, success=True, bytes_reclaimed=request.size_bytes)

    @staticmethod
    def _fail(item: ShredItem, error: str, *, protected: bool = False) -> ShredResult:
        item.status = ShredStatus.FAILED
        item.error = error
        return ShredResult(path=item.request.path, success=False, error=error, protected=protected)

    def _destroy(self, path: str) -> None:
        """Shred one path.

        Raises:
            ShredRefusedError: If the guard refuses the path, or the path is
                a device, FIFO or socket.
            ShredCancelledError: If cancellation was requested mid-item.
            OSError: On any filesystem failure.
        """
        if self._guard is not None and not self._guard.is_safe_to_delete(path):
            msg = f"Protected path cannot be shredded: {path}"
            raise ShredRefusedError(msg)

        try:
            mode = os.lstat(path).st_mode
        except FileNotFoundError:
            logger.debug("Already gone: %s", path)
            return

        # Links are removed, their targets are never overwritten.
        if stat.S_ISLNK(mode):
            os.unlink(path)
        elif stat.S_ISDIR(mode):
            self._shred_directory(path)
        elif stat.S_ISREG(mode):
            self._overwrite(path)
            self._remove_file(self._obfuscate(path))
        else:
            msg = f"Not a regular file, directory or link: {path}"
            raise ShredRefusedError(msg)

    def _shred_directory(self, path: str) -> None:
        """Overwrite every regular file below ``path``, then remove the tree."""
        for root, _dirs, files in os.walk(path, onerror=_raise_walk_error):
            for name in files:
                child = os.path.join(root, name)
                if stat.S_ISREG(os.lstat(child).st_mode):
                    self._overwrite(child)
        shutil.rmtree(path)

    def _overwrite(self, path: str) -> None:
        """Overwrite a file in place with zeros, block by block."""
        zeros = bytes(self._block_size)
        with open(path, "r+b") as f:
            length = f.seek(0, os.SEEK_END)
            f.seek(0)
            written = 0
            while written < length:
                if self._cancel_event.is_set():
                    raise ShredCancelledError
                chunk = min(self._block_size, length - written)
                f.write(zeros if chunk == self._block_size else bytes(chunk))
                written += chunk
                self._notify()
                # Give other threads (UI, cancel requests) a chance to run.
                time.sleep(0)
            f.flush()
            os.fsync(f.fileno())

    @staticmethod
    def _obfuscate(path: str) -> str:
        """Rename a file to a random name in the same directory."""
        renamed = os.path.join(os.path.dirname(path), uuid.uuid4().hex)
        os.rename(path, renamed)
        return renamed

    @staticmethod
    def _remove_file(path: str) -> None:
        os.unlink(path)

    def _notify(self) -> None:
        if self._on_progress is not None:
            self._on_progress(self.progress)


def _raise_walk_error(error: OSError) -> None:
    raise error
