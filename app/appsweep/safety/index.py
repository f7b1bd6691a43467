"""Time-bounded index of installed application identities.

The index is a set of lowercase tokens: bundle names, bundle
identifiers, identifier components longer than three characters,
Homebrew cask names, running process names and a static vendor
safe-list. It is rebuilt lazily once it is older than the validity
window or after an explicit invalidation.
"""

import logging
import threading
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from appsweep.residue.models import MIN_IDENTIFIER_COMPONENT_LENGTH
from appsweep.safety.processes import (
    RunningApplication,
    list_running_applications,
    read_bundle_identifier,
)
from appsweep.safety.registry import VENDOR_SAFE_LIST, expand_home

logger = logging.getLogger(__name__)

CACHE_VALIDITY_SECONDS: float = 300.0

DEFAULT_APPLICATION_DIRS: tuple[str, ...] = (
    "/Applications",
    "/System/Applications",
    "/System/Applications/Utilities",
    "~/Applications",
)

DEFAULT_CASKROOM_DIRS: tuple[str, ...] = (
    "/opt/homebrew/Caskroom",
    "/usr/local/Caskroom",
)

ProcessLister = Callable[[], list[RunningApplication]]


class InstalledApplicationIndex:
    """Lazily rebuilt set of installed application tokens.

    A rebuild happens under a lock and the new snapshot is published only
    when complete, so concurrent readers either see the previous complete
    snapshot or wait for the new one.

    Args:
        home: Home directory used to expand ``~`` in application dirs.
        application_dirs: Directories searched for ``.app`` bundles.
        caskroom_dirs: Homebrew Caskroom directories.
        process_lister: Callable returning running applications.
        extra_identifiers: Additional tokens always present in the index.
        clock: Monotonic time source in seconds.
        validity_seconds: How long a snapshot stays fresh.
    """

    def __init__(
        self,
        *,
        home: Path | None = None,
        application_dirs: Iterable[str] = DEFAULT_APPLICATION_DIRS,
        caskroom_dirs: Iterable[str] = DEFAULT_CASKROOM_DIRS,
        process_lister: ProcessLister = list_running_applications,
        extra_identifiers: Iterable[str] = (),
        clock: Callable[[], float] = time.monotonic,
        validity_seconds: float = CACHE_VALIDITY_SECONDS,
    ) -> None:
        self._home = home if home is not None else Path.home()
        self._application_dirs = tuple(application_dirs)
        self._caskroom_dirs = tuple(caskroom_dirs)
        self._process_lister = process_lister
        self._extra_identifiers = tuple(i.lower() for i in extra_identifiers)
        self._clock = clock
        self._validity = validity_seconds

        self._lock = threading.Lock()
        self._snapshot: frozenset[str] = frozenset()
        self._built_at: float | None = None
        self._rescan_count = 0

    @property
    def built_at(self) -> float | None:
        """Clock value of the last rebuild, None if invalidated or never built."""
        return self._built_at

    @property
    def rescan_count(self) -> int:
        """Number of rebuilds performed so far."""
        return self._rescan_count

    def is_stale(self) -> bool:
        """Check if the snapshot must be rebuilt before use."""
        if self._built_at is None:
            return True
        return self._clock() - self._built_at >= self._validity

    def get(self) -> frozenset[str]:
        """Return the current snapshot, rebuilding it first if stale.

        The rebuild is synchronous and touches the filesystem; expect a
        noticeable delay on the first call after expiry.
        """
        with self._lock:
            if self.is_stale():
                self._snapshot = self._build()
                self._built_at = self._clock()
                self._rescan_count += 1
            return self._snapshot

    def invalidate(self) -> None:
        """Force the next get() to rebuild.

        Call after installing or uninstalling an application.
        """
        with self._lock:
            self._built_at = None
        logger.debug("Installed application index invalidated")

    def _build(self) -> frozenset[str]:
        tokens: set[str] = set()

        for directory in self._application_dirs:
            tokens.update(self._scan_application_dir(Path(expand_home(directory, self._home))))

        for caskroom in self._caskroom_dirs:
            tokens.update(entry.name.lower() for entry in _list_directory(Path(caskroom)))

        for app in self._process_lister():
            tokens.add(app.name.lower())
            if app.bundle_identifier:
                tokens.add(app.bundle_identifier.lower())

        tokens.update(VENDOR_SAFE_LIST)
        tokens.update(self._extra_identifiers)
        tokens.discard("")

        logger.debug("Rebuilt installed application index with %d tokens", len(tokens))
        return frozenset(tokens)

    @staticmethod
    def _scan_application_dir(directory: Path) -> set[str]:
        tokens: set[str] = set()
        for entry in _list_directory(directory):
            if entry.suffix != ".app":
                continue
            tokens.add(entry.stem.lower())

            bundle_id = read_bundle_identifier(entry)
            if bundle_id is None:
                continue
            bundle_id = bundle_id.lower()
            tokens.add(bundle_id)
            tokens.update(
                part
                for part in bundle_id.split(".")
                if len(part) > MIN_IDENTIFIER_COMPONENT_LENGTH
            )
        return tokens


def _list_directory(directory: Path) -> list[Path]:
    try:
        return list(directory.iterdir())
    except OSError as e:
        logger.debug("Skipping %s: %s", directory, e)
        return []
