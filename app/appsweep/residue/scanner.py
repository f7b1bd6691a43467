"""Residual file scanner.

Given an application identity, looks through the per-user ``~/Library``
locations where macOS applications keep data and returns every entry
that appears to belong to that application, already sized.

Matching is heuristic: an entry matches when its lowercase filename
contains the lowercase display name, the bundle identifier, or one of
the identifier's components longer than three characters. A few
locations are keyed directly by bundle identifier and use an exact
existence check instead.
"""

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

from appsweep.residue.models import ApplicationIdentity, FileCategory, ResidualFile
from appsweep.residue.sizing import compute_size

logger = logging.getLogger(__name__)

# Locations (relative to ~/Library) searched with the generic matcher.
_SEARCH_LOCATIONS: tuple[tuple[str, FileCategory], ...] = (
    ("Preferences", FileCategory.PREFERENCES),
    ("Application Support", FileCategory.APPLICATION_SUPPORT),
    ("Caches", FileCategory.CACHES),
    ("Logs", FileCategory.LOGS),
)

_SAVED_STATE_DIR = "Saved Application State"
_CONTAINERS_DIR = "Containers"
_GROUP_CONTAINERS_DIR = "Group Containers"
_COOKIES_DIR = "Cookies"
_LAUNCH_AGENTS_DIR = "LaunchAgents"
_CRASH_REPORTS_DIR = "Logs/DiagnosticReports"
_DEVELOPER_DIR = "Developer"

# Xcode keeps huge auxiliary stores under ~/Library/Developer; list them
# on their own so the user can pick them individually.
_XCODE_BUNDLE_ID = "com.apple.dt.Xcode"
_XCODE_DEVELOPER_SUBDIRS: tuple[str, ...] = ("Xcode", "CoreSimulator")


class ResidualFileScanner:
    """Finds leftover files of an application in the user's Library.

    Every location is scanned independently; a missing or unreadable
    location contributes nothing and never stops the others.

    Args:
        home: Home directory to scan. Defaults to the current user's home.
    """

    def __init__(self, *, home: Path | None = None) -> None:
        self._home = home if home is not None else Path.home()
        self._library = self._home / "Library"

    @property
    def library(self) -> Path:
        """The ``~/Library`` directory being scanned."""
        return self._library

    def scan(self, identity: ApplicationIdentity) -> list[ResidualFile]:
        """Scan all known locations for residual files of an application.

        Results are de-duplicated by path; when two locations report the
        same entry the first one wins.

        Args:
            identity: Name and bundle identifier of the application.

        Returns:
            Residual files in location order.
        """
        sub_scans: tuple[Callable[[ApplicationIdentity], Iterator[ResidualFile]], ...] = (
            self._scan_search_locations,
            self._scan_saved_state,
            self._scan_containers,
            self._scan_group_containers,
            self._scan_cookies,
            self._scan_launch_agents,
            self._scan_crash_reports,
            self._scan_developer,
        )

        found: dict[str, ResidualFile] = {}
        for sub_scan in sub_scans:
            for residual in sub_scan(identity):
                found.setdefault(residual.path, residual)

        logger.debug("Found %d residual files for %s", len(found), identity.name)
        return list(found.values())

    def _scan_search_locations(self, identity: ApplicationIdentity) -> Iterator[ResidualFile]:
        for relative, category in _SEARCH_LOCATIONS:
            yield from self._search_directory(self._library / relative, identity, category)

    def _scan_saved_state(self, identity: ApplicationIdentity) -> Iterator[ResidualFile]:
        if not identity.bundle_identifier:
            return
        target = self._library / _SAVED_STATE_DIR / f"{identity.bundle_identifier}.savedState"
        yield from self._existing(target, FileCategory.SAVED_STATE)

    def _scan_containers(self, identity: ApplicationIdentity) -> Iterator[ResidualFile]:
        if not identity.bundle_identifier:
            return
        target = self._library / _CONTAINERS_DIR / identity.bundle_identifier
        yield from self._existing(target, FileCategory.CONTAINERS)

    def _scan_group_containers(self, identity: ApplicationIdentity) -> Iterator[ResidualFile]:
        """Group containers are named ``<team-id>.<bundle-id>``, so match by substring."""
        if not identity.bundle_identifier:
            return
        bundle_id = identity.bundle_identifier.lower()
        for entry in self._list_directory(self._library / _GROUP_CONTAINERS_DIR):
            if bundle_id in entry.name.lower():
                yield self._make_residual(entry, FileCategory.GROUP_CONTAINERS)

    def _scan_cookies(self, identity: ApplicationIdentity) -> Iterator[ResidualFile]:
        yield from self._search_directory(
            self._library / _COOKIES_DIR, identity, FileCategory.COOKIES
        )

    def _scan_launch_agents(self, identity: ApplicationIdentity) -> Iterator[ResidualFile]:
        yield from self._search_directory(
            self._library / _LAUNCH_AGENTS_DIR, identity, FileCategory.LAUNCH_AGENTS
        )

    def _scan_crash_reports(self, identity: ApplicationIdentity) -> Iterator[ResidualFile]:
        """Crash report names embed the process name, never the bundle identifier."""
        name = identity.name.lower()
        for entry in self._list_directory(self._library / _CRASH_REPORTS_DIR):
            if name in entry.name.lower():
                yield self._make_residual(entry, FileCategory.CRASH_REPORTS)

    def _scan_developer(self, identity: ApplicationIdentity) -> Iterator[ResidualFile]:
        developer = self._library / _DEVELOPER_DIR
        yield from self._search_directory(developer, identity, FileCategory.DEVELOPER)

        if identity.bundle_identifier == _XCODE_BUNDLE_ID:
            for subdir in _XCODE_DEVELOPER_SUBDIRS:
                yield from self._existing(developer / subdir, FileCategory.DEVELOPER)

    def _search_directory(
        self,
        directory: Path,
        identity: ApplicationIdentity,
        category: FileCategory,
    ) -> Iterator[ResidualFile]:
        """Yield top-level entries of ``directory`` that match the identity.

        Hidden entries are ignored.
        """
        for entry in self._list_directory(directory):
            if entry.name.startswith("."):
                continue
            if matches_identity(entry.name, identity):
                yield self._make_residual(entry, category)

    def _existing(self, target: Path, category: FileCategory) -> Iterator[ResidualFile]:
        if target.exists() or target.is_symlink():
            yield self._make_residual(target, category)

    @staticmethod
    def _list_directory(directory: Path) -> list[Path]:
        """List a directory, returning nothing if it is missing or unreadable."""
        try:
            return sorted(directory.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return []
        except PermissionError:
            logger.warning("Permission denied scanning directory: %s", directory)
            return []
        except OSError as e:
            logger.warning("Cannot scan directory %s: %s", directory, e)
            return []

    @staticmethod
    def _make_residual(entry: Path, category: FileCategory) -> ResidualFile:
        return ResidualFile(
            path=str(entry),
            category=category,
            size_bytes=compute_size(entry),
        )


def matches_identity(filename: str, identity: ApplicationIdentity) -> bool:
    """Check whether a filename appears to belong to an application.

    Args:
        filename: Basename of a directory entry.
        identity: Application to match against.

    Returns:
        True if the lowercase filename contains the display name, the
        bundle identifier, or an identifier component longer than three
        characters.
    """
    name_lower = filename.lower()

    if identity.name.lower() in name_lower:
        return True

    if identity.bundle_identifier:
        if identity.bundle_identifier.lower() in name_lower:
            return True
        for component in identity.identifier_components:
            if component in name_lower:
                return True

    return False
