"""Safety guard deciding whether a path may be deleted.

The guard combines the compiled-in registry with the installed
application index. Its verdicts lean towards keeping data: whenever a
check cannot be completed (unreadable metadata, ambiguous ownership) the
answer is "do not delete".

Denial checks, in order (first match wins):

1. Path under a protected prefix.
2. OS file: under a system prefix or carrying an immutable flag.
3. First-party preference file inside a Preferences directory.
4. Critical application settings: logged, but not denied.
5. Data tree of an installed application, unless inside a
   cache/tmp/log subdirectory.
"""

import logging
import os
import stat
import time
from collections.abc import Callable, Iterable
from pathlib import Path

from appsweep.core.config import SweepConfig
from appsweep.safety.index import DEFAULT_APPLICATION_DIRS, InstalledApplicationIndex, ProcessLister
from appsweep.safety.models import DeletionAdvice, DeletionRiskLevel
from appsweep.safety.processes import list_running_applications
from appsweep.safety.registry import (
    GENERIC_APPLICATION_SUPPORT_DIRS,
    SAFE_SUBDIRECTORY_NAMES,
    SYSTEM_FILE_PREFIXES,
    SYSTEM_PREFERENCE_WHITELIST,
    expand_home,
    has_reserved_vendor_prefix,
    is_critical_app_name,
    is_protected_path,
)

logger = logging.getLogger(__name__)

# Identifiers shorter than this never fuzzy-match an index token.
MIN_FUZZY_MATCH_LENGTH: int = 5

# Preferences modified more recently than this are assumed to be in use.
RECENT_PREFERENCE_DAYS: int = 7

_SECONDS_PER_DAY = 86400
_IMMUTABLE_FLAGS = stat.UF_IMMUTABLE | stat.SF_IMMUTABLE
_PREFERENCES_MARKER = "/Library/Preferences"
_CACHES_MARKER = "/Library/Caches"
_LOGS_MARKER = "/Library/Logs"


class SafetyGuard:
    """Classifies paths into delete / do-not-delete and risk levels.

    Args:
        home: Home directory the ``~`` prefixes refer to.
        index: Installed application index. Built from ``home`` if None.
        process_lister: Source of running applications.
        extra_protected_paths: Additional protected prefixes.
        clock: Wall-clock time source, used for preference recency.
    """

    def __init__(
        self,
        *,
        home: Path | None = None,
        index: InstalledApplicationIndex | None = None,
        process_lister: ProcessLister = list_running_applications,
        extra_protected_paths: Iterable[str] = (),
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._home = home if home is not None else Path.home()
        self._process_lister = process_lister
        self._index = (
            index
            if index is not None
            else InstalledApplicationIndex(home=self._home, process_lister=process_lister)
        )
        self._extra_protected = tuple(extra_protected_paths)
        self._clock = clock

    @classmethod
    def from_config(
        cls,
        config: SweepConfig,
        *,
        home: Path | None = None,
        process_lister: ProcessLister = list_running_applications,
    ) -> "SafetyGuard":
        """Create a guard honouring the user's additive configuration."""
        index = InstalledApplicationIndex(
            home=home,
            process_lister=process_lister,
            application_dirs=(*DEFAULT_APPLICATION_DIRS, *config.extra_application_dirs),
            extra_identifiers=config.extra_safe_identifiers,
        )
        return cls(
            home=home,
            index=index,
            process_lister=process_lister,
            extra_protected_paths=config.extra_protected_paths,
        )

    @property
    def index(self) -> InstalledApplicationIndex:
        """The installed application index owned by this guard."""
        return self._index

    def invalidate_cache(self) -> None:
        """Drop the installed application snapshot after an install or uninstall."""
        self._index.invalidate()

    def is_safe_to_delete(self, path: str | Path) -> bool:
        """Decide whether a path may be deleted.

        Args:
            path: Absolute path, ``~`` allowed.

        Returns:
            False if any denial check matches, True otherwise.
        """
        expanded = self._expand(path)

        if self._is_protected(expanded):
            logger.info("Protected path, cannot delete: %s", expanded)
            return False

        if self._is_system_file(expanded):
            logger.info("System file, cannot delete: %s", expanded)
            return False

        if self._is_system_preference(expanded):
            logger.info("System preference, cannot delete: %s", expanded)
            return False

        if is_critical_app_name(os.path.basename(expanded)):
            logger.warning("Critical application settings, risky to delete: %s", expanded)

        owner = self._installed_app_owner(expanded)
        if owner is not None:
            owner_name, is_safe_subdir = owner
            if not is_safe_subdir:
                logger.info("Data of installed app %s, cannot delete: %s", owner_name, expanded)
                return False
            logger.debug("Disposable subdirectory of installed app %s: %s", owner_name, expanded)

        return True

    def get_deletion_advice(self, path: str | Path) -> DeletionAdvice:
        """Explain how risky deleting a path is.

        Args:
            path: Absolute path, ``~`` allowed.

        Returns:
            DeletionAdvice with a risk level and a recommendation.
        """
        expanded = self._expand(path)

        if not self.is_safe_to_delete(expanded):
            return DeletionAdvice(
                DeletionRiskLevel.CRITICAL,
                "Protected file: deleting it may break macOS or an installed application.",
            )

        if self._is_system_preference(expanded):
            return DeletionAdvice(
                DeletionRiskLevel.CRITICAL,
                "System preference: deleting it resets macOS settings.",
            )

        if is_critical_app_name(os.path.basename(expanded)):
            return DeletionAdvice(
                DeletionRiskLevel.HIGH,
                "Important application settings: deleting them loses preferences "
                "and signs you out.",
            )

        if _PREFERENCES_MARKER in expanded:
            if self.is_preference_orphaned(expanded):
                return DeletionAdvice(
                    DeletionRiskLevel.LOW,
                    "Probably left behind by an application that is no longer installed.",
                )
            return DeletionAdvice(
                DeletionRiskLevel.MEDIUM,
                "The owning application still appears to be in use; keeping it is recommended.",
            )

        if _CACHES_MARKER in expanded:
            return DeletionAdvice(
                DeletionRiskLevel.LOW,
                "Cache data: safe to delete, the application rebuilds it.",
            )

        if _LOGS_MARKER in expanded:
            return DeletionAdvice(DeletionRiskLevel.LOW, "Log files: safe to delete.")

        return DeletionAdvice(
            DeletionRiskLevel.MEDIUM,
            "Consider moving it to the Trash instead of deleting it permanently.",
        )

    def is_application_installed(self, identifier: str) -> bool:
        """Check whether an application is installed or running.

        Any positive signal counts, which biases callers towards keeping
        residue rather than deleting it. Checks, in order: running
        processes (exact, case-insensitive, also ignoring punctuation),
        exact index membership, substring match against index tokens when
        both sides have at least five characters, and the OS vendor's
        reserved prefixes.

        Args:
            identifier: Bundle identifier or application name.

        Returns:
            True if the application appears to be installed.
        """
        wanted = identifier.strip().lower()
        if not wanted:
            return False

        if self._is_running(wanted):
            return True

        installed = self._index.get()
        if wanted in installed:
            return True

        for token in installed:
            if min(len(token), len(wanted)) < MIN_FUZZY_MATCH_LENGTH:
                continue
            if token in wanted or wanted in token:
                return True

        return has_reserved_vendor_prefix(wanted)

    def is_preference_orphaned(self, path: str | Path) -> bool:
        """Check whether a preference file belongs to no installed application.

        A preference is never orphaned when it is a first-party file, has
        the OS vendor's prefix, was modified within the last seven days,
        or cannot be inspected.

        Args:
            path: Path of a preference file.

        Returns:
            True only if no installed application matches the file name.
        """
        expanded = self._expand(path)
        filename = os.path.basename(expanded)

        if filename in SYSTEM_PREFERENCE_WHITELIST:
            return False

        stem = os.path.splitext(filename)[0]
        if has_reserved_vendor_prefix(stem):
            return False

        try:
            modified = os.stat(expanded).st_mtime
        except OSError as e:
            logger.debug("Cannot stat preference %s: %s", expanded, e)
            return False

        if self._clock() - modified < RECENT_PREFERENCE_DAYS * _SECONDS_PER_DAY:
            logger.debug("%s modified recently, keeping", filename)
            return False

        return not self.is_application_installed(stem)

    def _expand(self, path: str | Path) -> str:
        return expand_home(str(path), self._home)

    def _is_protected(self, expanded: str) -> bool:
        """Check the path as given and with symlinks resolved."""
        candidates = {expanded, os.path.realpath(expanded)}
        return any(
            is_protected_path(candidate, home=self._home, extra_prefixes=self._extra_protected)
            for candidate in candidates
        )

    def _is_system_file(self, expanded: str) -> bool:
        if expanded.startswith(SYSTEM_FILE_PREFIXES):
            return True

        try:
            st = os.lstat(expanded)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning("Cannot read attributes of %s, refusing: %s", expanded, e)
            return True

        return bool(getattr(st, "st_flags", 0) & _IMMUTABLE_FLAGS)

    @staticmethod
    def _is_system_preference(expanded: str) -> bool:
        if _PREFERENCES_MARKER not in os.path.dirname(expanded):
            return False
        return os.path.basename(expanded) in SYSTEM_PREFERENCE_WHITELIST

    def _installed_app_owner(self, expanded: str) -> tuple[str, bool] | None:
        """Find the installed application whose data tree contains a path.

        Returns:
            ``(owner, is_safe_subdir)`` for data of an installed application,
            None otherwise. Everything under ``~/Library/Caches`` counts as
            a safe subdirectory.
        """
        library = os.path.join(str(self._home), "Library")
        roots = (
            (os.path.join(library, "Containers"), False),
            (os.path.join(library, "Application Support"), False),
            (os.path.join(library, "Caches"), True),
        )

        for root, always_safe in roots:
            prefix = root + os.sep
            if not expanded.startswith(prefix):
                continue

            components = expanded[len(prefix) :].split(os.sep)
            owner = components[0]
            if not owner:
                return None
            if root.endswith("Application Support") and owner in GENERIC_APPLICATION_SUPPORT_DIRS:
                return None
            if not self.is_application_installed(owner):
                return None

            is_safe = always_safe or any(c in SAFE_SUBDIRECTORY_NAMES for c in components[1:])
            return owner, is_safe

        return None

    def _is_running(self, wanted: str) -> bool:
        squashed = _squash(wanted)
        for app in self._process_lister():
            for candidate in (app.name, app.bundle_identifier):
                if not candidate:
                    continue
                lowered = candidate.lower()
                if lowered == wanted or (squashed and _squash(lowered) == squashed):
                    return True
        return False


def _squash(value: str) -> str:
    """Strip everything but letters and digits."""
    return "".join(ch for ch in value if ch.isalnum())
