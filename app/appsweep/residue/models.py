"""Residual file domain models.

Defines the identity an application is matched by, the closed set of
``~/Library`` categories leftovers are grouped into, and the residual
file record the scanner produces.
"""

from dataclasses import dataclass, field
from enum import Enum

# Identifier components must be longer than this to be used for
# partial matching ("com", "app" and friends would match everything).
MIN_IDENTIFIER_COMPONENT_LENGTH: int = 3


class FileCategory(str, Enum):
    """Location class of a residual file.

    Attributes:
        PREFERENCES: ``~/Library/Preferences`` plists.
        APPLICATION_SUPPORT: ``~/Library/Application Support`` data.
        CACHES: ``~/Library/Caches`` entries.
        CONTAINERS: Sandboxed ``~/Library/Containers/<bundle-id>``.
        SAVED_STATE: ``~/Library/Saved Application State`` bundles.
        LOGS: ``~/Library/Logs`` entries.
        GROUP_CONTAINERS: Shared ``~/Library/Group Containers``.
        COOKIES: ``~/Library/Cookies`` stores.
        LAUNCH_AGENTS: Per-user ``~/Library/LaunchAgents`` plists.
        CRASH_REPORTS: ``~/Library/Logs/DiagnosticReports`` files.
        DEVELOPER: ``~/Library/Developer`` data.
    """

    PREFERENCES = "preferences"
    APPLICATION_SUPPORT = "application_support"
    CACHES = "caches"
    CONTAINERS = "containers"
    SAVED_STATE = "saved_state"
    LOGS = "logs"
    GROUP_CONTAINERS = "group_containers"
    COOKIES = "cookies"
    LAUNCH_AGENTS = "launch_agents"
    CRASH_REPORTS = "crash_reports"
    DEVELOPER = "developer"

    @property
    def label(self) -> str:
        """Human-readable name for grouping in output."""
        return _CATEGORY_LABELS[self]


_CATEGORY_LABELS: dict[FileCategory, str] = {
    FileCategory.PREFERENCES: "Preferences",
    FileCategory.APPLICATION_SUPPORT: "Application Support",
    FileCategory.CACHES: "Caches",
    FileCategory.CONTAINERS: "Containers",
    FileCategory.SAVED_STATE: "Saved State",
    FileCategory.LOGS: "Logs",
    FileCategory.GROUP_CONTAINERS: "Group Containers",
    FileCategory.COOKIES: "Cookies",
    FileCategory.LAUNCH_AGENTS: "Launch Agents",
    FileCategory.CRASH_REPORTS: "Crash Reports",
    FileCategory.DEVELOPER: "Developer Data",
}


@dataclass(frozen=True, slots=True)
class ApplicationIdentity:
    """Name and bundle identifier an application's leftovers are matched by.

    Attributes:
        name: Display name, e.g. ``"Slack"``.
        bundle_identifier: Reverse-DNS identifier, e.g. ``"com.tinyspeck.slackmacgap"``.
    """

    name: str
    bundle_identifier: str | None = None

    def __post_init__(self) -> None:
        """Validate and normalise the identity."""
        name = self.name.strip()
        if not name:
            msg = "Application name cannot be empty"
            raise ValueError(msg)
        object.__setattr__(self, "name", name)

        bundle_id = (self.bundle_identifier or "").strip()
        object.__setattr__(self, "bundle_identifier", bundle_id or None)

    @property
    def identifier_components(self) -> tuple[str, ...]:
        """Lowercase identifier components long enough for partial matching."""
        if not self.bundle_identifier:
            return ()
        return tuple(
            part
            for part in self.bundle_identifier.lower().split(".")
            if len(part) > MIN_IDENTIFIER_COMPONENT_LENGTH
        )


@dataclass(slots=True)
class ResidualFile:
    """A file or directory believed to belong to an application.

    ``size_bytes`` is measured once at discovery and not kept up to date.
    ``selected`` is the only field meant to change after creation; it
    records the user's choice for deletion.

    Attributes:
        path: Absolute filesystem path.
        category: Location class the entry was found in.
        size_bytes: Size in bytes (recursive for directories).
        selected: Whether the entry is marked for deletion.
    """

    path: str
    category: FileCategory
    size_bytes: int
    selected: bool = field(default=True, compare=False)

    def __post_init__(self) -> None:
        """Validate residual file data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)

    @property
    def name(self) -> str:
        """Last path component."""
        return self.path.rstrip("/").rsplit("/", 1)[-1]
