"""Compiled-in knowledge of what must never be deleted.

This module holds the protected path prefixes, the first-party
preference files, the application identities whose configuration is
flagged as high risk, and the directory names considered disposable
inside an application's data tree.

Protected prefixes are matched as plain string prefixes after ``~``
expansion, so ``/usr`` also covers ``/usrlocal``. A directory that
contains a protected prefix (``/``, the home directory, ``~/Library``)
is protected too, since deleting it would take the prefix with it.
Over-protection is the accepted failure mode.
"""

import os
from collections.abc import Iterable
from pathlib import Path

# Path prefixes that must never be scanned or deleted. Prefixes starting
# with ~ are expanded to the home directory before matching.
PROTECTED_PATH_PREFIXES: tuple[str, ...] = (
    # System
    "/System",
    "/Library/Apple",
    "/Library/Security",
    "/usr",
    "/bin",
    "/sbin",
    "/private/etc",
    "/private/var/db",
    "/private/var/root",
    "/private/var/vm",
    # Device nodes
    "/dev",
    # User media and documents
    "~/Movies",
    "~/Music",
    "~/Pictures",
    "~/Documents",
    "~/Desktop",
    "~/Downloads",
    # Application bundles
    "/Applications",
    "~/Applications",
    # Credentials and personal data
    "~/Library/Keychains",
    "~/Library/KeyboardServices",
    "~/Library/Cookies",
    "~/Library/Safari/Bookmarks.plist",
    "~/Library/Safari/History.db",
    "~/Library/Mail",
    "~/Library/Messages",
    "~/Library/Photos",
    # Password managers
    "~/Library/Application Support/1Password",
    "~/Library/Application Support/Bitwarden",
    "~/Library/Application Support/LastPass",
    "~/Library/Application Support/KeePassXC",
    # Browser profiles
    "~/Library/Application Support/Google/Chrome/Default/Cookies",
    "~/Library/Application Support/Google/Chrome/Default/Login Data",
    "~/Library/Application Support/Firefox/Profiles",
    "~/Library/Safari/CloudTabs.db",
    # Development environment
    "~/Library/Developer/Xcode/UserData",
    "~/.ssh",
    "~/.gnupg",
    # Cloud sync
    "~/Library/Application Support/iCloud",
    "~/Library/Mobile Documents",
)

# Prefixes under which every file counts as an OS file.
SYSTEM_FILE_PREFIXES: tuple[str, ...] = ("/System/", "/usr/", "/bin/", "/sbin/")

# OS and first-party preference files that are never orphaned.
SYSTEM_PREFERENCE_WHITELIST: frozenset[str] = frozenset(
    {
        # Core system settings
        "com.apple.finder.plist",
        "com.apple.dock.plist",
        "com.apple.LaunchServices.plist",
        "com.apple.loginwindow.plist",
        "com.apple.menuextra.plist",
        "com.apple.systempreferences.plist",
        ".GlobalPreferences.plist",
        # System UI
        "com.apple.spaces.plist",
        "com.apple.notificationcenterui.plist",
        "com.apple.notificationcenterui-donotdisturb.plist",
        "com.apple.controlcenter.plist",
        "com.apple.Spotlight.plist",
        "com.apple.SpotlightServer.plist",
        # Input devices
        "com.apple.driver.AppleBluetoothMultitouch.mouse.plist",
        "com.apple.driver.AppleBluetoothMultitouch.trackpad.plist",
        "com.apple.AppleMultitouchTrackpad.plist",
        "com.apple.keyboard.plist",
        # Accessibility
        "com.apple.universalaccess.plist",
        "com.apple.accessibility.plist",
        # Bundled applications
        "com.apple.Safari.plist",
        "com.apple.mail.plist",
        "com.apple.iCal.plist",
        "com.apple.Notes.plist",
        "com.apple.Contacts.plist",
        "com.apple.Maps.plist",
        "com.apple.Photos.plist",
        "com.apple.Music.plist",
        "com.apple.TV.plist",
        "com.apple.Podcasts.plist",
        "com.apple.Books.plist",
        "com.apple.FaceTime.plist",
        "com.apple.iChat.plist",
        "com.apple.TextEdit.plist",
        "com.apple.Preview.plist",
        "com.apple.QuickTimePlayerX.plist",
        # System services
        "com.apple.screensaver.plist",
        "com.apple.screencaptureui.plist",
        "com.apple.Siri.plist",
        "com.apple.speech.synthesis.general.prefs.plist",
        "com.apple.TimeMachine.plist",
        "com.apple.security.plist",
        "com.apple.networkextension.plist",
        # iCloud
        "com.apple.iCloud.plist",
        "com.apple.bird.plist",
        "com.apple.cloudd.plist",
        # Developer tools
        "com.apple.dt.Xcode.plist",
        "com.apple.dt.instruments.plist",
        # Misc
        "com.apple.HIToolbox.plist",
        "com.apple.LaunchServices.QuarantineEventsV2",
        "com.apple.recentitems.plist",
        "com.apple.sidebarlists.plist",
        # Accounts and authentication
        "MobileMeAccounts.plist",
        "com.apple.accountsd.plist",
        "com.apple.Passbook.plist",
        "com.apple.commerce.plist",
        "com.apple.tourist.plist",
    }
)

# Identity prefixes of applications whose settings hold logins, licences
# or large amounts of user state. Deleting them is allowed but flagged.
CRITICAL_APP_PATTERNS: tuple[str, ...] = (
    "com.google.Chrome",
    "com.microsoft.VSCode",
    "com.microsoft.edgemac",
    "com.jetbrains.",
    "com.tencent.xinWeChat",
    "com.tencent.qq",
    "com.tencent.meeting",
    "org.mozilla.firefox",
    "com.apple.dt.Xcode",
    "com.docker.docker",
    "com.spotify.client",
    "com.adobe.",
    "com.figma.Desktop",
    "com.notion.id",
    "com.slack.Slack",
    "us.zoom.xos",
    "com.skype.skype",
    "org.telegram.desktop",
    "com.facebook.archon.developerID",
    "com.readdle.PDFExpert-Mac",
    "com.tapbots.TweetbotMac",
)

# Directory names that are disposable even inside an installed
# application's data tree.
SAFE_SUBDIRECTORY_NAMES: frozenset[str] = frozenset(
    {
        "Cache",
        "Caches",
        "cache",
        "caches",
        "tmp",
        "Tmp",
        "temp",
        "Temp",
        "Logs",
        "logs",
        "Log",
        "log",
        "GPUCache",
        "ShaderCache",
        "Code Cache",
        "CachedData",
        "CachedExtensions",
    }
)

# Application Support children shared by many system components rather
# than owned by one application.
GENERIC_APPLICATION_SUPPORT_DIRS: frozenset[str] = frozenset(
    {
        "AddressBook",
        "CallHistoryDB",
        "CallHistoryTransactions",
        "CloudDocs",
        "CrashReporter",
        "FileProvider",
        "Knowledge",
        "MobileSync",
        "SyncServices",
        "Ubiquity",
    }
)

# Identifier prefixes reserved for the OS vendor.
RESERVED_VENDOR_PREFIXES: tuple[str, ...] = ("com.apple.", "apple")

# Well-known applications always counted as installed.
VENDOR_SAFE_LIST: tuple[str, ...] = (
    "finder", "dock", "spotlight", "safari", "mail", "messages", "photos",
    "music", "tv", "podcasts", "books", "notes", "calendar", "contacts",
    "facetime", "preview", "textedit", "quicktime", "appstore",
    "systempreferences", "activitymonitor", "terminal", "console",
    "chrome", "firefox", "edge", "opera", "brave",
    "vscode", "xcode", "jetbrains", "intellij", "pycharm", "webstorm",
    "docker", "postman", "figma", "sketch", "notion", "obsidian",
    "slack", "discord", "zoom", "skype", "telegram", "wechat", "qq",
    "1password", "bitwarden", "lastpass", "dropbox", "onedrive", "googledrive",
)  # fmt: skip


def expand_home(path: str, home: Path) -> str:
    """Expand a leading ``~`` against ``home`` and normalise the result."""
    if path == "~" or path.startswith("~/"):
        path = str(home) + path[1:]
    return os.path.normpath(path)


def is_protected_path(
    path: str,
    *,
    home: Path | None = None,
    extra_prefixes: Iterable[str] = (),
) -> bool:
    """Check if a path lies under or contains a protected prefix.

    Args:
        path: Path to check; ``~`` is expanded against ``home``.
        home: Home directory used for ``~`` expansion. Defaults to the
            current user's home.
        extra_prefixes: Additional prefixes to protect.

    Returns:
        True if the path starts with any protected prefix, or if any
        protected prefix lies inside the path.
    """
    home = home if home is not None else Path.home()
    expanded = expand_home(path, home)
    as_parent = expanded.rstrip("/") + "/"

    for prefix in (*PROTECTED_PATH_PREFIXES, *extra_prefixes):
        protected = expand_home(prefix, home)
        if expanded.startswith(protected):
            return True
        if protected == expanded or protected.startswith(as_parent):
            return True

    return False


def is_critical_app_name(filename: str) -> bool:
    """Check if a filename belongs to a critical application.

    Patterns match anywhere in the name, ignoring case.
    """
    name = filename.lower()
    return any(pattern.lower() in name for pattern in CRITICAL_APP_PATTERNS)


def has_reserved_vendor_prefix(identifier: str) -> bool:
    """Check if an identifier is reserved for the OS vendor."""
    return identifier.lower().startswith(RESERVED_VENDOR_PREFIXES)
