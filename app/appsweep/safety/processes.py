"""Running application discovery.

Lists the processes of the current machine through ``ps`` and maps
executables living inside an application bundle back to that bundle's
display name and identifier.
"""

import logging
import plistlib
import subprocess
from dataclasses import dataclass
from pathlib import Path

from appsweep.utils.shell import run_command

logger = logging.getLogger(__name__)

_BUNDLE_EXECUTABLE_MARKER = ".app/Contents/MacOS/"


@dataclass(frozen=True, slots=True)
class RunningApplication:
    """A process currently running on the machine.

    Attributes:
        name: Display name (bundle name or executable basename).
        bundle_identifier: Bundle identifier if the process belongs to an
            application bundle with a readable Info.plist.
    """

    name: str
    bundle_identifier: str | None = None


def read_bundle_identifier(bundle: Path) -> str | None:
    """Read ``CFBundleIdentifier`` from an application bundle.

    Args:
        bundle: Path to a ``.app`` directory.

    Returns:
        The identifier, or None if the Info.plist is missing or unreadable.
    """
    info_plist = bundle / "Contents" / "Info.plist"
    try:
        with open(info_plist, "rb") as f:
            info = plistlib.load(f)
    except (OSError, plistlib.InvalidFileException, ValueError) as e:
        logger.debug("Cannot read %s: %s", info_plist, e)
        return None

    identifier = info.get("CFBundleIdentifier") if isinstance(info, dict) else None
    return identifier if isinstance(identifier, str) and identifier else None


def parse_process_line(command: str) -> RunningApplication | None:
    """Turn one ``ps -o comm=`` line into a RunningApplication.

    Args:
        command: Executable path as printed by ps.

    Returns:
        RunningApplication, or None for blank lines.
    """
    command = command.strip()
    if not command:
        return None

    marker = command.find(_BUNDLE_EXECUTABLE_MARKER)
    if marker != -1:
        bundle = Path(command[: marker + len(".app")])
        return RunningApplication(
            name=bundle.stem,
            bundle_identifier=read_bundle_identifier(bundle),
        )

    return RunningApplication(name=Path(command).name)


def list_running_applications() -> list[RunningApplication]:
    """List applications currently running.

    Returns:
        One entry per distinct process executable. Empty if ``ps`` is
        unavailable or fails.
    """
    try:
        result = run_command(["ps", "-axo", "comm="], timeout=10.0)
    except (FileNotFoundError, OSError, subprocess.TimeoutExpired) as e:
        logger.warning("Cannot list running processes: %s", e)
        return []

    if not result.success:
        logger.warning("ps failed: %s", result.stderr.strip())
        return []

    apps: dict[str, RunningApplication] = {}
    for line in result.stdout.splitlines():
        app = parse_process_line(line)
        if app is not None:
            apps.setdefault(line.strip(), app)
    return list(apps.values())
