"""Subprocess helpers.

Used to query the process table (``ps``) without going through a shell.
"""

import subprocess
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class CommandResult:
    """Captured outcome of an external command.

    Attributes:
        stdout: Standard output, decoded as text.
        stderr: Standard error, decoded as text.
        returncode: Process exit status.
    """

    stdout: str
    stderr: str
    returncode: int

    @property
    def success(self) -> bool:
        """Check if the command exited with status 0."""
        return self.returncode == 0


def run_command(
    args: list[str],
    *,
    check: bool = False,
    timeout: float | None = 30.0,
) -> CommandResult:
    """Run a command and capture its output.

    Args:
        args: Executable followed by its arguments.
        check: If True, raise CalledProcessError on a non-zero exit.
        timeout: Seconds to wait before giving up.

    Returns:
        CommandResult with stdout, stderr, and returncode.

    Raises:
        subprocess.CalledProcessError: If check=True and the command fails.
        subprocess.TimeoutExpired: If the command exceeds timeout.
        FileNotFoundError: If the executable is not on PATH.
    """
    result = subprocess.run(
        args,
        capture_output=True,
        text=True,
        check=check,
        timeout=timeout,
    )
    return CommandResult(
        stdout=result.stdout,
        stderr=result.stderr,
        returncode=result.returncode,
    )
