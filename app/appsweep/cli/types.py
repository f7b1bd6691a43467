"""Shared types and helpers for CLI commands."""

from dataclasses import dataclass
from enum import Enum

import typer

from appsweep.core.config import ConfigError, SweepConfig, load_config_or_default
from appsweep.residue.models import ResidualFile
from appsweep.safety.guard import SafetyGuard
from appsweep.safety.models import DeletionAdvice
from appsweep.utils.formatting import print_error


class OutputFormat(str, Enum):
    """Output format options."""

    TABLE = "table"
    JSON = "json"


@dataclass(frozen=True, slots=True)
class AssessedFile:
    """A residual file together with the guard's verdict on it."""

    residual: ResidualFile
    safe: bool
    advice: DeletionAdvice

    def to_dict(self) -> dict[str, object]:
        """Serialise for JSON output."""
        return {
            "path": self.residual.path,
            "category": self.residual.category.value,
            "size_bytes": self.residual.size_bytes,
            "safe_to_delete": self.safe,
            "risk_level": self.advice.risk_level.name.lower(),
            "advice": self.advice.message,
        }


def get_config() -> SweepConfig:
    """Load the user configuration or exit with an error message."""
    try:
        return load_config_or_default()
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e


def get_guard(config: SweepConfig) -> SafetyGuard:
    """Create the safety guard for the current user."""
    return SafetyGuard.from_config(config)


def assess_files(files: list[ResidualFile], guard: SafetyGuard) -> list[AssessedFile]:
    """Attach a safety verdict and advice to every residual file.

    Files the guard refuses are also deselected.
    """
    assessed: list[AssessedFile] = []
    for residual in files:
        safe = guard.is_safe_to_delete(residual.path)
        if not safe:
            residual.selected = False
        assessed.append(
            AssessedFile(residual=residual, safe=safe, advice=guard.get_deletion_advice(residual.path))
        )
    return assessed
