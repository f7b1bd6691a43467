"""Risk classification models for deletion advice."""

from enum import IntEnum
from typing import NamedTuple


class DeletionRiskLevel(IntEnum):
    """How risky it is to delete a path, ordered LOW < CRITICAL.

    Risk levels are advisory. Whether a path may be deleted at all is
    decided by ``SafetyGuard.is_safe_to_delete``.

    Attributes:
        LOW: Disposable data such as caches, logs and orphaned preferences.
        MEDIUM: Data of unknown importance or still in use.
        HIGH: Settings of a critical application (logins, licences).
        CRITICAL: Protected system or user data.
    """

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        """Display label, e.g. ``"Low risk"``."""
        return f"{self.name.capitalize()} risk"

    @property
    def marker(self) -> str:
        """Coloured dot used in compact listings."""
        return _MARKERS[self]

    @property
    def style(self) -> str:
        """Rich theme style name for this level."""
        return f"risk.{self.name.lower()}"


_MARKERS: dict[DeletionRiskLevel, str] = {
    DeletionRiskLevel.LOW: "\U0001f7e2",
    DeletionRiskLevel.MEDIUM: "\U0001f7e1",
    DeletionRiskLevel.HIGH: "\U0001f7e0",
    DeletionRiskLevel.CRITICAL: "\U0001f534",
}


class DeletionAdvice(NamedTuple):
    """Risk level plus a human-readable recommendation."""

    risk_level: DeletionRiskLevel
    message: str
