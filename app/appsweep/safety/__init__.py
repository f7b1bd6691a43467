"""Deletion safety classification.

Provides the protected path registry, the installed application index
and the SafetyGuard that combines them into delete/keep verdicts and
risk advice.
"""

from appsweep.safety.guard import MIN_FUZZY_MATCH_LENGTH, RECENT_PREFERENCE_DAYS, SafetyGuard
from appsweep.safety.index import CACHE_VALIDITY_SECONDS, InstalledApplicationIndex
from appsweep.safety.models import DeletionAdvice, DeletionRiskLevel
from appsweep.safety.processes import RunningApplication, list_running_applications
from appsweep.safety.registry import (
    CRITICAL_APP_PATTERNS,
    PROTECTED_PATH_PREFIXES,
    SYSTEM_PREFERENCE_WHITELIST,
    is_protected_path,
)

__all__ = [
    "CACHE_VALIDITY_SECONDS",
    "CRITICAL_APP_PATTERNS",
    "MIN_FUZZY_MATCH_LENGTH",
    "PROTECTED_PATH_PREFIXES",
    "RECENT_PREFERENCE_DAYS",
    "SYSTEM_PREFERENCE_WHITELIST",
    "DeletionAdvice",
    "DeletionRiskLevel",
    "InstalledApplicationIndex",
    "RunningApplication",
    "SafetyGuard",
    "is_protected_path",
    "list_running_applications",
]
