"""Shredder request, state and result models."""

from dataclasses import dataclass, field
from enum import Enum


class ShredStatus(str, Enum):
    """Lifecycle of one item: PENDING -> SHREDDING -> DONE | FAILED.

    DONE and FAILED are terminal; failed items are never retried
    automatically.
    """

    PENDING = "pending"
    SHREDDING = "shredding"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if no further transition is possible."""
        return self in (ShredStatus.DONE, ShredStatus.FAILED)


@dataclass(frozen=True, slots=True)
class ShredRequest:
    """A path to destroy plus its size measured before deletion.

    Attributes:
        path: Absolute path of a file or directory.
        size_bytes: Size snapshot used for reclaimed-bytes accounting.
    """

    path: str
    size_bytes: int = 0

    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not self.path:
            msg = "Path cannot be empty"
            raise ValueError(msg)
        if self.size_bytes < 0:
            msg = f"Size cannot be negative, got {self.size_bytes}"
            raise ValueError(msg)

    @property
    def name(self) -> str:
        """Last path component, shown as the current item while shredding."""
        return self.path.rstrip("/").rsplit("/", 1)[-1]


@dataclass(slots=True)
class ShredItem:
    """Mutable per-session state of a request."""

    request: ShredRequest
    status: ShredStatus = ShredStatus.PENDING
    error: str | None = None


@dataclass(frozen=True, slots=True)
class ShredResult:
    """Terminal outcome of one item.

    Attributes:
        path: Path that was processed.
        success: True if the item reached DONE.
        bytes_reclaimed: Pre-deletion size for DONE items, 0 otherwise.
        error: Failure description, None on success.
        protected: True if the safety guard refused the path.
    """

    path: str
    success: bool
    bytes_reclaimed: int = 0
    error: str | None = None
    protected: bool = False


@dataclass(frozen=True, slots=True)
class ShredProgress:
    """Snapshot reported to progress observers.

    Attributes:
        current_item_name: Name of the item being shredded, "" when idle.
        completed: Number of items in a terminal state.
        total: Number of items in the batch.
        bytes_reclaimed: Running total of reclaimed bytes.
    """

    current_item_name: str
    completed: int
    total: int
    bytes_reclaimed: int

    @property
    def fraction(self) -> float:
        """Completed share of the batch, between 0.0 and 1.0."""
        if self.total == 0:
            return 1.0
        return self.completed / self.total


@dataclass(frozen=True, slots=True)
class ShredReport:
    """Summary of a shredding batch.

    Attributes:
        results: One result per item that reached a terminal state, in input order.
        bytes_reclaimed: Sum of bytes_reclaimed over successful results.
        cancelled: True if the batch stopped early on request.
    """

    results: list[ShredResult] = field(default_factory=list)
    bytes_reclaimed: int = 0
    cancelled: bool = False

    @property
    def succeeded(self) -> list[ShredResult]:
        """Results of items that were destroyed."""
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> list[ShredResult]:
        """Results of items that could not be destroyed."""
        return [r for r in self.results if not r.success]
