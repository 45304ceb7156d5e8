"""
Result types for the Banker's Algorithm Simulator.

Every core operation reports its outcome as a value instead of raising,
so callers can present denials without any error handling of their own.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Tuple


class Verdict(Enum):
    """Outcome of a safety check."""
    SAFE = "Safe"
    UNSAFE = "Unsafe"


class ErrorKind(Enum):
    """Reasons an operation can be refused."""
    INVALID_DIMENSION = "InvalidDimension"
    INVALID_VALUE = "InvalidValue"
    NEGATIVE_VALUE = "NegativeValue"
    EXCEEDS_MAXIMUM = "ExceedsMaximum"
    EXCEEDS_TOTAL = "ExceedsTotal"
    DENIED_EXCEEDS_NEED = "DeniedExceedsNeed"
    DENIED_INSUFFICIENT_AVAILABLE = "DeniedInsufficientAvailable"
    DENIED_UNSAFE = "DeniedUnsafe"
    DENIED_EXCEEDS_ALLOCATION = "DeniedExceedsAllocation"


@dataclass(frozen=True)
class Denial:
    """
    Structured reason for a refused operation.

    Attributes:
        kind: Category of the failure
        message: Human-readable explanation
        resource_indices: Every offending resource type, ascending
            (empty when the failure is not tied to particular resources)
    """
    kind: ErrorKind
    message: str
    resource_indices: Tuple[int, ...] = ()

    def __str__(self) -> str:
        return f"{self.kind.value}: {self.message}"


class InvalidStateError(ValueError):
    """Raised when a system cannot be constructed from the given values."""

    def __init__(self, denial: Denial):
        super().__init__(str(denial))
        self.denial = denial


@dataclass
class OperationResult:
    """
    Outcome of a configure, request or release operation.

    Attributes:
        granted: True if the operation was committed
        state: New state when granted, the untouched input state otherwise
        reason: One-line summary suitable for logging
        denial: Why the operation was refused (None when granted)
        safety: Safety check of the resulting state (or of the simulated
            state for an unsafe request), when one was run
    """
    granted: bool
    state: Any
    reason: str
    denial: Optional[Denial] = None
    safety: Optional[Any] = field(default=None, repr=False)

    @property
    def kind(self) -> Optional[ErrorKind]:
        """Error kind of the denial, or None when granted."""
        return self.denial.kind if self.denial else None


def denied(state: Any, denial: Denial, safety: Optional[Any] = None) -> OperationResult:
    """Build the result for a refused operation, leaving state untouched."""
    return OperationResult(
        granted=False,
        state=state,
        reason=f"DENIED ({denial.message})",
        denial=denial,
        safety=safety
    )
