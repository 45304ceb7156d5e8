"""
Input validation for the Banker's Algorithm Simulator.

Each check returns a Denial describing the first problem found, or None
when the input is acceptable.
"""

import numpy as np
from typing import Optional, Sequence

from models.outcomes import Denial, ErrorKind

# Largest component that fits the int arrays the state is stored in
MAX_VALUE = int(np.iinfo(int).max)


def _offending(mask: np.ndarray) -> tuple:
    """Resource indices where mask is True."""
    return tuple(int(j) for j in np.flatnonzero(mask))


def check_process_index(index, process_count: int) -> Optional[Denial]:
    """Process index must be an integer in [0, process_count)."""
    if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
        return Denial(ErrorKind.INVALID_DIMENSION, f"Process index {index!r} is not an integer")
    if index < 0 or index >= process_count:
        return Denial(
            ErrorKind.INVALID_DIMENSION,
            f"Process index {index} out of range (0-{process_count - 1})"
        )
    return None


def check_vector(vector: Sequence, length: int, label: str = "Vector") -> Optional[Denial]:
    """
    Validate a per-resource vector.

    Args:
        vector: Candidate values, one per resource type
        length: Required number of components (R)
        label: Name used in messages (e.g. "Request")

    Returns:
        Denial for a wrong length, non-integer or negative component, else None
    """
    try:
        values = list(vector)
    except TypeError:
        return Denial(ErrorKind.INVALID_DIMENSION, f"{label} must be a sequence of {length} values")

    if len(values) != length:
        return Denial(
            ErrorKind.INVALID_DIMENSION,
            f"{label} has {len(values)} values, expected exactly {length}"
        )

    bad = tuple(
        j for j, v in enumerate(values)
        if isinstance(v, bool) or not isinstance(v, (int, np.integer))
    )
    if bad:
        return Denial(ErrorKind.INVALID_VALUE, f"{label} values must be integers", bad)

    negative = tuple(j for j, v in enumerate(values) if v < 0)
    if negative:
        return Denial(ErrorKind.NEGATIVE_VALUE, f"{label} values must be non-negative", negative)

    too_large = tuple(j for j, v in enumerate(values) if v > MAX_VALUE)
    if too_large:
        return Denial(ErrorKind.INVALID_VALUE, f"{label} values must not exceed {MAX_VALUE}", too_large)

    return None


def check_at_most(
    values: np.ndarray,
    bound: np.ndarray,
    kind: ErrorKind,
    message: str
) -> Optional[Denial]:
    """Denial of the given kind if any component of values exceeds bound."""
    mask = values > bound
    if np.any(mask):
        return Denial(kind, message, _offending(mask))
    return None
