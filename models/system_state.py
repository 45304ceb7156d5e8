"""
System State model for the Banker's Algorithm Simulator.

Maintains the matrices and vectors required for deadlock avoidance:
total resources, available vector, allocation and maximum matrices.
Need is always derived as Maximum - Allocation.
"""

import numpy as np
from typing import Optional, Sequence
from dataclasses import dataclass

from models.outcomes import ErrorKind, Denial, InvalidStateError, OperationResult, denied
from models.validation import check_process_index, check_vector, check_at_most

MAX_PROCESSES = 10
MAX_RESOURCE_TYPES = 10


@dataclass
class SystemState:
    """
    Snapshot of a Banker's Algorithm system.

    Operations never mutate a SystemState they are given; they work on a
    copy and hand the copy back in their result.

    Attributes:
        total_resources: [R] Total instances of each resource type
        available: [R] Free instances of each resource type
        allocation: [P][R] Resources currently held by each process
        maximum: [P][R] Maximum resources declared by each process
        configured: [P] Whether each process row has been entered

    Invariant (once allocations are configured):
        available[j] + sum(allocation[:, j]) == total_resources[j]
    """
    total_resources: np.ndarray
    available: np.ndarray
    allocation: np.ndarray
    maximum: np.ndarray
    configured: np.ndarray

    @property
    def num_processes(self) -> int:
        """Number of processes in the system."""
        return self.allocation.shape[0]

    @property
    def num_resources(self) -> int:
        """Number of resource types in the system."""
        return self.total_resources.shape[0]

    @property
    def need(self) -> np.ndarray:
        """
        Get need matrix [P][R].
        Computed as: Need = Max - Allocation
        """
        return self.maximum - self.allocation

    @property
    def total_allocated(self) -> np.ndarray:
        """Resources held by all processes, per resource type [R]."""
        return self.allocation.sum(axis=0)

    @property
    def is_fully_configured(self) -> bool:
        """True once every process row has been entered."""
        return bool(np.all(self.configured))

    def copy(self) -> "SystemState":
        """Independent copy; no array is shared with the original."""
        return SystemState(
            total_resources=self.total_resources.copy(),
            available=self.available.copy(),
            allocation=self.allocation.copy(),
            maximum=self.maximum.copy(),
            configured=self.configured.copy()
        )

    @classmethod
    def create(
        cls,
        process_count: int,
        resource_type_count: int,
        total_resources: Sequence[int],
        available: Optional[Sequence[int]] = None
    ) -> "SystemState":
        """
        Create an unconfigured system.

        Args:
            process_count: Number of processes (1-10)
            resource_type_count: Number of resource types (1-10)
            total_resources: Total instances per resource type
            available: Free instances per resource type (defaults to total)

        Returns:
            SystemState with all allocation and maximum rows zeroed

        Raises:
            InvalidStateError: If counts or vectors are invalid
        """
        for label, count, limit in (
            ("Process count", process_count, MAX_PROCESSES),
            ("Resource type count", resource_type_count, MAX_RESOURCE_TYPES),
        ):
            if isinstance(count, bool) or not isinstance(count, (int, np.integer)) \
                    or count < 1 or count > limit:
                raise InvalidStateError(Denial(
                    ErrorKind.INVALID_DIMENSION,
                    f"{label} must be an integer between 1 and {limit} (got {count!r})"
                ))

        denial = check_vector(total_resources, resource_type_count, "Total resources")
        if denial:
            raise InvalidStateError(denial)
        total = np.array(total_resources, dtype=int)

        if available is None:
            free = total.copy()
        else:
            denial = check_vector(available, resource_type_count, "Available resources")
            if denial:
                raise InvalidStateError(denial)
            free = np.array(available, dtype=int)
            denial = check_at_most(
                free, total, ErrorKind.EXCEEDS_TOTAL,
                "Available resources cannot exceed total resources"
            )
            if denial:
                raise InvalidStateError(denial)

        return cls(
            total_resources=total,
            available=free,
            allocation=np.zeros((process_count, resource_type_count), dtype=int),
            maximum=np.zeros((process_count, resource_type_count), dtype=int),
            configured=np.zeros(process_count, dtype=bool)
        )

    @classmethod
    def from_matrices(
        cls,
        total_resources: Sequence[int],
        allocation: Sequence[Sequence[int]],
        maximum: Sequence[Sequence[int]],
        available: Optional[Sequence[int]] = None
    ) -> "SystemState":
        """
        Create a fully configured system in one step.

        Rows are entered one at a time through configure_process, so the
        same bound checks apply. Available is computed as
        total - sum(allocation); if supplied it must match that figure.

        Raises:
            InvalidStateError: If any row or vector is invalid
        """
        for label, values in (
            ("Total resources", total_resources),
            ("Allocation", allocation),
            ("Maximum", maximum),
        ):
            if isinstance(values, (str, bytes)) or not hasattr(values, '__len__'):
                raise InvalidStateError(Denial(
                    ErrorKind.INVALID_DIMENSION,
                    f"{label} must be a sequence (got {values!r})"
                ))

        if len(allocation) != len(maximum):
            raise InvalidStateError(Denial(
                ErrorKind.INVALID_DIMENSION,
                f"Allocation has {len(allocation)} rows but maximum has {len(maximum)}"
            ))

        state = cls.create(len(allocation), len(total_resources), total_resources)
        for index, (alloc_row, max_row) in enumerate(zip(allocation, maximum)):
            result = configure_process(state, index, alloc_row, max_row)
            if not result.granted:
                raise InvalidStateError(result.denial)
            state = result.state

        if available is not None:
            denial = check_vector(available, state.num_resources, "Available resources")
            if denial:
                raise InvalidStateError(denial)
            mismatch = np.array(available, dtype=int) != state.available
            if np.any(mismatch):
                raise InvalidStateError(Denial(
                    ErrorKind.INVALID_VALUE,
                    f"Available resources must equal total minus allocated "
                    f"({state.available.tolist()})",
                    tuple(int(j) for j in np.flatnonzero(mismatch))
                ))

        return state

    def resources_conserved(self) -> bool:
        """True if available + allocated == total and nothing is negative."""
        return bool(
            np.array_equal(self.available + self.total_allocated, self.total_resources)
            and np.all(self.available >= 0)
            and np.all(self.allocation >= 0)
            and np.all(self.need >= 0)
        )

    def assert_resource_conservation(self, context=""):
        """Verify resource conservation: allocated + available = total for all resources.

        Args:
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If resource conservation is violated
        """
        allocated = self.total_allocated
        for r_idx in range(self.num_resources):
            available = self.available[r_idx]
            total = self.total_resources[r_idx]

            assert allocated[r_idx] + available == total, (
                f"Resource conservation violated for R{r_idx} {context}\n"
                f"  Allocated: {allocated[r_idx]}, Available: {available}, Total: {total}"
            )
            assert available >= 0, (
                f"Negative available resources for R{r_idx} {context}\n"
                f"  Available: {available}"
            )

        assert np.all(self.need >= 0), f"Allocation exceeds maximum {context}"

    def display(self) -> str:
        """
        Generate readable string representation of system state.

        Returns:
            Formatted string showing all matrices and vectors
        """
        header = "     " + " ".join([f"R{j:<2}" for j in range(self.num_resources)])

        def matrix(title, values):
            lines = [f"\n{title}:", header]
            for i in range(self.num_processes):
                row = f"  P{i}: " + " ".join([f"{values[i][j]:3}" for j in range(self.num_resources)])
                if not self.configured[i]:
                    row += "   (not configured)"
                lines.append(row)
            return lines

        output = ["\n" + "=" * 60, "SYSTEM STATE", "=" * 60]
        output.append("\nTotal Resources:     " + _vector(self.total_resources))
        output.append("Available Resources: " + _vector(self.available))
        output.extend(matrix("Allocation Matrix", self.allocation))
        output.extend(matrix("Maximum Matrix", self.maximum))
        output.extend(matrix("Need Matrix (Max - Allocation)", self.need))
        output.append("\n" + "=" * 60)
        return "\n".join(output)


def _vector(values) -> str:
    return "[" + ", ".join(f"R{j}:{v}" for j, v in enumerate(values)) + "]"


def configure_process(
    state: SystemState,
    index: int,
    allocation: Sequence[int],
    maximum: Sequence[int]
) -> OperationResult:
    """
    Enter (or re-enter) one process's allocation and maximum.

    Re-entering a process replaces its previous row. On success the
    available vector is recomputed as total - sum(allocation).

    Args:
        state: Current system state (not modified)
        index: Process index
        allocation: Resources the process currently holds
        maximum: Maximum resources the process may ever hold

    Returns:
        OperationResult with the new state, or a denial
    """
    denial = (
        check_process_index(index, state.num_processes)
        or check_vector(allocation, state.num_resources, "Allocation")
        or check_vector(maximum, state.num_resources, "Maximum")
    )
    if denial:
        return denied(state, denial)

    alloc = np.array(allocation, dtype=int)
    max_demand = np.array(maximum, dtype=int)

    # Allocated by every other process, with this row's previous values removed
    others = state.total_allocated - state.allocation[index]
    denial = (
        check_at_most(
            others + alloc, state.total_resources, ErrorKind.EXCEEDS_TOTAL,
            "Total allocated would exceed total resources"
        )
        or check_at_most(
            max_demand, state.total_resources, ErrorKind.EXCEEDS_TOTAL,
            "Maximum cannot exceed total resources"
        )
        or check_at_most(
            alloc, max_demand, ErrorKind.EXCEEDS_MAXIMUM,
            "Maximum cannot be less than current allocation"
        )
    )
    if denial:
        return denied(state, denial)

    new_state = state.copy()
    new_state.allocation[index] = alloc
    new_state.maximum[index] = max_demand
    new_state.configured[index] = True
    new_state.available = new_state.total_resources - new_state.total_allocated

    return OperationResult(
        granted=True,
        state=new_state,
        reason=f"P{index} configured (need: {new_state.need[index].tolist()})"
    )
