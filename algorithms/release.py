"""
Resource release handling for the Banker's Algorithm Simulator.
"""

import numpy as np
from typing import Sequence

from models.outcomes import ErrorKind, OperationResult, denied
from models.system_state import SystemState
from models.validation import check_process_index, check_vector, check_at_most
from algorithms.safety import check_state


def release_resources(
    state: SystemState,
    process_index: int,
    release: Sequence[int]
) -> OperationResult:
    """
    Release resources held by a process back to the pool.

    A release only increases availability, so it can never turn a safe
    state unsafe and is applied without a safety gate. The resulting
    state is still checked so callers can report it.

    Args:
        state: Current system state (not modified)
        process_index: Index of the releasing process
        release: Instances released, one per resource type

    Returns:
        OperationResult with the new state, or DeniedExceedsAllocation
        naming every resource type released beyond what is held
    """
    denial = (
        check_process_index(process_index, state.num_processes)
        or check_vector(release, state.num_resources, "Release")
    )
    if denial:
        return denied(state, denial)

    release = np.array(release, dtype=int)
    denial = check_at_most(
        release, state.allocation[process_index], ErrorKind.DENIED_EXCEEDS_ALLOCATION,
        f"P{process_index} is releasing more than it holds "
        f"{state.allocation[process_index].tolist()}"
    )
    if denial:
        return denied(state, denial)

    new_state = state.copy()
    new_state.allocation[process_index] -= release
    new_state.available += release

    return OperationResult(
        granted=True,
        state=new_state,
        reason=f"RELEASED {release.tolist()} (available now {new_state.available.tolist()})",
        safety=check_state(new_state)
    )
