"""
Deadlock Avoidance (Banker's Algorithm) request handling for the Simulator.

A request is granted only if the state that would result from granting
it is safe.
"""

import numpy as np
from typing import Sequence

from models.outcomes import ErrorKind, Denial, OperationResult, denied
from models.system_state import SystemState
from models.validation import check_process_index, check_vector, check_at_most
from algorithms.safety import check_state


def evaluate_request(
    state: SystemState,
    process_index: int,
    request: Sequence[int]
) -> OperationResult:
    """
    Evaluate a resource request using Banker's Algorithm.

    Steps (first failing check wins):
    1. Validate process index and request vector
    2. Check: request <= need (otherwise DeniedExceedsNeed)
    3. Check: request <= available (otherwise DeniedInsufficientAvailable)
    4. Tentatively allocate on a copy of the state
    5. Run safety algorithm on the copy
    6. If safe: return the copy as the new state
       If unsafe: discard the copy (DeniedUnsafe)

    The input state is never modified, so a denied request leaves no trace.

    Args:
        state: Current system state
        process_index: Index of the requesting process
        request: Instances requested, one per resource type

    Returns:
        OperationResult; on success its state is the committed new state
    """
    denial = (
        check_process_index(process_index, state.num_processes)
        or check_vector(request, state.num_resources, "Request")
    )
    if denial:
        return denied(state, denial)

    request = np.array(request, dtype=int)

    # Step 2-3: Request must fit both the declared need and what is free now
    denial = (
        check_at_most(
            request, state.need[process_index], ErrorKind.DENIED_EXCEEDS_NEED,
            f"P{process_index} is requesting more than its need "
            f"{state.need[process_index].tolist()}"
        )
        or check_at_most(
            request, state.available, ErrorKind.DENIED_INSUFFICIENT_AVAILABLE,
            f"Insufficient resources available {state.available.tolist()}"
        )
    )
    if denial:
        return denied(state, denial)

    # Step 4: Tentative allocation on a copy
    simulated = state.copy()
    simulated.allocation[process_index] += request
    simulated.available -= request

    # Step 5: Run safety algorithm
    safety = check_state(simulated)

    # Step 6: Commit or discard
    if not safety.is_safe:
        blocked = ", ".join(f"P{i}" for i in safety.blocked)
        return denied(
            state,
            Denial(
                ErrorKind.DENIED_UNSAFE,
                f"Granting would leave the system unsafe (blocked: {blocked})"
            ),
            safety=safety
        )

    seq_str = " -> ".join(f"P{i}" for i in safety.sequence)
    return OperationResult(
        granted=True,
        state=simulated,
        reason=f"GRANTED (Safe state maintained, sequence: {seq_str})",
        safety=safety
    )
