"""
Safety Algorithm (Banker's Algorithm) for the Simulator.

Determines whether an allocation state is safe, and records every
eligibility test it performs so the run can be replayed step by step.
"""

import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from models.outcomes import Verdict


@dataclass(frozen=True)
class SafetyStep:
    """
    One eligibility test performed by the safety algorithm.

    Attributes:
        step: 1-based position in the trace
        process: Index of the process tested
        eligible: True if Need[process] <= Work
        need: Need vector of the process
        work_before: Work vector at the time of the test
        work_after: Work vector afterwards (grows by the allocation if eligible)
    """
    step: int
    process: int
    eligible: bool
    need: Tuple[int, ...]
    work_before: Tuple[int, ...]
    work_after: Tuple[int, ...]


@dataclass
class SafetyResult:
    """
    Outcome of a safety check.

    Attributes:
        verdict: SAFE if every process can finish
        sequence: Completion order discovered (partial when unsafe)
        trace: Every eligibility test, in the order performed
        blocked: Processes that could not finish (empty when safe)
        work: Work vector when the algorithm stopped
    """
    verdict: Verdict
    sequence: List[int]
    trace: List[SafetyStep] = field(default_factory=list)
    blocked: List[int] = field(default_factory=list)
    work: Tuple[int, ...] = ()

    @property
    def is_safe(self) -> bool:
        return self.verdict is Verdict.SAFE


def can_finish(need: np.ndarray, work: np.ndarray) -> bool:
    """Check if Need[i] <= Work for all resource types."""
    return bool(np.all(need <= work))


def run_safety_check(
    allocation: np.ndarray,
    available: np.ndarray,
    maximum: np.ndarray
) -> SafetyResult:
    """
    Run the safety algorithm and record a replay trace.

    Algorithm:
    1. Initialize Work = Available, Finish = [False] * num_processes
    2. Scan unfinished processes in ascending index order for one with
       Need[i] <= Work
    3. If found: Finish[i] = True, Work += Allocation[i], append i to the
       sequence and restart the scan from index 0
    4. Stop when a full scan finds nothing; SAFE iff every process finished

    Time Complexity: O(P²×R)

    The inputs are copied; nothing passed in is modified.

    Args:
        allocation: [P][R] Allocation matrix
        available: [R] Available vector
        maximum: [P][R] Maximum matrix

    Returns:
        SafetyResult with verdict, sequence, trace and blocked processes
    """
    allocation = np.asarray(allocation, dtype=int)
    maximum = np.asarray(maximum, dtype=int)
    need = maximum - allocation
    num_processes = allocation.shape[0]

    # Work = copy of Available (prevents modification of original)
    work = np.array(available, dtype=int)
    finish = np.zeros(num_processes, dtype=bool)
    sequence = []
    trace = []

    made_progress = True
    while made_progress:
        made_progress = False

        for i in range(num_processes):
            if finish[i]:
                continue

            work_before = tuple(int(w) for w in work)
            eligible = can_finish(need[i], work)
            if eligible:
                work = work + allocation[i]
                finish[i] = True
                sequence.append(i)

            trace.append(SafetyStep(
                step=len(trace) + 1,
                process=i,
                eligible=eligible,
                need=tuple(int(n) for n in need[i]),
                work_before=work_before,
                work_after=tuple(int(w) for w in work)
            ))

            if eligible:
                made_progress = True
                break  # Restart search from index 0

    blocked = [i for i in range(num_processes) if not finish[i]]
    verdict = Verdict.SAFE if not blocked else Verdict.UNSAFE

    return SafetyResult(
        verdict=verdict,
        sequence=sequence,
        trace=trace,
        blocked=blocked,
        work=tuple(int(w) for w in work)
    )


def is_safe_state(
    allocation: np.ndarray,
    available: np.ndarray,
    maximum: np.ndarray
) -> Tuple[bool, Optional[List[int]]]:
    """
    Check if a state is safe using Banker's Algorithm.

    Returns:
        Tuple of (is_safe, safe_sequence if exists else None)

    References:
        Silberschatz, A., Galvin, P. B., & Gagne, G. (2018).
        Operating System Concepts (10th ed.). Chapter 7.5: Deadlock Avoidance.
    """
    result = run_safety_check(allocation, available, maximum)
    if result.is_safe:
        return True, result.sequence
    return False, None


def check_state(state) -> SafetyResult:
    """Run the safety check on a SystemState."""
    return run_safety_check(state.allocation, state.available, state.maximum)
