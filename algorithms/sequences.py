"""
Safe Sequence Enumeration for the Banker's Algorithm Simulator.

Explores every completion order reachable from a state with a
depth-first search over which processes have finished.
"""

import numpy as np
from typing import List, Optional, Tuple

from algorithms.safety import can_finish


def find_all_safe_sequences(
    available: np.ndarray,
    allocation: np.ndarray,
    maximum: np.ndarray,
    limit: Optional[int] = None
) -> List[Tuple[int, ...]]:
    """
    Find every safe sequence reachable from the given state.

    At each node the eligible unfinished processes (Need[i] <= Work) are
    tried in ascending index order; each branch finishes one of them and
    recurses with Work += Allocation[i]. A node with no eligible process
    and unfinished work left is a dead end. The search is exponential in
    the worst case, which is acceptable for at most 10 processes.

    Args:
        available: [R] Available vector
        allocation: [P][R] Allocation matrix
        maximum: [P][R] Maximum matrix
        limit: Stop once this many sequences are found (None = all)

    Returns:
        Safe sequences in discovery (lexicographic) order; empty iff unsafe
    """
    allocation = np.asarray(allocation, dtype=int)
    need = np.asarray(maximum, dtype=int) - allocation
    num_processes = allocation.shape[0]

    sequences = []
    seen = set()

    def explore(work: np.ndarray, finish: np.ndarray, path: List[int]) -> bool:
        """Returns False once the limit is reached."""
        if finish.all():
            key = tuple(path)
            if key not in seen:
                seen.add(key)
                sequences.append(key)
            return limit is None or len(sequences) < limit

        for i in range(num_processes):
            if finish[i] or not can_finish(need[i], work):
                continue

            next_finish = finish.copy()
            next_finish[i] = True
            if not explore(work + allocation[i], next_finish, path + [i]):
                return False

        return True

    if limit is None or limit > 0:
        explore(
            np.array(available, dtype=int),
            np.zeros(num_processes, dtype=bool),
            []
        )
    return sequences
