"""
Session statistics for the Banker's Algorithm Simulator.

Tracks how many requests were granted or denied, how many releases were
applied and how often the banker refused a request to stay safe.
"""

from dataclasses import dataclass, asdict
from typing import Dict

from models.outcomes import ErrorKind, OperationResult


@dataclass
class SessionStatistics:
    """
    Accumulated counters for one session.

    Attributes:
        requests_granted: Requests committed
        requests_denied: Requests refused for any reason
        resources_released: Releases applied
        deadlocks_avoided: Requests refused because granting them was unsafe
        safety_checks: Safety checks run
        unsafe_checks: Safety checks that returned UNSAFE
    """
    requests_granted: int = 0
    requests_denied: int = 0
    resources_released: int = 0
    deadlocks_avoided: int = 0
    safety_checks: int = 0
    unsafe_checks: int = 0

    def record_request(self, result: OperationResult) -> None:
        """Count a request decision."""
        if result.granted:
            self.requests_granted += 1
            return
        self.requests_denied += 1
        if result.kind == ErrorKind.DENIED_UNSAFE:
            self.deadlocks_avoided += 1

    def record_release(self, result: OperationResult) -> None:
        """Count an applied release; refused releases are not counted."""
        if result.granted:
            self.resources_released += 1

    def record_safety_check(self, is_safe: bool) -> None:
        self.safety_checks += 1
        if not is_safe:
            self.unsafe_checks += 1

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    def display(self) -> str:
        """Format counters for display."""
        return (
            "\nSession Statistics:\n"
            f"  Requests Granted:   {self.requests_granted}\n"
            f"  Requests Denied:    {self.requests_denied}\n"
            f"  Deadlocks Avoided:  {self.deadlocks_avoided}\n"
            f"  Resources Released: {self.resources_released}\n"
            f"  Safety Checks:      {self.safety_checks} ({self.unsafe_checks} unsafe)"
        )
