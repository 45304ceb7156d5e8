"""
Logger utility for the Banker's Algorithm Simulator.

Provides session logging with verbosity levels and replay of safety
algorithm traces.
"""

from typing import List, Optional, Sequence, Tuple
from datetime import datetime

# Console/file prefix per level; "info" lines are written bare
LEVEL_PREFIXES = {
    "error": "[ERROR] ",
    "warning": "[WARNING] ",
    "debug": "[DEBUG] ",
    "info": "",
}


def _format_vector(values) -> str:
    try:
        return str(list(values))
    except TypeError:
        return repr(values)


class SimulatorLogger:
    """
    Logger for session events and decisions.

    Every line goes to stdout and, when a log file is given, to that file
    as well. Usable as a context manager so the file is closed when a
    session ends.

    Format: "P1 requests [1, 0] - GRANTED/DENIED (reason)"
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = open(log_file, 'w', encoding='utf-8') if log_file else None
        if self.file_handle:
            started = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            mode = "verbose" if verbose else "normal"
            self._emit(f"Banker's Algorithm Session Log - {started} ({mode})", console=False)
            self._emit("=" * 60 + "\n", console=False)

    def __enter__(self) -> "SimulatorLogger":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _emit(self, line: str, console: bool = True) -> None:
        if console:
            print(line)
        if self.file_handle:
            self.file_handle.write(line + "\n")
            self.file_handle.flush()

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Debug lines are dropped unless the logger is verbose. Unknown
        levels are treated as info.
        """
        if level == "debug" and not self.verbose:
            return
        self._emit(LEVEL_PREFIXES.get(level, "") + message)

    def log_request(self, pid: int, request: Sequence[int], granted: bool, reason: str) -> None:
        """Log a resource request decision."""
        status = "GRANTED" if granted else "DENIED"
        self.log(f"P{pid} requests {_format_vector(request)} - {status} ({reason})")

    def log_release(self, pid: int, release: Sequence[int], applied: bool, reason: str) -> None:
        """Log a resource release decision."""
        status = "APPLIED" if applied else "DENIED"
        self.log(f"P{pid} releases {_format_vector(release)} - {status} ({reason})")

    def log_safety(
        self,
        is_safe: bool,
        sequence: List[int],
        blocked: List[int],
        alternatives: List[Tuple[int, ...]]
    ) -> None:
        """
        Log the verdict of a safety check.

        Args:
            is_safe: Verdict of the check
            sequence: Completion order found by the scan
            blocked: Processes that could not finish
            alternatives: Every safe sequence found by enumeration
        """
        if is_safe:
            seq_str = " -> ".join(f"P{i}" for i in sequence)
            self.log(f"System is in a SAFE state. Safe sequence: {seq_str}")
            if len(alternatives) > 1:
                self.log(f"  {len(alternatives)} safe sequences found:")
                for number, alt in enumerate(alternatives, start=1):
                    self.log(f"    {number}. " + " -> ".join(f"P{i}" for i in alt))
        else:
            pids_str = ", ".join(f"P{i}" for i in blocked)
            self.log(f"System is in an UNSAFE state! Deadlock may occur. Blocked: [{pids_str}]", "warning")

    def log_trace(self, trace) -> None:
        """
        Narrate a safety algorithm trace.

        A process that cannot finish is reported once until some other
        process finishes and the work vector changes.
        """
        attempted = set()
        for entry in trace:
            if entry.eligible:
                attempted.clear()
                self.log(
                    f"  Step {entry.step}: P{entry.process} can finish "
                    f"(need {list(entry.need)} <= work {list(entry.work_before)}); "
                    f"work becomes {list(entry.work_after)}"
                )
            elif entry.process not in attempted:
                attempted.add(entry.process)
                self.log(
                    f"  Step {entry.step}: P{entry.process} must wait "
                    f"(need {list(entry.need)} > work {list(entry.work_before)})"
                )

    def log_system_state(self, state_str: str) -> None:
        """
        Log system state snapshot.

        Args:
            state_str: Formatted system state
        """
        if self.verbose:
            self.log(f"System State:\n{state_str}", "debug")

    def close(self) -> None:
        """Close the log file, if one is open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None
