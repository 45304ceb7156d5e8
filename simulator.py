#!/usr/bin/env python3
"""
Banker's Algorithm Simulator
Main entry point for the deadlock avoidance simulator.

Loads a system (scenario file or built-in sample), reports whether it is
safe and which completion orders exist, then replays resource requests
and releases against it.
"""

import argparse
import sys
from typing import Optional, List, Sequence

from models.outcomes import InvalidStateError, OperationResult
from models.system_state import SystemState, configure_process
from algorithms.safety import SafetyResult, check_state
from algorithms.sequences import find_all_safe_sequences
from algorithms.avoidance import evaluate_request
from algorithms.release import release_resources
from analysis.events import EventLog, EventType
from analysis.metrics import SessionStatistics
from utils.logger import SimulatorLogger
from utils.scenario_loader import (
    SAMPLE_SCENARIOS,
    ScenarioLoadError,
    get_scenario_description,
    load_sample,
    load_scenario,
    parse_operation,
)


class BankerSimulator:
    """
    One interactive session over a single system.

    The session owns the live SystemState. Every operation hands the
    current state to the core, and only a granted result replaces it.

    Attributes:
        state: Live system state (None until configured)
        event_log: Everything that happened in this session
        statistics: Request/release counters
        last_safety: Result of the most recent safety check
        safe_sequences: Safe sequences found by the most recent check
    """

    def __init__(
        self,
        logger: Optional[SimulatorLogger] = None,
        max_sequences: Optional[int] = None,
        show_trace: bool = False
    ):
        """
        Args:
            logger: Where decisions are narrated (console logger if None)
            max_sequences: Cap on safe sequences enumerated per check
            show_trace: Narrate every step of each safety check
        """
        self.logger = logger or SimulatorLogger()
        self.max_sequences = max_sequences
        self.show_trace = show_trace
        self.reset()

    def reset(self) -> None:
        """Discard the system and all session history."""
        self.state: Optional[SystemState] = None
        self.event_log = EventLog()
        self.statistics = SessionStatistics()
        self.last_safety: Optional[SafetyResult] = None
        self.safe_sequences: List[tuple] = []

    def _require_state(self) -> SystemState:
        if self.state is None:
            raise RuntimeError("System not configured; call configure_system or load_state first")
        return self.state

    def _require_ready(self) -> SystemState:
        state = self._require_state()
        if not state.is_fully_configured:
            pending = ", ".join(f"P{i}" for i, done in enumerate(state.configured) if not done)
            raise RuntimeError(f"Setup incomplete; configure {pending} before requests or releases")
        return state

    def configure_system(
        self,
        process_count: int,
        resource_type_count: int,
        total_resources: Sequence[int],
        available: Optional[Sequence[int]] = None
    ) -> OperationResult:
        """Start a new system; process rows are entered with configure_process."""
        try:
            state = SystemState.create(process_count, resource_type_count, total_resources, available)
        except InvalidStateError as e:
            self.logger.log(f"Cannot configure system: {e.denial.message}", "error")
            return OperationResult(granted=False, state=self.state,
                                   reason=f"DENIED ({e.denial.message})", denial=e.denial)

        self.reset()
        self.state = state
        self.event_log.add(
            EventType.CONFIGURE,
            message=f"{process_count} processes, {resource_type_count} resource types, "
                    f"total {state.total_resources.tolist()}"
        )
        return OperationResult(granted=True, state=state, reason="System configured")

    def configure_process(
        self,
        index: int,
        allocation: Sequence[int],
        maximum: Sequence[int]
    ) -> OperationResult:
        """Enter one process row; checks safety once every row is in."""
        result = configure_process(self._require_state(), index, allocation, maximum)
        if not result.granted:
            self.logger.log(f"P{index}: {result.reason}", "error")
            return result

        self.state = result.state
        self.event_log.add(EventType.CONFIGURE, index, message=result.reason)
        self.logger.log(f"{result.reason}", "debug")
        if self.state.is_fully_configured:
            self.check_safety()
        return result

    def load_state(self, state: SystemState) -> SafetyResult:
        """Replace the session with a fully configured system and check it."""
        self.reset()
        self.state = state
        self.event_log.add(
            EventType.CONFIGURE,
            message=f"Loaded {state.num_processes} processes, {state.num_resources} resource types"
        )
        return self.check_safety()

    def check_safety(self) -> SafetyResult:
        """
        Run the safety algorithm on the live state.

        When the state is safe, every alternative safe sequence is also
        enumerated.
        """
        state = self._require_state()
        safety = check_state(state)
        if safety.is_safe:
            self.safe_sequences = find_all_safe_sequences(
                state.available, state.allocation, state.maximum, limit=self.max_sequences
            )
        else:
            self.safe_sequences = []
        self.last_safety = safety

        self.statistics.record_safety_check(safety.is_safe)
        self.event_log.add(EventType.SAFETY_CHECK, message=safety.verdict.value)

        self.logger.log(f"\nAvailable: {state.available.tolist()}")
        if self.show_trace:
            self.logger.log_trace(safety.trace)
        self.logger.log_safety(safety.is_safe, safety.sequence, safety.blocked, self.safe_sequences)
        return safety

    def request(self, process_index: int, request: Sequence[int]) -> OperationResult:
        """Evaluate a request; a granted request replaces the live state."""
        result = evaluate_request(self._require_ready(), process_index, request)

        self.statistics.record_request(result)
        self.event_log.add(
            EventType.ALLOCATION if result.granted else EventType.DENIAL,
            process_index,
            vector=_as_tuple(request),
            reason=result.reason
        )
        self.logger.log_request(process_index, request, result.granted, result.reason)

        if result.granted:
            self._commit(result.state, f"after granting {list(request)} to P{process_index}")
        return result

    def release(self, process_index: int, release: Sequence[int]) -> OperationResult:
        """Apply a release; the state is re-checked afterwards but never reverted."""
        result = release_resources(self._require_ready(), process_index, release)

        self.statistics.record_release(result)
        self.event_log.add(
            EventType.RELEASE if result.granted else EventType.RELEASE_DENIED,
            process_index,
            vector=_as_tuple(release),
            reason=result.reason
        )
        self.logger.log_release(process_index, release, result.granted, result.reason)

        if result.granted:
            self._commit(result.state, f"after P{process_index} released {list(release)}")
        return result

    def _commit(self, state: SystemState, context: str) -> None:
        self.state = state
        if self.logger.verbose:
            # SANITY CHECK: Verify resource conservation after every mutation
            state.assert_resource_conservation(context)
            self.logger.log_system_state(state.display())
        self.check_safety()


def _as_tuple(vector) -> Optional[tuple]:
    try:
        return tuple(vector)
    except TypeError:
        return None


def run_scenario(
    scenario_path: Optional[str] = None,
    sample: Optional[str] = None,
    extra_operations: Optional[List[dict]] = None,
    verbose: bool = False,
    show_trace: bool = False,
    max_sequences: Optional[int] = None,
    log_file: Optional[str] = None
) -> BankerSimulator:
    """
    Load a system and replay its operations.

    Args:
        scenario_path: Path to scenario JSON file
        sample: Name of a built-in sample (used when no path is given)
        extra_operations: Operations to run after the scenario's own
        verbose: Enable verbose logging
        show_trace: Narrate each safety check step by step
        max_sequences: Cap on safe sequences enumerated per check
        log_file: Optional file mirroring the console output

    Returns:
        The finished session

    Raises:
        ScenarioLoadError: If the scenario cannot be loaded
    """
    with SimulatorLogger(verbose=verbose, log_file=log_file) as logger:
        if scenario_path:
            state, operations = load_scenario(scenario_path)
            title = get_scenario_description(scenario_path) or scenario_path
        else:
            state, operations = load_sample(sample)
            title = SAMPLE_SCENARIOS[sample]['description']

        logger.log(f"\n{'=' * 60}")
        logger.log(f"SCENARIO: {title}")
        logger.log(f"{'=' * 60}")
        logger.log(state.display())

        session = BankerSimulator(logger=logger, max_sequences=max_sequences, show_trace=show_trace)
        session.load_state(state)

        for operation in operations + list(extra_operations or []):
            logger.log(f"\n{'-' * 60}")
            if operation['type'] == 'request':
                session.request(operation['process'], operation['vector'])
            else:
                session.release(operation['process'], operation['vector'])

        logger.log(session.statistics.display())
        return session


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the simulator."""
    parser = argparse.ArgumentParser(
        description="Banker's Algorithm Deadlock Avoidance Simulator"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '--scenario',
        type=str,
        help='Path to scenario JSON file'
    )
    source.add_argument(
        '--sample',
        choices=sorted(SAMPLE_SCENARIOS),
        help='Built-in sample scenario to load'
    )
    parser.add_argument(
        '--request',
        action='append',
        default=[],
        metavar='P:V1,V2,...',
        help='Resource request to evaluate after the scenario (repeatable)'
    )
    parser.add_argument(
        '--release',
        action='append',
        default=[],
        metavar='P:V1,V2,...',
        help='Resource release to apply after the scenario (repeatable)'
    )
    parser.add_argument(
        '--max-sequences',
        type=int,
        default=None,
        help='Stop enumerating safe sequences after this many (default: all)'
    )
    parser.add_argument(
        '--trace',
        action='store_true',
        help='Narrate every step of each safety check'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the session log to this file'
    )

    args = parser.parse_args(argv)

    if args.max_sequences is not None and args.max_sequences < 1:
        parser.error('--max-sequences must be at least 1')

    try:
        extra = [
            {'type': 'request', 'process': pid, 'vector': vector}
            for pid, vector in (parse_operation(text, "Request") for text in args.request)
        ]
        extra += [
            {'type': 'release', 'process': pid, 'vector': vector}
            for pid, vector in (parse_operation(text, "Release") for text in args.release)
        ]
        run_scenario(
            scenario_path=args.scenario,
            sample=args.sample,
            extra_operations=extra,
            verbose=args.verbose,
            show_trace=args.trace,
            max_sequences=args.max_sequences,
            log_file=args.log_file
        )
    except ScenarioLoadError as e:
        SimulatorLogger().log(f"Failed to load scenario: {e}", "error")
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
