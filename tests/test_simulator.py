"""
Session, Scenario Loader and CLI Tests

Runs whole sessions the way the command line does: load a system,
replay requests/releases, and check the statistics and event log.
"""

import json
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from models.outcomes import ErrorKind
from analysis.events import EventType
from simulator import BankerSimulator, main, run_scenario
from utils.logger import SimulatorLogger
from utils.scenario_loader import (
    ScenarioLoadError,
    build_scenario,
    get_scenario_description,
    load_sample,
    load_scenario,
    parse_operation,
    parse_vector,
)


# Test scenarios directory
SCENARIOS_DIR = project_root / "tests" / "scenarios"


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

def test_incremental_configuration_matches_sample():
    """Entering the simple scenario one process at a time."""
    session = BankerSimulator()
    assert session.configure_system(3, 2, [10, 8], available=[3, 2]).granted

    rows = [([2, 1], [4, 3]), ([3, 3], [6, 4]), ([2, 2], [4, 4])]
    for i, (allocation, maximum) in enumerate(rows):
        assert session.last_safety is None
        assert session.configure_process(i, allocation, maximum).granted

    sample, _ = load_sample('simple')
    assert session.state.available.tolist() == sample.available.tolist()
    assert session.last_safety.is_safe
    assert session.last_safety.sequence == [0, 1, 2]
    assert len(session.safe_sequences) == 6
    assert session.statistics.safety_checks == 1


def test_configuration_errors_are_reported_not_raised():
    session = BankerSimulator()

    result = session.configure_system(11, 2, [10, 8])
    assert not result.granted
    assert result.kind == ErrorKind.INVALID_DIMENSION
    assert session.state is None

    session.configure_system(2, 2, [5, 5])
    result = session.configure_process(0, [6, 0], [6, 0])
    assert not result.granted
    assert result.kind == ErrorKind.EXCEEDS_TOTAL
    assert session.state.allocation.tolist() == [[0, 0], [0, 0]]


def test_operations_require_a_system():
    with pytest.raises(RuntimeError):
        BankerSimulator().request(0, [1, 0])


def test_operations_wait_for_every_process_to_be_configured():
    session = BankerSimulator()
    session.configure_system(3, 2, [10, 8])
    session.configure_process(0, [2, 1], [4, 3])

    with pytest.raises(RuntimeError, match="P1, P2"):
        session.request(0, [1, 0])
    with pytest.raises(RuntimeError, match="P1, P2"):
        session.release(0, [1, 0])
    assert session.state.allocation[0].tolist() == [2, 1]
    assert session.statistics.requests_granted == 0
    assert session.event_log.get_events_by_type(EventType.ALLOCATION) == []

    session.configure_process(1, [3, 3], [6, 4])
    session.configure_process(2, [2, 2], [4, 4])
    assert session.request(0, [1, 0]).granted


def test_session_commits_only_granted_operations():
    session = BankerSimulator()
    state, _ = load_sample('simple')
    session.load_state(state)

    assert session.request(0, [1, 0]).granted
    assert not session.request(0, [3, 3]).granted
    assert not session.release(0, [5, 5]).granted
    assert session.release(1, [1, 1]).granted

    assert session.state.allocation.tolist() == [[3, 1], [2, 2], [2, 2]]
    assert session.state.available.tolist() == [3, 3]
    assert session.state.resources_conserved()

    stats = session.statistics
    assert stats.requests_granted == 1
    assert stats.requests_denied == 1
    assert stats.deadlocks_avoided == 0
    assert stats.resources_released == 1
    # Initial load plus one re-check per committed operation
    assert stats.safety_checks == 3

    types = [e.event_type for e in session.event_log.events]
    assert types == [
        EventType.CONFIGURE, EventType.SAFETY_CHECK,
        EventType.ALLOCATION, EventType.SAFETY_CHECK,
        EventType.DENIAL,
        EventType.RELEASE_DENIED,
        EventType.RELEASE, EventType.SAFETY_CHECK,
    ]
    assert [e.seq for e in session.event_log.events] == list(range(len(types)))


def test_unsafe_denial_counts_as_deadlock_avoided():
    session = run_scenario(sample='classic')

    stats = session.statistics
    assert stats.requests_granted == 1
    assert stats.requests_denied == 1
    assert stats.deadlocks_avoided == 1
    assert stats.unsafe_checks == 0
    denial = session.event_log.get_events_by_type(EventType.DENIAL)[0]
    assert denial.process_id == 0
    assert denial.vector == (0, 2, 0)
    assert "DENIED" in str(denial)


def test_unsafe_state_reports_no_sequences():
    session = BankerSimulator()
    state, _ = load_sample('deadlock')

    safety = session.load_state(state)

    assert not safety.is_safe
    assert session.safe_sequences == []
    assert session.statistics.unsafe_checks == 1


def test_max_sequences_caps_enumeration():
    session = BankerSimulator(max_sequences=2)
    state, _ = load_sample('simple')

    session.load_state(state)

    assert session.safe_sequences == [(0, 1, 2), (0, 2, 1)]


# ---------------------------------------------------------------------------
# Scenario files
# ---------------------------------------------------------------------------

def test_load_scenario_file():
    state, operations = load_scenario(str(SCENARIOS_DIR / "request_release.json"))

    assert state.available.tolist() == [3, 2]
    assert len(operations) == 5
    assert operations[0] == {'type': 'request', 'process': 0, 'vector': [1, 0]}
    assert get_scenario_description(str(SCENARIOS_DIR / "request_release.json")) == \
        "Request and release replay"


def test_run_scenario_file_replays_operations():
    session = run_scenario(scenario_path=str(SCENARIOS_DIR / "request_release.json"))

    assert session.state.allocation.tolist() == [[3, 1], [2, 2], [2, 2]]
    denials = session.event_log.get_events_by_type(EventType.DENIAL)
    assert [e.process_id for e in denials] == [0, 7]
    assert session.statistics.requests_denied == 2


def test_invalid_scenarios_raise_load_error(tmp_path):
    with pytest.raises(ScenarioLoadError, match="exceed total"):
        load_scenario(str(SCENARIOS_DIR / "invalid_allocation.json"))

    with pytest.raises(ScenarioLoadError, match="unknown operation type"):
        load_scenario(str(SCENARIOS_DIR / "unknown_operation.json"))

    with pytest.raises(ScenarioLoadError, match="not found"):
        load_scenario(str(tmp_path / "missing.json"))

    broken = tmp_path / "broken.json"
    broken.write_text("{ not json", encoding="utf-8")
    with pytest.raises(ScenarioLoadError, match="Invalid JSON"):
        load_scenario(str(broken))
    assert get_scenario_description(str(broken)) == ''

    with pytest.raises(ScenarioLoadError, match="total_resources"):
        build_scenario({'processes': []})
    with pytest.raises(ScenarioLoadError, match="maximum"):
        build_scenario({'total_resources': [1], 'processes': [{'allocation': [0]}]})
    with pytest.raises(ScenarioLoadError, match="Unknown sample"):
        load_sample('nonexistent')

    with pytest.raises(ScenarioLoadError, match="must be a sequence"):
        build_scenario({'total_resources': 5, 'processes': [{'allocation': [1], 'maximum': [2]}]})
    with pytest.raises(ScenarioLoadError, match="'processes' must be a list"):
        build_scenario({'total_resources': [5], 'processes': 3})
    with pytest.raises(ScenarioLoadError, match="'operations' must be a list"):
        build_scenario({'total_resources': [5], 'processes': [{'allocation': [1], 'maximum': [2]}], 'operations': {}})


def test_parse_vector():
    assert parse_vector("1, 0, 2") == [1, 0, 2]
    assert parse_vector("4") == [4]
    for text in ("", "  ", "1,,2", "a,1", "1,-2"):
        with pytest.raises(ScenarioLoadError):
            parse_vector(text)


def test_parse_operation():
    assert parse_operation("1:1,0,2") == (1, [1, 0, 2])
    assert parse_operation("P2: 0, 1") == (2, [0, 1])
    with pytest.raises(ScenarioLoadError):
        parse_operation("1,0,2")
    with pytest.raises(ScenarioLoadError):
        parse_operation("x:1")


# ---------------------------------------------------------------------------
# Logging and CLI
# ---------------------------------------------------------------------------

def test_log_file_mirrors_console(tmp_path, capsys):
    log_path = tmp_path / "session.log"

    run_scenario(sample='classic', verbose=True, show_trace=True, log_file=str(log_path))

    text = log_path.read_text(encoding="utf-8")
    assert text.startswith("Banker's Algorithm Session Log")
    assert "P1 requests [1, 0, 2] - GRANTED" in text
    assert "P0 requests [0, 2, 0] - DENIED" in text
    assert "P1 can finish" in text
    assert "[DEBUG] System State:" in text
    assert "Deadlocks Avoided:  1" in text
    assert "P1 requests [1, 0, 2] - GRANTED" in capsys.readouterr().out


def test_trace_narration_reports_waiting_process_once(capsys):
    logger = SimulatorLogger()
    state, _ = load_sample('deadlock')
    session = BankerSimulator(logger=logger, show_trace=True)

    session.load_state(state)

    out = capsys.readouterr().out
    assert out.count("P0 must wait") == 1
    assert "[WARNING] System is in an UNSAFE state!" in out


def test_main_runs_sample_with_extra_operations(capsys):
    assert main(['--sample', 'simple', '--request', '0:1,0', '--release', 'P1:1,1']) == 0

    out = capsys.readouterr().out
    assert "P0 requests [1, 0] - GRANTED" in out
    assert "P1 releases [1, 1] - APPLIED" in out
    assert "6 safe sequences found" in out


def test_main_reports_load_errors(capsys):
    assert main(['--scenario', str(SCENARIOS_DIR / "invalid_allocation.json")]) == 1
    assert main(['--sample', 'simple', '--request', 'bad']) == 1
    assert "[ERROR] Failed to load scenario" in capsys.readouterr().out


def test_main_reports_malformed_scenario_file(tmp_path, capsys):
    scenario = tmp_path / "scalar_total.json"
    scenario.write_text(json.dumps({
        'total_resources': 5,
        'processes': [{'allocation': [1], 'maximum': [2]}],
    }), encoding="utf-8")

    assert main(['--scenario', str(scenario)]) == 1
    assert "[ERROR] Failed to load scenario" in capsys.readouterr().out


def test_logger_closes_file_on_exit(tmp_path):
    log_path = tmp_path / "closed.log"

    with SimulatorLogger(verbose=False, log_file=str(log_path)) as logger:
        logger.log("hidden detail", "debug")
        logger.log("denied", "warning")
        logger.log("plain", "unknown")

    assert logger.file_handle is None
    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert lines[0].endswith("(normal)")
    assert "hidden detail" not in lines
    assert lines[-2:] == ["[WARNING] denied", "plain"]


def test_main_argument_errors():
    with pytest.raises(SystemExit):
        main([])
    with pytest.raises(SystemExit):
        main(['--sample', 'simple', '--max-sequences', '0'])


def test_bundled_scenarios_load():
    for path in sorted((project_root / "scenarios").glob("*.json")):
        data = json.loads(path.read_text(encoding="utf-8"))
        state, operations = build_scenario(data)
        assert state.resources_conserved(), path.name
        assert len(operations) == len(data.get('operations', []))
