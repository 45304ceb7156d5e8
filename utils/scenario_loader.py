"""
Scenario Loader for the Banker's Algorithm Simulator.

Loads and validates JSON scenario files and the built-in sample
scenarios, and parses comma-separated resource vectors.
"""

import json
from typing import Dict, List, Any, Tuple

from models.outcomes import InvalidStateError
from models.system_state import SystemState


SAMPLE_SCENARIOS = {
    'simple': {
        'description': "Simple Example",
        'total_resources': [10, 8],
        'available': [3, 2],
        'processes': [
            {'allocation': [2, 1], 'maximum': [4, 3]},
            {'allocation': [3, 3], 'maximum': [6, 4]},
            {'allocation': [2, 2], 'maximum': [4, 4]},
        ],
    },
    'deadlock': {
        'description': "Deadlock Risk",
        'total_resources': [12, 10, 8],
        'available': [2, 1, 0],
        'processes': [
            {'allocation': [3, 2, 2], 'maximum': [5, 4, 4]},
            {'allocation': [2, 3, 2], 'maximum': [4, 5, 4]},
            {'allocation': [3, 2, 3], 'maximum': [5, 4, 5]},
            {'allocation': [2, 2, 1], 'maximum': [4, 4, 3]},
        ],
    },
    'classic': {
        'description': "Silberschatz textbook example (5 processes, 3 resource types)",
        'total_resources': [10, 5, 7],
        'available': [3, 3, 2],
        'processes': [
            {'allocation': [0, 1, 0], 'maximum': [7, 5, 3]},
            {'allocation': [2, 0, 0], 'maximum': [3, 2, 2]},
            {'allocation': [3, 0, 2], 'maximum': [9, 0, 2]},
            {'allocation': [2, 1, 1], 'maximum': [2, 2, 2]},
            {'allocation': [0, 0, 2], 'maximum': [4, 3, 3]},
        ],
        'operations': [
            {'type': 'request', 'process': 1, 'vector': [1, 0, 2]},
            {'type': 'request', 'process': 0, 'vector': [0, 2, 0]},
        ],
    },
}

OPERATION_TYPES = ('request', 'release')


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


def load_scenario(file_path: str) -> Tuple[SystemState, List[Dict]]:
    """
    Load scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Tuple of (SystemState, operations)
        - SystemState: Fully configured system
        - operations: Request/release operations to replay, in file order

    Raises:
        ScenarioLoadError: If file cannot be loaded or is invalid
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ScenarioLoadError(f"Scenario file not found: {file_path}")
    except json.JSONDecodeError as e:
        raise ScenarioLoadError(f"Invalid JSON in scenario file: {e}")

    return build_scenario(data)


def load_sample(name: str) -> Tuple[SystemState, List[Dict]]:
    """
    Load one of the built-in sample scenarios.

    Raises:
        ScenarioLoadError: If no sample has that name
    """
    if name not in SAMPLE_SCENARIOS:
        available = ", ".join(sorted(SAMPLE_SCENARIOS))
        raise ScenarioLoadError(f"Unknown sample scenario '{name}' (choose from: {available})")
    return build_scenario(SAMPLE_SCENARIOS[name])


def build_scenario(data: Dict[str, Any]) -> Tuple[SystemState, List[Dict]]:
    """
    Build the system state and operation list from scenario data.

    Args:
        data: Parsed scenario dictionary

    Returns:
        Tuple of (SystemState, operations)
    """
    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")

    # Validate required fields
    if 'total_resources' not in data:
        raise ScenarioLoadError("Scenario missing 'total_resources' field")
    if 'processes' not in data:
        raise ScenarioLoadError("Scenario missing 'processes' field")

    if not isinstance(data['processes'], list):
        raise ScenarioLoadError("Scenario 'processes' must be a list")
    if not isinstance(data.get('operations', []), list):
        raise ScenarioLoadError("Scenario 'operations' must be a list")

    allocation = []
    maximum = []
    for i, proc_data in enumerate(data['processes']):
        if not isinstance(proc_data, dict):
            raise ScenarioLoadError(f"Process {i} must be an object")
        for field in ('allocation', 'maximum'):
            if field not in proc_data:
                raise ScenarioLoadError(f"Process {i} missing required field: {field}")
        allocation.append(proc_data['allocation'])
        maximum.append(proc_data['maximum'])

    try:
        system_state = SystemState.from_matrices(
            data['total_resources'],
            allocation,
            maximum,
            available=data.get('available')
        )
    except InvalidStateError as e:
        raise ScenarioLoadError(f"Invalid scenario: {e}") from e

    operations = [_validate_operation(op, i) for i, op in enumerate(data.get('operations', []))]

    return system_state, operations


def _validate_operation(operation: Dict, position: int) -> Dict:
    """
    Validate the shape of an operation.

    Index ranges and vector values are left to the core, which reports
    them as denials when the operation is replayed.

    Raises:
        ScenarioLoadError: If operation is malformed
    """
    if not isinstance(operation, dict):
        raise ScenarioLoadError(f"Operation {position} must be an object")

    for field in ('type', 'process', 'vector'):
        if field not in operation:
            raise ScenarioLoadError(f"Operation {position} missing '{field}' field")

    if operation['type'] not in OPERATION_TYPES:
        raise ScenarioLoadError(
            f"Operation {position}: unknown operation type '{operation['type']}'"
        )

    if not isinstance(operation['vector'], list):
        raise ScenarioLoadError(f"Operation {position}: 'vector' must be a list")

    return {
        'type': operation['type'],
        'process': operation['process'],
        'vector': list(operation['vector']),
    }


def parse_vector(text: str, label: str = "Vector") -> List[int]:
    """
    Parse comma-separated non-negative integers, e.g. "1, 0, 2".

    Raises:
        ScenarioLoadError: If text is empty or holds anything else
    """
    if not text or not text.strip():
        raise ScenarioLoadError(f"Please enter {label} values")

    values = []
    for part in text.replace(' ', '').split(','):
        try:
            value = int(part)
        except ValueError:
            raise ScenarioLoadError(f"{label} values must be non-negative numbers (got '{part}')")
        if value < 0:
            raise ScenarioLoadError(f"{label} values must be non-negative numbers (got '{part}')")
        values.append(value)
    return values


def parse_operation(text: str, label: str = "Operation") -> Tuple[int, List[int]]:
    """
    Parse a "process:values" argument, e.g. "1:1,0,2".

    Raises:
        ScenarioLoadError: If text is malformed
    """
    process, sep, values = text.partition(':')
    if not sep:
        raise ScenarioLoadError(f"{label} must look like PROCESS:V1,V2,... (got '{text}')")
    try:
        pid = int(process.strip().lstrip('Pp'))
    except ValueError:
        raise ScenarioLoadError(f"{label}: invalid process '{process}'")
    return pid, parse_vector(values, label)


def get_scenario_description(file_path: str) -> str:
    """
    Get description from scenario file without full loading.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Description string, or empty string if not present
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError):
        return ''
    if not isinstance(data, dict):
        return ''
    return data.get('description', '')
