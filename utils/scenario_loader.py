"""
Scenario Loader for the OS Resource Allocation Simulator.

Loads and validates JSON scenario files describing processes, a memory
operation sequence and a disk request queue.
"""

import json
from typing import Dict, List, Any, Optional, Tuple

from algorithms.cpu_scheduling import SchedulingAlgorithm
from algorithms.disk_scheduling import DiskAlgorithm
from algorithms.errors import SimulationError
from algorithms.memory_allocation import FitAlgorithm
from config import TOTAL_MEMORY, KERNEL_SIZE, MAX_CYLINDER, DEFAULT_HEAD_POSITION
from models.system_state import SimulationSession


class ScenarioLoadError(Exception):
    """Exception raised when scenario file cannot be loaded or is invalid."""
    pass


MEMORY_OPERATIONS = ('allocate', 'deallocate', 'compact', 'reset')


def load_scenario(file_path: str) -> Tuple[SimulationSession, Dict[str, Any]]:
    """
    Load scenario from JSON file.

    Args:
        file_path: Path to scenario JSON file

    Returns:
        Tuple of (SimulationSession, plan)
        - SimulationSession: Session with processes, memory layout and disk queue
        - plan: Dict with 'description', 'memory_operations' (list of operation
          dicts) and 'disk_algorithm'

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


def build_scenario(data: Dict[str, Any]) -> Tuple[SimulationSession, Dict[str, Any]]:
    """
    Build a session from already-parsed scenario data.

    Args:
        data: Scenario dictionary

    Returns:
        Tuple of (SimulationSession, plan), as load_scenario

    Raises:
        ScenarioLoadError: If the scenario is invalid
    """
    if not isinstance(data, dict):
        raise ScenarioLoadError("Scenario must be a JSON object")
    if not any(key in data for key in ('processes', 'memory', 'disk')):
        raise ScenarioLoadError("Scenario needs at least one of 'processes', 'memory', 'disk'")

    memory_data = _section(data, 'memory')
    disk_data = _section(data, 'disk')

    try:
        session = SimulationSession(
            total_memory=_integer(memory_data, 'total_size', TOTAL_MEMORY),
            kernel_size=_integer(memory_data, 'kernel_size', KERNEL_SIZE),
            max_cylinder=_integer(disk_data, 'max_cylinder', MAX_CYLINDER),
            head_position=_integer(disk_data, 'head_position', DEFAULT_HEAD_POSITION)
        )
    except (SimulationError, TypeError, ValueError) as e:
        raise ScenarioLoadError(f"Invalid memory/disk configuration: {e}")

    _load_processes(_list(data, 'processes'), session)

    disk_algorithm = disk_data.get('algorithm', DiskAlgorithm.FCFS.value)
    _validate_choice(disk_algorithm, DiskAlgorithm, "disk algorithm")
    _load_disk_requests(_list(disk_data, 'requests'), disk_algorithm, session)

    memory_operations = [
        _validate_memory_operation(op, index)
        for index, op in enumerate(_list(memory_data, 'operations'))
    ]

    quantum = _integer(data, 'quantum', None)
    if quantum is not None and quantum < 1:
        raise ScenarioLoadError(f"quantum must be at least 1 ({quantum})")

    plan = {
        'description': data.get('description', ''),
        'algorithm': data.get('algorithm'),
        'quantum': quantum,
        'memory_operations': memory_operations,
        'disk_algorithm': disk_algorithm
    }
    if plan['algorithm'] is not None:
        _validate_choice(plan['algorithm'], SchedulingAlgorithm, "scheduling algorithm")

    return session, plan


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    """Return an optional object-valued section, {} when absent."""
    section = data.get(key, {})
    if not isinstance(section, dict):
        raise ScenarioLoadError(f"'{key}' must be a JSON object")
    return section


def _list(data: Dict[str, Any], key: str) -> List[Any]:
    """Return an optional list-valued field, [] when absent."""
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ScenarioLoadError(f"'{key}' must be a list")
    return value


def _integer(data: Dict[str, Any], key: str, default: Optional[int]) -> Optional[int]:
    """Return an optional integer field. Booleans are rejected."""
    value = data.get(key, default)
    if value is None:
        return default
    if not isinstance(value, int) or isinstance(value, bool):
        raise ScenarioLoadError(f"'{key}' must be an integer (got {value!r})")
    return value


def _load_processes(process_data: List[Dict], session: SimulationSession) -> None:
    """
    Load process definitions into the session.

    Args:
        process_data: List of process dictionaries
        session: Session to add processes to
    """
    required_fields = ['arrival_time', 'burst_time']

    for index, proc in enumerate(process_data):
        if not isinstance(proc, dict):
            raise ScenarioLoadError(f"Process #{index + 1} must be a JSON object")
        for field in required_fields:
            if field not in proc:
                raise ScenarioLoadError(f"Process #{index + 1} missing required field: {field}")

        try:
            session.add_process(
                arrival_time=int(proc['arrival_time']),
                burst_time=int(proc['burst_time']),
                priority=int(proc.get('priority', 1)),
                name=proc.get('name')
            )
        except (SimulationError, TypeError, ValueError) as e:
            raise ScenarioLoadError(f"Process #{index + 1}: {e}")


def _load_disk_requests(requests: List[Any], algorithm: str, session: SimulationSession) -> None:
    """
    Queue disk requests. Entries are cylinders or {"cylinder": n} objects.

    Args:
        requests: Request entries from the scenario
        algorithm: Algorithm tag to stamp on each request
        session: Session to queue requests on
    """
    for index, entry in enumerate(requests):
        cylinder = entry.get('cylinder') if isinstance(entry, dict) else entry
        if not isinstance(cylinder, int) or isinstance(cylinder, bool):
            raise ScenarioLoadError(f"Disk request #{index + 1}: cylinder must be an integer")

        try:
            session.add_disk_request(cylinder, algorithm)
        except SimulationError as e:
            raise ScenarioLoadError(f"Disk request #{index + 1}: {e}")


def _validate_memory_operation(operation: Dict, index: int) -> Dict:
    """
    Validate a memory operation.

    Args:
        operation: Operation dictionary
        index: Position in the operation list (for error messages)

    Returns:
        The operation, with 'algorithm' defaulted for allocations

    Raises:
        ScenarioLoadError: If operation is invalid
    """
    if not isinstance(operation, dict):
        raise ScenarioLoadError(f"Memory operation #{index + 1} must be a JSON object")
    if 'type' not in operation:
        raise ScenarioLoadError(f"Memory operation #{index + 1} missing 'type' field")

    op_type = operation['type']
    if op_type not in MEMORY_OPERATIONS:
        raise ScenarioLoadError(f"Memory operation #{index + 1}: unknown type '{op_type}'")

    if op_type == 'allocate':
        if 'size' not in operation:
            raise ScenarioLoadError(f"Memory operation #{index + 1}: allocate missing 'size'")
        size = operation['size']
        if not isinstance(size, int) or isinstance(size, bool) or size <= 0:
            raise ScenarioLoadError(f"Memory operation #{index + 1}: size must be a positive integer")

        operation = {**operation, 'algorithm': operation.get('algorithm', FitAlgorithm.FIRST.value)}
        _validate_choice(operation['algorithm'], FitAlgorithm, "fit algorithm")

    return operation


def _validate_choice(value: Any, enum_cls, label: str) -> None:
    """Reject tags that name no member of enum_cls."""
    valid = [member.value for member in enum_cls]
    if str(value).lower() not in valid:
        raise ScenarioLoadError(f"Unknown {label} '{value}' (expected one of: {', '.join(valid)})")


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
        return data.get('description', '')
    except (OSError, json.JSONDecodeError):
        return ''
