#!/usr/bin/env python3
"""
OS Resource Allocation Simulator
Main entry point for the simulation system.

Educational tool for CPU scheduling, contiguous memory allocation and
disk scheduling.
"""

import argparse
import sys
from typing import Optional, Dict, List, Any, Tuple

from algorithms.cpu_scheduling import ExecutionTrace, SchedulingAlgorithm
from algorithms.disk_scheduling import DiskRunResult
from algorithms.errors import SimulationError
from algorithms.memory_allocation import FitAlgorithm
from analysis.analyzer import (
    compare_scheduling_algorithms, compare_fit_algorithms, generate_comparison_report
)
from analysis.events import EventLog, EntityType, EventType
from analysis.metrics import (
    SchedulingMetrics, MemoryMetrics, DiskMetrics,
    compute_scheduling_metrics, compute_memory_metrics, compute_disk_metrics,
    format_scheduling_report, format_memory_report, format_disk_report
)
from config import DEFAULT_QUANTUM
from models.system_state import SimulationSession
from utils.logger import SimulatorLogger
from utils.scenario_loader import load_scenario, ScenarioLoadError


MODULES = ('cpu', 'memory', 'disk', 'all')


def run_cpu_simulation(
    session: SimulationSession,
    algorithm: str,
    quantum: int,
    logger: SimulatorLogger,
    event_log: EventLog
) -> Optional[Tuple[ExecutionTrace, SchedulingMetrics]]:
    """
    Schedule the session's processes and report the results.

    Args:
        session: Simulation session
        algorithm: Scheduling algorithm tag
        quantum: Round Robin time quantum
        logger: Logger instance
        event_log: Event log

    Returns:
        (trace, metrics), or None if the run failed
    """
    logger.log_section(f"CPU SCHEDULING: {algorithm.upper()}")

    try:
        trace = session.run_scheduler(algorithm, quantum)
    except SimulationError as e:
        _record_failure(EntityType.PROCESS, e, logger, event_log)
        return None

    metrics = compute_scheduling_metrics(trace)
    order = " | ".join(str(s) for s in trace.slices)
    logger.log_schedule(trace.algorithm.value, order, len(trace.processes))

    event_log.record(
        EntityType.PROCESS,
        EventType.SCHEDULED,
        f"Scheduler executed with {trace.algorithm.value.upper()} algorithm",
        data={
            'quantum': trace.quantum,
            'processes': [p.to_dict() for p in trace.processes]
        }
    )

    logger.log(format_scheduling_report(metrics, trace, logger.verbose))
    return trace, metrics


def run_memory_simulation(
    session: SimulationSession,
    operations: List[Dict],
    logger: SimulatorLogger,
    event_log: EventLog,
    fit_override: Optional[str] = None
) -> MemoryMetrics:
    """
    Apply a sequence of memory operations to the session.

    Failed allocations are logged and leave the layout unchanged.

    Args:
        session: Simulation session
        operations: Validated memory operations
        logger: Logger instance
        event_log: Event log
        fit_override: Fit algorithm forcing every allocation (optional)

    Returns:
        MemoryMetrics for the final layout
    """
    logger.log_section("MEMORY ALLOCATION")
    failed = 0

    for op in operations:
        op_type = op['type']

        if op_type == 'allocate':
            algorithm = fit_override or op['algorithm']
            try:
                outcome = session.allocate_memory(op['size'], algorithm, op.get('owner'))
            except SimulationError as e:
                _record_failure(EntityType.MEMORY, e, logger, event_log)
                failed += 1
                continue

            if outcome.success:
                logger.log_allocation(op['size'], outcome.block.owner, outcome.algorithm.value, True)
                event_log.record(
                    EntityType.MEMORY,
                    EventType.ALLOCATION,
                    f"Allocated {op['size']}KB to {outcome.block.owner} using {outcome.algorithm.value} fit",
                    data=outcome.block.to_dict()
                )
            else:
                failed += 1
                logger.log_allocation(op['size'], None, outcome.algorithm.value, False, "insufficient memory")
                event_log.record(
                    EntityType.MEMORY,
                    EventType.ALLOCATION_FAILED,
                    outcome.message,
                    data={'requested_size': outcome.requested_size, 'largest_free': outcome.largest_free}
                )

        elif op_type == 'deallocate':
            session.deallocate_memory()
            logger.log("[MEMORY] All user processes deallocated")
            event_log.record(EntityType.MEMORY, EventType.DEALLOCATION, "Memory deallocated - all user processes removed")

        elif op_type == 'compact':
            session.compact_memory()
            logger.log("[MEMORY] Memory compacted successfully", "success")
            event_log.record(EntityType.MEMORY, EventType.COMPACTION, "Memory compaction completed")

        elif op_type == 'reset':
            session.reset_memory()
            logger.log("[MEMORY] Memory layout reset")

        # Verify layout invariant after every operation
        session.assert_memory_conservation(f"after {op_type}")
        if logger.verbose:
            logger.log(f"  Fragmentation now: {session.fragmentation:.1f}%", "debug")

    metrics = compute_memory_metrics(session.memory_blocks, failed)
    logger.log(format_memory_report(metrics, session.memory_blocks))
    return metrics


def run_disk_simulation(
    session: SimulationSession,
    algorithm: str,
    logger: SimulatorLogger,
    event_log: EventLog
) -> Optional[Tuple[DiskRunResult, DiskMetrics]]:
    """
    Service the session's pending disk requests.

    Args:
        session: Simulation session
        algorithm: Disk algorithm tag
        logger: Logger instance
        event_log: Event log

    Returns:
        (result, metrics), or None if the run failed
    """
    logger.log_section(f"DISK SCHEDULING: {algorithm.upper()}")

    try:
        result = session.process_disk_queue(algorithm)
    except SimulationError as e:
        _record_failure(EntityType.DISK, e, logger, event_log)
        return None

    metrics = compute_disk_metrics(result)
    logger.log_disk_run(metrics.requests_processed, metrics.total_seek_distance, metrics.final_head_position)
    event_log.record(
        EntityType.DISK,
        EventType.DISK_PROCESSED,
        f"Processed {metrics.requests_processed} disk requests",
        data={
            'requests': [r.to_dict() for r in result.ordered_requests],
            'total_seek_distance': result.total_seek_distance,
            'head_position': result.final_head_position
        }
    )

    logger.log(format_disk_report(metrics, result))
    return result, metrics


def run_simulation(
    scenario_path: str,
    module: str = 'all',
    algorithm: Optional[str] = None,
    quantum: Optional[int] = None,
    fit: Optional[str] = None,
    verbose: bool = False,
    log_file: Optional[str] = None
) -> Tuple[SimulationSession, EventLog, Dict[str, Any]]:
    """
    Run the selected simulation modules on a scenario.

    Args:
        scenario_path: Path to scenario JSON file
        module: One of 'cpu', 'memory', 'disk', 'all'
        algorithm: Scheduling algorithm (default: scenario's, then FCFS)
        quantum: Round Robin quantum (default: scenario's, then 4)
        fit: Fit algorithm overriding the scenario's allocations (optional)
        verbose: Enable verbose logging
        log_file: Optional file path for logging

    Returns:
        Tuple of (session, event_log, results) where results maps module
        name to its metrics (None for a module that failed)

    Raises:
        ScenarioLoadError: If the scenario cannot be loaded
    """
    logger = SimulatorLogger(verbose=verbose, log_file=log_file)
    event_log = EventLog()
    results: Dict[str, Any] = {}

    try:
        try:
            session, plan = load_scenario(scenario_path)
        except ScenarioLoadError as e:
            logger.log(f"Failed to load scenario: {e}", "error")
            raise

        if algorithm is None:
            algorithm = plan['algorithm'] or SchedulingAlgorithm.FCFS.value
        if quantum is None:
            quantum = plan['quantum'] if plan['quantum'] is not None else DEFAULT_QUANTUM

        logger.log_section("SIMULATION START")
        logger.log(f"Scenario: {scenario_path}")
        if plan['description']:
            logger.log(f"Description: {plan['description']}")
        logger.log_state(session.display())

        if module in ('cpu', 'all'):
            if session.processes or module == 'cpu':
                outcome = run_cpu_simulation(session, algorithm, quantum, logger, event_log)
                results['cpu'] = outcome[1] if outcome else None
            else:
                logger.log("No processes in scenario - skipping CPU scheduling", "warning")

        if module in ('memory', 'all'):
            results['memory'] = run_memory_simulation(
                session, plan['memory_operations'], logger, event_log, fit
            )

        if module in ('disk', 'all'):
            if session.pending_requests or module == 'disk':
                outcome = run_disk_simulation(session, plan['disk_algorithm'], logger, event_log)
                results['disk'] = outcome[1] if outcome else None
            else:
                logger.log("No disk requests in scenario - skipping disk scheduling", "warning")

        logger.log_section("SIMULATION COMPLETE")
        logger.log_state(session.display())
    finally:
        logger.close()

    return session, event_log, results


def run_comparison(scenario_path: str, quantum: Optional[int] = None) -> str:
    """
    Compare all scheduling and fit algorithms on a scenario.

    Args:
        scenario_path: Path to scenario JSON file
        quantum: Round Robin quantum (default: scenario's, then 4)

    Returns:
        Formatted comparison report
    """
    session, plan = load_scenario(scenario_path)
    if quantum is None:
        quantum = plan['quantum'] if plan['quantum'] is not None else DEFAULT_QUANTUM

    scheduling_results = []
    if session.processes:
        scheduling_results = compare_scheduling_algorithms(session.processes, quantum)

    fit_results = []
    if any(op['type'] == 'allocate' for op in plan['memory_operations']):
        fit_results = compare_fit_algorithms(
            plan['memory_operations'], session.total_memory, session.kernel_size
        )

    return generate_comparison_report(scheduling_results, fit_results, scenario_path)


def _record_failure(
    entity: EntityType,
    error: SimulationError,
    logger: SimulatorLogger,
    event_log: EventLog
) -> None:
    """Surface an engine failure without stopping the simulation."""
    logger.log(f"{type(error).__name__}: {error}", "error")
    event_log.record(entity, EventType.ERROR, str(error), data={'error': type(error).__name__})


def main():
    """Main entry point for the simulator."""
    parser = argparse.ArgumentParser(
        description='OS Resource Allocation Simulator'
    )
    parser.add_argument(
        '--scenario',
        type=str,
        required=True,
        help='Path to scenario JSON file'
    )
    parser.add_argument(
        '--module',
        choices=MODULES,
        default='all',
        help='Simulation module to run (default: all)'
    )
    parser.add_argument(
        '--algorithm',
        choices=[a.value for a in SchedulingAlgorithm],
        default=None,
        help='CPU scheduling algorithm (default: scenario setting or fcfs)'
    )
    parser.add_argument(
        '--quantum',
        type=int,
        default=None,
        help=f'Round Robin time quantum (default: {DEFAULT_QUANTUM})'
    )
    parser.add_argument(
        '--fit',
        choices=[f.value for f in FitAlgorithm],
        default=None,
        help='Fit algorithm for every allocation (default: per-operation setting)'
    )
    parser.add_argument(
        '--compare',
        action='store_true',
        help='Compare all scheduling and fit algorithms on the scenario'
    )
    parser.add_argument(
        '--export',
        type=str,
        default=None,
        help='Write the event log to a JSON file'
    )
    parser.add_argument(
        '--log-file',
        type=str,
        default=None,
        help='Also write the log to a file'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    args = parser.parse_args()

    if args.quantum is not None and args.quantum < 1:
        parser.error('--quantum must be at least 1')

    try:
        if args.compare:
            print(run_comparison(args.scenario, args.quantum))
            return 0

        _, event_log, _ = run_simulation(
            args.scenario,
            module=args.module,
            algorithm=args.algorithm,
            quantum=args.quantum,
            fit=args.fit,
            verbose=args.verbose,
            log_file=args.log_file
        )
    except ScenarioLoadError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    except SimulationError as e:
        print(f"[ERROR] {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    if args.export:
        event_log.export(args.export)
        print(f"Event log exported to {args.export}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
