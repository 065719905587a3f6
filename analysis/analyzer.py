"""
Algorithm Comparison Library for the OS Resource Allocation Simulator.

Called by simulator.py --compare to run every scheduling algorithm on the same
workload and every fit algorithm on the same allocation sequence.
This is a library module, not a standalone CLI tool.
"""

from typing import Callable, List, Dict
from dataclasses import dataclass

from algorithms.cpu_scheduling import schedule, SchedulingAlgorithm
from algorithms.memory_allocation import (
    allocate, deallocate, compact, create_memory_layout, fragmentation, FitAlgorithm
)
from analysis.metrics import compute_scheduling_metrics, compute_memory_metrics
from config import DEFAULT_QUANTUM, TOTAL_MEMORY, KERNEL_SIZE
from models.process import Process


@dataclass
class SchedulingComparisonResult:
    """Metrics from running one scheduling algorithm on a shared workload."""
    algorithm: str
    avg_waiting_time: float
    avg_turnaround_time: float
    cpu_utilization: float
    throughput: float
    context_switches: int
    execution_order: List[str]

    def display(self) -> str:
        """Format results for display."""
        result = f"\nAlgorithm: {self.algorithm.upper()}\n"
        result += f"  Order: {' -> '.join(self.execution_order)}\n"
        result += f"  Avg Waiting Time: {self.avg_waiting_time:.2f}\n"
        result += f"  Avg Turnaround Time: {self.avg_turnaround_time:.2f}\n"
        result += f"  CPU Utilization: {self.cpu_utilization:.1f}%\n"
        result += f"  Context Switches: {self.context_switches}"
        return result


@dataclass
class FitComparisonResult:
    """Outcome of replaying one allocation sequence with one fit algorithm."""
    algorithm: str
    successful_allocations: int
    failed_allocations: int
    used_memory: int
    fragmentation: float
    free_blocks: int

    def display(self) -> str:
        """Format results for display."""
        result = f"\nFit Algorithm: {self.algorithm.upper()}\n"
        result += (
            f"  Allocations: {self.successful_allocations} granted, "
            f"{self.failed_allocations} failed\n"
        )
        result += f"  Used Memory: {self.used_memory} KB\n"
        result += f"  Fragmentation: {self.fragmentation:.1f}% over {self.free_blocks} free blocks"
        return result


def compare_scheduling_algorithms(
    processes: List[Process],
    quantum: int = DEFAULT_QUANTUM,
    algorithms: List[SchedulingAlgorithm] = None
) -> List[SchedulingComparisonResult]:
    """
    Schedule the same processes with each algorithm.

    Args:
        processes: Shared workload (not modified)
        quantum: Round Robin time quantum
        algorithms: Algorithms to compare (default: all)

    Returns:
        One result per algorithm, in the order given

    Raises:
        InvalidInput: Empty workload or invalid quantum
    """
    results = []
    for algorithm in algorithms or list(SchedulingAlgorithm):
        trace = schedule(processes, algorithm, quantum)
        metrics = compute_scheduling_metrics(trace)
        results.append(SchedulingComparisonResult(
            algorithm=algorithm.value,
            avg_waiting_time=metrics.avg_waiting_time,
            avg_turnaround_time=metrics.avg_turnaround_time,
            cpu_utilization=metrics.cpu_utilization,
            throughput=metrics.throughput,
            context_switches=metrics.context_switches,
            execution_order=trace.execution_order()
        ))
    return results


def compare_fit_algorithms(
    operations: List[Dict],
    total_size: int = TOTAL_MEMORY,
    kernel_size: int = KERNEL_SIZE,
    algorithms: List[FitAlgorithm] = None
) -> List[FitComparisonResult]:
    """
    Replay a memory operation sequence once per fit algorithm.

    Every 'allocate' operation uses the algorithm under test regardless of
    its own 'algorithm' field.

    Args:
        operations: Memory operations (see scenario format)
        total_size: Size of the address space
        kernel_size: Size of the reserved kernel block
        algorithms: Fit algorithms to compare (default: all)

    Returns:
        One result per algorithm
    """
    results = []
    for algorithm in algorithms or list(FitAlgorithm):
        blocks = create_memory_layout(total_size, kernel_size)
        granted = 0
        failed = 0

        for op in operations:
            if op['type'] == 'allocate':
                outcome = allocate(blocks, op['size'], algorithm, op.get('owner'))
                if outcome.success:
                    blocks = outcome.blocks
                    granted += 1
                else:
                    failed += 1
            elif op['type'] == 'deallocate':
                blocks = deallocate(blocks)
            elif op['type'] == 'compact':
                blocks = compact(blocks)
            elif op['type'] == 'reset':
                blocks = create_memory_layout(total_size, kernel_size)

        metrics = compute_memory_metrics(blocks, failed)
        results.append(FitComparisonResult(
            algorithm=algorithm.value,
            successful_allocations=granted,
            failed_allocations=failed,
            used_memory=metrics.used_memory,
            fragmentation=fragmentation(blocks),
            free_blocks=metrics.free_blocks
        ))
    return results


def _format_best(
    metric_name: str,
    results_list: list,
    key_func: Callable,
    format_func: Callable,
    higher_is_better: bool = True
) -> str:
    """Format best metric, handling ties. Returns empty string if all algorithms tied."""
    if higher_is_better:
        target_value = max(key_func(r) for r in results_list)
    else:
        target_value = min(key_func(r) for r in results_list)

    winners = [r for r in results_list if key_func(r) == target_value]

    # Skip if all algorithms are tied (meaningless comparison)
    if len(winners) == len(results_list):
        return ""

    if len(winners) == 1:
        return f"  {metric_name}: {winners[0].algorithm.upper()} ({format_func(target_value)})\n"
    names = ", ".join(w.algorithm.upper() for w in winners)
    return f"  {metric_name}: {names} (tie at {format_func(target_value)})\n"


def generate_comparison_report(
    scheduling_results: List[SchedulingComparisonResult],
    fit_results: List[FitComparisonResult],
    scenario_path: str
) -> str:
    """
    Generate formatted comparison report.

    Args:
        scheduling_results: Results of compare_scheduling_algorithms (may be empty)
        fit_results: Results of compare_fit_algorithms (may be empty)
        scenario_path: Path to scenario file

    Returns:
        Formatted string report
    """
    report = "\n" + "="*70 + "\n"
    report += "ALGORITHM COMPARISON REPORT\n"
    report += "="*70 + "\n"
    report += f"Scenario: {scenario_path}\n"
    report += "="*70 + "\n"

    for result in scheduling_results:
        report += result.display()
        report += "\n" + "-"*70

    for result in fit_results:
        report += result.display()
        report += "\n" + "-"*70

    report += "\n\nKEY INSIGHTS:\n"
    report += "-"*70 + "\n"

    insights = []
    if len(scheduling_results) > 1:
        insights.append(_format_best(
            "Lowest Waiting Time",
            scheduling_results,
            lambda r: r.avg_waiting_time,
            lambda v: f"{v:.2f}",
            higher_is_better=False
        ))
        insights.append(_format_best(
            "Lowest Turnaround Time",
            scheduling_results,
            lambda r: r.avg_turnaround_time,
            lambda v: f"{v:.2f}",
            higher_is_better=False
        ))
        insights.append(_format_best(
            "Fewest Context Switches",
            scheduling_results,
            lambda r: r.context_switches,
            lambda v: f"{v}",
            higher_is_better=False
        ))
    if len(fit_results) > 1:
        insights.append(_format_best(
            "Most Allocations Granted",
            fit_results,
            lambda r: r.successful_allocations,
            lambda v: f"{v}",
            higher_is_better=True
        ))
        insights.append(_format_best(
            "Lowest Fragmentation",
            fit_results,
            lambda r: r.fragmentation,
            lambda v: f"{v:.1f}%",
            higher_is_better=False
        ))

    # Filter out empty strings (all-tie cases)
    insights = [i for i in insights if i]
    if insights:
        for insight in insights:
            report += insight
    else:
        report += "  All algorithms showed identical performance.\n"

    report += "\n" + "="*70 + "\n"
    return report
