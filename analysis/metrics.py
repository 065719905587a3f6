"""
Metrics for the OS Resource Allocation Simulator.

Derives aggregate statistics from the outputs of the three engines.
"""

from dataclasses import dataclass, field
from typing import List, Dict
import statistics

from algorithms.cpu_scheduling import ExecutionTrace
from algorithms.disk_scheduling import DiskRunResult
from algorithms.memory_allocation import fragmentation
from models.memory_block import MemoryBlock, BlockStatus


@dataclass
class SchedulingMetrics:
    """
    Statistics for one scheduling run.

    Tracks:
    1. Average Waiting Time: mean of (turnaround - burst)
    2. Average Turnaround Time: mean of (completion - arrival)
    3. CPU Utilization %: busy time / makespan x 100
    4. Throughput: completed processes / makespan
    """
    algorithm: str
    total_processes: int = 0
    avg_waiting_time: float = 0.0
    avg_turnaround_time: float = 0.0
    cpu_utilization: float = 0.0
    throughput: float = 0.0
    makespan: int = 0
    busy_time: int = 0
    context_switches: int = 0

    # Per-process tracking, keyed by pid
    process_names: Dict[int, str] = field(default_factory=dict)
    process_waiting_times: Dict[int, int] = field(default_factory=dict)
    process_turnaround_times: Dict[int, int] = field(default_factory=dict)
    process_completion_times: Dict[int, int] = field(default_factory=dict)


def compute_scheduling_metrics(trace: ExecutionTrace) -> SchedulingMetrics:
    """
    Compute statistics from a scheduling trace.

    CPU utilization = (sum of slice durations) / max(start + duration) x 100.

    Args:
        trace: Result of a scheduling run

    Returns:
        SchedulingMetrics
    """
    metrics = SchedulingMetrics(algorithm=trace.algorithm.value)
    completed = [p for p in trace.processes if p.is_finished()]
    metrics.total_processes = len(trace.processes)

    if completed:
        metrics.avg_waiting_time = statistics.mean(p.waiting_time for p in completed)
        metrics.avg_turnaround_time = statistics.mean(p.turnaround_time for p in completed)

    metrics.makespan = trace.makespan
    metrics.busy_time = sum(s.duration for s in trace.slices)
    if metrics.makespan > 0:
        metrics.cpu_utilization = metrics.busy_time / metrics.makespan * 100
        metrics.throughput = len(completed) / metrics.makespan

    # A switch happens whenever consecutive slices belong to different processes
    metrics.context_switches = sum(
        1 for prev, cur in zip(trace.slices, trace.slices[1:])
        if prev.process_id != cur.process_id
    )

    for p in completed:
        metrics.process_names[p.pid] = p.name
        metrics.process_waiting_times[p.pid] = p.waiting_time
        metrics.process_turnaround_times[p.pid] = p.turnaround_time
        metrics.process_completion_times[p.pid] = p.completion_time

    return metrics


@dataclass
class MemoryMetrics:
    """Usage and fragmentation of a memory layout."""
    total_memory: int = 0
    used_memory: int = 0
    free_memory: int = 0
    largest_free_block: int = 0
    fragmentation: float = 0.0
    allocated_blocks: int = 0
    free_blocks: int = 0
    failed_allocations: int = 0

    @property
    def utilization(self) -> float:
        """Percentage of the address space in use."""
        if self.total_memory == 0:
            return 0.0
        return self.used_memory / self.total_memory * 100


def compute_memory_metrics(blocks: List[MemoryBlock], failed_allocations: int = 0) -> MemoryMetrics:
    """
    Compute usage statistics for a layout.

    Args:
        blocks: Memory layout
        failed_allocations: Number of failed requests to report alongside

    Returns:
        MemoryMetrics
    """
    allocated = [b for b in blocks if b.status == BlockStatus.ALLOCATED]
    free = [b for b in blocks if b.is_free]

    return MemoryMetrics(
        total_memory=sum(b.size for b in blocks),
        used_memory=sum(b.size for b in allocated),
        free_memory=sum(b.size for b in free),
        largest_free_block=max((b.size for b in free), default=0),
        fragmentation=fragmentation(blocks),
        allocated_blocks=len(allocated),
        free_blocks=len(free),
        failed_allocations=failed_allocations
    )


@dataclass
class DiskMetrics:
    """Seek statistics for one disk run."""
    requests_processed: int = 0
    total_seek_distance: int = 0
    avg_seek_time: float = 0.0
    avg_seek_distance: float = 0.0
    final_head_position: int = 0


def compute_disk_metrics(result: DiskRunResult) -> DiskMetrics:
    """Compute seek statistics from a disk run."""
    count = len(result.ordered_requests)
    return DiskMetrics(
        requests_processed=count,
        total_seek_distance=result.total_seek_distance,
        avg_seek_time=result.avg_seek_time,
        avg_seek_distance=result.total_seek_distance / count if count else 0.0,
        final_head_position=result.final_head_position
    )


def format_scheduling_report(
    metrics: SchedulingMetrics,
    trace: ExecutionTrace = None,
    verbose: bool = False
) -> str:
    """
    Format scheduling statistics for display.

    Args:
        metrics: SchedulingMetrics for the run
        trace: Trace to render as a text Gantt chart (optional)
        verbose: If True, include metric formulas

    Returns:
        Formatted report string
    """
    lines = []
    lines.append("\n" + "="*60)
    lines.append(f"CPU SCHEDULING METRICS ({metrics.algorithm.upper()})")
    lines.append("="*60)

    if trace is not None and trace.slices:
        lines.append("Gantt Chart:")
        lines.append("  " + " | ".join(str(s) for s in trace.slices))
        lines.append("")

    lines.append(f"Total Processes: {metrics.total_processes}")
    lines.append(f"1. Average Waiting Time: {metrics.avg_waiting_time:.2f}")
    lines.append(f"2. Average Turnaround Time: {metrics.avg_turnaround_time:.2f}")
    lines.append(f"3. CPU Utilization: {metrics.cpu_utilization:.1f}%")
    lines.append(f"4. Throughput: {metrics.throughput:.4f} processes/unit")
    lines.append(f"   Context Switches: {metrics.context_switches}")

    if metrics.process_completion_times:
        lines.append("")
        lines.append("PER-PROCESS SUMMARY:")
        lines.append("-" * 60)
        for pid, name in metrics.process_names.items():
            lines.append(
                f"  {name:6} completion={metrics.process_completion_times[pid]:4} | "
                f"turnaround={metrics.process_turnaround_times[pid]:4} | "
                f"waiting={metrics.process_waiting_times[pid]:4}"
            )

    if verbose:
        lines.append("")
        lines.append("METRIC FORMULAS:")
        lines.append("-" * 60)
        lines.append("Turnaround = completion - arrival; Waiting = turnaround - burst")
        lines.append("CPU Utilization = SUM slice durations / last slice end x 100")

    lines.append("="*60)
    return "\n".join(lines)


def format_memory_report(metrics: MemoryMetrics, blocks: List[MemoryBlock] = None) -> str:
    """Format memory statistics (and optionally the layout) for display."""
    lines = []
    lines.append("\n" + "="*60)
    lines.append("MEMORY METRICS")
    lines.append("="*60)

    if blocks:
        lines.append("Layout:")
        for block in blocks:
            lines.append(f"  {block}")
        lines.append("")

    lines.append(f"Used Memory: {metrics.used_memory} KB")
    lines.append(f"Free Memory: {metrics.free_memory} KB")
    lines.append(f"Fragmentation: {metrics.fragmentation:.1f}%")
    lines.append(f"Allocated Blocks: {metrics.allocated_blocks}")
    lines.append(f"Free Blocks: {metrics.free_blocks}")
    if metrics.failed_allocations:
        lines.append(f"Failed Allocations: {metrics.failed_allocations}")
    lines.append("="*60)
    return "\n".join(lines)


def format_disk_report(metrics: DiskMetrics, result: DiskRunResult = None) -> str:
    """Format disk statistics (and optionally the service order) for display."""
    lines = []
    lines.append("\n" + "="*60)
    lines.append("DISK METRICS")
    lines.append("="*60)

    if result is not None:
        lines.append("Head Path: " + " -> ".join(str(c) for c in result.head_path))
        for request in result.ordered_requests:
            lines.append(f"  #{request.request_id}: cylinder {request.cylinder:3} seek {request.seek_time:.2f} ms")
        lines.append("")

    lines.append(f"Requests Processed: {metrics.requests_processed}")
    lines.append(f"Head Position: {metrics.final_head_position}")
    lines.append(f"Total Seek Distance: {metrics.total_seek_distance}")
    lines.append(f"Average Seek Time: {metrics.avg_seek_time:.2f} ms")
    lines.append("="*60)
    return "\n".join(lines)
