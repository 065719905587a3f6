"""
Simulation Session for the OS Resource Allocation Simulator.

Owns the three entity collections (processes, memory blocks, disk requests)
and commits engine results into them. Engines receive the collections and
return new ones; the session only replaces its state once a call succeeds.
"""

from typing import List, Optional, Union
from dataclasses import dataclass, field

from algorithms.cpu_scheduling import schedule, ExecutionTrace, SchedulingAlgorithm
from algorithms.disk_scheduling import process_queue, DiskRunResult, DiskAlgorithm
from algorithms.errors import InvalidInput
from algorithms.memory_allocation import (
    allocate, deallocate, compact, create_memory_layout, fragmentation, validate_layout,
    AllocationOutcome, FitAlgorithm
)
from config import (
    TOTAL_MEMORY, KERNEL_SIZE, MAX_CYLINDER, DEFAULT_QUANTUM, DEFAULT_HEAD_POSITION
)
from models.process import Process
from models.memory_block import MemoryBlock, BlockStatus
from models.disk_request import DiskRequest


@dataclass
class SimulationSession:
    """
    The mutable "world" of one simulation run.

    Calls on a session must be serialized by the caller: each call commits
    its result before the next one starts.

    Attributes:
        processes: Submitted processes, in submission order
        memory_blocks: Current memory layout, sorted by start address
        disk_requests: Disk request queue, in submission order
        head_position: Current disk head cylinder
        total_memory: Size of the address space (KB)
        kernel_size: Size of the reserved kernel block (KB)
        max_cylinder: Highest valid cylinder
        last_trace: Trace of the most recent scheduling run
    """
    processes: List[Process] = field(default_factory=list)
    memory_blocks: List[MemoryBlock] = field(default_factory=list)
    disk_requests: List[DiskRequest] = field(default_factory=list)
    head_position: int = DEFAULT_HEAD_POSITION
    total_memory: int = TOTAL_MEMORY
    kernel_size: int = KERNEL_SIZE
    max_cylinder: int = MAX_CYLINDER
    last_trace: Optional[ExecutionTrace] = None

    def __post_init__(self):
        """Build the initial memory layout if none was given."""
        if not self.memory_blocks:
            self.memory_blocks = create_memory_layout(self.total_memory, self.kernel_size)
        if self.head_position < 0 or self.head_position > self.max_cylinder:
            raise InvalidInput(
                f"Head position {self.head_position} must be between 0 and {self.max_cylinder}"
            )

    # ------------------------------------------------------------------
    # CPU scheduling
    # ------------------------------------------------------------------

    def add_process(
        self,
        arrival_time: int = 0,
        burst_time: int = 1,
        priority: int = 1,
        name: Optional[str] = None
    ) -> Process:
        """
        Submit a new process.

        Args:
            arrival_time: Arrival time (>= 0)
            burst_time: CPU time required (>= 1)
            priority: Priority (lower = more urgent)
            name: Display name (defaults to P<pid>)

        Returns:
            The created process

        Raises:
            InvalidInput: If arrival_time or burst_time is out of range
        """
        pid = max((p.pid for p in self.processes), default=0) + 1
        process = Process(
            pid=pid,
            name=name or f"P{pid}",
            arrival_time=arrival_time,
            burst_time=burst_time,
            priority=priority
        )
        self.processes.append(process)
        return process

    def remove_process(self, index: int) -> Process:
        """Remove the process at position index in the submission list."""
        return self.processes.pop(index)

    def clear_processes(self) -> None:
        """Discard all processes and the last trace."""
        self.processes = []
        self.last_trace = None

    def run_scheduler(
        self,
        algorithm: Union[SchedulingAlgorithm, str],
        quantum: int = DEFAULT_QUANTUM
    ) -> ExecutionTrace:
        """
        Schedule the submitted processes and commit the updated processes.

        Raises:
            InvalidInput: No processes or invalid quantum
            AlgorithmUnsupported: Unrecognised algorithm tag
        """
        trace = schedule(self.processes, algorithm, quantum)
        self.processes = trace.processes
        self.last_trace = trace
        return trace

    # ------------------------------------------------------------------
    # Memory allocation
    # ------------------------------------------------------------------

    def allocate_memory(
        self,
        size: int,
        algorithm: Union[FitAlgorithm, str],
        owner: Optional[str] = None
    ) -> AllocationOutcome:
        """
        Allocate memory and commit the new layout on success.

        A failed allocation is returned as-is and leaves the layout untouched.
        """
        outcome = allocate(self.memory_blocks, size, algorithm, owner)
        if outcome.success:
            self.memory_blocks = outcome.blocks
        return outcome

    def deallocate_memory(self) -> List[MemoryBlock]:
        """Reclaim all user allocations."""
        self.memory_blocks = deallocate(self.memory_blocks)
        return self.memory_blocks

    def compact_memory(self) -> List[MemoryBlock]:
        """Compact allocated blocks towards address 0."""
        self.memory_blocks = compact(self.memory_blocks)
        return self.memory_blocks

    def reset_memory(self) -> List[MemoryBlock]:
        """Restore the initial kernel + free layout."""
        self.memory_blocks = create_memory_layout(self.total_memory, self.kernel_size)
        return self.memory_blocks

    @property
    def used_memory(self) -> int:
        return sum(b.size for b in self.memory_blocks if b.status == BlockStatus.ALLOCATED)

    @property
    def free_memory(self) -> int:
        return sum(b.size for b in self.memory_blocks if b.is_free)

    @property
    def fragmentation(self) -> float:
        """External fragmentation percentage of the current layout."""
        return fragmentation(self.memory_blocks)

    # ------------------------------------------------------------------
    # Disk scheduling
    # ------------------------------------------------------------------

    def add_disk_request(
        self,
        cylinder: int,
        algorithm: Union[DiskAlgorithm, str] = DiskAlgorithm.FCFS
    ) -> DiskRequest:
        """
        Queue a disk request.

        Raises:
            InvalidInput: If cylinder is outside [0, max_cylinder]
        """
        tag = algorithm.value if isinstance(algorithm, DiskAlgorithm) else str(algorithm).lower()
        request = DiskRequest(
            request_id=len(self.disk_requests) + 1,
            cylinder=cylinder,
            algorithm=tag
        )
        request.validate(self.max_cylinder)
        self.disk_requests.append(request)
        return request

    @property
    def pending_requests(self) -> List[DiskRequest]:
        return [r for r in self.disk_requests if not r.processed]

    def process_disk_queue(
        self,
        algorithm: Union[DiskAlgorithm, str] = DiskAlgorithm.FCFS
    ) -> DiskRunResult:
        """
        Service all pending requests and commit results and head position.

        Raises:
            EmptyQueue: No pending requests
            AlgorithmUnsupported: Algorithm other than FCFS
        """
        result = process_queue(
            self.disk_requests,
            self.head_position,
            algorithm,
            max_cylinder=self.max_cylinder
        )

        serviced = {r.request_id: r for r in result.ordered_requests}
        self.disk_requests = [serviced.get(r.request_id, r) for r in self.disk_requests]
        self.head_position = result.final_head_position
        return result

    def clear_disk_requests(self) -> None:
        """Discard the whole request queue."""
        self.disk_requests = []

    # ------------------------------------------------------------------
    # Invariants and display
    # ------------------------------------------------------------------

    def assert_memory_conservation(self, context=""):
        """Verify the layout still partitions the address space.

        Args:
            context: Description of when this check is being run (for error messages)

        Raises:
            AssertionError: If blocks overlap, leave gaps or change the total size
        """
        validate_layout(self.memory_blocks, self.total_memory, context)

    def display(self) -> str:
        """
        Generate readable string representation of the session.

        Returns:
            Formatted string showing processes, memory layout and disk queue
        """
        output = []
        output.append("\n" + "="*60)
        output.append("SIMULATION STATE")
        output.append("="*60)

        output.append("\nProcesses:")
        if not self.processes:
            output.append("  (none)")
        for p in self.processes:
            output.append(
                f"  {p.name:6} arrival={p.arrival_time:3} burst={p.burst_time:3} "
                f"priority={p.priority:2} state={p.state.value}"
            )

        output.append(f"\nMemory Layout ({self.total_memory}KB):")
        for block in self.memory_blocks:
            output.append(f"  {block}")
        output.append(
            f"  Used: {self.used_memory}KB, Free: {self.free_memory}KB, "
            f"Fragmentation: {self.fragmentation:.1f}%"
        )

        output.append(f"\nDisk Queue (head at {self.head_position}):")
        if not self.disk_requests:
            output.append("  (empty)")
        for request in self.disk_requests:
            output.append(f"  {request!r}")

        output.append("\n" + "="*60)
        return "\n".join(output)
