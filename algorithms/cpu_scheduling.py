"""
CPU Scheduling Algorithms for the OS Resource Allocation Simulator.

Implements FCFS, non-preemptive SJF, non-preemptive Priority and Round Robin
scheduling over a list of processes, producing a Gantt trace.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, List, Tuple, Union

from algorithms.errors import InvalidInput, coerce_algorithm
from config import DEFAULT_QUANTUM
from models.process import Process, ExecutionSlice


class SchedulingAlgorithm(Enum):
    """Supported CPU scheduling algorithms."""
    FCFS = "fcfs"
    SJF = "sjf"
    PRIORITY = "priority"
    RR = "rr"


@dataclass
class ExecutionTrace:
    """
    Result of a scheduling run.

    Attributes:
        algorithm: Algorithm used
        quantum: Time quantum (only meaningful for Round Robin)
        slices: Gantt trace in execution order
        processes: Updated process copies, in submission order
    """
    algorithm: SchedulingAlgorithm
    quantum: int
    slices: List[ExecutionSlice] = field(default_factory=list)
    processes: List[Process] = field(default_factory=list)

    @property
    def makespan(self) -> int:
        """Clock value when the last slice ended."""
        return max((s.end_time for s in self.slices), default=0)

    def slices_for(self, pid: int) -> List[ExecutionSlice]:
        """All slices belonging to one process."""
        return [s for s in self.slices if s.process_id == pid]

    def execution_order(self) -> List[str]:
        """Process names in the order their slices ran."""
        return [s.process_name for s in self.slices]


# Ready-queue entries are (submission_index, process)
QueueEntry = Tuple[int, Process]


def schedule(
    processes: List[Process],
    algorithm: Union[SchedulingAlgorithm, str],
    quantum: int = DEFAULT_QUANTUM
) -> ExecutionTrace:
    """
    Schedule processes with the selected algorithm.

    The input processes are not modified: each run works on fresh copies
    (with results of any previous run cleared) and returns them in the trace.

    Args:
        processes: Processes in submission order
        algorithm: Algorithm enum member or tag ("fcfs", "sjf", "priority", "rr")
        quantum: Round Robin time quantum (>= 1)

    Returns:
        ExecutionTrace with slices and updated processes

    Raises:
        InvalidInput: Empty process list or quantum < 1
        AlgorithmUnsupported: Unrecognised algorithm tag
    """
    algorithm = coerce_algorithm(SchedulingAlgorithm, algorithm)
    if not processes:
        raise InvalidInput("Cannot schedule an empty process list")
    if quantum < 1:
        raise InvalidInput(f"Time quantum must be at least 1 ({quantum})")

    working = [replace(p) for p in processes]
    for process in working:
        process.reset()

    if algorithm == SchedulingAlgorithm.FCFS:
        slices = schedule_fcfs(working)
    elif algorithm == SchedulingAlgorithm.SJF:
        slices = schedule_sjf(working)
    elif algorithm == SchedulingAlgorithm.PRIORITY:
        slices = schedule_priority(working)
    elif algorithm == SchedulingAlgorithm.RR:
        slices = schedule_round_robin(working, quantum)
    else:
        raise AssertionError(f"Unhandled algorithm {algorithm}")

    return ExecutionTrace(
        algorithm=algorithm,
        quantum=quantum,
        slices=slices,
        processes=working
    )


def _arrival_order(processes: List[Process]) -> List[QueueEntry]:
    """Processes tagged with submission index, stably sorted by arrival time."""
    return sorted(enumerate(processes), key=lambda entry: entry[1].arrival_time)


def _run_to_completion(process: Process, current_time: int) -> Tuple[ExecutionSlice, int]:
    """Run a process for its whole burst and return its slice and the new clock."""
    slice_ = ExecutionSlice(
        process_id=process.pid,
        process_name=process.name,
        start_time=current_time,
        duration=process.remaining_time
    )
    end_time = process.run(current_time, process.remaining_time)
    return slice_, end_time


def schedule_fcfs(processes: List[Process]) -> List[ExecutionSlice]:
    """
    First-Come, First-Served scheduling.

    Processes run to completion in arrival order (ties keep submission
    order). When the next process has not arrived yet the CPU idles
    forward to its arrival.

    Args:
        processes: Working copies, mutated in place

    Returns:
        Gantt trace
    """
    slices = []
    current_time = 0

    for _, process in _arrival_order(processes):
        if current_time < process.arrival_time:
            current_time = process.arrival_time
        slice_, current_time = _run_to_completion(process, current_time)
        slices.append(slice_)

    return slices


def _schedule_non_preemptive(
    processes: List[Process],
    selection_key: Callable[[Process], int]
) -> List[ExecutionSlice]:
    """
    Ready-queue protocol shared by SJF and Priority.

    Algorithm:
    1. Admit every process whose arrival_time <= clock into the ready queue
    2. If the queue is empty, advance the clock to the next arrival
    3. Otherwise pick the entry minimising (key, arrival_time, submission index)
    4. Run it to completion, advance the clock, repeat

    Args:
        processes: Working copies, mutated in place
        selection_key: Primary selection key (lower runs first)

    Returns:
        Gantt trace
    """
    pending = _arrival_order(processes)
    ready_queue: List[QueueEntry] = []
    slices = []
    current_time = 0
    next_arrival = 0

    while next_arrival < len(pending) or ready_queue:
        while next_arrival < len(pending) and pending[next_arrival][1].has_arrived(current_time):
            ready_queue.append(pending[next_arrival])
            next_arrival += 1

        if not ready_queue:
            current_time = pending[next_arrival][1].arrival_time
            continue

        chosen = min(
            ready_queue,
            key=lambda entry: (selection_key(entry[1]), entry[1].arrival_time, entry[0])
        )
        ready_queue.remove(chosen)

        slice_, current_time = _run_to_completion(chosen[1], current_time)
        slices.append(slice_)

    return slices


def schedule_sjf(processes: List[Process]) -> List[ExecutionSlice]:
    """Shortest Job First (non-preemptive): smallest burst_time among arrived processes."""
    return _schedule_non_preemptive(processes, lambda p: p.burst_time)


def schedule_priority(processes: List[Process]) -> List[ExecutionSlice]:
    """Priority scheduling (non-preemptive): lowest priority value among arrived processes."""
    return _schedule_non_preemptive(processes, lambda p: p.priority)


def schedule_round_robin(processes: List[Process], quantum: int) -> List[ExecutionSlice]:
    """
    Round Robin scheduling with a fixed time quantum.

    Processes are visited in a wrap-around cycle (arrival order, ties by
    submission order). A visit runs min(quantum, remaining_time) if the
    process has arrived and still has work; completion is recorded the
    moment remaining_time reaches 0. If a whole pass runs nothing, no
    unfinished process has arrived yet and the clock jumps to the earliest
    pending arrival.

    Args:
        processes: Working copies, mutated in place
        quantum: Time quantum (>= 1)

    Returns:
        Gantt trace (several slices per process when burst > quantum)
    """
    cycle = [process for _, process in _arrival_order(processes)]
    slices = []
    current_time = 0

    while any(p.remaining_time > 0 for p in cycle):
        ran_this_pass = False

        for process in cycle:
            if process.remaining_time == 0 or not process.has_arrived(current_time):
                continue

            execute_time = min(quantum, process.remaining_time)
            slices.append(ExecutionSlice(
                process_id=process.pid,
                process_name=process.name,
                start_time=current_time,
                duration=execute_time
            ))
            current_time = process.run(current_time, execute_time)
            ran_this_pass = True

        if not ran_this_pass:
            current_time = min(p.arrival_time for p in cycle if p.remaining_time > 0)

    return slices
