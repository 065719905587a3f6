"""
Process model for the OS Resource Allocation Simulator.

Represents a process submitted to the CPU scheduler, its scheduling inputs
and the timing results of the last scheduling run.
"""

from dataclasses import dataclass, field
from typing import Optional
from enum import Enum

from algorithms.errors import InvalidInput


class ProcessState(Enum):
    """Process states in the simulation."""
    READY = "ready"
    RUNNING = "running"
    COMPLETED = "completed"


@dataclass
class Process:
    """
    Represents a process in the CPU scheduling simulation.

    Attributes:
        pid: Process identifier (unique, assigned in submission order)
        name: Display name (e.g. "P1")
        arrival_time: Time the process enters the ready queue (>= 0)
        burst_time: Total CPU time required (>= 1)
        priority: Priority level (lower value = more urgent)
        remaining_time: CPU time still needed
        start_time: Time of first execution (None until scheduled)
        completion_time: Time the last slice finished
        waiting_time: turnaround_time - burst_time
        turnaround_time: completion_time - arrival_time
        state: Current process state
    """
    pid: int
    name: str
    arrival_time: int
    burst_time: int
    priority: int = 1
    remaining_time: Optional[int] = None
    start_time: Optional[int] = None
    completion_time: int = 0
    waiting_time: int = 0
    turnaround_time: int = 0
    state: ProcessState = field(default=ProcessState.READY)

    def __post_init__(self):
        """Validate scheduling inputs and initialize remaining time."""
        if self.arrival_time < 0:
            raise InvalidInput(f"{self.name}: arrival_time cannot be negative ({self.arrival_time})")
        if self.burst_time < 1:
            raise InvalidInput(f"{self.name}: burst_time must be at least 1 ({self.burst_time})")
        if self.remaining_time is None:
            self.remaining_time = self.burst_time

    def reset(self) -> None:
        """Discard the results of a previous scheduling run."""
        self.remaining_time = self.burst_time
        self.start_time = None
        self.completion_time = 0
        self.waiting_time = 0
        self.turnaround_time = 0
        self.state = ProcessState.READY

    def run(self, current_time: int, duration: int) -> int:
        """
        Execute the process for a slice of CPU time.

        Args:
            current_time: Clock value when the slice starts
            duration: Length of the slice

        Returns:
            Clock value when the slice ends

        Raises:
            ValueError: If duration exceeds the remaining time
        """
        if duration <= 0 or duration > self.remaining_time:
            raise ValueError(
                f"{self.name}: cannot run for {duration} "
                f"(remaining {self.remaining_time})"
            )

        if self.start_time is None:
            self.start_time = current_time
        self.state = ProcessState.RUNNING
        self.remaining_time -= duration

        end_time = current_time + duration
        if self.remaining_time == 0:
            self.complete(end_time)
        return end_time

    def complete(self, completion_time: int) -> None:
        """
        Record completion and derive turnaround and waiting times.

        Args:
            completion_time: Clock value when the process finished
        """
        self.completion_time = completion_time
        self.turnaround_time = self.completion_time - self.arrival_time
        self.waiting_time = self.turnaround_time - self.burst_time
        self.state = ProcessState.COMPLETED

    def is_finished(self) -> bool:
        """Check if process has completed execution."""
        return self.state == ProcessState.COMPLETED

    def has_arrived(self, current_time: int) -> bool:
        """Check if process is in the system at current_time."""
        return self.arrival_time <= current_time

    def to_dict(self) -> dict:
        """Convert to a plain dictionary for reports and export."""
        return {
            'pid': self.pid,
            'name': self.name,
            'arrival_time': self.arrival_time,
            'burst_time': self.burst_time,
            'priority': self.priority,
            'start_time': self.start_time,
            'completion_time': self.completion_time,
            'waiting_time': self.waiting_time,
            'turnaround_time': self.turnaround_time,
            'state': self.state.value
        }

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Process(pid={self.pid}, name={self.name}, "
            f"arrival={self.arrival_time}, burst={self.burst_time}, "
            f"priority={self.priority}, state={self.state.value})"
        )


@dataclass
class ExecutionSlice:
    """
    One contiguous run of a process on the CPU (a Gantt chart bar).

    Attributes:
        process_id: PID of the process that ran
        process_name: Name of the process that ran
        start_time: Clock value when the slice started
        duration: Length of the slice
    """
    process_id: int
    process_name: str
    start_time: int
    duration: int

    @property
    def end_time(self) -> int:
        """Clock value when the slice ended."""
        return self.start_time + self.duration

    def __str__(self) -> str:
        return f"{self.process_name}({self.start_time}-{self.end_time})"
