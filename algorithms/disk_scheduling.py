"""
Disk Scheduling for the OS Resource Allocation Simulator.

Services a queue of cylinder requests and computes head movement and seek
time. Requests are serviced in arrival order; the seek-optimising policies
(SSTF, SCAN, C-SCAN) are recognised but not implemented.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import List, Union

import numpy as np

from algorithms.errors import InvalidInput, EmptyQueue, AlgorithmUnsupported, coerce_algorithm
from config import MAX_CYLINDER, SEEK_TIME_PER_CYLINDER
from models.disk_request import DiskRequest


class DiskAlgorithm(Enum):
    """Disk scheduling algorithm tags."""
    FCFS = "fcfs"
    SSTF = "sstf"
    SCAN = "scan"
    CSCAN = "cscan"


IMPLEMENTED_ALGORITHMS = (DiskAlgorithm.FCFS,)


@dataclass
class DiskRunResult:
    """
    Result of processing the disk queue.

    Attributes:
        ordered_requests: Serviced request copies, in service order
        total_seek_distance: Cylinders travelled by the head
        avg_seek_time: Mean seek time (ms) of the requests serviced in this run
        final_head_position: Cylinder where the head stopped
        head_path: Head positions visited, starting with the initial position
    """
    ordered_requests: List[DiskRequest]
    total_seek_distance: int
    avg_seek_time: float
    final_head_position: int
    head_path: List[int] = field(default_factory=list)

    @property
    def seek_distances(self) -> List[int]:
        """Distance travelled for each serviced request."""
        return [abs(b - a) for a, b in zip(self.head_path, self.head_path[1:])]


def process_queue(
    requests: List[DiskRequest],
    head_position: int,
    algorithm: Union[DiskAlgorithm, str] = DiskAlgorithm.FCFS,
    max_cylinder: int = MAX_CYLINDER,
    time_per_cylinder: float = SEEK_TIME_PER_CYLINDER
) -> DiskRunResult:
    """
    Service every pending request and compute seek statistics.

    Algorithm (arrival order):
    1. Take requests with processed == False, in submission order
    2. For each: seek_distance = |cylinder - head|,
       seek_time = seek_distance x time_per_cylinder
    3. Move the head to the cylinder and accumulate the distance

    Already-processed requests are skipped; input requests are not modified.

    Args:
        requests: Request queue (pending and processed)
        head_position: Starting head cylinder
        algorithm: Algorithm tag; only FCFS is implemented
        max_cylinder: Highest valid cylinder
        time_per_cylinder: Seek cost in ms per cylinder

    Returns:
        DiskRunResult

    Raises:
        AlgorithmUnsupported: Unknown tag, or SSTF/SCAN/C-SCAN
        InvalidInput: Head or cylinder outside [0, max_cylinder]
        EmptyQueue: No pending requests
    """
    algorithm = coerce_algorithm(DiskAlgorithm, algorithm)
    if algorithm not in IMPLEMENTED_ALGORITHMS:
        raise AlgorithmUnsupported(
            f"Disk algorithm '{algorithm.value}' is not implemented "
            f"(requests are serviced in arrival order only)"
        )
    if head_position < 0 or head_position > max_cylinder:
        raise InvalidInput(f"Head position {head_position} must be between 0 and {max_cylinder}")

    pending = [r for r in requests if not r.processed]
    if not pending:
        raise EmptyQueue("No pending disk requests")
    for request in pending:
        request.validate(max_cylinder)

    head_path = np.array([head_position] + [r.cylinder for r in pending], dtype=int)
    distances = np.abs(np.diff(head_path))
    seek_times = distances * time_per_cylinder

    ordered = [
        replace(request, seek_time=float(seek_time), processed=True)
        for request, seek_time in zip(pending, seek_times)
    ]

    return DiskRunResult(
        ordered_requests=ordered,
        total_seek_distance=int(distances.sum()),
        avg_seek_time=float(seek_times.mean()),
        final_head_position=int(head_path[-1]),
        head_path=head_path.tolist()
    )
