"""
Disk request model for the OS Resource Allocation Simulator.
"""

from dataclasses import dataclass

from algorithms.errors import InvalidInput
from config import MAX_CYLINDER


@dataclass
class DiskRequest:
    """
    A pending or serviced request for a disk cylinder.

    Attributes:
        request_id: Request identifier (assigned in submission order)
        cylinder: Target cylinder (0..max_cylinder)
        algorithm: Algorithm tag selected when the request was submitted
        seek_time: Seek time in ms, set when the request is serviced
        processed: Whether the request has been serviced
    """
    request_id: int
    cylinder: int
    algorithm: str = "fcfs"
    seek_time: float = 0.0
    processed: bool = False

    def validate(self, max_cylinder: int = MAX_CYLINDER) -> None:
        """
        Check the cylinder is on the disk.

        Raises:
            InvalidInput: If cylinder is outside [0, max_cylinder]
        """
        if self.cylinder < 0 or self.cylinder > max_cylinder:
            raise InvalidInput(
                f"Request {self.request_id}: cylinder {self.cylinder} "
                f"must be between 0 and {max_cylinder}"
            )

    def to_dict(self) -> dict:
        """Convert to a plain dictionary for reports and export."""
        return {
            'request_id': self.request_id,
            'cylinder': self.cylinder,
            'algorithm': self.algorithm,
            'seek_time': round(self.seek_time, 2),
            'processed': self.processed
        }

    def __repr__(self) -> str:
        status = "Completed" if self.processed else "Pending"
        return f"Request#{self.request_id}(cylinder={self.cylinder}, {status}, seek={self.seek_time:.2f} ms)"
