"""
Logger utility for the OS Resource Allocation Simulator.

Provides console and file logging with verbosity levels.
"""

from typing import Optional
from datetime import datetime


class SimulatorLogger:
    """
    Logger for simulation events and decisions.

    Format: "[CPU] FCFS: P1(0-5) | P2(5-8)", "[MEMORY] Allocated 80KB to P1 ..."
    """

    def __init__(self, verbose: bool = False, log_file: Optional[str] = None):
        """
        Initialize logger.

        Args:
            verbose: Enable verbose output
            log_file: Optional file path for logging
        """
        self.verbose = verbose
        self.log_file = log_file
        self.file_handle = None

        if self.log_file:
            self.file_handle = open(self.log_file, 'w', encoding='utf-8')
            self._write_header()

    def _write_header(self) -> None:
        """Write log file header."""
        if self.file_handle:
            timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self.file_handle.write(f"Simulation Log - {timestamp}\n")
            self.file_handle.write("="*60 + "\n\n")

    def log(self, message: str, level: str = "info") -> None:
        """
        Log a message.

        Args:
            message: Message to log
            level: Log level (info, success, debug, warning, error)
        """
        if level == "debug" and not self.verbose:
            return

        formatted = self._format_message(message, level)

        # Console output
        print(formatted)

        # File output
        if self.file_handle:
            self.file_handle.write(formatted + "\n")
            self.file_handle.flush()

    def _format_message(self, message: str, level: str) -> str:
        """Format message with level prefix."""
        if level == "error":
            return f"[ERROR] {message}"
        elif level == "warning":
            return f"[WARNING] {message}"
        elif level == "debug":
            return f"[DEBUG] {message}"
        elif level == "success":
            return f"[OK] {message}"
        else:
            return message

    def log_section(self, title: str) -> None:
        """Log a banner separating simulation phases."""
        self.log(f"\n{'='*60}")
        self.log(title)
        self.log(f"{'='*60}")

    def log_schedule(self, algorithm: str, order: str, process_count: int) -> None:
        """
        Log a completed scheduling run.

        Args:
            algorithm: Algorithm tag
            order: Rendered Gantt order
            process_count: Number of scheduled processes
        """
        self.log(f"[CPU] {algorithm.upper()} scheduled {process_count} processes: {order}", "success")

    def log_allocation(
        self,
        size: int,
        owner: Optional[str],
        algorithm: str,
        granted: bool,
        reason: str = ""
    ) -> None:
        """
        Log a memory allocation request.

        Args:
            size: Requested size in KB
            owner: Owner of the new block (if granted)
            algorithm: Fit algorithm tag
            granted: Whether the request was satisfied
            reason: Reason for failure
        """
        if granted:
            self.log(f"[MEMORY] Allocated {size}KB to {owner} using {algorithm} fit algorithm", "success")
        else:
            self.log(f"[MEMORY] Failed to allocate {size}KB - {reason}", "error")

    def log_disk_run(self, processed: int, total_seek_distance: int, head_position: int) -> None:
        """
        Log a disk queue run.

        Args:
            processed: Number of requests serviced
            total_seek_distance: Cylinders travelled
            head_position: Final head cylinder
        """
        self.log(
            f"[DISK] Processed {processed} disk requests "
            f"(seek distance {total_seek_distance}, head at {head_position})",
            "success"
        )

    def log_state(self, state_str: str) -> None:
        """
        Log a session state snapshot.

        Args:
            state_str: Formatted session state
        """
        if self.verbose:
            self.log(f"Session State:\n{state_str}")

    def close(self) -> None:
        """Close log file if open."""
        if self.file_handle:
            self.file_handle.close()
            self.file_handle = None

    def __del__(self):
        """Cleanup on destruction."""
        self.close()
