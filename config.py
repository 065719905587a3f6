"""
Simulator configuration.

Defaults for the reference scenario; scenario files and CLI flags override them.
"""

# Memory (all sizes in KB)
TOTAL_MEMORY = 1024              # Size of the contiguous address space
KERNEL_SIZE = 128                # Reserved block at address 0
KERNEL_OWNER = "OS"              # Owner name of the reserved block

# CPU scheduling
DEFAULT_QUANTUM = 4              # Round Robin time quantum

# Disk
MAX_CYLINDER = 199               # Cylinders are numbered 0..MAX_CYLINDER
SEEK_TIME_PER_CYLINDER = 0.1     # Head movement cost (ms per cylinder)
DEFAULT_HEAD_POSITION = 0
