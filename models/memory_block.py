"""
Memory block model for the OS Resource Allocation Simulator.

Represents one contiguous region of the simulated address space.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from algorithms.errors import InvalidInput
from config import KERNEL_OWNER


class BlockStatus(Enum):
    """Allocation status of a memory block."""
    ALLOCATED = "allocated"
    FREE = "free"


@dataclass
class MemoryBlock:
    """
    Represents a contiguous memory region in the allocation simulation.

    Attributes:
        block_id: Block identifier
        owner: Name of the owning process (None for free blocks)
        size: Size of the block in KB
        start_address: First address of the block
        end_address: One past the last address of the block
        status: Whether the block is allocated or free

    Invariant:
        end_address - start_address == size
    """
    block_id: int
    owner: Optional[str]
    size: int
    start_address: int
    end_address: int
    status: BlockStatus = BlockStatus.FREE

    def __post_init__(self):
        """Validate block geometry."""
        if self.size <= 0:
            raise InvalidInput(f"Block {self.block_id}: size must be positive ({self.size})")
        if self.start_address < 0:
            raise InvalidInput(f"Block {self.block_id}: start_address cannot be negative")
        if self.end_address - self.start_address != self.size:
            raise InvalidInput(
                f"Block {self.block_id}: range {self.start_address}-{self.end_address} "
                f"does not match size {self.size}"
            )

    @property
    def is_free(self) -> bool:
        """Check if the block is unallocated."""
        return self.status == BlockStatus.FREE

    @property
    def is_reserved(self) -> bool:
        """Check if the block is the permanently allocated kernel block."""
        return self.status == BlockStatus.ALLOCATED and self.owner == KERNEL_OWNER

    def can_hold(self, request_size: int) -> bool:
        """Check if a request of request_size fits in this free block."""
        return self.is_free and self.size >= request_size

    def to_dict(self) -> dict:
        """Convert to a plain dictionary for reports and export."""
        return {
            'block_id': self.block_id,
            'owner': self.owner,
            'size': self.size,
            'start_address': self.start_address,
            'end_address': self.end_address,
            'status': self.status.value
        }

    def __str__(self) -> str:
        label = self.owner if self.owner else f"Free {self.size}KB"
        return f"[{self.start_address:4}-{self.end_address:4}] {label}"


def make_block(block_id: int, start_address: int, size: int, owner: Optional[str] = None) -> MemoryBlock:
    """
    Build a block from its start and size.

    Blocks with an owner are allocated, blocks without one are free.
    """
    status = BlockStatus.ALLOCATED if owner is not None else BlockStatus.FREE
    return MemoryBlock(
        block_id=block_id,
        owner=owner,
        size=size,
        start_address=start_address,
        end_address=start_address + size,
        status=status
    )
