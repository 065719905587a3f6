"""
Contiguous Memory Allocation for the OS Resource Allocation Simulator.

Implements First-Fit, Best-Fit and Worst-Fit allocation, deallocation of user
blocks and compaction over a list of MemoryBlocks partitioning a fixed
address space.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Union

import numpy as np

from algorithms.errors import InvalidInput, InsufficientSpace, coerce_algorithm
from config import TOTAL_MEMORY, KERNEL_SIZE, KERNEL_OWNER
from models.memory_block import MemoryBlock, BlockStatus, make_block


class FitAlgorithm(Enum):
    """Supported placement policies."""
    FIRST = "first"
    BEST = "best"
    WORST = "worst"


class FailureReason(Enum):
    """Reasons an allocation can fail without raising."""
    INSUFFICIENT_SPACE = "insufficient_space"


@dataclass
class Allocation:
    """
    Successful allocation.

    Attributes:
        block: The newly allocated block
        blocks: Complete new layout, sorted by start address
        algorithm: Placement policy used
    """
    block: MemoryBlock
    blocks: List[MemoryBlock]
    algorithm: FitAlgorithm

    @property
    def success(self) -> bool:
        return True

    def unwrap(self) -> MemoryBlock:
        """Return the allocated block."""
        return self.block


@dataclass
class AllocationFailure:
    """
    Failed allocation. The caller's layout must be left as it was.

    Attributes:
        reason: Why the allocation failed
        requested_size: Size that was requested
        largest_free: Largest free block at the time of the request
        algorithm: Placement policy used
    """
    reason: FailureReason
    requested_size: int
    largest_free: int
    algorithm: FitAlgorithm

    @property
    def success(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return (
            f"Failed to allocate {self.requested_size}KB - insufficient memory "
            f"(largest free block: {self.largest_free}KB)"
        )

    def unwrap(self) -> MemoryBlock:
        """
        Raises:
            InsufficientSpace: Always
        """
        raise InsufficientSpace(self.message)


AllocationOutcome = Union[Allocation, AllocationFailure]


def create_memory_layout(
    total_size: int = TOTAL_MEMORY,
    kernel_size: int = KERNEL_SIZE
) -> List[MemoryBlock]:
    """
    Build the initial layout: reserved kernel block at 0, the rest free.

    Args:
        total_size: Size of the address space in KB
        kernel_size: Size of the reserved kernel block (0 for none)

    Returns:
        Initial block list

    Raises:
        InvalidInput: If the sizes do not describe a usable address space
    """
    if total_size <= 0:
        raise InvalidInput(f"Total memory must be positive ({total_size})")
    if kernel_size < 0 or kernel_size > total_size:
        raise InvalidInput(
            f"Kernel size ({kernel_size}) must be between 0 and total memory ({total_size})"
        )

    blocks = []
    if kernel_size > 0:
        blocks.append(make_block(1, 0, kernel_size, owner=KERNEL_OWNER))
    if total_size > kernel_size:
        blocks.append(make_block(len(blocks) + 1, kernel_size, total_size - kernel_size))
    return blocks


def total_size(blocks: List[MemoryBlock]) -> int:
    """Size of the address space covered by blocks."""
    return sum(b.size for b in blocks)


def validate_layout(
    blocks: List[MemoryBlock],
    expected_total: Optional[int] = None,
    context: str = ""
) -> None:
    """
    Verify layout invariants: sorted, contiguous from 0, non-overlapping.

    Args:
        blocks: Layout to check
        expected_total: Size the layout must cover (skipped if None)
        context: Description of when this check is being run (for error messages)

    Raises:
        AssertionError: If an invariant is violated
    """
    if not blocks:
        assert not expected_total, f"Empty layout cannot cover the address space {context}"
        return

    starts = np.array([b.start_address for b in blocks])
    ends = np.array([b.end_address for b in blocks])
    sizes = np.array([b.size for b in blocks])

    assert starts[0] == 0, f"Layout starts at {starts[0]}, not 0 {context}"
    assert np.all(ends - starts == sizes), f"Block size does not match its address range {context}"
    assert np.all(starts[1:] == ends[:-1]), (
        f"Blocks overlap or leave gaps {context}\n"
        f"  Starts: {starts.tolist()}, Ends: {ends.tolist()}"
    )
    if expected_total is not None:
        assert sizes.sum() == expected_total, (
            f"Memory conservation violated {context}\n"
            f"  Block sizes sum to {sizes.sum()}KB, address space is {expected_total}KB"
        )


def fragmentation(blocks: List[MemoryBlock]) -> float:
    """
    External fragmentation percentage.

    Formula: (free_space - largest_free_block) / free_space x 100,
    defined as 0 when there is no free space.
    """
    free_sizes = [b.size for b in blocks if b.is_free]
    free_space = sum(free_sizes)
    if free_space == 0:
        return 0.0
    return (free_space - max(free_sizes)) / free_space * 100


def _next_block_id(blocks: List[MemoryBlock]) -> int:
    return max((b.block_id for b in blocks), default=0) + 1


def _default_owner(blocks: List[MemoryBlock]) -> str:
    user_blocks = [b for b in blocks if b.status == BlockStatus.ALLOCATED and not b.is_reserved]
    return f"P{len(user_blocks) + 1}"


def select_block(
    blocks: List[MemoryBlock],
    request_size: int,
    algorithm: FitAlgorithm
) -> Optional[MemoryBlock]:
    """
    Choose the free block that will hold a request.

    Candidates are free blocks with size >= request_size, in address order.
    - FIRST: first candidate
    - BEST: smallest candidate (tie -> lowest address)
    - WORST: largest candidate (tie -> lowest address)

    Returns:
        Chosen block, or None if no candidate exists
    """
    candidates = [
        b for b in sorted(blocks, key=lambda b: b.start_address)
        if b.can_hold(request_size)
    ]
    if not candidates:
        return None

    if algorithm == FitAlgorithm.FIRST:
        return candidates[0]
    elif algorithm == FitAlgorithm.BEST:
        # min/max keep the first of equal keys, i.e. the lowest address
        return min(candidates, key=lambda b: b.size)
    elif algorithm == FitAlgorithm.WORST:
        return max(candidates, key=lambda b: b.size)
    raise AssertionError(f"Unhandled algorithm {algorithm}")


def allocate(
    blocks: List[MemoryBlock],
    request_size: int,
    algorithm: Union[FitAlgorithm, str],
    owner: Optional[str] = None
) -> AllocationOutcome:
    """
    Allocate request_size KB using the selected placement policy.

    The chosen free block is replaced by an allocated block of exactly
    request_size at the same start address and, if space is left over, a
    free block covering the remainder. The input list is not modified.

    Args:
        blocks: Current layout
        request_size: Size to allocate (> 0)
        algorithm: Fit algorithm enum member or tag ("first", "best", "worst")
        owner: Owning process name (defaults to P<n>)

    Returns:
        Allocation with the new layout, or AllocationFailure if nothing fits

    Raises:
        InvalidInput: If request_size <= 0
        AlgorithmUnsupported: Unrecognised algorithm tag
    """
    algorithm = coerce_algorithm(FitAlgorithm, algorithm)
    if request_size <= 0:
        raise InvalidInput(f"Allocation size must be positive ({request_size})")

    selected = select_block(blocks, request_size, algorithm)
    if selected is None:
        return AllocationFailure(
            reason=FailureReason.INSUFFICIENT_SPACE,
            requested_size=request_size,
            largest_free=max((b.size for b in blocks if b.is_free), default=0),
            algorithm=algorithm
        )

    next_id = _next_block_id(blocks)
    new_block = make_block(
        next_id,
        selected.start_address,
        request_size,
        owner=owner if owner is not None else _default_owner(blocks)
    )

    new_blocks = [replace(b) for b in blocks if b is not selected]
    new_blocks.append(new_block)

    if selected.size > request_size:
        new_blocks.append(make_block(
            next_id + 1,
            selected.start_address + request_size,
            selected.size - request_size
        ))

    new_blocks.sort(key=lambda b: b.start_address)
    return Allocation(block=new_block, blocks=new_blocks, algorithm=algorithm)


def deallocate(blocks: List[MemoryBlock]) -> List[MemoryBlock]:
    """
    Reclaim every user allocation, keeping reserved blocks in place.

    Each maximal run of non-reserved space becomes a single free block, so
    with one kernel block at address 0 the result is the kernel block plus
    one free block from its boundary to the end of memory.

    Args:
        blocks: Current layout

    Returns:
        New layout
    """
    new_blocks: List[MemoryBlock] = []
    run_start = None
    run_end = None

    def close_run():
        if run_start is not None:
            new_blocks.append(make_block(0, run_start, run_end - run_start))

    for block in sorted(blocks, key=lambda b: b.start_address):
        if block.is_reserved:
            close_run()
            run_start = None
            new_blocks.append(replace(block))
        else:
            if run_start is None:
                run_start = block.start_address
            run_end = block.end_address
    close_run()

    # Renumber so ids stay unique after merging
    for block_id, block in enumerate(new_blocks, start=1):
        block.block_id = block_id
    return new_blocks


def compact(blocks: List[MemoryBlock]) -> List[MemoryBlock]:
    """
    Slide every allocated block down to eliminate external fragmentation.

    Allocated blocks keep their relative order and size and are packed
    from address 0; a single free block covers the remaining space.
    Blocks are renumbered 1..n, so compacting twice changes nothing.

    Args:
        blocks: Current layout

    Returns:
        New layout with total size unchanged
    """
    memory_size = total_size(blocks)
    allocated = sorted(
        (b for b in blocks if b.status == BlockStatus.ALLOCATED),
        key=lambda b: b.start_address
    )

    new_blocks = []
    current_address = 0
    for block_id, block in enumerate(allocated, start=1):
        new_blocks.append(replace(
            block,
            block_id=block_id,
            start_address=current_address,
            end_address=current_address + block.size
        ))
        current_address += block.size

    remaining = memory_size - current_address
    if remaining > 0:
        new_blocks.append(make_block(len(new_blocks) + 1, current_address, remaining))

    return new_blocks
