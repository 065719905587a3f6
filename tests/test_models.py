"""
Data Model Tests

Tests Process, MemoryBlock, DiskRequest and SimulationSession functionality.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.errors import InvalidInput, EmptyQueue
from models.process import Process, ProcessState, ExecutionSlice
from models.memory_block import MemoryBlock, BlockStatus, make_block
from models.disk_request import DiskRequest
from models.system_state import SimulationSession


def test_process_model():
    """Test Process initialization, run and completion bookkeeping."""
    process = Process(pid=1, name="P1", arrival_time=2, burst_time=5, priority=1)
    print(f"\nCreated: {process}")

    assert process.remaining_time == 5, "remaining_time should start at burst_time"
    assert process.start_time is None
    assert process.state == ProcessState.READY

    end = process.run(4, 3)
    assert end == 7
    assert process.start_time == 4, "start_time records the first execution"
    assert process.remaining_time == 2
    assert not process.is_finished()

    end = process.run(9, 2)
    assert end == 11
    assert process.start_time == 4, "start_time must not move on later slices"
    assert process.is_finished()
    assert process.completion_time == 11
    assert process.turnaround_time == 9, "turnaround = completion - arrival"
    assert process.waiting_time == 4, "waiting = turnaround - burst"


def test_process_rejects_invalid_inputs():
    """Arrival must be >= 0 and burst >= 1."""
    with pytest.raises(InvalidInput):
        Process(pid=1, name="P1", arrival_time=-1, burst_time=5)
    with pytest.raises(InvalidInput):
        Process(pid=1, name="P1", arrival_time=0, burst_time=0)


def test_process_cannot_overrun():
    """Running longer than the remaining time is rejected."""
    process = Process(pid=1, name="P1", arrival_time=0, burst_time=3)
    with pytest.raises(ValueError):
        process.run(0, 4)
    assert process.remaining_time == 3, "Rejected run must not change the process"


def test_process_reset():
    """reset() discards the results of a previous run."""
    process = Process(pid=1, name="P1", arrival_time=0, burst_time=3)
    process.run(0, 3)
    assert process.is_finished()

    process.reset()
    assert process.remaining_time == 3
    assert process.start_time is None
    assert process.completion_time == 0
    assert process.waiting_time == 0
    assert process.state == ProcessState.READY


def test_execution_slice_end_time():
    slice_ = ExecutionSlice(process_id=1, process_name="P1", start_time=5, duration=3)
    assert slice_.end_time == 8
    assert str(slice_) == "P1(5-8)"


def test_memory_block_model():
    """Test MemoryBlock geometry validation and helpers."""
    block = make_block(1, 128, 100, owner="P1")
    assert block.end_address == 228
    assert block.status == BlockStatus.ALLOCATED
    assert not block.is_free
    assert not block.is_reserved

    kernel = make_block(2, 0, 128, owner="OS")
    assert kernel.is_reserved

    free = make_block(3, 228, 50)
    assert free.is_free
    assert free.can_hold(50)
    assert not free.can_hold(51)
    assert not block.can_hold(10), "Allocated blocks cannot hold requests"

    with pytest.raises(InvalidInput):
        MemoryBlock(block_id=4, owner=None, size=10, start_address=0, end_address=20)
    with pytest.raises(InvalidInput):
        make_block(5, 0, 0)


def test_disk_request_model():
    """Test DiskRequest defaults and cylinder validation."""
    request = DiskRequest(request_id=1, cylinder=98)
    assert not request.processed
    assert request.seek_time == 0.0

    request.validate(199)
    with pytest.raises(InvalidInput):
        DiskRequest(request_id=2, cylinder=200).validate(199)
    with pytest.raises(InvalidInput):
        DiskRequest(request_id=3, cylinder=-1).validate(199)


def test_session_initial_layout():
    """A new session has the kernel block plus one free block."""
    session = SimulationSession()
    print(session.display())

    assert len(session.memory_blocks) == 2
    kernel, free = session.memory_blocks
    assert kernel.is_reserved and kernel.size == 128
    assert free.is_free and free.start_address == 128 and free.end_address == 1024
    assert session.used_memory == 128
    assert session.free_memory == 896
    session.assert_memory_conservation("at initial state")


def test_session_process_management():
    """add_process assigns ids and names; remove and clear edit the list."""
    session = SimulationSession()
    p1 = session.add_process(arrival_time=0, burst_time=5)
    p2 = session.add_process(arrival_time=1, burst_time=3, name="editor")
    p3 = session.add_process(arrival_time=2, burst_time=8)

    assert [p.pid for p in session.processes] == [1, 2, 3]
    assert p1.name == "P1" and p2.name == "editor" and p3.name == "P3"

    removed = session.remove_process(1)
    assert removed is p2
    p4 = session.add_process(arrival_time=0, burst_time=1)
    assert p4.pid == 4, "pids stay unique after removal"
    assert p4.name == "P4", "default names follow the pid"
    assert len({p.name for p in session.processes}) == len(session.processes)

    session.run_scheduler("fcfs")
    assert session.last_trace is not None
    session.clear_processes()
    assert session.processes == []
    assert session.last_trace is None


def test_session_rejects_invalid_process():
    session = SimulationSession()
    with pytest.raises(InvalidInput):
        session.add_process(arrival_time=0, burst_time=0)
    assert session.processes == [], "Invalid process must not be queued"


def test_session_run_scheduler_commits_processes():
    """run_scheduler replaces the process list with the scheduled copies."""
    session = SimulationSession()
    original = session.add_process(arrival_time=0, burst_time=4)

    trace = session.run_scheduler("rr", quantum=2)
    assert len(trace.slices) == 2
    assert session.processes[0].is_finished()
    assert not original.is_finished(), "Engine works on copies of the processes"


def test_session_failed_allocation_leaves_layout():
    """A failed allocation is returned and the layout is untouched."""
    session = SimulationSession()
    before = [b.to_dict() for b in session.memory_blocks]

    outcome = session.allocate_memory(2000, "first")
    assert not outcome.success
    assert [b.to_dict() for b in session.memory_blocks] == before


def test_session_memory_operations():
    """allocate / compact / deallocate / reset keep the layout consistent."""
    session = SimulationSession()
    outcome = session.allocate_memory(100, "first")
    assert outcome.success
    assert outcome.block.owner == "P1"
    session.assert_memory_conservation("after allocate")

    session.allocate_memory(200, "best")
    session.compact_memory()
    session.assert_memory_conservation("after compact")

    session.deallocate_memory()
    session.assert_memory_conservation("after deallocate")
    assert session.used_memory == 128

    session.allocate_memory(64, "worst")
    session.reset_memory()
    assert session.used_memory == 128
    assert session.fragmentation == 0.0


def test_session_disk_queue():
    """Disk requests are validated, processed once and update the head."""
    session = SimulationSession(head_position=50)
    for cylinder in (98, 183, 37, 122):
        session.add_disk_request(cylinder)

    with pytest.raises(InvalidInput):
        session.add_disk_request(200)
    assert len(session.disk_requests) == 4, "Out-of-range request must not be queued"

    result = session.process_disk_queue()
    assert result.total_seek_distance == 364
    assert session.head_position == 122
    assert all(r.processed for r in session.disk_requests)
    assert session.pending_requests == []

    with pytest.raises(EmptyQueue):
        session.process_disk_queue()

    session.add_disk_request(100)
    result = session.process_disk_queue()
    assert result.total_seek_distance == 22, "Second run starts from the committed head"
    assert len(result.ordered_requests) == 1

    session.clear_disk_requests()
    assert session.disk_requests == []


def test_session_rejects_bad_head_position():
    with pytest.raises(InvalidInput):
        SimulationSession(head_position=500)


def test_memory_conservation_detects_gaps():
    """assert_memory_conservation catches a corrupted layout."""
    session = SimulationSession()
    session.memory_blocks = [make_block(1, 0, 128, owner="OS"), make_block(2, 200, 824)]
    with pytest.raises(AssertionError):
        session.assert_memory_conservation("with a gap")


def main():
    """Run all model tests without pytest."""
    test_process_model()
    test_process_reset()
    test_memory_block_model()
    test_disk_request_model()
    test_session_initial_layout()
    test_session_memory_operations()
    test_session_disk_queue()
    print("\nALL MODEL TESTS PASSED")
    return 0


if __name__ == '__main__':
    sys.exit(main())
