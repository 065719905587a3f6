"""
Disk Scheduling Tests

Validates head movement, seek times and queue handling for arrival-order
servicing.
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.disk_scheduling import process_queue, DiskAlgorithm
from algorithms.errors import InvalidInput, EmptyQueue, AlgorithmUnsupported
from analysis.metrics import compute_disk_metrics
from models.disk_request import DiskRequest


def make_queue(cylinders, processed=()):
    return [
        DiskRequest(request_id=i, cylinder=c, processed=(i in processed))
        for i, c in enumerate(cylinders, start=1)
    ]


def test_fcfs_reference_queue():
    """Head 50, queue [98, 183, 37, 122] -> 48 + 85 + 146 + 85 = 364 cylinders."""
    result = process_queue(make_queue([98, 183, 37, 122]), head_position=50)
    print(f"\nHead path: {result.head_path}")

    assert result.total_seek_distance == 364
    assert result.seek_distances == [48, 85, 146, 85]
    assert [r.seek_time for r in result.ordered_requests] == pytest.approx([4.8, 8.5, 14.6, 8.5])
    assert result.avg_seek_time == pytest.approx(9.1)
    assert result.final_head_position == 122
    assert result.head_path == [50, 98, 183, 37, 122]
    assert [r.request_id for r in result.ordered_requests] == [1, 2, 3, 4]
    assert all(r.processed for r in result.ordered_requests)


def test_seek_time_scales_with_cost():
    result = process_queue(make_queue([60]), head_position=50, time_per_cylinder=0.5)
    assert result.ordered_requests[0].seek_time == pytest.approx(5.0)


def test_request_at_head_costs_nothing():
    result = process_queue(make_queue([50, 50]), head_position=50)
    assert result.total_seek_distance == 0
    assert result.avg_seek_time == 0.0
    assert result.final_head_position == 50


def test_processed_requests_are_skipped():
    """Only pending requests are serviced; average covers this run only."""
    queue = make_queue([98, 183, 37], processed={1, 2})
    result = process_queue(queue, head_position=183)

    assert [r.request_id for r in result.ordered_requests] == [3]
    assert result.total_seek_distance == 146
    assert result.avg_seek_time == pytest.approx(14.6)


def test_empty_queue():
    with pytest.raises(EmptyQueue):
        process_queue([], head_position=0)
    with pytest.raises(EmptyQueue):
        process_queue(make_queue([10, 20], processed={1, 2}), head_position=0)


@pytest.mark.parametrize("algorithm", ["sstf", "scan", "cscan", DiskAlgorithm.SCAN])
def test_seek_optimising_algorithms_unsupported(algorithm):
    with pytest.raises(AlgorithmUnsupported):
        process_queue(make_queue([98]), head_position=50, algorithm=algorithm)


def test_unknown_algorithm_tag():
    with pytest.raises(AlgorithmUnsupported):
        process_queue(make_queue([98]), head_position=50, algorithm="elevator")


def test_out_of_range_inputs():
    with pytest.raises(InvalidInput):
        process_queue(make_queue([98]), head_position=200)
    with pytest.raises(InvalidInput):
        process_queue(make_queue([98]), head_position=-1)
    with pytest.raises(InvalidInput):
        process_queue(make_queue([98, 250]), head_position=50)

    # Custom disk geometry
    result = process_queue(make_queue([250]), head_position=0, max_cylinder=499)
    assert result.total_seek_distance == 250


def test_input_queue_not_modified():
    queue = make_queue([98, 183])
    process_queue(queue, head_position=50)
    assert all(not r.processed for r in queue)
    assert all(r.seek_time == 0.0 for r in queue)


def test_disk_metrics():
    result = process_queue(make_queue([98, 183, 37, 122]), head_position=50)
    metrics = compute_disk_metrics(result)

    assert metrics.requests_processed == 4
    assert metrics.total_seek_distance == 364
    assert metrics.avg_seek_distance == pytest.approx(91.0)
    assert metrics.avg_seek_time == pytest.approx(9.1)
    assert metrics.final_head_position == 122
