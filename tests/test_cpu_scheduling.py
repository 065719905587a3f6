"""
CPU Scheduling Tests

Validates FCFS, SJF, Priority and Round Robin traces against hand-computed
schedules and the timing invariants every schedule must satisfy.
"""

import sys
from collections import defaultdict
from math import ceil
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from algorithms.cpu_scheduling import schedule, SchedulingAlgorithm
from algorithms.errors import InvalidInput, AlgorithmUnsupported
from analysis.metrics import compute_scheduling_metrics, format_scheduling_report
from models.process import Process


def make_processes(rows):
    """Build processes from (name, arrival, burst[, priority]) tuples."""
    processes = []
    for pid, row in enumerate(rows, start=1):
        name, arrival, burst = row[:3]
        priority = row[3] if len(row) > 3 else 1
        processes.append(Process(pid=pid, name=name, arrival_time=arrival, burst_time=burst, priority=priority))
    return processes


TEXTBOOK = [("P1", 0, 5, 2), ("P2", 1, 3, 1), ("P3", 2, 8, 3)]


def by_name(trace):
    return {p.name: p for p in trace.processes}


def assert_timing_invariants(trace):
    """Invariants shared by all algorithms."""
    durations = defaultdict(int)
    for s in trace.slices:
        durations[s.process_id] += s.duration

    for p in trace.processes:
        assert p.is_finished(), f"{p.name} did not complete"
        assert p.remaining_time == 0
        assert p.waiting_time >= 0, f"{p.name} has negative waiting time"
        assert p.turnaround_time >= p.burst_time
        assert p.turnaround_time == p.completion_time - p.arrival_time
        assert p.waiting_time == p.turnaround_time - p.burst_time
        assert durations[p.pid] == p.burst_time, f"{p.name} ran {durations[p.pid]}, burst {p.burst_time}"

    # Slices never overlap and never start before their process arrives
    arrivals = {p.pid: p.arrival_time for p in trace.processes}
    for prev, cur in zip(trace.slices, trace.slices[1:]):
        assert cur.start_time >= prev.end_time
    for s in trace.slices:
        assert s.start_time >= arrivals[s.process_id]


def test_fcfs_textbook():
    """FCFS: completion 5, 8, 16 and waiting 0, 4, 6."""
    trace = schedule(make_processes(TEXTBOOK), "fcfs")
    processes = by_name(trace)

    assert [processes[n].completion_time for n in ("P1", "P2", "P3")] == [5, 8, 16]
    assert [processes[n].waiting_time for n in ("P1", "P2", "P3")] == [0, 4, 6]
    assert trace.execution_order() == ["P1", "P2", "P3"]
    assert_timing_invariants(trace)


def test_sjf_textbook():
    """SJF: P1(0-5), P2(5-8), P3(8-16)."""
    trace = schedule(make_processes(TEXTBOOK), SchedulingAlgorithm.SJF)

    assert [(s.process_name, s.start_time, s.end_time) for s in trace.slices] == [
        ("P1", 0, 5), ("P2", 5, 8), ("P3", 8, 16)
    ]
    assert [by_name(trace)[n].waiting_time for n in ("P1", "P2", "P3")] == [0, 4, 6]
    assert_timing_invariants(trace)


def test_sjf_picks_shortest_ready_job():
    """A short job arriving later overtakes a long job that arrived earlier."""
    processes = make_processes([("A", 0, 4), ("B", 1, 9), ("C", 2, 2), ("D", 3, 1)])
    trace = schedule(processes, "sjf")

    assert trace.execution_order() == ["A", "D", "C", "B"]
    assert_timing_invariants(trace)


def test_sjf_tie_breaks_by_arrival_then_submission():
    processes = make_processes([("late", 2, 3), ("first", 0, 1), ("early", 1, 3), ("twin", 1, 3)])
    trace = schedule(processes, "sjf")

    # At t=1 "early" and "twin" tie on burst and arrival; submission order decides
    assert trace.execution_order() == ["first", "early", "twin", "late"]


def test_priority_lowest_value_wins():
    """Priority: among arrived processes the lowest priority value runs first."""
    trace = schedule(make_processes(TEXTBOOK), "priority")

    # P1 runs alone at t=0; at t=5 P2 (priority 1) beats P3 (priority 3)
    assert trace.execution_order() == ["P1", "P2", "P3"]

    processes = make_processes([("A", 0, 3, 5), ("B", 1, 2, 3), ("C", 1, 2, 1), ("D", 2, 1, 1)])
    trace = schedule(processes, "priority")
    assert trace.execution_order() == ["A", "C", "D", "B"]
    assert_timing_invariants(trace)


def test_non_preemptive_one_slice_per_process():
    for algorithm in ("fcfs", "sjf", "priority"):
        trace = schedule(make_processes(TEXTBOOK), algorithm)
        counts = defaultdict(int)
        for s in trace.slices:
            counts[s.process_id] += 1
        assert all(count == 1 for count in counts.values()), f"{algorithm} preempted a process"


def test_round_robin_textbook():
    """RR with quantum 4 over the textbook workload."""
    trace = schedule(make_processes(TEXTBOOK), "rr", quantum=4)

    assert [(s.process_name, s.start_time, s.duration) for s in trace.slices] == [
        ("P1", 0, 4), ("P2", 4, 3), ("P3", 7, 4), ("P1", 11, 1), ("P3", 12, 4)
    ]
    processes = by_name(trace)
    assert processes["P2"].completion_time == 7
    assert processes["P1"].completion_time == 12
    assert processes["P3"].completion_time == 16
    assert_timing_invariants(trace)


def test_round_robin_slice_count():
    """Slices per process = ceil(burst / quantum) when all arrive together."""
    processes = make_processes([("A", 0, 10), ("B", 0, 4), ("C", 0, 7), ("D", 0, 1)])
    for quantum in (1, 2, 3, 5):
        trace = schedule(processes, "rr", quantum=quantum)
        for p in trace.processes:
            assert len(trace.slices_for(p.pid)) == ceil(p.burst_time / quantum)
        assert_timing_invariants(trace)


def test_round_robin_default_quantum():
    trace = schedule(make_processes([("A", 0, 9)]), "rr")
    assert [s.duration for s in trace.slices] == [4, 4, 1]
    assert trace.quantum == 4


def test_idle_cpu_jumps_to_next_arrival():
    """Every algorithm idles forward when nothing has arrived."""
    rows = [("late", 3, 2), ("later", 10, 4)]
    for algorithm in SchedulingAlgorithm:
        trace = schedule(make_processes(rows), algorithm, quantum=1)
        assert trace.slices[0].start_time == 3, f"{algorithm.value} did not wait for first arrival"
        assert trace.processes[1].start_time == 10
        assert trace.makespan == 14
        assert_timing_invariants(trace)


def test_engine_does_not_mutate_inputs():
    processes = make_processes(TEXTBOOK)
    schedule(processes, "rr", quantum=2)

    for p in processes:
        assert p.remaining_time == p.burst_time
        assert p.start_time is None
        assert not p.is_finished()


def test_rescheduling_clears_previous_results():
    """Scheduling already-scheduled processes starts from a clean slate."""
    first = schedule(make_processes(TEXTBOOK), "fcfs")
    second = schedule(first.processes, "sjf")
    assert [p.completion_time for p in second.processes] == [5, 8, 16]
    assert_timing_invariants(second)


def test_processes_returned_in_submission_order():
    processes = make_processes([("B", 5, 1), ("A", 0, 1)])
    trace = schedule(processes, "fcfs")
    assert [p.name for p in trace.processes] == ["B", "A"]
    assert trace.execution_order() == ["A", "B"]


def test_invalid_inputs():
    with pytest.raises(InvalidInput):
        schedule([], "fcfs")
    with pytest.raises(InvalidInput):
        schedule(make_processes(TEXTBOOK), "rr", quantum=0)
    with pytest.raises(AlgorithmUnsupported):
        schedule(make_processes(TEXTBOOK), "lottery")


def test_scheduling_metrics():
    """Average waiting/turnaround and CPU utilization from the trace."""
    trace = schedule(make_processes(TEXTBOOK), "fcfs")
    metrics = compute_scheduling_metrics(trace)

    assert metrics.avg_waiting_time == pytest.approx(10 / 3)
    assert metrics.avg_turnaround_time == pytest.approx((5 + 7 + 14) / 3)
    assert metrics.cpu_utilization == pytest.approx(100.0)
    assert metrics.makespan == 16
    assert metrics.context_switches == 2


def test_cpu_utilization_with_idle_time():
    trace = schedule(make_processes([("A", 0, 2), ("B", 6, 2)]), "fcfs")
    metrics = compute_scheduling_metrics(trace)

    assert metrics.busy_time == 4
    assert metrics.makespan == 8
    assert metrics.cpu_utilization == pytest.approx(50.0)


def test_metrics_keep_processes_with_duplicate_names():
    """Per-process rows are keyed by pid, so equal names do not collapse."""
    trace = schedule(make_processes([("worker", 0, 2), ("worker", 1, 3), ("shell", 2, 1)]), "fcfs")
    metrics = compute_scheduling_metrics(trace)

    assert metrics.process_names == {1: "worker", 2: "worker", 3: "shell"}
    assert metrics.process_completion_times == {1: 2, 2: 5, 3: 6}
    assert metrics.process_waiting_times == {1: 0, 2: 1, 3: 3}

    report = format_scheduling_report(metrics, trace)
    assert report.count("worker ") == 2
