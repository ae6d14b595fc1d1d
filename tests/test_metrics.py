import pytest

from ossim_cli.algorithms import schedule_fcfs, schedule_rr
from ossim_cli.errors import EmptyProcessSet, InvalidProcess
from ossim_cli.metrics import summarize, summarize_process_metrics
from ossim_cli.models import ProcessRecord


def _procs():
    return [
        ProcessRecord(1, arrival_time=0, service_time=5),
        ProcessRecord(2, arrival_time=1, service_time=3),
        ProcessRecord(3, arrival_time=2, service_time=1),
    ]


def test_derived_times_are_unset_until_scheduled():
    p = ProcessRecord(1, arrival_time=2, service_time=4)
    assert p.remaining_time == 4
    assert p.response_time is None
    assert p.wait_time is None
    assert p.turnaround_time is None
    assert not p.completed


def test_fcfs_summary():
    summary = summarize(schedule_fcfs(_procs()).processes)

    rows = {r.pid: r for r in summary.per_process}
    assert (rows[2].response_time, rows[2].wait_time, rows[2].turnaround_time) == (4, 4, 7)
    assert (rows[3].response_time, rows[3].wait_time, rows[3].turnaround_time) == (6, 6, 7)

    assert summary.avg_response == pytest.approx(10 / 3)
    assert summary.avg_wait == pytest.approx(10 / 3)
    assert summary.avg_turnaround == pytest.approx(19 / 3)
    assert summary.makespan == 9
    assert summary.throughput == pytest.approx(3 / 9)
    assert summary.cpu_busy_time == 9
    assert summary.cpu_utilization == pytest.approx(1.0)


def test_rr_summary_response_differs_from_wait():
    summary = summarize(schedule_rr(_procs(), quantum=2).processes)
    rows = {r.pid: r for r in summary.per_process}
    # Process 1 starts immediately but is preempted twice.
    assert rows[1].response_time == 0
    assert rows[1].wait_time == 4
    assert summary.makespan == 9


def test_utilization_counts_idle_gaps():
    procs = [ProcessRecord(1, 0, 2), ProcessRecord(2, 6, 2)]
    summary = summarize(schedule_fcfs(procs).processes)
    assert summary.makespan == 8
    assert summary.cpu_utilization == pytest.approx(0.5)
    assert summary.throughput == pytest.approx(0.25)


def test_empty_set_raises():
    with pytest.raises(EmptyProcessSet):
        summarize([])


def test_incomplete_process_raises():
    with pytest.raises(InvalidProcess):
        summarize([ProcessRecord(1, 0, 3, start_time=0)])


def test_summarize_process_metrics_averages():
    summary = summarize(schedule_fcfs(_procs()).processes)
    averages = summarize_process_metrics(summary)
    assert set(averages) == {"avg_wait", "avg_turnaround", "avg_response"}
    assert averages["avg_turnaround"] == pytest.approx(19 / 3)
