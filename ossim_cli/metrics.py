from __future__ import annotations

from typing import List

from .errors import EmptyProcessSet, InvalidProcess
from .models import MetricsSummary, ProcessMetrics, ProcessRecord


def summarize(completed: List[ProcessRecord]) -> MetricsSummary:
    """
    Derive per-process and aggregate metrics from a completed schedule.

    Throughput is the completed-process count divided by the makespan (the
    finish time of the last process).
    """
    if not completed:
        raise EmptyProcessSet("Metrics need at least one completed process")

    rows: List[ProcessMetrics] = []
    for p in completed:
        if p.start_time is None or p.finish_time is None:
            raise InvalidProcess(f"Process {p.pid} has not completed")
        rows.append(
            ProcessMetrics(
                pid=p.pid,
                arrival_time=p.arrival_time,
                service_time=p.service_time,
                start_time=p.start_time,
                finish_time=p.finish_time,
                response_time=p.response_time,
                wait_time=p.wait_time,
                turnaround_time=p.turnaround_time,
            )
        )

    n = len(rows)
    makespan = max(r.finish_time for r in rows)
    if makespan <= 0:
        raise InvalidProcess(f"Makespan must be positive (got {makespan})")
    cpu_busy_time = sum(r.service_time for r in rows)

    return MetricsSummary(
        per_process=rows,
        avg_response=sum(r.response_time for r in rows) / n,
        avg_wait=sum(r.wait_time for r in rows) / n,
        avg_turnaround=sum(r.turnaround_time for r in rows) / n,
        throughput=n / makespan,
        makespan=makespan,
        cpu_busy_time=cpu_busy_time,
        cpu_utilization=cpu_busy_time / makespan,
    )


def summarize_process_metrics(summary: MetricsSummary) -> dict:
    """
    Return averages of the key per-process metrics for quick comparison.
    """
    return {
        "avg_wait": summary.avg_wait,
        "avg_turnaround": summary.avg_turnaround,
        "avg_response": summary.avg_response,
    }
