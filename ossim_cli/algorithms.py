from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field, replace
from typing import Deque, List, Optional, Tuple

from .errors import InvalidProcess, InvalidQuantum, UnknownAlgorithm
from .models import FCFS, SPN, Algorithm, ProcessRecord, RoundRobin, ScheduleResult, ScheduledSlice

logger = logging.getLogger(__name__)

ADMISSION_POLICIES = ("jump", "poll")

# (input index, record)
Entry = Tuple[int, ProcessRecord]


@dataclass
class SimulationState:
    """
    Everything a single scheduling run owns: the simulated clock, the
    processes that have not arrived yet (input order) and the bookkeeping
    for completed work.
    """

    clock: int = 0
    pending: List[Entry] = field(default_factory=list)
    completed: List[ProcessRecord] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)


def _prepare(processes: List[ProcessRecord]) -> List[Entry]:
    """
    Validate the input and return fresh copies, so callers' records are
    never touched and a workload can be scheduled repeatedly.
    """
    seen = set()
    entries: List[Entry] = []
    for index, p in enumerate(processes):
        if p.pid in seen:
            raise InvalidProcess(f"Duplicate process id {p.pid!r}")
        if p.arrival_time < 0:
            raise InvalidProcess(f"Process {p.pid}: arrival time must be >= 0 (got {p.arrival_time})")
        if p.service_time <= 0:
            raise InvalidProcess(f"Process {p.pid}: service time must be > 0 (got {p.service_time})")
        seen.add(p.pid)
        fresh = replace(p, start_time=None, finish_time=None, remaining_time=p.service_time)
        entries.append((index, fresh))
    return entries


def admit_arrivals(state: SimulationState) -> List[Entry]:
    """
    Partition ``state.pending`` at the current clock: remove and return every
    entry that has arrived, keeping input order on both sides.
    """
    arrived = [e for e in state.pending if e[1].arrival_time <= state.clock]
    if arrived:
        state.pending = [e for e in state.pending if e[1].arrival_time > state.clock]
    return arrived


def advance_idle(state: SimulationState, admission: str = "jump") -> None:
    """
    Move the clock forward while the CPU has nothing to run.
    """
    if admission == "poll" or not state.pending:
        state.clock += 1
        return
    state.clock = max(state.clock + 1, min(p.arrival_time for _, p in state.pending))


def run_slice(state: SimulationState, proc: ProcessRecord, run_time: int) -> None:
    if proc.start_time is None:
        proc.start_time = state.clock
    logger.debug("t=%d dispatch pid=%s for %d", state.clock, proc.pid, run_time)
    state.timeline.append(ScheduledSlice(pid=proc.pid, start_time=state.clock, end_time=state.clock + run_time))
    state.clock += run_time
    proc.remaining_time -= run_time
    if proc.remaining_time == 0:
        proc.finish_time = state.clock
        state.completed.append(proc)
        logger.debug("t=%d pid=%s finished", state.clock, proc.pid)


def schedule_fcfs(processes: List[ProcessRecord], quantum: Optional[int] = None) -> ScheduleResult:
    """
    First-Come First-Serve (non-preemptive) scheduling.
    """
    entries = _prepare(processes)
    # sorted() is stable, so equal arrivals keep input order.
    state = SimulationState(pending=sorted(entries, key=lambda e: e[1].arrival_time))

    for _, p in state.pending:
        if state.clock < p.arrival_time:
            state.clock = p.arrival_time
        run_slice(state, p, p.service_time)

    return ScheduleResult(algorithm=FCFS.name, quantum=None, processes=state.completed, timeline=state.timeline)


def schedule_spn(
    processes: List[ProcessRecord], quantum: Optional[int] = None, admission: str = "jump"
) -> ScheduleResult:
    """
    Shortest Process Next (non-preemptive).

    At each decision point, among processes that have arrived and are not yet
    completed, choose the one with the smallest service time. Ties go to the
    earlier arrival, then to input order.
    """
    if admission not in ADMISSION_POLICIES:
        raise UnknownAlgorithm(f"Unknown SPN admission policy '{admission}'")

    state = SimulationState(pending=_prepare(processes))
    ready: List[Entry] = []

    while state.pending or ready:
        ready.extend(admit_arrivals(state))

        if not ready:
            advance_idle(state, admission)
            continue

        chosen = min(ready, key=lambda e: (e[1].service_time, e[1].arrival_time, e[0]))
        ready.remove(chosen)
        proc = chosen[1]
        run_slice(state, proc, proc.service_time)

    return ScheduleResult(algorithm=SPN.name, quantum=None, processes=state.completed, timeline=state.timeline)


def schedule_rr(processes: List[ProcessRecord], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Arrivals join the back of the queue before the process whose slice just
    ended is requeued.
    """
    if quantum is None or quantum <= 0:
        raise InvalidQuantum(f"Round Robin requires a positive quantum (got {quantum})")

    state = SimulationState(pending=_prepare(processes))
    ready: Deque[ProcessRecord] = deque()

    while state.pending or ready:
        ready.extend(p for _, p in admit_arrivals(state))

        if not ready:
            advance_idle(state)
            continue

        proc = ready.popleft()
        run_slice(state, proc, min(quantum, proc.remaining_time))

        if proc.remaining_time > 0:
            ready.extend(p for _, p in admit_arrivals(state))
            ready.append(proc)

    return ScheduleResult(
        algorithm=RoundRobin.name, quantum=quantum, processes=state.completed, timeline=state.timeline
    )


def schedule(processes: List[ProcessRecord], algorithm: Algorithm) -> ScheduleResult:
    """
    Run ``algorithm`` over ``processes`` and return the completed records in
    completion order together with the execution timeline.
    """
    if isinstance(algorithm, FCFS):
        result = schedule_fcfs(processes)
    elif isinstance(algorithm, SPN):
        result = schedule_spn(processes, admission=algorithm.admission)
    elif isinstance(algorithm, RoundRobin):
        result = schedule_rr(processes, quantum=algorithm.quantum)
    else:
        raise UnknownAlgorithm(f"Unknown algorithm selector {algorithm!r}")

    logger.info("%s scheduled %d processes", result.algorithm, len(result.processes))
    return result


ALGORITHMS = {
    "fcfs": FCFS,
    "spn": SPN,
    "rr": RoundRobin,
}

ALIASES = {
    "sjf": "spn",
    "round-robin": "rr",
}


def parse_algorithm(name: str, quantum: Optional[int] = None) -> Algorithm:
    """
    Map a command-line algorithm name onto its selector. Quantum is only
    used by round robin.
    """
    key = name.lower()
    key = ALIASES.get(key, key)
    if key not in ALGORITHMS:
        raise UnknownAlgorithm(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    if key == "rr":
        if quantum is None or quantum <= 0:
            raise InvalidQuantum(f"Round Robin requires a positive quantum (got {quantum})")
        return RoundRobin(quantum=quantum)
    return ALGORITHMS[key]()


def run_algorithm(name: str, processes: List[ProcessRecord], quantum: Optional[int] = None) -> ScheduleResult:
    """
    Dispatch to the requested algorithm by name.
    """
    return schedule(processes, parse_algorithm(name, quantum))
