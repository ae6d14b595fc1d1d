from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Union


@dataclass
class ProcessRecord:
    """
    A synthetic process. ``start_time`` and ``finish_time`` stay ``None``
    until the scheduler dispatches and completes the process.
    """

    pid: int
    arrival_time: int
    service_time: int
    start_time: Optional[int] = None
    finish_time: Optional[int] = None
    remaining_time: Optional[int] = None

    def __post_init__(self) -> None:
        if self.remaining_time is None:
            self.remaining_time = self.service_time

    @property
    def completed(self) -> bool:
        return self.finish_time is not None

    @property
    def response_time(self) -> Optional[int]:
        if self.start_time is None:
            return None
        return self.start_time - self.arrival_time

    @property
    def turnaround_time(self) -> Optional[int]:
        if self.finish_time is None:
            return None
        return self.finish_time - self.arrival_time

    @property
    def wait_time(self) -> Optional[int]:
        if self.finish_time is None:
            return None
        return self.finish_time - self.arrival_time - self.service_time


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    pid: int
    start_time: int
    end_time: int

    @property
    def length(self) -> int:
        return self.end_time - self.start_time


@dataclass
class ScheduleResult:
    algorithm: str
    quantum: Optional[int]
    processes: List[ProcessRecord] = field(default_factory=list)
    timeline: List[ScheduledSlice] = field(default_factory=list)


@dataclass
class ProcessMetrics:
    pid: int
    arrival_time: int
    service_time: int
    start_time: int
    finish_time: int
    response_time: int
    wait_time: int
    turnaround_time: int


@dataclass
class MetricsSummary:
    per_process: List[ProcessMetrics]
    avg_response: float
    avg_wait: float
    avg_turnaround: float
    throughput: float
    makespan: int
    cpu_busy_time: int
    cpu_utilization: float


# Algorithm selectors. Each variant carries its own parameters.


@dataclass(frozen=True)
class FCFS:
    name = "FCFS"


@dataclass(frozen=True)
class SPN:
    # "jump" moves an idle clock straight to the next arrival,
    # "poll" advances it one unit at a time.
    admission: str = "jump"

    name = "SPN (non-preemptive)"


@dataclass(frozen=True)
class RoundRobin:
    quantum: int

    name = "Round Robin"


Algorithm = Union[FCFS, SPN, RoundRobin]


class Strategy(Enum):
    FIRST_FIT = "first-fit"
    BEST_FIT = "best-fit"


@dataclass
class MemoryBlock:
    """
    A contiguous span ``[offset, offset + size)`` of the memory pool.
    """

    block_id: int
    offset: int
    size: int
    owner_id: Optional[int] = None

    @property
    def free(self) -> bool:
        return self.owner_id is None

    @property
    def end(self) -> int:
        return self.offset + self.size


@dataclass
class AllocationOutcome:
    owner_id: int
    size: int
    success: bool
    block: Optional[MemoryBlock] = None
    error: Optional[str] = None
    snapshot: Tuple[MemoryBlock, ...] = ()
