from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


@dataclass
class Process:
    """
    One schedulable unit. Engines never run the caller's instance; they work
    on ``copy()`` so the input list stays untouched.
    """

    name: str
    arrival_time: int
    burst_time: int
    priority: int
    remaining_time: int = field(init=False)
    completion_time: Optional[int] = field(default=None, init=False)

    def __post_init__(self) -> None:
        self.remaining_time = self.burst_time

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Process):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    @property
    def finished(self) -> bool:
        return self.remaining_time == 0

    def copy(self) -> Process:
        return Process(self.name, self.arrival_time, self.burst_time, self.priority)


@dataclass(eq=False)
class AGProcess(Process):
    """
    Process variant for the AG policy: carries its own quantum plus the log of
    every quantum it has been assigned (initial value first).
    """

    quantum: int
    quantum_history: List[int] = field(default_factory=list, init=False)

    def __post_init__(self) -> None:
        super().__post_init__()
        self.quantum_history = [self.quantum]

    def assign_quantum(self, quantum: int) -> None:
        self.quantum = quantum
        self.quantum_history.append(quantum)

    def copy(self) -> AGProcess:
        return AGProcess(self.name, self.arrival_time, self.burst_time, self.priority, self.quantum)


class StopReason(Enum):
    """Why the previous AG dispatch ended; drives the next selection."""

    NONE = "NONE"
    PRIORITY_PREEMPT = "PRIORITY_PREEMPT"
    SJF_PREEMPT = "SJF_PREEMPT"


@dataclass
class ScheduledSlice:
    """
    One contiguous slice of execution for a process in the Gantt chart.
    """

    name: str
    start_time: int
    end_time: int


@dataclass
class ProcessResult:
    name: str
    waiting_time: int
    turnaround_time: int


@dataclass
class SystemMetrics:
    cpu_busy_time: int
    makespan: int
    throughput: float
    cpu_utilization: float


@dataclass
class SchedulerResult:
    algorithm: str
    execution_order: List[str] = field(default_factory=list)
    process_results: List[ProcessResult] = field(default_factory=list)
    average_waiting_time: float = 0.0
    average_turnaround_time: float = 0.0
    timeline: List[ScheduledSlice] = field(default_factory=list)
    quantum_histories: Dict[str, List[int]] = field(default_factory=dict)
    # Every AG dispatch, repeats included
    dispatches: List[str] = field(default_factory=list)
    system: Optional[SystemMetrics] = None

    def record_dispatch(self, name: str) -> None:
        # Re-dispatching the process that ran last is not a new entry.
        if not self.execution_order or self.execution_order[-1] != name:
            self.execution_order.append(name)

    def record_run(self, name: str, start_time: int, end_time: int) -> None:
        if end_time <= start_time:
            return
        last = self.timeline[-1] if self.timeline else None
        if last is not None and last.name == name and last.end_time == start_time:
            last.end_time = end_time
        else:
            self.timeline.append(ScheduledSlice(name=name, start_time=start_time, end_time=end_time))

    def to_dict(self) -> dict:
        """
        Wire shape shared with fixture files (camelCase keys).
        """
        data = {
            "executionOrder": list(self.execution_order),
            "processResults": [
                {
                    "name": r.name,
                    "waitingTime": r.waiting_time,
                    "turnaroundTime": r.turnaround_time,
                }
                for r in self.process_results
            ],
            "averageWaitingTime": self.average_waiting_time,
            "averageTurnaroundTime": self.average_turnaround_time,
        }
        if self.quantum_histories:
            data["quantumHistories"] = {name: list(h) for name, h in self.quantum_histories.items()}
        if self.dispatches:
            data["dispatches"] = list(self.dispatches)
        return data
