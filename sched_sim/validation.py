from __future__ import annotations

from typing import Optional, Sequence

from .errors import ConfigurationError
from .models import Process


def validate_processes(processes: Sequence[Process]) -> None:
    """
    Reject workloads no engine can finish: every process needs a unique name,
    a non-negative arrival and at least one tick of work.
    """
    if not processes:
        raise ConfigurationError("Workload must contain at least one process")

    seen: set[str] = set()
    for p in processes:
        if not p.name:
            raise ConfigurationError(f"Process name must be non-empty: {p!r}")
        if p.name in seen:
            raise ConfigurationError(f"Duplicate process name '{p.name}'")
        seen.add(p.name)

        if p.arrival_time < 0:
            raise ConfigurationError(f"Process '{p.name}' has negative arrival time {p.arrival_time}")
        if p.burst_time <= 0:
            raise ConfigurationError(f"Process '{p.name}' needs a positive burst time, got {p.burst_time}")


def validate_context_switch(context_switch: int) -> None:
    if context_switch < 0:
        raise ConfigurationError(f"Context switch cost must be non-negative, got {context_switch}")


def validate_quantum(quantum: Optional[int], owner: str = "Round Robin") -> int:
    if quantum is None or quantum <= 0:
        raise ConfigurationError(f"{owner} requires a positive quantum, got {quantum}")
    return quantum
