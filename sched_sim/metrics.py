from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from .errors import ConfigurationError
from .models import Process, ProcessResult, SchedulerResult, SystemMetrics

_TWO_PLACES = Decimal("0.01")


def round_average(total: int, count: int) -> float:
    """
    ``total / count`` rounded half-up to two decimals (2.345 -> 2.35, unlike
    the banker's rounding of the builtin ``round``).
    """
    if count <= 0:
        raise ConfigurationError("Cannot average metrics over an empty process list")
    value = (Decimal(total) / Decimal(count)).quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    return float(value)


def fill_results(
    result: SchedulerResult,
    processes: Sequence[Process],
    waiting_times: Optional[Dict[str, int]] = None,
) -> SchedulerResult:
    """
    Populate per-process waiting/turnaround and both averages from finished
    processes, in the order given.

    ``waiting_times`` overrides the derived ``turnaround - burst`` value for
    engines that accumulate waiting time themselves (Round Robin).
    """
    if not processes:
        raise ConfigurationError("Cannot build results for an empty process list")

    total_wt = 0
    total_tat = 0
    rows: List[ProcessResult] = []

    for p in processes:
        if p.completion_time is None:
            raise RuntimeError(f"Process '{p.name}' never completed")
        tat = p.completion_time - p.arrival_time
        if waiting_times is not None:
            wt = waiting_times[p.name]
        else:
            wt = tat - p.burst_time

        rows.append(ProcessResult(name=p.name, waiting_time=wt, turnaround_time=tat))
        total_wt += wt
        total_tat += tat

    result.process_results = rows
    result.average_waiting_time = round_average(total_wt, len(processes))
    result.average_turnaround_time = round_average(total_tat, len(processes))
    return result


def compute_system_metrics(result: SchedulerResult, processes: Sequence[Process]) -> SystemMetrics:
    """
    Compute throughput and CPU utilization given finished processes and the
    timeline slices recorded by the engine.
    """
    makespan = max(p.completion_time or 0 for p in processes)
    cpu_busy_time = sum(slice_.end_time - slice_.start_time for slice_ in result.timeline)

    throughput = len(processes) / makespan if makespan > 0 else 0.0
    cpu_utilization = cpu_busy_time / makespan if makespan > 0 else 0.0

    system = SystemMetrics(
        cpu_busy_time=cpu_busy_time,
        makespan=makespan,
        throughput=throughput,
        cpu_utilization=cpu_utilization,
    )
    result.system = system
    return system
