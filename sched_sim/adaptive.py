"""
AG scheduling: an adaptive hybrid of FCFS, priority and SJF.

Every process owns a quantum that is re-sized after each dispatch. A dispatch
runs in three phases:

* the first ``ceil(Q/4)`` ticks run without any preemption check (FCFS);
* up to ``ceil(Q/2)`` ticks in, before every ``ceil(Q/4)`` sub-slice, a ready
  process with a strictly better priority preempts it;
* for the rest of the quantum, before every tick, a ready process with
  strictly less remaining time preempts it.

How the dispatch ended decides both the process's next quantum and how the
next process is picked.
"""

from __future__ import annotations

import logging
import math
from typing import List, Optional, Sequence

from .metrics import compute_system_metrics, fill_results
from .models import AGProcess, Process, SchedulerResult, StopReason
from .validation import validate_processes, validate_quantum

logger = logging.getLogger(__name__)

# Quantum growth when a process uses its whole slice without being preempted.
EXHAUSTED_QUANTUM_BONUS = 2


def _as_ag_process(p: Process, default_quantum: Optional[int]) -> AGProcess:
    if isinstance(p, AGProcess):
        validate_quantum(p.quantum, owner=f"AG process '{p.name}'")
        return p.copy()
    quantum = validate_quantum(default_quantum, owner=f"AG process '{p.name}'")
    return AGProcess(p.name, p.arrival_time, p.burst_time, p.priority, quantum)


def pick_next(ready: List[AGProcess], last_stop: StopReason) -> AGProcess:
    """
    Remove and return the next process to dispatch.

    After a normal dispatch the ready queue is served FIFO. After a priority
    preemption the best priority is taken, after an SJF preemption the least
    remaining time; ties go to the earliest queued process.
    """
    if last_stop is StopReason.NONE:
        return ready.pop(0)

    if last_stop is StopReason.PRIORITY_PREEMPT:
        chosen = min(ready, key=lambda p: p.priority)
    else:
        chosen = min(ready, key=lambda p: p.remaining_time)

    ready.remove(chosen)
    return chosen


def schedule_ag(
    processes: Sequence[Process],
    context_switch: int = 0,
    quantum: Optional[int] = None,
    aging_interval: int = 0,
) -> SchedulerResult:
    """
    Run the AG policy. ``AGProcess`` inputs bring their own quantum, plain
    ``Process`` inputs start with ``quantum``. Context switches are free and
    there is no aging, so ``context_switch`` and ``aging_interval`` are ignored.

    Per-process quantum histories are returned in ``result.quantum_histories``.
    """
    validate_processes(processes)

    ps: List[AGProcess] = [_as_ag_process(p, quantum) for p in processes]
    result = SchedulerResult(algorithm="AG")

    pending: List[AGProcess] = list(ps)
    ready: List[AGProcess] = []
    time = 0

    def admit_arrivals(current_time: int) -> None:
        arrived = [p for p in pending if p.arrival_time <= current_time]
        for p in arrived:
            pending.remove(p)
            ready.append(p)

    def advance(current: AGProcess, ticks: int) -> None:
        nonlocal time
        start = time
        current.remaining_time -= ticks
        time += ticks
        result.record_run(current.name, start, time)
        admit_arrivals(time)

    def complete(current: AGProcess) -> StopReason:
        current.assign_quantum(0)
        current.completion_time = time
        logger.debug(f"AG: {current.name} completed at t={time}")
        return StopReason.NONE

    def dispatch(current: AGProcess) -> StopReason:
        q = current.quantum
        q25 = math.ceil(q / 4)
        q50 = math.ceil(q / 2)
        used = 0

        # FCFS: not preemptible
        run = min(q25, current.remaining_time)
        advance(current, run)
        used += run
        if current.finished:
            return complete(current)

        # Priority-checked sub-slices up to the half-way mark
        while used < q50 and not current.finished:
            best = min(ready, key=lambda p: p.priority) if ready else None
            if best is not None and best.priority < current.priority:
                current.assign_quantum(q + math.ceil((q - used) / 2))
                ready.append(current)
                logger.debug(
                    f"AG: t={time} {best.name} (prio {best.priority}) preempts {current.name}; "
                    f"quantum {q} -> {current.quantum}"
                )
                return StopReason.PRIORITY_PREEMPT

            run = min(q25, current.remaining_time)
            advance(current, run)
            used += run

        if current.finished:
            return complete(current)

        # SJF-checked, tick by tick, for the rest of the quantum
        while used < q and not current.finished:
            best = min(ready, key=lambda p: p.remaining_time) if ready else None
            if best is not None and best.remaining_time < current.remaining_time:
                current.assign_quantum(q + (q - used))
                ready.append(current)
                logger.debug(
                    f"AG: t={time} {best.name} (remaining {best.remaining_time}) preempts {current.name}; "
                    f"quantum {q} -> {current.quantum}"
                )
                return StopReason.SJF_PREEMPT

            advance(current, 1)
            used += 1

        if current.finished:
            return complete(current)

        current.assign_quantum(q + EXHAUSTED_QUANTUM_BONUS)
        ready.append(current)
        logger.debug(f"AG: {current.name} used its full quantum; quantum {q} -> {current.quantum}")
        return StopReason.NONE

    stop_reason = StopReason.NONE

    while ready or pending:
        admit_arrivals(time)

        if not ready:
            time += 1
            continue

        current = pick_next(ready, stop_reason)
        result.dispatches.append(current.name)
        result.record_dispatch(current.name)
        stop_reason = dispatch(current)

    result.quantum_histories = {p.name: list(p.quantum_history) for p in ps}
    fill_results(result, ps)
    compute_system_metrics(result, ps)
    logger.info(f"AG finished at t={time}: order={result.execution_order}")
    return result
