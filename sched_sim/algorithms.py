from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .adaptive import schedule_ag
from .errors import ConfigurationError
from .metrics import compute_system_metrics, fill_results
from .models import Process, SchedulerResult
from .validation import validate_context_switch, validate_processes, validate_quantum

logger = logging.getLogger(__name__)


def schedule_sjf(
    processes: Sequence[Process],
    context_switch: int = 0,
    quantum: Optional[int] = None,
    aging_interval: int = 0,
) -> SchedulerResult:
    """
    Shortest Job First (preemptive, a.k.a. shortest remaining time).

    The clock advances one tick at a time. Each tick the arrived, unfinished
    process with the least remaining time runs; ties keep the first one in
    input order. Switching to a different process first costs
    ``context_switch`` ticks. ``quantum`` and ``aging_interval`` are ignored.
    """
    validate_processes(processes)
    validate_context_switch(context_switch)

    # Work on copies so we don't surprise callers.
    ps: List[Process] = [p.copy() for p in processes]
    result = SchedulerResult(algorithm="SJF")

    time = 0
    completed = 0
    last: Optional[Process] = None

    while completed < len(ps):
        current: Optional[Process] = None
        for p in ps:
            if p.remaining_time > 0 and p.arrival_time <= time:
                if current is None or p.remaining_time < current.remaining_time:
                    current = p

        if current is None:
            time += 1
            continue

        if last is not None and last is not current:
            logger.debug(f"SJF: t={time} switch {last.name} -> {current.name} (+{context_switch})")
            time += context_switch

        result.record_dispatch(current.name)
        result.record_run(current.name, time, time + 1)

        current.remaining_time -= 1
        time += 1

        if current.remaining_time == 0:
            completed += 1
            current.completion_time = time
            logger.debug(f"SJF: {current.name} completed at t={time}")

        last = current

    fill_results(result, ps)
    compute_system_metrics(result, ps)
    logger.info(f"SJF finished at t={time}: order={result.execution_order}")
    return result


def schedule_rr(
    processes: Sequence[Process],
    context_switch: int = 0,
    quantum: Optional[int] = None,
    aging_interval: int = 0,
) -> SchedulerResult:
    """
    Round Robin scheduling with a fixed time quantum.

    Waiting time is accumulated per dispatch as the gap since the process last
    left the CPU (its arrival, for the first dispatch). A context switch is
    charged after every dispatch. Results are listed in completion order.
    """
    validate_processes(processes)
    validate_context_switch(context_switch)
    quantum = validate_quantum(quantum)

    ps: List[Process] = [p.copy() for p in processes]
    result = SchedulerResult(algorithm="RR")

    waiting: Dict[str, int] = {p.name: 0 for p in ps}
    last_finish: Dict[str, int] = {p.name: p.arrival_time for p in ps}
    finished: List[Process] = []

    # Ready queue, FIFO
    ready: List[Process] = [p for p in ps if p.arrival_time == 0]
    time = 0

    def enqueue_arrivals(after: int, until: int) -> None:
        # Arrivals in (after, until], in input order
        for p in ps:
            if p.remaining_time > 0 and after < p.arrival_time <= until:
                ready.append(p)

    while len(finished) < len(ps):
        if not ready:
            time += 1
            enqueue_arrivals(time - 1, time)
            continue

        current = ready.pop(0)

        wait = time - last_finish[current.name]
        if wait > 0:
            waiting[current.name] += wait

        result.record_dispatch(current.name)

        run = min(quantum, current.remaining_time)
        start = time
        current.remaining_time -= run
        time += run
        result.record_run(current.name, start, time)

        enqueue_arrivals(start, time)

        if current.remaining_time == 0:
            current.completion_time = time
            finished.append(current)
            logger.debug(f"RR: {current.name} completed at t={time}")
        else:
            # Back to the tail, behind anything that arrived during the slice
            ready.append(current)

        last_finish[current.name] = time

        for _ in range(context_switch):
            time += 1
            enqueue_arrivals(time - 1, time)

    fill_results(result, finished, waiting_times=waiting)
    compute_system_metrics(result, ps)
    logger.info(f"RR finished at t={time}: order={result.execution_order}")
    return result


def schedule_priority(
    processes: Sequence[Process],
    context_switch: int = 0,
    quantum: Optional[int] = None,
    aging_interval: int = 0,
) -> SchedulerResult:
    """
    Preemptive priority scheduling with aging.

    Lower numeric priority wins; ties go to earlier arrival, then name. The
    running process is re-selected every tick. With ``aging_interval > 0``
    each waiting process gains one priority level (floored at 1) every
    ``aging_interval`` ticks since it was last put back in the ready set.

    A context switch is charged when the selected process differs from the
    previously selected one, unless the CPU was idle before. The switch ticks
    age and admit like normal ticks and selection is redone afterwards.
    """
    validate_processes(processes)
    validate_context_switch(context_switch)

    ps: List[Process] = [p.copy() for p in processes]
    result = SchedulerResult(algorithm="Priority")

    pending = sorted(ps, key=lambda p: p.arrival_time)
    requeued_at: Dict[str, int] = {p.name: p.arrival_time for p in ps}
    ready: List[Process] = []
    next_arrival = 0

    def admit_arrivals(current_time: int) -> None:
        nonlocal next_arrival
        while next_arrival < len(pending) and pending[next_arrival].arrival_time == current_time:
            ready.append(pending[next_arrival])
            next_arrival += 1

    def apply_aging(current_time: int) -> None:
        if aging_interval <= 0:
            return
        for p in ready:
            if (current_time - requeued_at[p.name]) % aging_interval == 0:
                p.priority = max(1, p.priority - 1)

    time = pending[0].arrival_time
    admit_arrivals(time)

    # "" before the first selection, None after an idle tick
    previous: Optional[str] = ""

    while ready or next_arrival < len(pending):
        current: Optional[Process] = None
        if ready:
            current = min(ready, key=lambda p: (p.priority, p.arrival_time, p.name))
            ready.remove(current)
            result.record_dispatch(current.name)

        name = current.name if current is not None else None

        if previous and previous != name:
            if current is not None:
                ready.append(current)
            logger.debug(f"Priority: t={time} switch {previous} -> {name} (+{context_switch})")
            for _ in range(context_switch):
                time += 1
                apply_aging(time)
                admit_arrivals(time)
            previous = name
            continue

        previous = name

        time += 1
        if current is not None:
            current.remaining_time -= 1
            result.record_run(current.name, time - 1, time)

        apply_aging(time)
        admit_arrivals(time)

        if current is None:
            continue

        if current.remaining_time > 0:
            requeued_at[current.name] = time
            ready.append(current)
        else:
            current.completion_time = time
            logger.debug(f"Priority: {current.name} completed at t={time}")

    fill_results(result, ps)
    compute_system_metrics(result, ps)
    logger.info(f"Priority finished at t={time}: order={result.execution_order}")
    return result


ALGORITHMS = {
    "sjf": schedule_sjf,
    "rr": schedule_rr,
    "priority": schedule_priority,
    "ag": schedule_ag,
}


def run_algorithm(
    name: str,
    processes: Sequence[Process],
    context_switch: int = 0,
    quantum: Optional[int] = None,
    aging_interval: int = 0,
) -> SchedulerResult:
    """
    Dispatch to the requested engine. Every engine accepts the same policy
    parameters and ignores the ones it has no use for.
    """
    name = name.lower()
    if name not in ALGORITHMS:
        raise ConfigurationError(f"Unknown algorithm '{name}' (choose from {', '.join(ALGORITHMS)})")

    func = ALGORITHMS[name]
    return func(
        processes,
        context_switch=context_switch,
        quantum=quantum,
        aging_interval=aging_interval,
    )
