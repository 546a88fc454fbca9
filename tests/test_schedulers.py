import pytest

from sched_sim.algorithms import (
    run_algorithm,
    schedule_priority,
    schedule_rr,
    schedule_sjf,
)
from sched_sim.adaptive import schedule_ag
from sched_sim.errors import ConfigurationError
from sched_sim.metrics import round_average
from sched_sim.models import Process


def _procs():
    return [
        Process("P1", arrival_time=0, burst_time=5, priority=2),
        Process("P2", arrival_time=1, burst_time=3, priority=1),
        Process("P3", arrival_time=2, burst_time=8, priority=3),
    ]


def _waits(res):
    return {r.name: (r.waiting_time, r.turnaround_time) for r in res.process_results}


def test_sjf_preempts_for_shorter_remaining():
    res = schedule_sjf(_procs())
    assert res.execution_order == ["P1", "P2", "P1", "P3"]
    assert _waits(res) == {"P1": (3, 8), "P2": (0, 3), "P3": (6, 14)}
    assert res.average_waiting_time == 3.0
    assert res.average_turnaround_time == 8.33


def test_sjf_context_switch_charged_once_per_switch():
    res = schedule_sjf(_procs(), context_switch=1)
    assert res.execution_order == ["P1", "P2", "P1", "P3"]
    assert _waits(res) == {"P1": (5, 10), "P2": (1, 4), "P3": (9, 17)}
    assert [(s.name, s.start_time, s.end_time) for s in res.timeline] == [
        ("P1", 0, 1),
        ("P2", 2, 5),
        ("P1", 6, 10),
        ("P3", 11, 19),
    ]
    assert res.system.cpu_busy_time == 16
    assert res.system.makespan == 19


def test_sjf_runs_least_remaining_each_tick():
    procs = _procs() + [Process("P4", 3, 1, 2), Process("P5", 4, 6, 1), Process("P6", 9, 2, 1)]
    res = schedule_sjf(procs)

    arrival = {p.name: p.arrival_time for p in procs}
    remaining = {p.name: p.burst_time for p in procs}
    ticks = sorted((t, s.name) for s in res.timeline for t in range(s.start_time, s.end_time))
    assert len(ticks) == sum(remaining.values())

    for t, name in ticks:
        ready = [n for n in remaining if arrival[n] <= t and remaining[n] > 0]
        assert remaining[name] == min(remaining[n] for n in ready)
        remaining[name] -= 1

    assert all(r == 0 for r in remaining.values())


def test_sjf_tie_keeps_input_order():
    a = Process("A", 0, 3, 1)
    b = Process("B", 0, 3, 1)
    assert schedule_sjf([a, b]).execution_order == ["A", "B"]
    assert schedule_sjf([b, a]).execution_order == ["B", "A"]


def test_sjf_idles_until_first_arrival():
    res = schedule_sjf([Process("A", 2, 2, 1)])
    assert res.execution_order == ["A"]
    assert _waits(res) == {"A": (0, 2)}
    assert res.timeline[0].start_time == 2


def test_rr_interleave_regression():
    procs = [Process("A", 0, 5, 1), Process("B", 2, 3, 2)]
    res = schedule_rr(procs, quantum=2)
    assert res.execution_order == ["A", "B", "A", "B", "A"]
    # completion order
    assert [r.name for r in res.process_results] == ["B", "A"]
    assert _waits(res) == {"A": (3, 8), "B": (2, 5)}
    assert res.average_waiting_time == 2.5
    assert res.average_turnaround_time == 6.5
    assert [(s.name, s.start_time, s.end_time) for s in res.timeline] == [
        ("A", 0, 2),
        ("B", 2, 4),
        ("A", 4, 6),
        ("B", 6, 7),
        ("A", 7, 8),
    ]


def test_rr_context_switch_after_every_dispatch():
    procs = [Process("A", 0, 5, 1), Process("B", 2, 3, 2)]
    res = schedule_rr(procs, context_switch=1, quantum=2)
    assert res.execution_order == ["A", "B", "A", "B", "A"]
    assert _waits(res) == {"A": (7, 12), "B": (5, 8)}
    assert res.average_waiting_time == 6.0
    assert res.average_turnaround_time == 10.0


def test_rr_slices_never_exceed_quantum():
    res = schedule_rr(_procs(), context_switch=1, quantum=3)
    assert all(s.end_time - s.start_time <= 3 for s in res.timeline)
    assert res.system.cpu_busy_time == sum(p.burst_time for p in _procs())


def test_rr_waits_for_late_arrival():
    res = schedule_rr([Process("A", 3, 2, 1)], quantum=2)
    assert _waits(res) == {"A": (0, 2)}


def test_rr_requires_positive_quantum():
    with pytest.raises(ConfigurationError):
        schedule_rr(_procs(), quantum=0)
    with pytest.raises(ConfigurationError):
        schedule_rr(_procs())


def test_priority_without_aging():
    res = schedule_priority(_procs())
    assert res.execution_order == ["P1", "P2", "P1", "P3"]
    # input order
    assert [r.name for r in res.process_results] == ["P1", "P2", "P3"]
    assert _waits(res) == {"P1": (3, 8), "P2": (0, 3), "P3": (6, 14)}


def test_priority_context_switch():
    res = schedule_priority(_procs(), context_switch=1)
    assert res.execution_order == ["P1", "P2", "P1", "P3"]
    assert _waits(res) == {"P1": (5, 10), "P2": (1, 4), "P3": (9, 17)}


def test_priority_aging_lets_waiting_process_in():
    procs = [Process("A", 0, 2, 3), Process("B", 0, 5, 1)]

    res = schedule_priority(procs, aging_interval=0)
    assert res.execution_order == ["B", "A"]
    assert _waits(res) == {"A": (5, 7), "B": (0, 5)}

    # A ages 3 -> 2 at t=2 and 2 -> 1 at t=4, then wins the name tie-break
    res = schedule_priority(procs, aging_interval=2)
    assert res.execution_order == ["B", "A", "B"]
    assert _waits(res) == {"A": (4, 6), "B": (2, 7)}
    assert res.average_waiting_time == 3.0
    assert res.average_turnaround_time == 6.5


def test_priority_switch_into_waiting_process_is_charged():
    procs = [Process("A", 0, 1, 1), Process("B", 1, 1, 1)]
    res = schedule_priority(procs, context_switch=2)
    assert res.execution_order == ["A", "B"]
    assert _waits(res) == {"A": (0, 1), "B": (2, 3)}


def test_priority_switch_cost_overlaps_idle_gap():
    procs = [Process("A", 0, 1, 1), Process("B", 3, 1, 1)]
    res = schedule_priority(procs, context_switch=2)
    assert _waits(res) == {"A": (0, 1), "B": (0, 1)}


def test_engines_do_not_mutate_input():
    procs = _procs()
    for name in ("sjf", "rr", "priority", "ag"):
        run_algorithm(name, procs, context_switch=1, quantum=2, aging_interval=1)
    assert [(p.remaining_time, p.priority, p.completion_time) for p in procs] == [
        (5, 2, None),
        (3, 1, None),
        (8, 3, None),
    ]


@pytest.mark.parametrize("name", ["sjf", "rr", "priority", "ag"])
def test_single_process_any_policy(name):
    res = run_algorithm(name, [Process("P", 0, 4, 1)], quantum=2)
    assert res.execution_order == ["P"]
    assert _waits(res) == {"P": (0, 4)}


@pytest.mark.parametrize("name", ["sjf", "rr", "priority", "ag"])
@pytest.mark.parametrize("context_switch", [0, 2])
def test_metric_invariants(name, context_switch):
    procs = _procs() + [Process("P4", 6, 2, 2), Process("P5", 20, 3, 4)]
    res = run_algorithm(name, procs, context_switch=context_switch, quantum=3, aging_interval=2)

    bursts = {p.name: p.burst_time for p in procs}
    assert {r.name for r in res.process_results} == set(bursts)
    for r in res.process_results:
        assert r.turnaround_time >= bursts[r.name]
        assert r.waiting_time == r.turnaround_time - bursts[r.name]
        assert r.waiting_time >= 0

    n = len(procs)
    assert res.average_waiting_time == round_average(sum(r.waiting_time for r in res.process_results), n)
    assert res.average_turnaround_time == round_average(sum(r.turnaround_time for r in res.process_results), n)


def test_run_algorithm_rejects_unknown_name():
    with pytest.raises(ConfigurationError):
        run_algorithm("fcfs", _procs())


def test_run_algorithm_is_case_insensitive():
    assert run_algorithm("SJF", _procs()).algorithm == "SJF"
    assert run_algorithm("Priority", _procs()).algorithm == "Priority"
    assert schedule_ag(_procs(), quantum=4).algorithm == "AG"
