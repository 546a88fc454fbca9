from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from .algorithms import run_algorithm
from .models import SchedulerResult
from .workload_io import ExpectedOutput, TestCase


@dataclass
class CaseOutcome:
    algorithm: str
    actual: SchedulerResult
    failures: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.failures


def compare_result(actual: SchedulerResult, expected: ExpectedOutput) -> List[str]:
    """
    Return a human-readable line per mismatch between an engine result and a
    fixture's expectation. Per-process rows are matched by name.
    """
    failures: List[str] = []

    # AG fixtures list every dispatch, including back-to-back repeats
    order = actual.dispatches or actual.execution_order
    if order != expected.execution_order:
        failures.append(
            "[Execution Order] does not match\n"
            f"Expected = {expected.execution_order}\n"
            f"Actual = {order}"
        )

    if expected.process_results is not None:
        by_name = {r.name: r for r in actual.process_results}
        for exp in expected.process_results:
            act = by_name.get(exp.name)
            if act is None:
                failures.append(f"[Missing Process] {exp.name} has no result")
                continue
            if act.waiting_time != exp.waiting_time:
                failures.append(
                    f"[Waiting Time] does not match for {exp.name}\n"
                    f"Expected = {exp.waiting_time}\n"
                    f"Actual = {act.waiting_time}"
                )
            if act.turnaround_time != exp.turnaround_time:
                failures.append(
                    f"[Turnaround Time] does not match for {exp.name}\n"
                    f"Expected = {exp.turnaround_time}\n"
                    f"Actual = {act.turnaround_time}"
                )

    if expected.average_waiting_time is not None and actual.average_waiting_time != expected.average_waiting_time:
        failures.append(
            "[Average Waiting Time] does not match\n"
            f"Expected = {expected.average_waiting_time}\n"
            f"Actual = {actual.average_waiting_time}"
        )
    if (
        expected.average_turnaround_time is not None
        and actual.average_turnaround_time != expected.average_turnaround_time
    ):
        failures.append(
            "[Average Turnaround Time] does not match\n"
            f"Expected = {expected.average_turnaround_time}\n"
            f"Actual = {actual.average_turnaround_time}"
        )

    return failures


def run_test_case(case: TestCase) -> List[CaseOutcome]:
    """
    Run every engine the fixture has expectations for, in fixture order.
    """
    outcomes: List[CaseOutcome] = []
    for alg, expected in case.expected.items():
        actual = run_algorithm(
            alg,
            case.processes,
            context_switch=case.context_switch,
            quantum=case.rr_quantum,
            aging_interval=case.aging_interval,
        )
        outcomes.append(CaseOutcome(algorithm=alg, actual=actual, failures=compare_result(actual, expected)))
    return outcomes
