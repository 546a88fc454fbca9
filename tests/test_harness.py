from sched_sim.harness import compare_result, run_test_case
from sched_sim.models import AGProcess, Process, ProcessResult
from sched_sim.workload_io import ExpectedOutput, TestCase


def _case(rr_order):
    return TestCase(
        name="interleave",
        processes=[Process("A", 0, 5, 1), Process("B", 2, 3, 2)],
        rr_quantum=2,
        expected={
            "sjf": ExpectedOutput(
                execution_order=["A", "B"],
                # remaining-time tie at t=2 keeps A running
                process_results=[ProcessResult("A", 0, 5), ProcessResult("B", 3, 6)],
            ),
            "rr": ExpectedOutput(
                execution_order=rr_order,
                process_results=[ProcessResult("A", 3, 8), ProcessResult("B", 2, 5)],
                average_waiting_time=2.5,
                average_turnaround_time=6.5,
            ),
        },
    )


def test_matching_case_passes():
    outcomes = run_test_case(_case(["A", "B", "A", "B", "A"]))
    assert [o.algorithm for o in outcomes] == ["sjf", "rr"]
    assert all(o.passed for o in outcomes)


def test_order_mismatch_reported():
    outcomes = run_test_case(_case(["A", "B"]))
    rr = outcomes[1]
    assert not rr.passed
    assert rr.failures[0].startswith("[Execution Order] does not match")


def test_metric_mismatches_and_missing_process():
    outcome = run_test_case(_case(["A", "B", "A", "B", "A"]))[1]
    expected = ExpectedOutput(
        execution_order=outcome.actual.execution_order,
        process_results=[ProcessResult("A", 4, 8), ProcessResult("C", 0, 1)],
        average_turnaround_time=7.0,
    )
    failures = compare_result(outcome.actual, expected)
    assert [f.splitlines()[0] for f in failures] == [
        "[Waiting Time] does not match for A",
        "[Missing Process] C has no result",
        "[Average Turnaround Time] does not match",
    ]


def test_ag_case():
    case = TestCase(
        name="ag",
        processes=[AGProcess("P1", 0, 6, 1, quantum=4), AGProcess("P2", 2, 1, 5, quantum=4)],
        expected={"ag": ExpectedOutput(execution_order=["P1", "P2", "P1"])},
    )
    (outcome,) = run_test_case(case)
    assert outcome.passed
    assert outcome.actual.quantum_histories["P1"] == [4, 6, 0]


def test_ag_case_compares_every_dispatch():
    processes = [AGProcess("P", 0, 4, 1, quantum=2)]
    case = TestCase(name="ag", processes=processes, expected={"ag": ExpectedOutput(execution_order=["P", "P"])})
    (outcome,) = run_test_case(case)
    assert outcome.passed
    assert outcome.actual.execution_order == ["P"]

    case.expected["ag"] = ExpectedOutput(execution_order=["P"])
    (outcome,) = run_test_case(case)
    assert outcome.failures[0].startswith("[Execution Order] does not match")
