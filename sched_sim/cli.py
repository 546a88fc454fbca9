from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .algorithms import ALGORITHMS, run_algorithm
from .errors import ConfigurationError
from .gantt import build_rich_gantt
from .harness import run_test_case
from .models import Process, SchedulerResult
from .workload_io import load_test_case, load_workload

logger = logging.getLogger(__name__)

EXIT_FAILED = 1
EXIT_BAD_INPUT = 2


def _add_policy_args(parser: argparse.ArgumentParser, default_quantum: Optional[int]) -> None:
    parser.add_argument(
        "--workload",
        "-w",
        required=True,
        help="Path to JSON or CSV workload file.",
    )
    parser.add_argument(
        "--context-switch",
        "-c",
        type=int,
        default=0,
        help="Ticks charged when the CPU switches process (default: 0).",
    )
    parser.add_argument(
        "--quantum",
        "-q",
        type=int,
        default=default_quantum,
        help="Time quantum for RR, and the starting quantum for AG processes without one.",
    )
    parser.add_argument(
        "--aging",
        type=int,
        default=0,
        help="Priority aging interval in ticks; 0 disables aging (default: 0).",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sched-sim",
        description="CPU scheduling simulator (preemptive SJF, RR, Priority with aging, AG).",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Log scheduling decisions (context switches, preemptions, completions).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run_parser = subparsers.add_parser("run", help="Run a scheduling algorithm on a workload file.")
    run_parser.add_argument(
        "--algorithm",
        "-a",
        required=True,
        help=f"Algorithm to use ({', '.join(ALGORITHMS)}).",
    )
    _add_policy_args(run_parser, default_quantum=None)
    run_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the result as JSON instead of tables.",
    )

    compare_parser = subparsers.add_parser(
        "compare",
        help="Run multiple algorithms on the same workload and compare average metrics.",
    )
    compare_parser.add_argument(
        "--algorithms",
        "-a",
        nargs="+",
        default=list(ALGORITHMS),
        help=f"Algorithms to compare (default: {' '.join(ALGORITHMS)}).",
    )
    _add_policy_args(compare_parser, default_quantum=2)

    check_parser = subparsers.add_parser(
        "check",
        help="Run fixture files and compare actual results against their expected output.",
    )
    check_parser.add_argument("fixtures", nargs="+", help="Fixture JSON files.")

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _print_result(result: SchedulerResult, processes: Sequence[Process], console: Console) -> None:
    console.print(f"[bold]Algorithm:[/bold] {result.algorithm}")
    console.print(f"[bold]Execution order:[/bold] {' -> '.join(result.execution_order)}")
    console.print()

    panel, marks = build_rich_gantt(result.timeline)
    console.print(panel)
    if marks:
        console.print(marks)

    console.print()

    inputs = {p.name: p for p in processes}
    headers = ["Name", "Arrive", "Burst", "Priority", "Wait", "Turnaround"]
    if result.quantum_histories:
        headers.append("Quantum history")

    proc_table = Table(title="Per-process metrics", box=box.SIMPLE_HEAVY)
    for h in headers:
        justify = "center" if h == "Name" else "right"
        proc_table.add_column(h, justify=justify)

    for r in result.process_results:
        p = inputs[r.name]
        row = [
            r.name,
            str(p.arrival_time),
            str(p.burst_time),
            str(p.priority),
            str(r.waiting_time),
            str(r.turnaround_time),
        ]
        if result.quantum_histories:
            row.append(str(result.quantum_histories[r.name]))
        proc_table.add_row(*row)

    console.print(proc_table)

    sys_table = Table(title="Summary", box=box.SIMPLE_HEAVY)
    sys_table.add_column("Metric")
    sys_table.add_column("Value", justify="right")
    sys_table.add_row("Avg waiting", f"{result.average_waiting_time:.2f}")
    sys_table.add_row("Avg turnaround", f"{result.average_turnaround_time:.2f}")
    if result.system:
        sys_table.add_row("Makespan", str(result.system.makespan))
        sys_table.add_row("Throughput (proc/time)", f"{result.system.throughput:.3f}")
        sys_table.add_row("CPU utilization", f"{result.system.cpu_utilization*100:.1f}%")

    console.print(sys_table)


def _run_compare(args: argparse.Namespace, console: Console) -> int:
    processes = load_workload(Path(args.workload))

    summary_table = Table(title=f"Algorithm comparison: {args.workload}", box=box.SIMPLE_HEAVY)
    summary_table.add_column("Algorithm")
    summary_table.add_column("Execution order")
    summary_table.add_column("Avg waiting", justify="right")
    summary_table.add_column("Avg turnaround", justify="right")
    summary_table.add_column("CPU utilization", justify="right")

    for alg in args.algorithms:
        result = run_algorithm(
            alg,
            processes,
            context_switch=args.context_switch,
            quantum=args.quantum,
            aging_interval=args.aging,
        )
        utilization = f"{result.system.cpu_utilization*100:.1f}%" if result.system else ""
        summary_table.add_row(
            result.algorithm,
            " ".join(result.execution_order),
            f"{result.average_waiting_time:.2f}",
            f"{result.average_turnaround_time:.2f}",
            utilization,
        )

    console.print(summary_table)
    return 0


def _run_check(fixtures: List[str], console: Console) -> int:
    failed = 0

    for path in fixtures:
        case = load_test_case(path)
        console.print(f"\n[bold]=== Running Test: {case.name} ===[/bold]")

        for outcome in run_test_case(case):
            label = outcome.actual.algorithm
            if outcome.passed:
                console.print(f"[{label}] : PASSED", style="green", markup=False, highlight=False)
            else:
                failed += 1
                console.print(f"[{label}] : FAILED", style="red", markup=False, highlight=False)
                for failure in outcome.failures:
                    console.print(failure, markup=False)

            result = outcome.actual
            console.print(f"Execution Order: {result.dispatches or result.execution_order}", markup=False)
            for r in result.process_results:
                line = f"{r.name} | Waiting Time = {r.waiting_time} | Turnaround Time = {r.turnaround_time}"
                if r.name in result.quantum_histories:
                    line += f" | Quantum History: {result.quantum_histories[r.name]}"
                console.print(line, markup=False)
            console.print(f"Average Waiting Time = {result.average_waiting_time}")
            console.print(f"Average Turnaround Time = {result.average_turnaround_time}")
            console.print("-" * 50)

    return EXIT_FAILED if failed else 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        if args.command == "run":
            processes = load_workload(Path(args.workload))
            result = run_algorithm(
                args.algorithm,
                processes,
                context_switch=args.context_switch,
                quantum=args.quantum,
                aging_interval=args.aging,
            )
            if args.json:
                console.print_json(data=result.to_dict())
            else:
                _print_result(result, processes, console)
            return 0

        if args.command == "compare":
            return _run_compare(args, console)

        if args.command == "check":
            return _run_check(args.fixtures, console)
    except ConfigurationError as exc:
        console.print(f"Configuration error: {exc}", style="red", markup=False)
        return EXIT_BAD_INPUT
    except (ValueError, OSError) as exc:
        logger.debug("Input rejected", exc_info=True)
        console.print(f"Error: {exc}", style="red", markup=False)
        return EXIT_BAD_INPUT

    parser.error(f"Unknown command: {args.command}")
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
