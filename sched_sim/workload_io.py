from __future__ import annotations

import csv
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .models import AGProcess, Process, ProcessResult

# Accepted spellings for each process field, first match wins.
_FIELD_ALIASES = {
    "name": ("name", "pid"),
    "arrival": ("arrival", "arrival_time", "arrivalTime"),
    "burst": ("burst", "burst_time", "burstTime"),
    "priority": ("priority",),
    "quantum": ("quantum",),
}

# Fixture keys for the expected output of each engine.
_EXPECTED_KEYS = {"SJF": "sjf", "RR": "rr", "Priority": "priority"}


@dataclass
class ExpectedOutput:
    execution_order: List[str]
    process_results: Optional[List[ProcessResult]] = None
    average_waiting_time: Optional[float] = None
    average_turnaround_time: Optional[float] = None


@dataclass
class TestCase:
    """
    One fixture file: a workload, its policy parameters and the expected
    result of every engine it exercises (keyed by algorithm name).
    """

    __test__ = False  # not a pytest class

    name: str
    processes: List[Process]
    context_switch: int = 0
    rr_quantum: Optional[int] = None
    aging_interval: int = 0
    expected: Dict[str, ExpectedOutput] = field(default_factory=dict)


def load_workload(path: str | Path) -> List[Process]:
    """
    Load a workload from a JSON or CSV file into a list of Process objects.

    JSON may be a list of process objects or an object with a ``processes``
    list. Entries carrying a ``quantum`` become AGProcess instances.
    """
    path = Path(path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        return _load_json(path)
    if suffix == ".csv":
        return _load_csv(path)

    raise ValueError(f"Unsupported workload format: {suffix} (use .json or .csv)")


def load_test_case(path: str | Path) -> TestCase:
    """
    Load a fixture in either of the two supported shapes: a multi-policy case
    whose ``expectedOutput`` has ``SJF``/``RR``/``Priority`` sections, or an AG
    case whose ``expectedOutput`` is a single result.
    """
    path = Path(path)
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict) or "input" not in raw or "expectedOutput" not in raw:
        raise ValueError(f"{path}: fixture needs 'input' and 'expectedOutput' objects")

    inp = raw["input"]
    expected_raw = raw["expectedOutput"]
    processes = [_process_from_mapping(entry) for entry in inp.get("processes", [])]
    name = str(raw.get("name") or path.stem)

    if "executionOrder" in expected_raw:
        return TestCase(
            name=name,
            processes=processes,
            expected={"ag": _expected_from_mapping(expected_raw)},
        )

    expected: Dict[str, ExpectedOutput] = {}
    for key, alg in _EXPECTED_KEYS.items():
        if key in expected_raw:
            expected[alg] = _expected_from_mapping(expected_raw[key])
    if not expected:
        raise ValueError(f"{path}: expectedOutput has none of {', '.join(_EXPECTED_KEYS)}")

    try:
        context_switch = int(inp.get("contextSwitch", 0))
        rr_quantum = int(inp["rrQuantum"]) if inp.get("rrQuantum") is not None else None
        aging_interval = int(inp.get("agingInterval", 0))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{path}: invalid policy parameters in {inp!r}") from exc

    return TestCase(
        name=name,
        processes=processes,
        context_switch=context_switch,
        rr_quantum=rr_quantum,
        aging_interval=aging_interval,
        expected=expected,
    )


def _load_json(path: Path) -> List[Process]:
    with path.open("r", encoding="utf-8") as f:
        raw = json.load(f)

    if isinstance(raw, dict):
        raw = raw.get("processes")
    if not isinstance(raw, list):
        raise ValueError("JSON workload must be a list of process objects")

    return [_process_from_mapping(entry) for entry in raw]


def _load_csv(path: Path) -> List[Process]:
    processes: List[Process] = []
    with path.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            processes.append(_process_from_mapping(row))
    return processes


def _lookup(mapping, key: str):
    for alias in _FIELD_ALIASES[key]:
        value = mapping.get(alias)
        if value not in (None, ""):
            return value
    return None


def _process_from_mapping(mapping) -> Process:
    try:
        name = _lookup(mapping, "name")
        if name is None:
            raise KeyError("name")
        arrival = int(_lookup(mapping, "arrival"))
        burst = int(_lookup(mapping, "burst"))
        priority_val = _lookup(mapping, "priority")
        priority = int(priority_val) if priority_val is not None else 1
        quantum_val = _lookup(mapping, "quantum")
        quantum = int(quantum_val) if quantum_val is not None else None
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid process entry: {mapping!r}") from exc

    if quantum is not None:
        return AGProcess(str(name), arrival, burst, priority, quantum)
    return Process(str(name), arrival, burst, priority)


def _expected_from_mapping(mapping) -> ExpectedOutput:
    try:
        order = [str(n) for n in mapping["executionOrder"]]
        rows = mapping.get("processResults")
        results = None
        if rows is not None:
            results = [
                ProcessResult(
                    name=str(r["name"]),
                    waiting_time=int(r["waitingTime"]),
                    turnaround_time=int(r["turnaroundTime"]),
                )
                for r in rows
            ]
    except (KeyError, TypeError, ValueError) as exc:
        raise ValueError(f"Invalid expected output: {mapping!r}") from exc

    avg_wt = mapping.get("averageWaitingTime")
    avg_tat = mapping.get("averageTurnaroundTime")
    return ExpectedOutput(
        execution_order=order,
        process_results=results,
        average_waiting_time=float(avg_wt) if avg_wt is not None else None,
        average_turnaround_time=float(avg_tat) if avg_tat is not None else None,
    )
