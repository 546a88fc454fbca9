"""
sched-sim package.

Deterministic CPU scheduling simulators (preemptive SJF, Round Robin,
Priority with aging and the adaptive AG policy) plus a command-line
interface for running workloads and checking them against fixtures.
"""

from .algorithms import ALGORITHMS, run_algorithm, schedule_priority, schedule_rr, schedule_sjf
from .adaptive import schedule_ag
from .errors import ConfigurationError
from .models import AGProcess, Process, ProcessResult, SchedulerResult, StopReason

__all__ = [
    "ALGORITHMS",
    "AGProcess",
    "ConfigurationError",
    "Process",
    "ProcessResult",
    "SchedulerResult",
    "StopReason",
    "run_algorithm",
    "schedule_ag",
    "schedule_priority",
    "schedule_rr",
    "schedule_sjf",
]
