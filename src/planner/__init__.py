"""Dependency-ordered step scheduler with a simulated worker pool."""

from .executor import WorkerPool
from .graph import DependencyGraph, parse_rule
from .scheduler import ScheduleResult, Scheduler, completion_time, plan_order
from .task import ALPHABET, Assignment, WorkerState, task_duration
from .trace import ScheduleTrace, ScheduleTraceEntry

__all__ = [
    "ALPHABET",
    "Assignment",
    "DependencyGraph",
    "ScheduleResult",
    "ScheduleTrace",
    "ScheduleTraceEntry",
    "Scheduler",
    "WorkerPool",
    "WorkerState",
    "completion_time",
    "parse_rule",
    "plan_order",
    "task_duration",
]
