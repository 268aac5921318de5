"""Discrete-event scheduler for dependency-ordered steps."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from contracts.errors import CyclicDependencyError

from .executor import WorkerPool
from .graph import DependencyGraph
from .task import Assignment, task_duration
from .trace import ScheduleTrace, ScheduleTraceEntry

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleResult:
    """Outcome of a full simulation run."""

    elapsed: int
    order: str
    worker_count: int
    base_offset: int
    assignments: Tuple[Assignment, ...] = ()
    trace: ScheduleTrace = field(default_factory=ScheduleTrace, compare=False)


class Scheduler:
    """Assign ready steps to idle workers until every step has finished.

    Each round runs three phases: hand the alphabetically smallest ready
    steps to idle workers, jump the clock to the next completion, then retire
    every step whose worker reached zero.  The loop keeps going while steps
    are pending or still in flight, so the last batch is drained exactly once.
    """

    def __init__(self, graph: DependencyGraph, *, worker_count: int, base_offset: int) -> None:
        if worker_count < 1:
            raise ValueError("worker_count must be >= 1")
        if base_offset < 0:
            raise ValueError("base_offset must be >= 0")
        self.graph = graph
        self.worker_count = worker_count
        self.base_offset = base_offset

    @classmethod
    def from_rules(
        cls,
        lines: Iterable[str],
        *,
        worker_count: int,
        base_offset: int,
        seed_alphabet: bool = True,
    ) -> "Scheduler":
        graph = DependencyGraph.from_rules(lines, seed_alphabet=seed_alphabet)
        return cls(graph, worker_count=worker_count, base_offset=base_offset)

    def run(self) -> ScheduleResult:
        """Simulate the schedule on a copy of the graph and return the result."""

        graph = self.graph.copy()
        pool = WorkerPool(self.worker_count)
        trace = ScheduleTrace()
        clock = 0
        order: List[str] = []
        started: Dict[str, Tuple[int, int]] = {}
        assignments: List[Assignment] = []

        while graph or pool.busy():
            assigned: List[Tuple[int, str]] = []
            while pool.has_idle() and graph.has_ready():
                step = graph.pop_ready()
                worker = pool.assign(step, task_duration(step, self.base_offset))
                started[step] = (worker.worker_id, clock)
                assigned.append((worker.worker_id, step))

            delta = pool.time_to_next_completion()
            if delta is None:
                raise CyclicDependencyError(graph.pending())

            pool.advance(delta)
            clock += delta
            finished = pool.collect_finished()
            graph.retire(finished)
            order.extend(finished)
            for step in finished:
                worker_id, start = started.pop(step)
                assignments.append(Assignment(task=step, worker_id=worker_id, start=start, finish=clock))

            trace.append(
                ScheduleTraceEntry(
                    round=len(trace) + 1,
                    clock=clock,
                    assigned=tuple(assigned),
                    finished=tuple(finished),
                )
            )
            _LOGGER.debug("round %d: clock=%d started=%s finished=%s", len(trace), clock, assigned, finished)

        _LOGGER.info(
            "scheduled %d steps on %d worker(s) in %d time units",
            len(order),
            self.worker_count,
            clock,
        )
        return ScheduleResult(
            elapsed=clock,
            order="".join(order),
            worker_count=self.worker_count,
            base_offset=self.base_offset,
            assignments=tuple(assignments),
            trace=trace,
        )


def plan_order(graph: DependencyGraph) -> str:
    """Return the alphabetical-tie-break topological order of ``graph``.

    Equivalent to a one-worker run with zero-cost steps, without the clock.
    """

    pending = graph.copy()
    order: List[str] = []
    while pending:
        if not pending.has_ready():
            raise CyclicDependencyError(pending.pending())
        step = pending.pop_ready()
        pending.retire([step])
        order.append(step)
    return "".join(order)


def completion_time(graph: DependencyGraph, *, worker_count: int, base_offset: int) -> int:
    return Scheduler(graph, worker_count=worker_count, base_offset=base_offset).run().elapsed


__all__ = ["ScheduleResult", "Scheduler", "completion_time", "plan_order"]
