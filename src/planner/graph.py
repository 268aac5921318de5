"""Dependency graph for step rules with an incrementally maintained ready set."""

from __future__ import annotations

import heapq
import re
from typing import Dict, FrozenSet, Iterable, Iterator, List, Set, Tuple

from contracts.errors import RuleParseError

from .task import ALPHABET, is_step_id

RULE_PATTERN = re.compile(
    r"^Step (?P<parent>[A-Z]) must be finished before step (?P<child>[A-Z]) can begin\.$"
)


def parse_rule(line: str, line_no: int | None = None) -> Tuple[str, str]:
    """Return ``(parent, child)`` for a single precedence sentence."""

    match = RULE_PATTERN.match(line.strip())
    if match is None:
        raise RuleParseError(line, line_no)
    return match.group("parent"), match.group("child")


class DependencyGraph:
    """Pending steps mapped to their unresolved prerequisites.

    Keys are the steps that have not started yet.  Starting a step
    (:meth:`pop_ready`) removes its key; finishing it (:meth:`retire`) strips it
    from the prerequisite sets of its dependents.  Ready steps live in a heap
    so the smallest id is always handed out first, independent of the order
    in which rules were read.
    """

    def __init__(self, tasks: Iterable[str] = ()) -> None:
        self._prerequisites: Dict[str, Set[str]] = {}
        self._dependents: Dict[str, Set[str]] = {}
        self._ready: List[str] | None = None
        self._edges = 0
        for task in tasks:
            self.add_task(task)

    @classmethod
    def from_rules(cls, lines: Iterable[str], *, seed_alphabet: bool = True) -> "DependencyGraph":
        """Build a graph from precedence sentences.

        Blank lines are ignored.  With ``seed_alphabet`` every letter is a
        step even if no rule mentions it.
        """

        graph = cls(ALPHABET if seed_alphabet else ())
        for line_no, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            parent, child = parse_rule(line, line_no)
            graph.add_dependency(parent, child)
        return graph

    # Construction -----------------------------------------------------

    def add_task(self, task: str) -> None:
        if not is_step_id(task):
            raise ValueError(f"step id must be a single uppercase letter, got {task!r}")
        self._prerequisites.setdefault(task, set())
        self._dependents.setdefault(task, set())
        self._ready = None

    def add_dependency(self, parent: str, child: str) -> None:
        """Declare that ``parent`` must finish before ``child`` starts."""

        self.add_task(parent)
        self.add_task(child)
        if parent not in self._prerequisites[child]:
            self._prerequisites[child].add(parent)
            self._dependents[parent].add(child)
            self._edges += 1

    # Queries ----------------------------------------------------------

    def __len__(self) -> int:
        return len(self._prerequisites)

    def __bool__(self) -> bool:
        return bool(self._prerequisites)

    def __contains__(self, task: object) -> bool:
        return task in self._prerequisites

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._prerequisites))

    @property
    def edge_count(self) -> int:
        return self._edges

    def prerequisites(self, task: str) -> FrozenSet[str]:
        return frozenset(self._prerequisites[task])

    def pending(self) -> Tuple[str, ...]:
        return tuple(sorted(self._prerequisites))

    def edges(self) -> List[Tuple[str, str]]:
        """All declared ``(parent, child)`` pairs in sorted order."""

        return sorted(
            (parent, child)
            for parent, children in self._dependents.items()
            for child in children
        )

    def snapshot(self) -> Dict[str, Tuple[str, ...]]:
        return {task: tuple(sorted(self._prerequisites[task])) for task in sorted(self._prerequisites)}

    # Ready set --------------------------------------------------------

    def _ready_heap(self) -> List[str]:
        if self._ready is None:
            self._ready = [task for task, prereqs in self._prerequisites.items() if not prereqs]
            heapq.heapify(self._ready)
        return self._ready

    def has_ready(self) -> bool:
        return bool(self._ready_heap())

    def peek_ready(self) -> str | None:
        heap = self._ready_heap()
        return heap[0] if heap else None

    def pop_ready(self) -> str:
        """Remove and return the alphabetically smallest ready step."""

        heap = self._ready_heap()
        if not heap:
            raise LookupError("no step is ready")
        task = heapq.heappop(heap)
        del self._prerequisites[task]
        return task

    def retire(self, tasks: Iterable[str]) -> List[str]:
        """Mark ``tasks`` finished and return the steps that became ready."""

        heap = self._ready_heap()
        unblocked: List[str] = []
        for task in tasks:
            for child in self._dependents.get(task, ()):
                prereqs = self._prerequisites.get(child)
                if prereqs is None or task not in prereqs:
                    continue
                prereqs.discard(task)
                if not prereqs:
                    heapq.heappush(heap, child)
                    unblocked.append(child)
        return sorted(unblocked)

    def copy(self) -> "DependencyGraph":
        clone = DependencyGraph()
        clone._prerequisites = {task: set(prereqs) for task, prereqs in self._prerequisites.items()}
        clone._dependents = {task: set(children) for task, children in self._dependents.items()}
        clone._edges = self._edges
        return clone


__all__ = ["DependencyGraph", "RULE_PATTERN", "parse_rule"]
