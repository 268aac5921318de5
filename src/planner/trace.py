"""Round-by-round trace of a schedule simulation."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import List, MutableSequence, Tuple


class TraceValidationError(ValueError):
    """Raised when a trace entry is inconsistent with the simulation clock."""


@dataclass(frozen=True, slots=True)
class ScheduleTraceEntry:
    """One assign/advance/retire round.

    ``clock`` is the simulated time after the advance phase; ``assigned``
    holds ``(worker_id, step)`` pairs started at the beginning of the round.
    """

    round: int
    clock: int
    assigned: Tuple[Tuple[int, str], ...]
    finished: Tuple[str, ...]

    def __post_init__(self) -> None:
        if self.round < 1:
            raise TraceValidationError("round must be >= 1")
        if self.clock < 0:
            raise TraceValidationError("clock must be >= 0")

    def to_payload(self) -> dict:
        return {
            "round": int(self.round),
            "clock": int(self.clock),
            "assigned": [[worker, step] for worker, step in self.assigned],
            "finished": list(self.finished),
        }


@dataclass
class ScheduleTrace:
    entries: MutableSequence[ScheduleTraceEntry] = field(default_factory=list)

    def append(self, entry: ScheduleTraceEntry) -> None:
        if self.entries:
            last = self.entries[-1]
            if entry.round <= last.round:
                raise TraceValidationError("trace rounds must be strictly increasing")
            if entry.clock < last.clock:
                raise TraceValidationError("trace clock must not move backwards")
        self.entries.append(entry)

    def __len__(self) -> int:
        return len(self.entries)

    def finished_tasks(self) -> List[str]:
        return [step for entry in self.entries for step in entry.finished]

    def to_payload(self) -> list:
        return [entry.to_payload() for entry in self.entries]

    def to_json(self, *, indent: int | None = None) -> str:
        return json.dumps(self.to_payload(), ensure_ascii=False, separators=(",", ":"), indent=indent)


__all__ = ["ScheduleTrace", "ScheduleTraceEntry", "TraceValidationError"]
