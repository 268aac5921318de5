"""Step and worker records shared by the scheduler."""

from __future__ import annotations

import string
from dataclasses import dataclass
from typing import Optional, Tuple

ALPHABET: Tuple[str, ...] = tuple(string.ascii_uppercase)


def is_step_id(value: str) -> bool:
    return len(value) == 1 and value in string.ascii_uppercase


def task_duration(task_id: str, base_offset: int) -> int:
    """Return the time a step occupies a worker.

    A step costs its 1-indexed alphabet position plus ``base_offset``, so with
    an offset of 60 step ``A`` takes 61 units and ``Z`` takes 86.
    """

    if not is_step_id(task_id):
        raise ValueError(f"step id must be a single uppercase letter, got {task_id!r}")
    if base_offset < 0:
        raise ValueError("base_offset must be >= 0")
    return ord(task_id) - ord("A") + 1 + base_offset


@dataclass
class WorkerState:
    """Mutable slot in the worker pool."""

    worker_id: int
    current_task: Optional[str] = None
    time_remaining: int = 0

    @property
    def idle(self) -> bool:
        return self.current_task is None


@dataclass(frozen=True)
class Assignment:
    """A single step run on a worker over ``[start, finish)``."""

    task: str
    worker_id: int
    start: int
    finish: int

    @property
    def duration(self) -> int:
        return self.finish - self.start

    def to_payload(self) -> dict:
        return {
            "task": self.task,
            "worker": self.worker_id,
            "start": self.start,
            "finish": self.finish,
        }


__all__ = ["ALPHABET", "Assignment", "WorkerState", "is_step_id", "task_duration"]
