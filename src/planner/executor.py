"""Simulated worker pool for the step scheduler."""

from __future__ import annotations

from typing import Collection, List, Sequence, Tuple

from .task import WorkerState


def clear_finished(workers: Sequence[WorkerState], finished: Collection[str]) -> None:
    """Return every worker holding one of ``finished`` to the idle state."""

    for worker in workers:
        if worker.current_task is not None and worker.current_task in finished:
            worker.current_task = None
            worker.time_remaining = 0


class WorkerPool:
    """Fixed-size pool of symmetric workers.

    Workers do not run anything; they only count down the simulated time left
    on the step they hold.  Idle workers are handed out lowest id first, which
    keeps assignments reproducible without affecting the schedule itself.
    """

    def __init__(self, size: int) -> None:
        if size < 1:
            raise ValueError("worker pool size must be >= 1")
        self._workers: List[WorkerState] = [WorkerState(worker_id=index) for index in range(size)]

    @property
    def workers(self) -> Tuple[WorkerState, ...]:
        return tuple(self._workers)

    def __len__(self) -> int:
        return len(self._workers)

    def has_idle(self) -> bool:
        return any(worker.idle for worker in self._workers)

    def busy(self) -> List[WorkerState]:
        return [worker for worker in self._workers if not worker.idle]

    def assign(self, task: str, duration: int) -> WorkerState:
        if duration < 0:
            raise ValueError("duration must be >= 0")
        for worker in self._workers:
            if worker.idle:
                worker.current_task = task
                worker.time_remaining = duration
                return worker
        raise LookupError("no idle worker available")

    def time_to_next_completion(self) -> int | None:
        """Smallest remaining time over busy workers, ``None`` if all are idle."""

        busy = self.busy()
        if not busy:
            return None
        return min(worker.time_remaining for worker in busy)

    def advance(self, delta: int) -> None:
        if delta < 0:
            raise ValueError("time can only move forward")
        for worker in self.busy():
            worker.time_remaining = max(worker.time_remaining - delta, 0)

    def collect_finished(self) -> List[str]:
        """Free the workers whose step reached zero and return those steps sorted."""

        finished = sorted(
            worker.current_task
            for worker in self.busy()
            if worker.time_remaining == 0 and worker.current_task is not None
        )
        clear_finished(self._workers, finished)
        return finished


__all__ = ["WorkerPool", "clear_finished"]
