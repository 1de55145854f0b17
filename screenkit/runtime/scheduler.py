"""Deferred and repeating timer queue driven by the host loop clock."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from heapq import heappop, heappush

TaskCallback = Callable[[], None]


@dataclass(slots=True)
class _Task:
    task_id: int
    due_seconds: float
    callback: TaskCallback
    interval_seconds: float | None = None
    cancelled: bool = False


class Scheduler:
    """Time-ordered timer queue.

    The scheduler never runs callbacks itself: `pop_due` hands due callbacks
    back so the owning loop can run them outside its lock. Not thread-safe on
    its own; the loop guards every call.
    """

    def __init__(self) -> None:
        self._now_seconds = 0.0
        self._next_task_id = 1
        self._tasks: dict[int, _Task] = {}
        self._queue: list[tuple[float, int]] = []

    @property
    def now_seconds(self) -> float:
        return self._now_seconds

    @property
    def queued_task_count(self) -> int:
        """Return count of active queued tasks."""
        return sum(1 for task in self._tasks.values() if not task.cancelled)

    @property
    def next_due_seconds(self) -> float | None:
        """Return due time of the earliest live task, if any."""
        while self._queue:
            due_seconds, task_id = self._queue[0]
            task = self._tasks.get(task_id)
            if task is not None and not task.cancelled:
                return due_seconds
            heappop(self._queue)
            self._tasks.pop(task_id, None)
        return None

    def call_later(self, now_seconds: float, delay_seconds: float, callback: TaskCallback) -> int:
        """Schedule a one-shot callback after delay."""
        if delay_seconds < 0.0:
            raise ValueError("delay_seconds must be >= 0")
        return self._schedule(
            due_seconds=now_seconds + delay_seconds,
            callback=callback,
            interval_seconds=None,
        )

    def call_every(
        self, now_seconds: float, interval_seconds: float, callback: TaskCallback
    ) -> int:
        """Schedule a recurring callback at fixed interval."""
        if interval_seconds <= 0.0:
            raise ValueError("interval_seconds must be > 0")
        return self._schedule(
            due_seconds=now_seconds + interval_seconds,
            callback=callback,
            interval_seconds=interval_seconds,
        )

    def cancel(self, task_id: int) -> None:
        """Cancel a scheduled task if it exists."""
        task = self._tasks.get(task_id)
        if task is not None:
            task.cancelled = True

    def pop_due(self, now_seconds: float) -> list[TaskCallback]:
        """Return callbacks due at or before `now_seconds`, rescheduling repeaters."""
        if now_seconds < self._now_seconds:
            raise ValueError("now_seconds cannot move backwards")
        self._now_seconds = now_seconds
        due: list[TaskCallback] = []
        while self._queue and self._queue[0][0] <= self._now_seconds:
            _, task_id = heappop(self._queue)
            task = self._tasks.get(task_id)
            if task is None or task.cancelled:
                self._tasks.pop(task_id, None)
                continue
            due.append(task.callback)
            if task.interval_seconds is None:
                self._tasks.pop(task_id, None)
                continue
            task.due_seconds += task.interval_seconds
            heappush(self._queue, (task.due_seconds, task.task_id))
        return due

    def _schedule(
        self,
        *,
        due_seconds: float,
        callback: TaskCallback,
        interval_seconds: float | None,
    ) -> int:
        task_id = self._next_task_id
        self._next_task_id += 1
        task = _Task(
            task_id=task_id,
            due_seconds=due_seconds,
            callback=callback,
            interval_seconds=interval_seconds,
        )
        self._tasks[task_id] = task
        heappush(self._queue, (due_seconds, task_id))
        return task_id
