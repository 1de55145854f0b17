"""Cooperative single-dispatch-thread event loop with reentrant pumping."""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from collections.abc import Callable

from screenkit.api.host import LoopCallback
from screenkit.runtime.config import load_config
from screenkit.runtime.scheduler import Scheduler

_LOG = logging.getLogger("screenkit.loop")


class RuntimeEventLoop:
    """Reference host loop.

    Posted callbacks run in FIFO order on whichever frame is pumping. Timers
    join the same queue when they come due. `run_until` may nest to any
    depth. A frame checks its predicate before every callback and returns as
    soon as it holds, leaving queued callbacks to the enclosing frame, so an
    inner frame always unwinds before the frame that entered it.
    """

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        stall_warning_seconds: float | None = None,
    ) -> None:
        self._clock = clock
        self._origin = clock()
        self._cond = threading.Condition()
        self._queue: deque[LoopCallback] = deque()
        self._scheduler = Scheduler()
        self._wake_serial = 0
        self._depth = 0
        self._running = False
        self._quit_requested = False
        if stall_warning_seconds is None:
            stall_warning_seconds = load_config().stall_warning_seconds
        self._stall_warning_seconds = stall_warning_seconds

    @property
    def depth(self) -> int:
        """Return number of active pump frames on the dispatch thread."""
        return self._depth

    @property
    def pending_count(self) -> int:
        """Return count of queued callbacks and live timers."""
        with self._cond:
            return len(self._queue) + self._scheduler.queued_task_count

    def post(self, callback: LoopCallback) -> None:
        """Queue callback for the dispatch thread. Safe from any thread."""
        with self._cond:
            self._queue.append(callback)
            self._wake_serial += 1
            self._cond.notify_all()

    def call_later(self, delay_seconds: float, callback: LoopCallback) -> int:
        """Schedule a one-shot callback after delay."""
        with self._cond:
            task_id = self._scheduler.call_later(self._now(), delay_seconds, callback)
            self._wake_serial += 1
            self._cond.notify_all()
            return task_id

    def call_every(self, interval_seconds: float, callback: LoopCallback) -> int:
        """Schedule a recurring callback at fixed interval."""
        with self._cond:
            task_id = self._scheduler.call_every(self._now(), interval_seconds, callback)
            self._wake_serial += 1
            self._cond.notify_all()
            return task_id

    def cancel(self, task_id: int) -> None:
        """Cancel a scheduled timer if it exists."""
        with self._cond:
            self._scheduler.cancel(task_id)

    def wakeup(self) -> None:
        """Make waiting pumps re-check their predicates."""
        with self._cond:
            self._wake_serial += 1
            self._cond.notify_all()

    def quit(self) -> None:
        """Request the top-level `run` to return."""
        with self._cond:
            self._quit_requested = True
            self._wake_serial += 1
            self._cond.notify_all()

    def run(self) -> None:
        """Run the top-level loop until `quit` is requested."""
        if self._running:
            raise RuntimeError("event loop is already running")
        self._running = True
        self._quit_requested = False
        try:
            self.run_until(lambda: self._quit_requested)
        finally:
            self._running = False

    def run_until(self, predicate: Callable[[], bool]) -> None:
        """Service events on the calling thread until predicate holds."""
        self._depth += 1
        _LOG.debug("loop_enter depth=%d", self._depth)
        try:
            while True:
                callback = self._next_callback(predicate)
                if callback is None:
                    return
                callback()
        finally:
            _LOG.debug("loop_exit depth=%d", self._depth)
            self._depth -= 1

    def run_pending(self) -> int:
        """Run callbacks and timers that are ready now without blocking."""
        with self._cond:
            self._collect_due_locked()
            budget = len(self._queue)
        executed = 0
        while executed < budget:
            with self._cond:
                if not self._queue:
                    break
                callback = self._queue.popleft()
            callback()
            executed += 1
        return executed

    def _next_callback(self, predicate: Callable[[], bool]) -> LoopCallback | None:
        idle_since: float | None = None
        warned = False
        while True:
            with self._cond:
                serial = self._wake_serial
            if predicate():
                return None
            with self._cond:
                self._collect_due_locked()
                if self._queue:
                    return self._queue.popleft()
                if serial != self._wake_serial:
                    continue
                now = self._now()
                if idle_since is None:
                    idle_since = now
                timeout = self._wait_timeout_locked(now)
                if self._stall_warning_seconds > 0.0 and not warned:
                    idle_for = now - idle_since
                    if idle_for >= self._stall_warning_seconds:
                        warned = True
                        _LOG.warning(
                            "loop_stalled depth=%d idle_seconds=%.3f",
                            self._depth,
                            idle_for,
                        )
                    else:
                        remaining = self._stall_warning_seconds - idle_for
                        timeout = remaining if timeout is None else min(timeout, remaining)
                self._cond.wait(timeout)

    def _collect_due_locked(self) -> None:
        due = self._scheduler.pop_due(max(self._now(), self._scheduler.now_seconds))
        self._queue.extend(due)

    def _wait_timeout_locked(self, now: float) -> float | None:
        next_due = self._scheduler.next_due_seconds
        if next_due is None:
            return None
        return max(0.0, next_due - now)

    def _now(self) -> float:
        return self._clock() - self._origin


EventLoop = RuntimeEventLoop
