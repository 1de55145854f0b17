"""Synchronous modal bridge over callback-driven UI constructs.

Typical use from a handler running on the dispatch thread::

    def trigger(task):
        host.show_dialog(spec, on_choice=task.end_modal, on_cancel=lambda: task.end_modal(None))

    answer = RuntimeModalTask(loop, trigger).execute()

`execute` runs the trigger, then pumps the host loop on the calling thread
until some callback calls `end_modal`. Every dismissal path of the construct
must end the task, otherwise `execute` never returns.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from screenkit.api.host import HostLoop
from screenkit.api.modal import ModalState

_LOG = logging.getLogger("screenkit.modal")


class RuntimeModalTask[TResult]:
    """One-shot blocking task. Subclasses may override `run` instead of passing a trigger."""

    def __init__(
        self,
        loop: HostLoop,
        trigger: Callable[[RuntimeModalTask[TResult]], None] | None = None,
    ) -> None:
        self._loop = loop
        self._trigger = trigger
        self._lock = threading.Lock()
        self._state = ModalState.CREATED
        self._result: TResult | None = None
        self._extras: dict[str, object] = {}

    @property
    def state(self) -> ModalState:
        return self._state

    @property
    def extras(self) -> dict[str, object]:
        return self._extras

    @property
    def result(self) -> TResult | None:
        return self._result

    def done(self) -> bool:
        """Return whether a completion has been accepted."""
        return self._state is ModalState.COMPLETED

    def run(self) -> None:
        """Present the modal construct. Must not block."""
        if self._trigger is None:
            raise NotImplementedError("pass a trigger or override run()")
        self._trigger(self)

    def execute(self) -> TResult | None:
        """Run trigger, pump the host loop until completion, return result."""
        with self._lock:
            if self._state is not ModalState.CREATED:
                raise RuntimeError("modal task can only be executed once")
            self._state = ModalState.RUNNING
        try:
            self.run()
        except BaseException:
            with self._lock:
                self._state = ModalState.COMPLETED
            raise
        if not self.done():
            self._loop.run_until(self.done)
        return self._result

    def end_modal(self, result: TResult | None) -> bool:
        """Complete the task. Return False when a completion already happened."""
        with self._lock:
            if self._state is ModalState.COMPLETED:
                accepted = False
            else:
                self._result = result
                self._state = ModalState.COMPLETED
                accepted = True
        if not accepted:
            _LOG.warning("modal_double_completion ignored_result=%r", result)
            return False
        self._loop.wakeup()
        return True


ModalTask = RuntimeModalTask
