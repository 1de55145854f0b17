"""Public synchronous-modal API contracts."""

from __future__ import annotations

from collections.abc import Callable, MutableMapping
from enum import Enum
from typing import Protocol

from screenkit.api.host import HostLoop


class ModalState(Enum):
    """Modal task lifecycle."""

    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"


class ModalTask[TResult](Protocol):
    """Blocking call over an asynchronous, callback-driven UI construct."""

    @property
    def state(self) -> ModalState:
        """Current lifecycle state."""

    @property
    def extras(self) -> MutableMapping[str, object]:
        """Context bag shared between trigger and callbacks."""

    def done(self) -> bool:
        """Return whether a completion has been accepted."""

    def execute(self) -> TResult | None:
        """Run trigger, pump the host loop until completion, return result."""

    def end_modal(self, result: TResult | None) -> bool:
        """Complete the task. Return False when a completion already happened."""


type ModalTrigger[TResult] = Callable[[ModalTask[TResult]], None]


def create_modal_task[TResult](
    loop: HostLoop,
    trigger: ModalTrigger[TResult],
) -> ModalTask[TResult]:
    """Create default modal task implementation."""
    from screenkit.runtime.modal import RuntimeModalTask

    return RuntimeModalTask(loop, trigger)


def present_modal[TResult](loop: HostLoop, trigger: ModalTrigger[TResult]) -> TResult | None:
    """Run trigger and block (reentrantly) until it signals completion."""
    return create_modal_task(loop, trigger).execute()
