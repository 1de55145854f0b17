"""Public host-runtime contracts consumed by screens and the modal bridge."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Final, Protocol

RESULT_OK: Final = -1
RESULT_CANCELED: Final = 0

LoopCallback = Callable[[], None]


@dataclass(slots=True)
class Intent:
    """Navigation request with a generic extras bag."""

    target: str = ""
    extras: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ActivityResult:
    """Result delivered back to the screen that started a navigation."""

    request_code: int
    result_code: int
    data: Intent | None = None


@dataclass(frozen=True, slots=True)
class DialogButton:
    """One dialog choice and the value it reports."""

    label: str
    value: object = None


@dataclass(frozen=True, slots=True)
class DialogSpec:
    """Toolkit-neutral dialog description.

    Button dialogs report the chosen button's `value`; list dialogs (non-empty
    `items`) report the selected item index.
    """

    title: str
    message: str = ""
    buttons: tuple[DialogButton, ...] = ()
    items: tuple[str, ...] = ()
    cancelable: bool = True


class HostLoop(Protocol):
    """Single dispatch-thread event loop that supports reentrant pumping."""

    def post(self, callback: LoopCallback) -> None:
        """Queue callback for the dispatch thread. Safe from any thread."""

    def call_later(self, delay_seconds: float, callback: LoopCallback) -> int:
        """Schedule callback after delay."""

    def run_until(self, predicate: Callable[[], bool]) -> None:
        """Service events on the calling thread until predicate holds."""

    def wakeup(self) -> None:
        """Make waiting pumps re-check their predicates."""


class ScreenHost(Protocol):
    """Host-side operations a screen controller delegates to."""

    def show_dialog(
        self,
        spec: DialogSpec,
        on_choice: Callable[[object], None],
        on_cancel: Callable[[], None],
    ) -> None:
        """Present dialog without blocking; report through callbacks."""

    def start_for_result(self, intent: Intent, request_code: int) -> None:
        """Navigate to intent; deliver an `ActivityResult` later."""

    def set_result(self, result_code: int, data: Intent | None) -> None:
        """Record the result the current screen returns on finish."""

    def finish(self) -> None:
        """Close the current screen."""


class ActivityStarter(Protocol):
    """Handler awaiting the result of an externally started activity."""

    def handle_activity_result(
        self,
        screen: object,
        data: Intent | None,
        request_code: int,
        result_code: int,
    ) -> None:
        """Consume activity result."""


class LifecycleInjection(Protocol):
    """Object that follows the pause/resume lifecycle of a screen."""

    def pause(self) -> None:
        """Screen paused."""

    def resume(self) -> None:
        """Screen resumed."""


class PersistenceHook(Protocol):
    """Loads persistent context before a screen initializes."""

    def load_persistent_context(self, screen: object) -> None:
        """Restore persisted fields onto screen."""


def create_event_loop() -> HostLoop:
    """Create default cooperative host loop implementation."""
    from screenkit.runtime.event_loop import RuntimeEventLoop

    return RuntimeEventLoop()
