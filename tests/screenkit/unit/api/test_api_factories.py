from __future__ import annotations

import screenkit
from screenkit.api import (
    NOT_CALLED,
    ModalState,
    MotionEvent,
    create_argument_transformer,
    create_command_router,
    create_event_dispatcher,
    create_event_loop,
    create_modal_task,
    create_motion_dispatcher,
    create_navigation_correlator,
    create_screen_controller,
    default_correlator,
    dispatch,
    invoke_if_supported,
    present_modal,
)
from screenkit.runtime.correlator import RuntimeNavigationCorrelator
from screenkit.runtime.event_loop import RuntimeEventLoop
from screenkit.runtime.headless import HeadlessScreenHost
from screenkit.runtime.screen import ScreenController


class Counter:
    def __init__(self) -> None:
        self.total = 0

    def add(self, amount: int) -> int:
        self.total += amount
        return self.total

    def onTap(self, x: float, y: float) -> None:
        self.total += int(x + y)

    def resetClicked(self) -> None:
        self.total = 0


def test_dispatch_helpers_report_whether_handler_ran() -> None:
    counter = Counter()
    assert dispatch("add", counter, 2) is True
    assert dispatch("add", counter, "2") is False
    assert invoke_if_supported("add", counter, 3) == 5
    assert invoke_if_supported("missing", counter) is NOT_CALLED


def test_factories_build_runtime_dispatchers() -> None:
    counter = Counter()
    to_int = create_argument_transformer(
        (int,), lambda args: (len(str(args[0])),), source_types=(str,), name="length"
    )

    assert create_event_dispatcher("add", to_int).invoke(counter, "abcd") == 4
    assert create_motion_dispatcher("onTap").call_method_on(counter, MotionEvent(x=1.0, y=2.0))
    assert counter.total == 7
    assert create_command_router(counter).dispatch("reset") is True
    assert counter.total == 0


def test_modal_factories_run_on_created_loop() -> None:
    loop = create_event_loop()
    assert isinstance(loop, RuntimeEventLoop)

    task = create_modal_task(loop, lambda t: loop.post(lambda: t.end_modal("done")))
    assert task.state is ModalState.CREATED
    assert task.execute() == "done"

    assert present_modal(loop, lambda t: t.end_modal(42)) == 42
    assert screenkit.present_modal(loop, lambda t: loop.post(lambda: t.end_modal("top"))) == "top"


def test_correlator_factories() -> None:
    assert isinstance(create_navigation_correlator(), RuntimeNavigationCorrelator)
    assert create_navigation_correlator() is not create_navigation_correlator()
    assert default_correlator() is default_correlator()


def test_create_screen_controller_binds_screen() -> None:
    loop = RuntimeEventLoop(stall_warning_seconds=0.0)
    screen = Counter()
    controller = create_screen_controller(
        screen, HeadlessScreenHost(loop), loop, correlator=create_navigation_correlator()
    )
    assert isinstance(controller, ScreenController)
    assert controller.screen is screen
