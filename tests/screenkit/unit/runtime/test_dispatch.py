from __future__ import annotations

import logging

import pytest

from screenkit.api.dispatch import NOT_CALLED
from screenkit.api.input_events import MenuItem, MotionEvent
from screenkit.runtime.dispatch import (
    MotionEventDispatcher,
    RuntimeCommandRouter,
    RuntimeEventDispatcher,
)
from screenkit.runtime.transformers import RuntimeArgumentTransformer

_HANDLER_FAILURE = KeyError("handler failure")


class MotionScreen:
    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple[object, ...]]] = []

    def onMove(self, x: float, y: float) -> str:
        self.calls.append(("onMove", (x, y)))
        return "moved"

    def onPress(self, event: MotionEvent) -> None:
        self.calls.append(("onPress", (event,)))


class PriorityScreen:
    def __init__(self) -> None:
        self.calls: list[tuple[object, ...]] = []

    def onMove(self, first: MotionEvent | float, second: float | None = None) -> None:
        self.calls.append((first, second))


class LabelScreen:
    def __init__(self) -> None:
        self.labels: list[str] = []

    def label(self, text: str) -> str:
        self.labels.append(text)
        return text.upper()


class FailingScreen:
    def explode(self) -> None:
        raise _HANDLER_FAILURE

    def explodeWith(self, value: int) -> None:
        raise RuntimeError(f"bad value {value}")


class SaveWithEventScreen:
    def __init__(self) -> None:
        self.calls: list[tuple[object, ...]] = []

    def saveClicked(self, item: MenuItem) -> None:
        self.calls.append((item,))


class SaveNoArgScreen:
    def __init__(self) -> None:
        self.calls: list[tuple[object, ...]] = []

    def saveClicked(self) -> None:
        self.calls.append(())


class NoHandlersScreen:
    def saveAll(self) -> None:
        raise AssertionError("must not be called")


def test_motion_dispatch_unpacks_event_for_two_scalar_handler() -> None:
    screen = MotionScreen()
    dispatcher = MotionEventDispatcher("onMove")

    result = dispatcher.invoke(screen, MotionEvent(x=10.5, y=20.25))

    assert result == "moved"
    assert screen.calls == [("onMove", (10.5, 20.25))]


def test_motion_dispatch_passes_raw_event_when_handler_takes_it() -> None:
    screen = MotionScreen()
    event = MotionEvent(x=1.0, y=2.0, action="down")

    assert MotionEventDispatcher("onPress").call_method_on(screen, event) is True
    assert screen.calls == [("onPress", (event,))]


def test_identity_shape_wins_over_transformer_shape() -> None:
    screen = PriorityScreen()
    event = MotionEvent(x=5.0, y=6.0)

    assert MotionEventDispatcher("onMove").call_method_on(screen, event) is True
    assert screen.calls == [(event, None)]


def test_plain_dispatcher_does_not_unpack_motion_events() -> None:
    screen = MotionScreen()
    dispatcher = RuntimeEventDispatcher("onMove")

    assert dispatcher.supported_by(screen, MotionEvent(x=1.0, y=2.0)) is False
    assert dispatcher.invoke(screen, MotionEvent(x=1.0, y=2.0)) is NOT_CALLED
    assert screen.calls == []


def test_invoke_runs_handler_iff_supported() -> None:
    screen = LabelScreen()
    dispatcher = RuntimeEventDispatcher("label")
    for args in [("hi",), (1,), (), ("a", "b")]:
        supported = dispatcher.supported_by(screen, *args)
        before = len(screen.labels)
        called = dispatcher.call_method_on(screen, *args)
        assert called is supported
        assert len(screen.labels) == before + (1 if supported else 0)


def test_custom_transformer_adapts_argument_shape() -> None:
    screen = LabelScreen()
    to_text = RuntimeArgumentTransformer(
        target_types=(str,),
        transform_fn=lambda args: (f"#{args[0]}",),
        source_types=(int,),
        name="int_to_text",
    )
    dispatcher = RuntimeEventDispatcher("label", to_text)

    assert dispatcher.invoke(screen, 7) == "#7"
    assert screen.labels == ["#7"]


def test_transformer_registration_order_breaks_ties() -> None:
    screen = LabelScreen()
    first = RuntimeArgumentTransformer(target_types=(str,), transform_fn=lambda args: ("first",))
    second = RuntimeArgumentTransformer(target_types=(str,), transform_fn=lambda args: ("second",))

    RuntimeEventDispatcher("label", first, second).invoke(screen, 1)
    RuntimeEventDispatcher("label", second, first).invoke(screen, 1)

    assert screen.labels == ["first", "second"]


def test_transformer_failure_is_reported_as_not_called(caplog: pytest.LogCaptureFixture) -> None:
    screen = LabelScreen()

    def fail(args: tuple[object, ...]) -> tuple[object, ...]:
        raise ValueError("cannot adapt")

    dispatcher = RuntimeEventDispatcher(
        "label", RuntimeArgumentTransformer(target_types=(str,), transform_fn=fail)
    )
    with caplog.at_level(logging.DEBUG, logger="screenkit.dispatch"):
        assert dispatcher.invoke(screen, 3) is NOT_CALLED
    assert screen.labels == []
    assert any("dispatch preparation failed" in r.getMessage() for r in caplog.records)


def test_handler_exception_propagates_unwrapped() -> None:
    with pytest.raises(KeyError) as excinfo:
        RuntimeEventDispatcher("explode").invoke(FailingScreen())
    assert excinfo.value is _HANDLER_FAILURE


def test_handler_runtime_error_is_not_mistaken_for_resolution_failure() -> None:
    with pytest.raises(RuntimeError, match="bad value 4"):
        RuntimeEventDispatcher("explodeWith").call_method_on(FailingScreen(), 4)


def test_not_called_sentinel_is_falsy_singleton() -> None:
    assert not NOT_CALLED
    assert repr(NOT_CALLED) == "NOT_CALLED"
    assert type(NOT_CALLED)() is NOT_CALLED


def test_command_prefers_one_argument_handler() -> None:
    screen = SaveWithEventScreen()
    item = MenuItem(identifier="save", title="Save")

    assert RuntimeCommandRouter(screen).dispatch("save", item) is True
    assert screen.calls == [(item,)]


def test_command_falls_back_to_zero_argument_handler() -> None:
    screen = SaveNoArgScreen()

    assert RuntimeCommandRouter(screen).dispatch("save", MenuItem(identifier="save")) is True
    assert screen.calls == [()]


def test_command_with_mismatched_event_and_no_zero_argument_form_is_not_invoked() -> None:
    screen = SaveWithEventScreen()

    assert RuntimeCommandRouter(screen).dispatch("save", "not-a-menu-item") is False
    assert screen.calls == []


def test_command_without_handler_is_not_an_error() -> None:
    router = RuntimeCommandRouter(NoHandlersScreen())
    assert router.dispatch("save", MenuItem(identifier="save")) is False
    assert router.dispatch("unknown") is False


def test_command_router_collects_identifiers_at_construction() -> None:
    router = RuntimeCommandRouter(SaveNoArgScreen())
    assert router.identifiers == frozenset({"save"})
    assert router.handler_name("open") == "openClicked"


def test_command_router_honours_custom_suffix() -> None:
    class TappedScreen:
        def __init__(self) -> None:
            self.tapped = 0

        def saveTapped(self) -> None:
            self.tapped += 1

    screen = TappedScreen()
    router = RuntimeCommandRouter(screen, suffix="Tapped")

    assert router.dispatch("save") is True
    assert screen.tapped == 1


def test_dispatch_trace_logs_resolution(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("SCREENKIT_DISPATCH_TRACE", "1")
    dispatcher = MotionEventDispatcher("onMove")
    with caplog.at_level(logging.DEBUG, logger="screenkit.dispatch"):
        dispatcher.call_method_on(MotionScreen(), MotionEvent(x=1.0, y=1.0))
    messages = [record.getMessage() for record in caplog.records]
    assert any("resolved=True" in message and "motion_xy" in message for message in messages)
