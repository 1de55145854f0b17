from __future__ import annotations

import pytest

from screenkit.runtime.modal import RuntimeModalTask


def test_modal_task_completes_through_nested_qt_frame(qt_loop) -> None:
    task: RuntimeModalTask[str] = RuntimeModalTask(
        qt_loop, lambda t: qt_loop.post(lambda: t.end_modal("accepted"))
    )

    assert task.execute() == "accepted"
    assert qt_loop.depth == 0


def test_posted_callbacks_run_in_order_while_blocked(qt_loop) -> None:
    calls: list[str] = []

    def trigger(task: RuntimeModalTask[int]) -> None:
        qt_loop.post(lambda: calls.append("first"))
        qt_loop.post(lambda: calls.append("second"))
        qt_loop.call_later(0.01, lambda: task.end_modal(len(calls)))

    assert RuntimeModalTask(qt_loop, trigger).execute() == 2
    assert calls == ["first", "second"]


def test_callback_exception_is_raised_from_pump_frame(qt_loop) -> None:
    def explode() -> None:
        raise LookupError("qt callback failure")

    task: RuntimeModalTask[int] = RuntimeModalTask(qt_loop, lambda t: qt_loop.post(explode))
    with pytest.raises(LookupError, match="qt callback failure"):
        task.execute()
    assert qt_loop.depth == 0


def test_cancelled_timer_never_fires(qt_loop) -> None:
    calls: list[str] = []

    def trigger(task: RuntimeModalTask[None]) -> None:
        timer_id = qt_loop.call_later(0.0, lambda: calls.append("cancelled"))
        qt_loop.cancel(timer_id)
        qt_loop.call_later(0.02, lambda: task.end_modal(None))

    RuntimeModalTask(qt_loop, trigger).execute()
    assert calls == []


def test_call_later_rejects_negative_delay(qt_loop) -> None:
    with pytest.raises(ValueError):
        qt_loop.call_later(-0.5, lambda: None)
