"""`HostLoop` implementation on top of the Qt event dispatcher."""

from __future__ import annotations

import logging
from collections.abc import Callable

from screenkit.api.host import LoopCallback

try:
    from PyQt6.QtCore import QCoreApplication, QEventLoop, QObject, Qt, QTimer, pyqtSignal
except Exception as exc:  # pragma: no cover
    raise RuntimeError("PyQt6 is required for the Qt host. Install dependency 'PyQt6'.") from exc

_LOG = logging.getLogger("screenkit.qt")


class _Invoker(QObject):
    """Runs posted callables on the thread that owns this object."""

    invoke = pyqtSignal(object)

    def __init__(
        self,
        on_error: Callable[[BaseException], None],
        after: LoopCallback,
    ) -> None:
        super().__init__()
        self._on_error = on_error
        self._after = after
        self.invoke.connect(self.run_guarded, Qt.ConnectionType.QueuedConnection)

    def run_guarded(self, callback: LoopCallback) -> None:
        try:
            callback()
        except BaseException as exc:  # noqa: BLE001
            # Qt aborts on exceptions escaping a slot; hand them to the pump frame instead.
            self._on_error(exc)
            return
        self._after()


class QtEventLoop:
    """Reentrant pumping via nested `QEventLoop` frames.

    `post` is safe from any thread. Timers must be scheduled from the GUI
    thread. A callback exception ends the innermost `run_until` frame and is
    re-raised from it. Frame predicates are re-checked after every callback.
    """

    def __init__(self, app: QCoreApplication | None = None) -> None:
        self._app = app or QCoreApplication.instance()
        if self._app is None:
            raise RuntimeError("create a QApplication before QtEventLoop")
        self._invoker = _Invoker(self._fail, self._check_frames)
        self._frames: list[tuple[Callable[[], bool], QEventLoop]] = []
        self._timers: dict[int, QTimer] = {}
        self._next_timer_id = 1
        self._pending_error: BaseException | None = None

    @property
    def depth(self) -> int:
        return len(self._frames)

    def post(self, callback: LoopCallback) -> None:
        self._invoker.invoke.emit(callback)

    def call_later(self, delay_seconds: float, callback: LoopCallback) -> int:
        if delay_seconds < 0.0:
            raise ValueError("delay_seconds must be >= 0")
        timer_id = self._next_timer_id
        self._next_timer_id += 1
        timer = QTimer()
        timer.setSingleShot(True)
        timer.timeout.connect(lambda: self._fire(timer_id, callback))
        self._timers[timer_id] = timer
        timer.start(int(delay_seconds * 1000))
        return timer_id

    def cancel(self, task_id: int) -> None:
        timer = self._timers.pop(task_id, None)
        if timer is not None:
            timer.stop()

    def run_until(self, predicate: Callable[[], bool]) -> None:
        if predicate():
            return
        frame = QEventLoop()
        entry = (predicate, frame)
        self._frames.append(entry)
        _LOG.debug("qt_loop_enter depth=%d", len(self._frames))
        try:
            frame.exec()
        finally:
            self._frames.remove(entry)
            _LOG.debug("qt_loop_exit depth=%d", len(self._frames) + 1)
        error = self._pending_error
        if error is not None:
            self._pending_error = None
            raise error

    def wakeup(self) -> None:
        self.post(self._check_frames)

    def _check_frames(self) -> None:
        for predicate, frame in list(self._frames):
            if predicate():
                frame.quit()

    def _fire(self, timer_id: int, callback: LoopCallback) -> None:
        self._timers.pop(timer_id, None)
        self._invoker.run_guarded(callback)

    def _fail(self, exc: BaseException) -> None:
        if not self._frames:
            raise exc
        self._pending_error = exc
        self._frames[-1][1].quit()
