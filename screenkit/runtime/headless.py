"""Toolkit-free screen host for automation, scripted flows and tests."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Final

from screenkit.api.host import RESULT_CANCELED, DialogSpec, HostLoop, Intent


class _Dismiss:
    def __repr__(self) -> str:
        return "DISMISS"


DISMISS: Final = _Dismiss()

DialogResponder = Callable[[DialogSpec], object]
Navigator = Callable[[Intent, int], None]
FinishListener = Callable[[int, Intent | None], None]


@dataclass(slots=True)
class OpenDialog:
    """Dialog presented on the headless host and not yet answered."""

    spec: DialogSpec
    on_choice: Callable[[object], None]
    on_cancel: Callable[[], None]
    answered: bool = False


class HeadlessScreenHost:
    """`ScreenHost` that records requests and answers them through the loop.

    Answers are always posted, never delivered inline, so they reach a modal
    task the same way a toolkit callback would. A `responder` answers dialogs
    automatically; returning `DISMISS` cancels.
    """

    def __init__(
        self,
        loop: HostLoop,
        *,
        responder: DialogResponder | None = None,
        navigator: Navigator | None = None,
        on_finished: FinishListener | None = None,
    ) -> None:
        self._loop = loop
        self._responder = responder
        self._navigator = navigator
        self._on_finished = on_finished
        self.dialogs: list[OpenDialog] = []
        self.started: list[tuple[Intent, int]] = []
        self.result: tuple[int, Intent | None] | None = None
        self.finished = False

    def open_dialogs(self) -> list[OpenDialog]:
        return [dialog for dialog in self.dialogs if not dialog.answered]

    def show_dialog(
        self,
        spec: DialogSpec,
        on_choice: Callable[[object], None],
        on_cancel: Callable[[], None],
    ) -> None:
        dialog = OpenDialog(spec=spec, on_choice=on_choice, on_cancel=on_cancel)
        self.dialogs.append(dialog)
        if self._responder is None:
            return
        answer = self._responder(spec)
        if answer is DISMISS:
            self.cancel(dialog)
        else:
            self.choose(answer, dialog)

    def choose(self, value: object, dialog: OpenDialog | None = None) -> None:
        """Answer a dialog (default: most recent open one) with value."""
        target = dialog or self._top_dialog()
        target.answered = True
        self._loop.post(lambda: target.on_choice(value))

    def cancel(self, dialog: OpenDialog | None = None) -> None:
        """Dismiss a dialog (default: most recent open one)."""
        target = dialog or self._top_dialog()
        target.answered = True
        self._loop.post(target.on_cancel)

    def start_for_result(self, intent: Intent, request_code: int) -> None:
        self.started.append((intent, request_code))
        if self._navigator is not None:
            self._navigator(intent, request_code)

    def set_result(self, result_code: int, data: Intent | None) -> None:
        self.result = (result_code, data)

    def finish(self) -> None:
        self.finished = True
        listener = self._on_finished
        if listener is None:
            return
        result_code, data = self.result or (RESULT_CANCELED, None)
        self._loop.post(lambda: listener(result_code, data))

    def _top_dialog(self) -> OpenDialog:
        pending = self.open_dialogs()
        if not pending:
            raise RuntimeError("no open dialog to answer")
        return pending[-1]
