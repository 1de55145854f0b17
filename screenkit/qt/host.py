"""`ScreenHost` backed by window-modal Qt dialogs opened without blocking."""

from __future__ import annotations

import logging
from collections.abc import Callable

from screenkit.api.host import RESULT_CANCELED, DialogSpec, HostLoop, Intent

try:
    from PyQt6.QtCore import Qt
    from PyQt6.QtWidgets import QDialog, QInputDialog, QMessageBox, QWidget
except Exception as exc:  # pragma: no cover
    raise RuntimeError("PyQt6 is required for the Qt host. Install dependency 'PyQt6'.") from exc

_LOG = logging.getLogger("screenkit.qt")

Navigator = Callable[[Intent, int], None]
FinishListener = Callable[[int, Intent | None], None]


class QtScreenHost:
    """Present dialogs with `open()` so the modal bridge owns the waiting."""

    def __init__(
        self,
        owner: QWidget,
        loop: HostLoop,
        *,
        navigator: Navigator | None = None,
        on_finished: FinishListener | None = None,
    ) -> None:
        self._owner = owner
        self._loop = loop
        self._navigator = navigator
        self._on_finished = on_finished
        self._result: tuple[int, Intent | None] | None = None

    def show_dialog(
        self,
        spec: DialogSpec,
        on_choice: Callable[[object], None],
        on_cancel: Callable[[], None],
    ) -> None:
        if spec.items:
            self._show_list_dialog(spec, on_choice, on_cancel)
        else:
            self._show_message_box(spec, on_choice, on_cancel)

    def start_for_result(self, intent: Intent, request_code: int) -> None:
        if self._navigator is None:
            raise RuntimeError("QtScreenHost has no navigator for start_for_result")
        self._navigator(intent, request_code)

    def set_result(self, result_code: int, data: Intent | None) -> None:
        self._result = (result_code, data)

    def finish(self) -> None:
        self._owner.close()
        listener = self._on_finished
        if listener is None:
            return
        result_code, data = self._result or (RESULT_CANCELED, None)
        self._loop.post(lambda: listener(result_code, data))

    def _show_message_box(
        self,
        spec: DialogSpec,
        on_choice: Callable[[object], None],
        on_cancel: Callable[[], None],
    ) -> None:
        box = QMessageBox(self._owner)
        box.setWindowTitle(spec.title)
        box.setText(spec.message)
        box.setWindowModality(Qt.WindowModality.WindowModal)
        box.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)
        choices = [
            (box.addButton(button.label, QMessageBox.ButtonRole.AcceptRole), button.value)
            for button in spec.buttons
        ]
        if spec.cancelable and choices:
            # Escape reports the last button, which carries the negative answer.
            box.setEscapeButton(choices[-1][0])

        def finished(_: int) -> None:
            clicked = box.clickedButton()
            for widget, value in choices:
                if widget is clicked:
                    on_choice(value)
                    return
            on_cancel()

        box.finished.connect(finished)
        box.open()

    def _show_list_dialog(
        self,
        spec: DialogSpec,
        on_choice: Callable[[object], None],
        on_cancel: Callable[[], None],
    ) -> None:
        dialog = QInputDialog(self._owner)
        dialog.setWindowTitle(spec.title)
        dialog.setLabelText(spec.message or spec.title)
        dialog.setComboBoxItems(list(spec.items))
        dialog.setComboBoxEditable(False)
        dialog.setWindowModality(Qt.WindowModality.WindowModal)
        dialog.setAttribute(Qt.WidgetAttribute.WA_DeleteOnClose)

        def finished(code: int) -> None:
            if code != QDialog.DialogCode.Accepted.value:
                on_cancel()
                return
            text = dialog.textValue()
            if text not in spec.items:
                _LOG.debug("qt_list_dialog_unknown_item text=%r", text)
                on_cancel()
                return
            on_choice(spec.items.index(text))

        dialog.finished.connect(finished)
        dialog.open()
