from __future__ import annotations

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qt_app():
    qt_widgets = pytest.importorskip("PyQt6.QtWidgets")
    return qt_widgets.QApplication.instance() or qt_widgets.QApplication([])


@pytest.fixture
def qt_loop(qt_app):
    from screenkit.qt.event_loop import QtEventLoop

    return QtEventLoop(qt_app)
