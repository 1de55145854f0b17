"""Public screen-controller API contracts."""

from __future__ import annotations

from collections.abc import Iterable, MutableSequence, Sequence
from typing import Protocol

from screenkit.api.correlation import NavigationCorrelator
from screenkit.api.host import (
    ActivityResult,
    ActivityStarter,
    HostLoop,
    Intent,
    PersistenceHook,
    ScreenHost,
)
from screenkit.api.input_events import MenuItem, MotionEvent


class ScreenController(Protocol):
    """Blocking dialogs, navigation and event routing for one screen."""

    def show_confirmation_dialog(self, title: str, message: str) -> bool:
        """Ask yes/no; cancel is no."""

    def show_alert_dialog(self, title: str, message: str) -> None:
        """Show message until dismissed."""

    def select_item_from_list(self, title: str, items: Iterable[object]) -> object | None:
        """Pick one item, or None on cancel."""

    def present_screen(self, target: str, *args: object) -> object | None:
        """Show a sub-screen and return its finish value."""

    def present_activity(self, intent: Intent) -> ActivityResult:
        """Start intent and block until its result arrives."""

    def finish(self, result: object = None) -> None:
        """Close screen with result."""

    def screen_arguments(self, intent: Intent) -> tuple[object, ...] | None:
        """Return arguments passed by the presenting screen."""

    def start_activity_for_result(
        self, starter: ActivityStarter, intent: Intent, request_code: int
    ) -> None:
        """Start intent with a correlated result handler."""

    def handle_activity_result(
        self, request_code: int, result_code: int, data: Intent | None
    ) -> bool:
        """Route an incoming activity result."""

    def invoke_initialize(self, args: Sequence[object] | None) -> bool:
        """Call the matching `initialize` handler."""

    def on_create_options_menu(self, menu: MutableSequence[MenuItem]) -> bool:
        """Fill menu from the screen's declared options."""

    def on_options_item_selected(self, item: MenuItem) -> bool:
        """Route a selected command to `<identifier>Clicked`."""

    def dispatch_motion(self, method_name: str, event: MotionEvent) -> bool:
        """Route a motion event to a handler."""


def create_screen_controller(
    screen: object,
    host: ScreenHost,
    loop: HostLoop,
    *,
    correlator: NavigationCorrelator | None = None,
    persistence: PersistenceHook | None = None,
) -> ScreenController:
    """Create default screen controller implementation."""
    from screenkit.runtime.screen import ScreenController as RuntimeScreenController

    return RuntimeScreenController(
        screen, host, loop, correlator=correlator, persistence=persistence
    )
