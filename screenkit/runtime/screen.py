"""Screen controller: modal dialogs, sub-screen navigation and event routing."""

from __future__ import annotations

import logging
import weakref
from collections.abc import Callable, Iterable, MutableMapping, MutableSequence, Sequence
from typing import Final

from screenkit.api.correlation import CorrelationToken, NavigationCorrelator
from screenkit.api.host import (
    RESULT_CANCELED,
    RESULT_OK,
    ActivityResult,
    ActivityStarter,
    DialogButton,
    DialogSpec,
    HostLoop,
    Intent,
    LifecycleInjection,
    PersistenceHook,
    ScreenHost,
)
from screenkit.api.input_events import MenuItem, MotionEvent
from screenkit.runtime.correlator import default_correlator, pending_handler_key
from screenkit.runtime.dispatch import (
    MotionEventDispatcher,
    RuntimeCommandRouter,
    RuntimeEventDispatcher,
)
from screenkit.runtime.modal import RuntimeModalTask

_LOG = logging.getLogger("screenkit.screen")

SCREEN_ARGUMENTS_KEY: Final = "screenkit.screen.arguments"
SCREEN_RESULT_KEY: Final = "screenkit.screen.result"
INSTANCE_DATA_KEY: Final = "screenkit.screen.instance_data"
PRESENT_REQUEST_CODE: Final = 0x5C4E0001


class ScreenController:
    """Composition object that gives a screen blocking dialogs and navigation."""

    def __init__(
        self,
        screen: object,
        host: ScreenHost,
        loop: HostLoop,
        *,
        correlator: NavigationCorrelator | None = None,
        persistence: PersistenceHook | None = None,
    ) -> None:
        self._screen = screen
        self._host = host
        self._loop = loop
        self._correlator = correlator or default_correlator()
        self._persistence = persistence
        self._instance_data: dict[str, object] = {}
        self._injections: weakref.WeakKeyDictionary[LifecycleInjection, None] = (
            weakref.WeakKeyDictionary()
        )
        self._presented: list[RuntimeModalTask[ActivityResult]] = []
        self._commands = RuntimeCommandRouter(screen)
        self._initialize = RuntimeEventDispatcher("initialize")
        self._motion: dict[str, MotionEventDispatcher] = {}

    @property
    def screen(self) -> object:
        return self._screen

    @property
    def host(self) -> ScreenHost:
        return self._host

    @property
    def loop(self) -> HostLoop:
        return self._loop

    @property
    def correlator(self) -> NavigationCorrelator:
        return self._correlator

    @property
    def instance_data(self) -> dict[str, object]:
        return self._instance_data

    # Lifecycle

    def add_lifecycle_injection(self, injection: LifecycleInjection) -> None:
        self._injections.setdefault(injection, None)

    def remove_lifecycle_injection(self, injection: LifecycleInjection) -> None:
        self._injections.pop(injection, None)

    def run_pause_injections(self) -> None:
        for injection in list(self._injections.keys()):
            injection.pause()

    def run_resume_injections(self) -> None:
        for injection in list(self._injections.keys()):
            injection.resume()

    def save_instance_state(self, bundle: MutableMapping[str, object]) -> None:
        bundle[INSTANCE_DATA_KEY] = dict(self._instance_data)

    def restore_instance_state(self, bundle: MutableMapping[str, object] | None) -> None:
        if bundle is None:
            return
        data = bundle.get(INSTANCE_DATA_KEY)
        if isinstance(data, dict):
            self._instance_data = dict(data)

    # Dialogs

    def show_confirmation_dialog(self, title: str, message: str) -> bool:
        """Ask a yes/no question. No and cancel both yield False."""
        spec = DialogSpec(
            title=title,
            message=message,
            buttons=(DialogButton("Yes", True), DialogButton("No", False)),
        )
        return self._show_dialog(spec) is True

    def show_alert_dialog(self, title: str, message: str) -> None:
        """Show a message and wait until it is dismissed."""
        self._show_dialog(DialogSpec(title=title, message=message, buttons=(DialogButton("OK"),)))

    def select_item_from_list[TItem](
        self,
        title: str,
        items: Iterable[TItem],
        render: Callable[[TItem], str] = str,
    ) -> TItem | None:
        """Let the user pick one item. Returns None when cancelled."""
        choices = list(items)
        spec = DialogSpec(title=title, items=tuple(render(item) for item in choices))
        index = self._show_dialog(spec)
        if not isinstance(index, int) or not 0 <= index < len(choices):
            return None
        return choices[index]

    def _show_dialog(self, spec: DialogSpec) -> object:
        def trigger(task: RuntimeModalTask[object]) -> None:
            self._host.show_dialog(
                spec,
                on_choice=task.end_modal,
                on_cancel=lambda: task.end_modal(None),
            )

        return RuntimeModalTask(self._loop, trigger).execute()

    # Navigation

    def present_screen(self, target: str, *args: object) -> object | None:
        """Show another screen and return the value it finishes with.

        Returns None when the presented screen was closed without a result.
        """
        intent = Intent(target=target)
        token = self._correlator.register_arguments(args, owner=self._screen)
        intent.extras[SCREEN_ARGUMENTS_KEY] = token
        try:
            outcome = self.present_activity(intent)
        finally:
            self._correlator.release_arguments(token)
        if outcome.result_code != RESULT_OK or outcome.data is None:
            return None
        result_token = outcome.data.extras.get(SCREEN_RESULT_KEY)
        if not isinstance(result_token, CorrelationToken):
            return None
        return self._correlator.take_result(result_token)

    def present_activity(self, intent: Intent) -> ActivityResult:
        """Start intent and block until its activity result arrives."""

        def trigger(task: RuntimeModalTask[ActivityResult]) -> None:
            self._host.start_for_result(intent, PRESENT_REQUEST_CODE)

        task: RuntimeModalTask[ActivityResult] = RuntimeModalTask(self._loop, trigger)
        self._presented.append(task)
        try:
            outcome = task.execute()
        finally:
            self._presented.remove(task)
        if outcome is None:
            return ActivityResult(request_code=PRESENT_REQUEST_CODE, result_code=RESULT_CANCELED)
        return outcome

    def finish(self, result: object = None) -> None:
        """Close this screen, handing result back to the presenting screen."""
        data = Intent()
        data.extras[SCREEN_RESULT_KEY] = self._correlator.register_result(result)
        self._host.set_result(RESULT_OK, data)
        self._host.finish()

    def screen_arguments(self, intent: Intent) -> tuple[object, ...] | None:
        """Return arguments the presenting screen passed, if still available."""
        token = intent.extras.get(SCREEN_ARGUMENTS_KEY)
        if not isinstance(token, CorrelationToken):
            return None
        return self._correlator.take_arguments(token)

    def start_activity_for_result(
        self,
        starter: ActivityStarter,
        intent: Intent,
        request_code: int,
    ) -> None:
        """Start intent; starter receives the result on `handle_activity_result`."""
        screen = self._screen

        def deliver(payload: object) -> None:
            if not isinstance(payload, ActivityResult):
                raise TypeError(f"expected ActivityResult, got {type(payload).__name__}")
            starter.handle_activity_result(
                screen, payload.data, payload.request_code, payload.result_code
            )

        key = pending_handler_key(request_code)
        replaced = self._instance_data.get(key)
        if isinstance(replaced, CorrelationToken):
            self._correlator.take_pending_handler(replaced)
            _LOG.warning("pending_handler_replaced request_code=%d", request_code)
        self._correlator.register_pending_handler(deliver, self._instance_data, key=key)
        self._host.start_for_result(intent, request_code)

    def handle_activity_result(
        self,
        request_code: int,
        result_code: int,
        data: Intent | None,
    ) -> bool:
        """Route an activity result to the blocked presenter or a pending starter."""
        outcome = ActivityResult(request_code=request_code, result_code=result_code, data=data)
        if request_code == PRESENT_REQUEST_CODE:
            if not self._presented:
                _LOG.debug("activity_result_unclaimed request_code=%#x", request_code)
                return False
            return self._presented[-1].end_modal(outcome)
        token = self._instance_data.pop(pending_handler_key(request_code), None)
        if not isinstance(token, CorrelationToken):
            return False
        return self._correlator.take_and_dispatch(token, outcome)

    # Event routing

    def invoke_initialize(self, args: Sequence[object] | None) -> bool:
        """Load persistent context, then call the matching `initialize` handler."""
        if self._persistence is not None:
            self._persistence.load_persistent_context(self._screen)
        return self._initialize.call_method_on(self._screen, *(args or ()))

    def on_create_options_menu(self, menu: MutableSequence[MenuItem]) -> bool:
        items: Sequence[MenuItem] = getattr(type(self._screen), "options_menu", ())
        if not items:
            return False
        menu.extend(items)
        return True

    def on_options_item_selected(self, item: MenuItem) -> bool:
        return self._commands.dispatch(item.identifier, item)

    def dispatch_motion(self, method_name: str, event: MotionEvent) -> bool:
        dispatcher = self._motion.get(method_name)
        if dispatcher is None:
            dispatcher = MotionEventDispatcher(method_name)
            self._motion[method_name] = dispatcher
        return dispatcher.call_method_on(self._screen, event)


class Screen:
    """Convenience base class that owns a `ScreenController`."""

    options_menu: tuple[MenuItem, ...] = ()

    def __init__(
        self,
        host: ScreenHost,
        loop: HostLoop,
        *,
        correlator: NavigationCorrelator | None = None,
        persistence: PersistenceHook | None = None,
    ) -> None:
        self.screen_controller = ScreenController(
            self, host, loop, correlator=correlator, persistence=persistence
        )

    def show_confirmation_dialog(self, title: str, message: str) -> bool:
        return self.screen_controller.show_confirmation_dialog(title, message)

    def show_alert_dialog(self, title: str, message: str) -> None:
        self.screen_controller.show_alert_dialog(title, message)

    def present_screen(self, target: str, *args: object) -> object | None:
        return self.screen_controller.present_screen(target, *args)

    def finish(self, result: object = None) -> None:
        self.screen_controller.finish(result)


def get_controller(obj: object) -> ScreenController | None:
    """Return the controller an object carries, if any."""
    controller = getattr(obj, "screen_controller", None)
    if isinstance(controller, ScreenController):
        return controller
    return None
