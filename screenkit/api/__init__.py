"""Public screenkit API contracts."""

from screenkit.api.correlation import (
    CorrelationToken,
    NavigationCorrelator,
    PendingHandler,
    create_navigation_correlator,
    default_correlator,
)
from screenkit.api.dispatch import (
    NOT_CALLED,
    ArgumentTransformer,
    CommandRouter,
    EventDispatcher,
    create_argument_transformer,
    create_command_router,
    create_event_dispatcher,
    create_motion_dispatcher,
    dispatch,
    invoke_if_supported,
)
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
    create_event_loop,
)
from screenkit.api.input_events import MenuItem, MotionEvent
from screenkit.api.logging import LoggingConfig
from screenkit.api.modal import ModalState, ModalTask, create_modal_task, present_modal
from screenkit.api.screens import ScreenController, create_screen_controller

__all__ = [
    "ActivityResult",
    "ActivityStarter",
    "ArgumentTransformer",
    "CommandRouter",
    "CorrelationToken",
    "DialogButton",
    "DialogSpec",
    "EventDispatcher",
    "HostLoop",
    "Intent",
    "LifecycleInjection",
    "LoggingConfig",
    "MenuItem",
    "ModalState",
    "ModalTask",
    "MotionEvent",
    "NOT_CALLED",
    "NavigationCorrelator",
    "PendingHandler",
    "PersistenceHook",
    "RESULT_CANCELED",
    "RESULT_OK",
    "ScreenController",
    "ScreenHost",
    "create_argument_transformer",
    "create_command_router",
    "create_event_dispatcher",
    "create_event_loop",
    "create_modal_task",
    "create_motion_dispatcher",
    "create_navigation_correlator",
    "create_screen_controller",
    "default_correlator",
    "dispatch",
    "invoke_if_supported",
    "present_modal",
]
