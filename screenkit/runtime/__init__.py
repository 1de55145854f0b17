"""Screenkit runtime modules."""

from screenkit.api.correlation import CorrelationToken
from screenkit.api.modal import ModalState
from screenkit.runtime.capabilities import (
    CapabilityResolver,
    HandlerSignature,
    HandlerTable,
    Resolution,
    handler_table_for,
)
from screenkit.runtime.config import ScreenkitConfig, load_config
from screenkit.runtime.correlator import NavigationCorrelator, TokenSource, default_correlator
from screenkit.runtime.dispatch import (
    CommandRouter,
    EventDispatcher,
    MotionEventDispatcher,
)
from screenkit.runtime.event_loop import EventLoop
from screenkit.runtime.headless import DISMISS, HeadlessScreenHost
from screenkit.runtime.logging import setup_logging
from screenkit.runtime.modal import ModalTask
from screenkit.runtime.scheduler import Scheduler
from screenkit.runtime.screen import Screen, ScreenController, get_controller
from screenkit.runtime.transformers import RuntimeArgumentTransformer, xy_transformer

__all__ = [
    "CapabilityResolver",
    "CommandRouter",
    "CorrelationToken",
    "DISMISS",
    "EventDispatcher",
    "EventLoop",
    "HandlerSignature",
    "HandlerTable",
    "HeadlessScreenHost",
    "ModalState",
    "ModalTask",
    "MotionEventDispatcher",
    "NavigationCorrelator",
    "Resolution",
    "RuntimeArgumentTransformer",
    "Scheduler",
    "Screen",
    "ScreenController",
    "ScreenkitConfig",
    "TokenSource",
    "default_correlator",
    "get_controller",
    "handler_table_for",
    "load_config",
    "setup_logging",
    "xy_transformer",
]
