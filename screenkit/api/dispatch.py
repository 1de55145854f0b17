"""Public dynamic-dispatch API contracts."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Final, Protocol

ArgTypes = tuple[type, ...]
TransformFn = Callable[[tuple[object, ...]], Sequence[object]]


class _NotCalled:
    """Marker returned by `invoke` when no handler was resolved."""

    _instance: _NotCalled | None = None

    def __new__(cls) -> _NotCalled:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NOT_CALLED"


NOT_CALLED: Final = _NotCalled()


class ArgumentTransformer(Protocol):
    """Pure adapter from a raw argument shape to a handler's parameter shape."""

    @property
    def target_types(self) -> ArgTypes:
        """Parameter types produced by `transform`."""

    def accepts(self, arg_types: ArgTypes) -> bool:
        """Return whether the raw argument shape can be transformed."""

    def supports(self, receiver: object, method_name: str, arg_types: ArgTypes) -> bool:
        """Return whether receiver has a handler for the transformed shape."""

    def transform(self, args: tuple[object, ...]) -> tuple[object, ...]:
        """Map raw arguments to the target shape."""


class EventDispatcher(Protocol):
    """Route one named event to a matching handler method on a receiver."""

    @property
    def method_name(self) -> str:
        """Handler method name this dispatcher looks for."""

    def supported_by(self, receiver: object, *args: object) -> bool:
        """Return whether receiver exposes a viable handler for args."""

    def invoke(self, receiver: object, *args: object) -> object:
        """Invoke handler and return its result, or `NOT_CALLED`."""

    def call_method_on(self, receiver: object, *args: object) -> bool:
        """Invoke handler and return whether one ran."""


class CommandRouter(Protocol):
    """Route command identifiers to `<identifier>Clicked` handlers."""

    def dispatch(self, identifier: str, event: object | None = None) -> bool:
        """Dispatch one command. Return whether a handler ran."""


def create_argument_transformer(
    target_types: ArgTypes,
    transform: TransformFn,
    *,
    source_types: ArgTypes | None = None,
    name: str = "",
) -> ArgumentTransformer:
    """Create default transformer implementation."""
    from screenkit.runtime.transformers import RuntimeArgumentTransformer

    return RuntimeArgumentTransformer(
        target_types=target_types,
        transform_fn=transform,
        source_types=source_types,
        name=name,
    )


def create_event_dispatcher(
    method_name: str,
    *transformers: ArgumentTransformer,
) -> EventDispatcher:
    """Create default event dispatcher implementation."""
    from screenkit.runtime.dispatch import RuntimeEventDispatcher

    return RuntimeEventDispatcher(method_name, *transformers)


def create_motion_dispatcher(method_name: str) -> EventDispatcher:
    """Create dispatcher that also unpacks motion events into `(x, y)`."""
    from screenkit.runtime.dispatch import MotionEventDispatcher

    return MotionEventDispatcher(method_name)


def create_command_router(receiver: object, *, suffix: str = "Clicked") -> CommandRouter:
    """Create command router bound to one receiver."""
    from screenkit.runtime.dispatch import RuntimeCommandRouter

    return RuntimeCommandRouter(receiver, suffix=suffix)


def dispatch(method_name: str, receiver: object, *args: object) -> bool:
    """Invoke `method_name` on receiver if supported. Return whether it ran."""
    return create_event_dispatcher(method_name).call_method_on(receiver, *args)


def invoke_if_supported(method_name: str, receiver: object, *args: object) -> object:
    """Invoke `method_name` on receiver if supported, else return `NOT_CALLED`."""
    return create_event_dispatcher(method_name).invoke(receiver, *args)
