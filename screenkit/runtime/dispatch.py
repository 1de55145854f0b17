"""Dynamic event dispatch onto convention-named receiver methods."""

from __future__ import annotations

import logging

from screenkit.api.dispatch import NOT_CALLED, ArgTypes, ArgumentTransformer
from screenkit.runtime.capabilities import (
    CapabilityResolver,
    Resolution,
    arg_types_of,
    handler_table_for,
)
from screenkit.runtime.config import enabled_dispatch_trace
from screenkit.runtime.errors import RECOVERABLE_RUNTIME_ERRORS, log_recoverable
from screenkit.runtime.transformers import RuntimeArgumentTransformer, xy_transformer

_LOG = logging.getLogger("screenkit.dispatch")
_RESOLVER = CapabilityResolver()


class RuntimeEventDispatcher:
    """Resolve and invoke a handler named `method_name` on arbitrary receivers.

    Resolution failures are never errors: an unsupported receiver yields
    `NOT_CALLED`. Exceptions raised by the handler itself propagate unchanged.
    """

    def __init__(
        self,
        method_name: str,
        *transformers: ArgumentTransformer,
        resolver: CapabilityResolver | None = None,
    ) -> None:
        self._method_name = method_name
        self._transformers: tuple[ArgumentTransformer, ...] = transformers
        self._resolver = resolver or _RESOLVER
        self._trace = enabled_dispatch_trace()

    @property
    def method_name(self) -> str:
        return self._method_name

    @property
    def transformers(self) -> tuple[ArgumentTransformer, ...]:
        return self._transformers

    def lookup_transformers(
        self, receiver: object, arg_types: ArgTypes
    ) -> list[ArgumentTransformer]:
        """Return transformer candidates in priority order. Subclasses extend this."""
        _ = (receiver, arg_types)
        return list(self._transformers)

    def resolve(self, receiver: object, *args: object) -> Resolution | None:
        """Return viable resolution for receiver and args, or None."""
        try:
            transformers = self.lookup_transformers(receiver, arg_types_of(args))
            resolution = self._resolver.resolve(receiver, self._method_name, args, transformers)
        except RECOVERABLE_RUNTIME_ERRORS:
            log_recoverable(_LOG, f"dispatch resolution failed method={self._method_name}")
            return None
        if self._trace:
            _LOG.debug(
                "dispatch_resolve method=%s receiver=%s arity=%d resolved=%s transformer=%s",
                self._method_name,
                type(receiver).__qualname__,
                len(args),
                resolution is not None,
                _transformer_label(resolution),
            )
        return resolution

    def supported_by(self, receiver: object, *args: object) -> bool:
        """Return whether receiver exposes a viable handler for args."""
        return self.resolve(receiver, *args) is not None

    def invoke(self, receiver: object, *args: object) -> object:
        """Invoke handler and return its result, or `NOT_CALLED`."""
        resolution = self.resolve(receiver, *args)
        if resolution is None:
            return NOT_CALLED
        try:
            call_args = resolution.prepare(args)
            handler = getattr(receiver, resolution.signature.name)
        except RECOVERABLE_RUNTIME_ERRORS:
            log_recoverable(_LOG, f"dispatch preparation failed method={self._method_name}")
            return NOT_CALLED
        return handler(*call_args)

    def call_method_on(self, receiver: object, *args: object) -> bool:
        """Invoke handler and return whether one ran."""
        return self.invoke(receiver, *args) is not NOT_CALLED


class MotionEventDispatcher(RuntimeEventDispatcher):
    """Dispatcher for pointer events that may also unpack them to `(x, y)`."""

    def __init__(self, method_name: str, *transformers: ArgumentTransformer) -> None:
        super().__init__(method_name, *transformers)
        self._xy_transformer: RuntimeArgumentTransformer | None = None

    def lookup_transformers(
        self, receiver: object, arg_types: ArgTypes
    ) -> list[ArgumentTransformer]:
        found = super().lookup_transformers(receiver, arg_types)
        xy = self.xy_transformer()
        if xy.supports(receiver, self.method_name, arg_types):
            found.append(xy)
        return found

    def xy_transformer(self) -> RuntimeArgumentTransformer:
        if self._xy_transformer is None:
            self._xy_transformer = xy_transformer()
        return self._xy_transformer


class RuntimeCommandRouter:
    """Map command identifiers to `<identifier><suffix>` handlers on one receiver.

    The identifier-to-dispatcher map is built once from the receiver's
    handler table. Each command tries the one-argument form with the event
    first, then the zero-argument form.
    """

    def __init__(self, receiver: object, *, suffix: str = "Clicked") -> None:
        self._receiver = receiver
        self._suffix = suffix
        self._routes: dict[str, RuntimeEventDispatcher] = {}
        for name in sorted(handler_table_for(type(receiver)).names()):
            if name.endswith(suffix) and len(name) > len(suffix):
                identifier = name[: -len(suffix)]
                self._routes[identifier] = RuntimeEventDispatcher(name)

    @property
    def identifiers(self) -> frozenset[str]:
        return frozenset(self._routes)

    def handler_name(self, identifier: str) -> str:
        return f"{identifier}{self._suffix}"

    def dispatch(self, identifier: str, event: object | None = None) -> bool:
        """Dispatch one command. Return whether a handler ran."""
        dispatcher = self._routes.get(identifier)
        if dispatcher is None:
            return False
        if event is not None and dispatcher.supported_by(self._receiver, event):
            return dispatcher.call_method_on(self._receiver, event)
        return dispatcher.call_method_on(self._receiver)


def _transformer_label(resolution: Resolution | None) -> str:
    if resolution is None:
        return "-"
    transformer = resolution.transformer
    if transformer is None:
        return "identity"
    return getattr(transformer, "name", "") or type(transformer).__name__


EventDispatcher = RuntimeEventDispatcher
CommandRouter = RuntimeCommandRouter
