"""Receiver capability resolution for convention-based handler dispatch.

Handler discovery runs once per receiver class: every public method is turned
into one `HandlerSignature` per arity it accepts, and the result is cached in
a process-wide weak-keyed table. Per-call resolution only compares argument
types against cached signatures.

Type matching is exact. An annotated parameter accepts an argument only when
`type(arg)` is the annotation (or one member of a union annotation). Missing,
`object` and `Any` annotations accept anything. There is no subclass widening
and no numeric promotion.
"""

from __future__ import annotations

import inspect
import logging
import threading
import types
import typing
import weakref
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Annotated, Any, Union, get_args, get_origin

from screenkit.api.dispatch import ArgTypes, ArgumentTransformer
from screenkit.runtime.errors import RECOVERABLE_RUNTIME_ERRORS, log_recoverable

_LOG = logging.getLogger("screenkit.dispatch")
_MISSING = object()

# None in a parameter slot means "any argument type".
ParamTypes = tuple[type, ...] | None


def arg_types_of(args: Sequence[object]) -> ArgTypes:
    """Return exact runtime types for an argument list."""
    return tuple(type(arg) for arg in args)


@dataclass(frozen=True, slots=True)
class HandlerSignature:
    """One callable shape of a public receiver method."""

    name: str
    params: tuple[ParamTypes, ...]

    @property
    def arity(self) -> int:
        return len(self.params)

    def matches(self, arg_types: ArgTypes) -> bool:
        """Return whether argument types fit this signature exactly."""
        if len(arg_types) != len(self.params):
            return False
        for accepted, actual in zip(self.params, arg_types, strict=True):
            if accepted is not None and actual not in accepted:
                return False
        return True


class HandlerTable:
    """Immutable `(name, arity)` signature index for one receiver class."""

    def __init__(self, owner: type, signatures: Iterable[HandlerSignature]) -> None:
        self._owner_name = owner.__qualname__
        self._by_key: dict[tuple[str, int], HandlerSignature] = {}
        for signature in signatures:
            self._by_key.setdefault((signature.name, signature.arity), signature)

    @property
    def owner_name(self) -> str:
        return self._owner_name

    def lookup(self, name: str, arg_types: ArgTypes) -> HandlerSignature | None:
        """Return the signature matching name and exact argument types."""
        signature = self._by_key.get((name, len(arg_types)))
        if signature is None or not signature.matches(arg_types):
            return None
        return signature

    def names(self) -> frozenset[str]:
        """Return handler names exposed by the class."""
        return frozenset(name for name, _ in self._by_key)

    def __len__(self) -> int:
        return len(self._by_key)


_TABLES: weakref.WeakKeyDictionary[type, HandlerTable] = weakref.WeakKeyDictionary()
_TABLES_LOCK = threading.Lock()


def handler_table_for(cls: type) -> HandlerTable:
    """Return cached handler table for a class, building it on first use."""
    with _TABLES_LOCK:
        table = _TABLES.get(cls)
    if table is not None:
        return table
    built = build_handler_table(cls)
    with _TABLES_LOCK:
        # Another thread may have built the same table meanwhile; keep the first.
        return _TABLES.setdefault(cls, built)


def clear_handler_tables() -> None:
    """Forget cached tables (classes patched at runtime)."""
    with _TABLES_LOCK:
        _TABLES.clear()


def build_handler_table(cls: type) -> HandlerTable:
    """Introspect public methods of cls into a handler table."""
    signatures: list[HandlerSignature] = []
    for name in dir(cls):
        if name.startswith("_"):
            continue
        try:
            attr = inspect.getattr_static(cls, name)
            signatures.extend(_signatures_for(name, attr))
        except RECOVERABLE_RUNTIME_ERRORS:
            log_recoverable(_LOG, f"handler introspection failed for {cls.__qualname__}.{name}")
    return HandlerTable(cls, signatures)


def _signatures_for(name: str, attr: object) -> tuple[HandlerSignature, ...]:
    if isinstance(attr, staticmethod):
        func, bound = attr.__func__, False
    elif isinstance(attr, classmethod):
        func, bound = attr.__func__, True
    elif inspect.isfunction(attr):
        func, bound = attr, True
    else:
        return ()
    signature = inspect.signature(func)
    try:
        hints = typing.get_type_hints(func)
    except NameError as exc:
        _LOG.warning(
            "handler_annotations_unresolved handler=%s error=%s", func.__qualname__, exc
        )
        hints = {}
    params = list(signature.parameters.values())
    if bound and params:
        params = params[1:]
    positional: list[inspect.Parameter] = []
    for param in params:
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD):
            positional.append(param)
        elif param.kind is param.VAR_POSITIONAL:
            return ()
        elif param.kind is param.KEYWORD_ONLY and param.default is param.empty:
            return ()
    required = sum(1 for param in positional if param.default is param.empty)
    accepted = tuple(_accepted_types(hints.get(param.name, _MISSING)) for param in positional)
    return tuple(
        HandlerSignature(name=name, params=accepted[:arity])
        for arity in range(required, len(positional) + 1)
    )


def _accepted_types(annotation: object) -> ParamTypes:
    if annotation is _MISSING or annotation is Any or annotation is object:
        return None
    origin = get_origin(annotation)
    if origin is Annotated:
        return _accepted_types(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        members: list[type] = []
        for member in get_args(annotation):
            accepted = _accepted_types(member)
            if accepted is None:
                return None
            members.extend(accepted)
        return tuple(members)
    if isinstance(origin, type):
        return (origin,)
    if isinstance(annotation, type):
        return (annotation,)
    # TypeVar, Literal and other typing forms carry no exact runtime type.
    return None


@dataclass(frozen=True, slots=True)
class Resolution:
    """Viable handler plus the transformer (None = identity) that reaches it."""

    signature: HandlerSignature
    transformer: ArgumentTransformer | None = None

    def prepare(self, args: tuple[object, ...]) -> tuple[object, ...]:
        """Return the argument list the handler is called with."""
        if self.transformer is None:
            return args
        return self.transformer.transform(args)


class CapabilityResolver:
    """First-match resolution over identity and registered transformers."""

    def has_handler(self, receiver: object, method_name: str, arg_types: ArgTypes) -> bool:
        """Return whether receiver exposes `method_name` for exact arg types."""
        return handler_table_for(type(receiver)).lookup(method_name, arg_types) is not None

    def candidates(
        self,
        receiver: object,
        method_name: str,
        arg_types: ArgTypes,
        transformers: Iterable[ArgumentTransformer],
    ) -> list[ArgumentTransformer | None]:
        """Return identity followed by supporting transformers in registration order."""
        found: list[ArgumentTransformer | None] = [None]
        for transformer in transformers:
            if transformer.supports(receiver, method_name, arg_types):
                found.append(transformer)
        return found

    def resolve(
        self,
        receiver: object,
        method_name: str,
        args: tuple[object, ...],
        transformers: Iterable[ArgumentTransformer] = (),
    ) -> Resolution | None:
        """Return the first viable candidate, or None when unsupported."""
        table = handler_table_for(type(receiver))
        arg_types = arg_types_of(args)
        for candidate in self.candidates(receiver, method_name, arg_types, transformers):
            wanted = arg_types if candidate is None else candidate.target_types
            signature = table.lookup(method_name, wanted)
            if signature is not None:
                return Resolution(signature=signature, transformer=candidate)
        return None
