from __future__ import annotations

import logging
from typing import Any

import pytest

from screenkit.api.input_events import MotionEvent
from screenkit.runtime.capabilities import (
    CapabilityResolver,
    HandlerSignature,
    arg_types_of,
    build_handler_table,
    handler_table_for,
)
from screenkit.runtime.transformers import xy_transformer


class _BaseEvent:
    pass


class _DerivedEvent(_BaseEvent):
    pass


class TypedReceiver:
    def onMove(self, x: float, y: float) -> None:
        pass

    def onBase(self, event: _BaseEvent) -> None:
        pass

    def onMaybe(self, value: int | None) -> None:
        pass

    def onAnything(self, value, other: Any, third: object) -> None:
        pass

    def onDefaults(self, a: int, b: int = 0, c: str = "") -> None:
        pass

    def onVarargs(self, *values: int) -> None:
        pass

    def onKeywordOnly(self, *, required: int) -> None:
        pass

    def onKeywordDefault(self, value: int, *, flag: bool = False) -> None:
        pass

    @staticmethod
    def onStatic(value: str) -> None:
        pass

    @classmethod
    def onClass(cls, value: str) -> None:
        pass

    def _hidden(self) -> None:
        pass

    def broken(self, value: "NoSuchType") -> None:  # noqa: F821
        pass

    label = "not a method"


class PriorityReceiver:
    def onMove(self, first: MotionEvent | float, second: float | None = None) -> None:
        pass


class InheritingReceiver(TypedReceiver):
    def extra(self) -> None:
        pass


def test_signature_matching_is_exact_per_position() -> None:
    signature = HandlerSignature(name="h", params=((float,), None))
    assert signature.arity == 2
    assert signature.matches((float, str)) is True
    assert signature.matches((int, str)) is False
    assert signature.matches((float,)) is False


def test_annotated_parameters_require_exact_types() -> None:
    table = build_handler_table(TypedReceiver)
    assert table.lookup("onMove", (float, float)) is not None
    assert table.lookup("onMove", (int, int)) is None
    assert table.lookup("onBase", (_BaseEvent,)) is not None
    assert table.lookup("onBase", (_DerivedEvent,)) is None


def test_union_and_optional_annotations_accept_each_member() -> None:
    table = build_handler_table(TypedReceiver)
    assert table.lookup("onMaybe", (int,)) is not None
    assert table.lookup("onMaybe", (type(None),)) is not None
    assert table.lookup("onMaybe", (bool,)) is None


def test_unannotated_any_and_object_parameters_accept_everything() -> None:
    table = build_handler_table(TypedReceiver)
    assert table.lookup("onAnything", (str, bytes, list)) is not None


def test_default_parameters_register_every_arity() -> None:
    table = build_handler_table(TypedReceiver)
    assert table.lookup("onDefaults", (int,)) is not None
    assert table.lookup("onDefaults", (int, int)) is not None
    assert table.lookup("onDefaults", (int, int, str)) is not None
    assert table.lookup("onDefaults", ()) is None


def test_varargs_and_required_keyword_only_methods_are_not_handlers() -> None:
    table = build_handler_table(TypedReceiver)
    assert "onVarargs" not in table.names()
    assert "onKeywordOnly" not in table.names()
    assert table.lookup("onKeywordDefault", (int,)) is not None


def test_static_and_class_methods_are_handlers() -> None:
    table = build_handler_table(TypedReceiver)
    assert table.lookup("onStatic", (str,)) is not None
    assert table.lookup("onClass", (str,)) is not None


def test_private_members_and_data_are_skipped() -> None:
    names = build_handler_table(TypedReceiver).names()
    assert "_hidden" not in names
    assert "label" not in names


def test_unresolvable_annotations_fall_back_to_any_type(
    caplog: pytest.LogCaptureFixture,
) -> None:
    with caplog.at_level(logging.WARNING, logger="screenkit.dispatch"):
        table = build_handler_table(TypedReceiver)

    assert table.lookup("broken", (str,)) is not None
    assert table.lookup("broken", (MotionEvent,)) is not None
    assert table.lookup("broken", ()) is None
    warnings = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
    assert any(
        "handler_annotations_unresolved" in m and "TypedReceiver.broken" in m for m in warnings
    )


def test_inherited_methods_are_part_of_the_surface() -> None:
    table = build_handler_table(InheritingReceiver)
    assert table.lookup("onMove", (float, float)) is not None
    assert table.lookup("extra", ()) is not None


def test_handler_table_is_built_once_per_class() -> None:
    assert handler_table_for(TypedReceiver) is handler_table_for(TypedReceiver)
    assert handler_table_for(TypedReceiver) is not handler_table_for(InheritingReceiver)


def test_resolver_prefers_identity_over_transformer() -> None:
    resolver = CapabilityResolver()
    receiver = PriorityReceiver()
    event = MotionEvent(x=1.0, y=2.0)
    transformer = xy_transformer()

    candidates = resolver.candidates(receiver, "onMove", arg_types_of((event,)), [transformer])
    assert candidates == [None, transformer]

    resolution = resolver.resolve(receiver, "onMove", (event,), [transformer])
    assert resolution is not None
    assert resolution.transformer is None
    assert resolution.prepare((event,)) == (event,)


def test_resolver_uses_transformer_when_identity_fails() -> None:
    resolver = CapabilityResolver()
    event = MotionEvent(x=3.0, y=4.0)

    resolution = resolver.resolve(TypedReceiver(), "onMove", (event,), [xy_transformer()])

    assert resolution is not None
    assert resolution.transformer is not None
    assert resolution.prepare((event,)) == (3.0, 4.0)


def test_resolver_reports_unsupported_as_none() -> None:
    resolver = CapabilityResolver()
    assert resolver.resolve(TypedReceiver(), "missing", ()) is None
    assert resolver.resolve(TypedReceiver(), "onMove", ("a", "b")) is None
    assert resolver.has_handler(TypedReceiver(), "onMove", (float, float)) is True
