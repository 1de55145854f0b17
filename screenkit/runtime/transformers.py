"""Argument transformers adapting raw event payloads to handler shapes."""

from __future__ import annotations

from dataclasses import dataclass

from screenkit.api.dispatch import ArgTypes, TransformFn
from screenkit.api.input_events import MotionEvent
from screenkit.runtime.capabilities import handler_table_for


@dataclass(frozen=True, slots=True)
class RuntimeArgumentTransformer:
    """Pure mapping from one argument shape to a declared target shape.

    `source_types` restricts which raw shapes the transformer accepts; each
    raw argument must be an instance of the matching source type. `None`
    accepts any raw shape.
    """

    target_types: ArgTypes
    transform_fn: TransformFn
    source_types: ArgTypes | None = None
    name: str = ""

    def accepts(self, arg_types: ArgTypes) -> bool:
        """Return whether the raw argument shape can be transformed."""
        if self.source_types is None:
            return True
        if len(arg_types) != len(self.source_types):
            return False
        return all(
            issubclass(actual, expected)
            for actual, expected in zip(arg_types, self.source_types, strict=True)
        )

    def supports(self, receiver: object, method_name: str, arg_types: ArgTypes) -> bool:
        """Return whether receiver has a handler for the transformed shape."""
        if not self.accepts(arg_types):
            return False
        table = handler_table_for(type(receiver))
        return table.lookup(method_name, self.target_types) is not None

    def transform(self, args: tuple[object, ...]) -> tuple[object, ...]:
        """Map raw arguments to the target shape."""
        transformed = tuple(self.transform_fn(args))
        if len(transformed) != len(self.target_types):
            raise ValueError(
                f"transformer {self.name or '<anonymous>'} produced {len(transformed)} "
                f"arguments, expected {len(self.target_types)}"
            )
        return transformed


def _motion_to_xy(args: tuple[object, ...]) -> tuple[float, float]:
    event = args[0]
    if not isinstance(event, MotionEvent):
        raise TypeError(f"expected MotionEvent, got {type(event).__name__}")
    return float(event.x), float(event.y)


def xy_transformer() -> RuntimeArgumentTransformer:
    """Transform `(MotionEvent)` into `(float x, float y)`."""
    return RuntimeArgumentTransformer(
        target_types=(float, float),
        transform_fn=_motion_to_xy,
        source_types=(MotionEvent,),
        name="motion_xy",
    )
