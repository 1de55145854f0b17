"""Public input event types."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class MotionEvent:
    """Pointer/motion sample in screen coordinates."""

    x: float
    y: float
    action: str = "move"
    pointer_id: int = 0


@dataclass(frozen=True, slots=True)
class MenuItem:
    """Selected command with its stable identifier."""

    identifier: str
    title: str = ""


__all__ = ["MenuItem", "MotionEvent"]
