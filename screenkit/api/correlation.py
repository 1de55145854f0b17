"""Public navigation/result correlation API contracts."""

from __future__ import annotations

from collections.abc import Callable, MutableMapping, Sequence
from dataclasses import dataclass
from typing import Protocol

PendingHandler = Callable[[object], None]


@dataclass(frozen=True, slots=True, order=True)
class CorrelationToken:
    """Opaque, time-ordered key embedded in navigation payloads."""

    serial: int
    generation: int = 0


class NavigationCorrelator(Protocol):
    """Token-keyed tables for transient arguments, results and handlers."""

    def register_arguments(
        self, args: Sequence[object], *, owner: object | None = None
    ) -> CorrelationToken:
        """Store arguments; they vanish with owner or on reclaim."""

    def take_arguments(self, token: CorrelationToken | None) -> tuple[object, ...] | None:
        """Read arguments without removing them."""

    def release_arguments(self, token: CorrelationToken | None) -> None:
        """Drop one argument entry."""

    def reclaim_arguments(self) -> int:
        """Drop all argument entries and start a new generation."""

    def register_result(self, value: object) -> CorrelationToken:
        """Store result until first take."""

    def take_result(self, token: CorrelationToken | None) -> object | None:
        """Remove and return result."""

    def register_pending_handler(
        self,
        handler: PendingHandler,
        instance_data: MutableMapping[str, object] | None = None,
        *,
        key: str = ...,
    ) -> CorrelationToken:
        """Store handler awaiting an external callback."""

    def take_pending_handler(self, token: CorrelationToken | None) -> PendingHandler | None:
        """Remove and return a pending handler."""

    def take_and_dispatch(self, token: CorrelationToken | None, payload: object) -> bool:
        """Remove handler and invoke it once with payload."""


def create_navigation_correlator() -> NavigationCorrelator:
    """Create an isolated correlator instance."""
    from screenkit.runtime.correlator import RuntimeNavigationCorrelator

    return RuntimeNavigationCorrelator()


def default_correlator() -> NavigationCorrelator:
    """Return the process-wide correlator."""
    from screenkit.runtime.correlator import default_correlator as runtime_default

    return runtime_default()
