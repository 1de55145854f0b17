from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from screenkit.api.host import Intent
from screenkit.runtime.correlator import RuntimeNavigationCorrelator
from screenkit.runtime.event_loop import RuntimeEventLoop


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass(eq=False)
class RecordingInjection:
    events: list[str] = field(default_factory=list)

    def pause(self) -> None:
        self.events.append("pause")

    def resume(self) -> None:
        self.events.append("resume")


class RecordingStarter:
    def __init__(self) -> None:
        self.calls: list[tuple[object, Intent | None, int, int]] = []

    def handle_activity_result(
        self,
        screen: object,
        data: Intent | None,
        request_code: int,
        result_code: int,
    ) -> None:
        self.calls.append((screen, data, request_code, result_code))


class RecordingPersistence:
    def __init__(self, log: list[str]) -> None:
        self.log = log

    def load_persistent_context(self, screen: object) -> None:
        self.log.append(f"load:{type(screen).__name__}")


@pytest.fixture
def loop() -> RuntimeEventLoop:
    return RuntimeEventLoop(stall_warning_seconds=0.0)


@pytest.fixture
def correlator() -> RuntimeNavigationCorrelator:
    return RuntimeNavigationCorrelator()
