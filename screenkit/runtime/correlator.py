"""Token-keyed transient storage for data crossing navigation boundaries."""

from __future__ import annotations

import logging
import threading
import time
import weakref
from collections.abc import Callable, MutableMapping, Sequence
from dataclasses import dataclass

from screenkit.api.correlation import CorrelationToken, PendingHandler

_LOG = logging.getLogger("screenkit.correlator")

PENDING_HANDLER_KEY = "screenkit.correlator.pending_handler"


def pending_handler_key(request_code: int) -> str:
    """Return the instance-data marker for handlers awaiting `request_code`."""
    return f"{PENDING_HANDLER_KEY}.{request_code}"


class TokenSource:
    """Time-ordered serials that never repeat within the process."""

    def __init__(self, clock_ns: Callable[[], int] = time.time_ns) -> None:
        self._clock_ns = clock_ns
        self._last = 0
        self._lock = threading.Lock()

    def next_serial(self) -> int:
        with self._lock:
            self._last = max(self._clock_ns(), self._last + 1)
            return self._last


@dataclass(slots=True)
class _ArgumentEntry:
    values: tuple[object, ...]
    finalizer: weakref.finalize | None = None


class ArgumentArena:
    """Generation-tagged argument store.

    Entries live until released, until their owner is collected, or until
    `reclaim` starts a new generation. Tokens of older generations miss.
    """

    def __init__(self, tokens: TokenSource) -> None:
        self._tokens = tokens
        self._lock = threading.Lock()
        self._generation = 0
        self._entries: dict[int, _ArgumentEntry] = {}

    @property
    def generation(self) -> int:
        return self._generation

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def register(self, args: Sequence[object], owner: object | None = None) -> CorrelationToken:
        serial = self._tokens.next_serial()
        entry = _ArgumentEntry(values=tuple(args))
        with self._lock:
            token = CorrelationToken(serial=serial, generation=self._generation)
            self._entries[serial] = entry
        if owner is not None:
            entry.finalizer = weakref.finalize(owner, self.release, token)
        return token

    def get(self, token: CorrelationToken | None) -> tuple[object, ...] | None:
        if token is None:
            return None
        with self._lock:
            if token.generation != self._generation:
                return None
            entry = self._entries.get(token.serial)
        return None if entry is None else entry.values

    def release(self, token: CorrelationToken | None) -> None:
        if token is None:
            return
        with self._lock:
            if token.generation != self._generation:
                return
            entry = self._entries.pop(token.serial, None)
        if entry is not None and entry.finalizer is not None:
            entry.finalizer.detach()

    def reclaim(self) -> int:
        with self._lock:
            dropped = list(self._entries.values())
            self._entries.clear()
            self._generation += 1
        for entry in dropped:
            if entry.finalizer is not None:
                entry.finalizer.detach()
        return len(dropped)


class RuntimeNavigationCorrelator:
    """Three independent lock-guarded tables: arguments, results, pending handlers."""

    def __init__(self, tokens: TokenSource | None = None) -> None:
        self._tokens = tokens or TokenSource()
        self._arguments = ArgumentArena(self._tokens)
        self._results: dict[CorrelationToken, object] = {}
        self._results_lock = threading.Lock()
        self._handlers: dict[CorrelationToken, PendingHandler] = {}
        self._handlers_lock = threading.Lock()

    @property
    def argument_count(self) -> int:
        return len(self._arguments)

    @property
    def result_count(self) -> int:
        with self._results_lock:
            return len(self._results)

    @property
    def pending_handler_count(self) -> int:
        with self._handlers_lock:
            return len(self._handlers)

    def register_arguments(
        self, args: Sequence[object], *, owner: object | None = None
    ) -> CorrelationToken:
        """Store arguments; they vanish with owner or on reclaim."""
        return self._arguments.register(args, owner)

    def take_arguments(self, token: CorrelationToken | None) -> tuple[object, ...] | None:
        """Read arguments without removing them."""
        args = self._arguments.get(token)
        if args is None and token is not None:
            _LOG.debug("correlator_arguments_miss serial=%d", token.serial)
        return args

    def release_arguments(self, token: CorrelationToken | None) -> None:
        """Drop one argument entry."""
        self._arguments.release(token)

    def reclaim_arguments(self) -> int:
        """Drop all argument entries and start a new generation."""
        dropped = self._arguments.reclaim()
        _LOG.debug("correlator_arguments_reclaimed count=%d", dropped)
        return dropped

    def register_result(self, value: object) -> CorrelationToken:
        """Store result until first take."""
        token = CorrelationToken(serial=self._tokens.next_serial())
        with self._results_lock:
            self._results[token] = value
        return token

    def take_result(self, token: CorrelationToken | None) -> object | None:
        """Remove and return result."""
        if token is None:
            return None
        with self._results_lock:
            return self._results.pop(token, None)

    def register_pending_handler(
        self,
        handler: PendingHandler,
        instance_data: MutableMapping[str, object] | None = None,
        *,
        key: str = PENDING_HANDLER_KEY,
    ) -> CorrelationToken:
        """Store handler awaiting an external callback.

        When `instance_data` is given the token is also stored there under `key`.
        """
        token = CorrelationToken(serial=self._tokens.next_serial())
        with self._handlers_lock:
            self._handlers[token] = handler
        if instance_data is not None:
            instance_data[key] = token
        return token

    def take_pending_handler(self, token: CorrelationToken | None) -> PendingHandler | None:
        """Remove and return a pending handler."""
        if token is None:
            return None
        with self._handlers_lock:
            return self._handlers.pop(token, None)

    def take_and_dispatch(self, token: CorrelationToken | None, payload: object) -> bool:
        """Remove handler and invoke it once with payload."""
        handler = self.take_pending_handler(token)
        if handler is None:
            return False
        handler(payload)
        return True


_DEFAULT: RuntimeNavigationCorrelator | None = None
_DEFAULT_LOCK = threading.Lock()


def default_correlator() -> RuntimeNavigationCorrelator:
    """Return the process-wide correlator."""
    global _DEFAULT

    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            _DEFAULT = RuntimeNavigationCorrelator()
        return _DEFAULT


NavigationCorrelator = RuntimeNavigationCorrelator
