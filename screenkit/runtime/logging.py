"""Logging pipeline for the screenkit logger tree.

Every screenkit module logs under the `screenkit` namespace. The console and
optional file sinks hang off the root logger; per-namespace levels from
`LoggingConfig.logger_levels` (or `SCREENKIT_LOG_LEVELS`) let a host turn on,
say, `screenkit.dispatch` at DEBUG while the rest of the tree stays at INFO.
"""

from __future__ import annotations

import json
import logging
import queue
from collections.abc import Iterable
from datetime import UTC, datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from typing import Final

from screenkit.api.logging import LoggingConfig
from screenkit.runtime.config import load_config

ROOT_NAMESPACE: Final = "screenkit"
LOGGER_NAMESPACES: tuple[str, ...] = (
    "screenkit.correlator",
    "screenkit.dispatch",
    "screenkit.loop",
    "screenkit.modal",
    "screenkit.qt",
    "screenkit.screen",
)

_LOG = logging.getLogger("screenkit.logging")
_QUEUE_LISTENER: QueueListener | None = None

_STANDARD_RECORD_FIELDS = frozenset(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {
    "message",
    "asctime",
}


class JsonFormatter(logging.Formatter):
    """One JSON object per record; `extra=` fields land under `fields`."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        extras = {k: v for k, v in record.__dict__.items() if k not in _STANDARD_RECORD_FIELDS}
        if extras:
            payload["fields"] = extras
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=True, default=repr)


def configure_logging(config: LoggingConfig) -> None:
    """Install sinks on the root logger and apply screenkit namespace levels."""
    shutdown_logging()
    sinks = _build_sinks(config)
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(_level_value(config.level_name, logging.INFO))
    if len(sinks) == 1:
        root.addHandler(sinks[0])
    else:
        _start_listener(root, sinks)
    applied = apply_logger_levels(config.logger_levels)
    _LOG.debug(
        "logging_configured level=%s sinks=%d overrides=%s",
        config.level_name.upper(),
        len(sinks),
        ",".join(f"{name}={level}" for name, level in applied) or "-",
    )


def apply_logger_levels(levels: Iterable[tuple[str, str]]) -> tuple[tuple[str, str], ...]:
    """Reset the screenkit namespaces, then set the requested levels.

    Names outside the `screenkit` tree and unknown level names are ignored.
    Returns the overrides that were applied.
    """
    for name in (ROOT_NAMESPACE, *LOGGER_NAMESPACES):
        logging.getLogger(name).setLevel(logging.NOTSET)
    applied: list[tuple[str, str]] = []
    for name, level_name in levels:
        if not _in_namespace(name):
            continue
        level = _level_value(level_name, None)
        if level is None:
            continue
        logging.getLogger(name).setLevel(level)
        applied.append((name, logging.getLevelName(level)))
    return tuple(applied)


def setup_logging() -> None:
    """Configure logging from `SCREENKIT_*` env vars if no handlers are present."""
    if logging.getLogger().handlers:
        return
    cfg = load_config()
    configure_logging(
        LoggingConfig(
            level_name=cfg.log_level,
            console_format=cfg.log_format,
            file_path=cfg.log_file,
            logger_levels=cfg.logger_levels,
        )
    )


def shutdown_logging() -> None:
    """Flush and stop the file-streaming listener if one is running."""
    global _QUEUE_LISTENER

    if _QUEUE_LISTENER is not None:
        _QUEUE_LISTENER.stop()
        _QUEUE_LISTENER = None


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the screenkit namespace.

    `get_logger("dispatch")` and `get_logger("screenkit.dispatch")` are the
    same logger.
    """
    if not _in_namespace(name):
        name = f"{ROOT_NAMESPACE}.{name}"
    return logging.getLogger(name)


def _build_sinks(config: LoggingConfig) -> list[logging.Handler]:
    console = logging.StreamHandler()
    console.setFormatter(_resolve_formatter(config.console_format))
    sinks: list[logging.Handler] = [console]
    if config.file_path:
        file_path = Path(config.file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_sink = logging.FileHandler(file_path, mode="a", encoding="utf-8", delay=True)
        file_sink.setFormatter(_resolve_formatter(config.file_format))
        sinks.append(file_sink)
    return sinks


def _start_listener(root: logging.Logger, sinks: list[logging.Handler]) -> None:
    global _QUEUE_LISTENER

    # Sinks run on the listener thread, never on the dispatch thread.
    log_queue: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    root.addHandler(QueueHandler(log_queue))
    _QUEUE_LISTENER = QueueListener(log_queue, *sinks, respect_handler_level=True)
    _QUEUE_LISTENER.start()


def _in_namespace(name: str) -> bool:
    return name == ROOT_NAMESPACE or name.startswith(f"{ROOT_NAMESPACE}.")


def _level_value(level_name: str, default: int | None) -> int | None:
    level = logging.getLevelNamesMapping().get(level_name.strip().upper())
    return default if level is None else level


def _resolve_formatter(kind: str) -> logging.Formatter:
    if kind.strip().lower() == "json":
        return JsonFormatter()
    return logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
