"""Screenkit runtime configuration sourced from environment."""

from __future__ import annotations

import os
from dataclasses import dataclass

_LEVEL_NAMES = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


def _flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def _float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _choice(name: str, choices: set[str], default: str) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    return value if value in choices else default


def _logger_levels(name: str) -> tuple[tuple[str, str], ...]:
    raw = os.getenv(name)
    if raw is None:
        return ()
    levels: list[tuple[str, str]] = []
    for entry in raw.split(","):
        logger_name, sep, level = entry.partition("=")
        logger_name = logger_name.strip()
        level = level.strip().upper()
        if not sep or not logger_name or level not in _LEVEL_NAMES:
            continue
        if logger_name != "screenkit" and not logger_name.startswith("screenkit."):
            logger_name = f"screenkit.{logger_name}"
        levels.append((logger_name, level))
    return tuple(levels)


@dataclass(frozen=True, slots=True)
class ScreenkitConfig:
    """Immutable runtime configuration."""

    log_level: str
    log_format: str
    log_file: str | None
    dispatch_trace_enabled: bool
    stall_warning_seconds: float
    logger_levels: tuple[tuple[str, str], ...] = ()


def resolve_log_level_name(default: str = "INFO") -> str:
    """Resolve log level with screenkit-prefixed override."""
    value = os.getenv("SCREENKIT_LOG_LEVEL")
    if value is None:
        value = os.getenv("LOG_LEVEL", default)
    return value.strip().upper()


def load_config() -> ScreenkitConfig:
    """Load immutable configuration from env vars."""
    log_file = os.getenv("SCREENKIT_LOG_FILE", "").strip()
    return ScreenkitConfig(
        log_level=resolve_log_level_name(),
        log_format=_choice("SCREENKIT_LOG_FORMAT", {"text", "json"}, "text"),
        log_file=log_file or None,
        dispatch_trace_enabled=_flag("SCREENKIT_DISPATCH_TRACE", False),
        stall_warning_seconds=max(0.0, _float("SCREENKIT_MODAL_STALL_WARNING_S", 0.0)),
        logger_levels=_logger_levels("SCREENKIT_LOG_LEVELS"),
    )


def enabled_dispatch_trace() -> bool:
    return load_config().dispatch_trace_enabled
