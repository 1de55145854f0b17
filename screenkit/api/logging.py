"""Public screenkit logging API."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging pipeline configuration."""

    level_name: str = "INFO"
    console_format: str = "text"  # text|json
    file_path: str | None = None
    file_format: str = "json"  # text|json
    # (logger name, level name) pairs inside the screenkit namespace.
    logger_levels: tuple[tuple[str, str], ...] = ()
