"""Severity levels and their Datadog wire statuses.

Records carry one of the ``Level`` members; the intake API expects a
``status`` string. The mapping is total: unknown inputs resolve to "info"
rather than raising, so a misconfigured caller never loses a record.

Example:
    >>> map_level(Level.PANIC)
    'emergency'
    >>> map_level("warning")
    'warn'
    >>> map_level(40)
    'error'
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class Level(str, Enum):
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    DPANIC = "dpanic"
    PANIC = "panic"
    FATAL = "fatal"


DEFAULT_STATUS: Final[str] = "info"

_STATUS_BY_LEVEL: Final[dict[Level, str]] = {
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warn",
    Level.ERROR: "error",
    Level.DPANIC: "critical",
    Level.PANIC: "emergency",
    Level.FATAL: "critical",
}

_LEVEL_ALIASES: Final[dict[str, Level]] = {
    "WARNING": Level.WARN,
    "CRITICAL": Level.FATAL,
}

# Standard library numeric levels
_LEVEL_BY_PRIORITY: Final[dict[int, Level]] = {
    10: Level.DEBUG,
    20: Level.INFO,
    30: Level.WARN,
    40: Level.ERROR,
    50: Level.FATAL,
}


def resolve_level(level: Level | str | int | None) -> Level | None:
    """Resolve a level given as enum, name or stdlib priority.

    Returns:
        The matching ``Level``, or None when the input is not recognized.
    """
    if isinstance(level, Level):
        return level
    if isinstance(level, bool):
        return None
    if isinstance(level, int):
        return _LEVEL_BY_PRIORITY.get(level)
    if isinstance(level, str):
        name = level.strip().upper()
        if name in Level.__members__:
            return Level[name]
        return _LEVEL_ALIASES.get(name)
    return None


def map_level(level: Level | str | int | None) -> str:
    """Map a record level to its wire status. Unknown levels map to "info"."""
    resolved = resolve_level(level)
    if resolved is None:
        return DEFAULT_STATUS
    return _STATUS_BY_LEVEL.get(resolved, DEFAULT_STATUS)


def get_status_table() -> dict[str, str]:
    """Return a copy of the level to status table keyed by level value."""
    return {level.value: status for level, status in _STATUS_BY_LEVEL.items()}
