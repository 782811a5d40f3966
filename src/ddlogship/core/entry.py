"""
Records and their wire representation.

A ``Record`` is what the application hands to the writer. The writer turns
it into a ``LogEntry`` by stamping the current time, mapping the level to a
wire status and attaching the static descriptive fields from configuration.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Final, Mapping

from .config import WriterConfig
from .levels import Level, map_level

RESERVED_KEYS: Final[frozenset[str]] = frozenset(
    {
        "timestamp",
        "status",
        "message",
        "service",
        "ddsource",
        "ddtags",
        "hostname",
        "env",
        "version",
    }
)


@dataclass(frozen=True)
class Record:
    """Application-level log record: a level, a message and optional fields."""

    level: Level | str | int
    message: str
    fields: Mapping[str, Any] | None = None


@dataclass
class LogEntry:
    timestamp: int
    status: str
    message: str
    service: str = ""
    source: str = ""
    tags: str = ""
    hostname: str = ""
    env: str = ""
    version: str = ""
    fields: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON object sent to the intake API.

        Empty descriptive fields are omitted and extra fields are flattened
        at the top level without overriding the reserved keys.
        """
        out: dict[str, Any] = {
            "timestamp": self.timestamp,
            "status": self.status,
            "message": self.message,
        }
        optional = (
            ("service", self.service),
            ("ddsource", self.source),
            ("ddtags", self.tags),
            ("hostname", self.hostname),
            ("env", self.env),
            ("version", self.version),
        )
        for key, value in optional:
            if value:
                out[key] = value
        for key, value in self.fields.items():
            if key not in RESERVED_KEYS:
                out[key] = value
        return out


def now_ms() -> int:
    return time.time_ns() // 1_000_000


def build_entry(record: Record, config: WriterConfig, tags: str) -> LogEntry:
    """Build the wire entry for ``record``.

    ``tags`` is the pre-joined tag string for ``config.tags``; it is passed
    in so the writer can compute it once.
    """
    return LogEntry(
        timestamp=now_ms(),
        status=map_level(record.level),
        message=record.message,
        service=config.service,
        source=config.source,
        tags=tags,
        hostname=config.hostname,
        env=config.environment,
        version=config.version,
        fields=dict(record.fields) if record.fields else {},
    )
