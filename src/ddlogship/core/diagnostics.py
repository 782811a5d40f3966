"""
Internal diagnostics for non-fatal errors inside the writer.

Diagnostics are structured JSON lines written to stderr. They are disabled
by default and enabled with ``DDLOGSHIP_INTERNAL_LOGGING_ENABLED=true``.
The enabled flag is read once and cached; emitting a diagnostic never
raises into the caller.
"""

from __future__ import annotations

import sys
import threading
import time
from typing import Any, Callable

import orjson

_internal_logging_enabled: bool | None = None
_lock = threading.Lock()


def _default_writer(payload: dict[str, Any]) -> None:
    data = orjson.dumps(payload, default=str)
    with _lock:
        sys.stderr.buffer.write(data + b"\n")
        sys.stderr.flush()


_writer: Callable[[dict[str, Any]], None] = _default_writer


def is_enabled() -> bool:
    global _internal_logging_enabled
    if _internal_logging_enabled is None:
        try:
            from .settings import DiagnosticsSettings

            _internal_logging_enabled = bool(
                DiagnosticsSettings().internal_logging_enabled
            )
        except Exception:
            _internal_logging_enabled = False
    return _internal_logging_enabled


def _emit(level: str, component: str, message: str, **fields: Any) -> None:
    if not is_enabled():
        return
    payload: dict[str, Any] = {
        "timestamp": time.time(),
        "level": level,
        "logger": "ddlogship",
        "component": component,
        "message": message,
    }
    payload.update(fields)
    try:
        _writer(payload)
    except Exception:
        # Diagnostics must never break the delivery path
        pass


def warn(component: str, message: str, **fields: Any) -> None:
    """Emit a WARN diagnostic for a contained failure."""
    _emit("WARN", component, message, **fields)


def debug(component: str, message: str, **fields: Any) -> None:
    _emit("DEBUG", component, message, **fields)


def set_writer_for_tests(writer: Callable[[dict[str, Any]], None]) -> None:
    global _writer
    _writer = writer


def _reset_for_tests() -> None:
    global _internal_logging_enabled, _writer
    _internal_logging_enabled = None
    _writer = _default_writer
