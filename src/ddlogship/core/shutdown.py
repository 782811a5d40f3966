"""Drain-on-exit support for writers.

Writers created with ``drain_on_exit=True`` register here. A single
atexit hook closes every writer still open at interpreter exit, so the
final buffered batch is delivered even if the application forgot to call
``close()``.

Registration uses a WeakSet so a registered writer can still be garbage
collected. The hook is best-effort and never raises.
"""

from __future__ import annotations

import atexit
import threading
import weakref
from typing import TYPE_CHECKING, Any

from . import diagnostics

if TYPE_CHECKING:
    from .writer import DatadogWriter


_registered_writers: weakref.WeakSet[Any] = weakref.WeakSet()
_hook_installed: bool = False
_shutdown_in_progress: bool = False
_lock = threading.Lock()


def register_writer(writer: DatadogWriter) -> None:
    """Register a writer to be closed at interpreter exit."""
    global _hook_installed
    with _lock:
        _registered_writers.add(writer)
        if not _hook_installed:
            atexit.register(_atexit_handler)
            _hook_installed = True


def unregister_writer(writer: DatadogWriter) -> None:
    with _lock:
        _registered_writers.discard(writer)


def registered_count() -> int:
    with _lock:
        return len(_registered_writers)


def _close_single_writer(writer: Any) -> None:
    try:
        writer.close()
    except Exception as exc:
        # The error handler already saw delivery failures
        diagnostics.warn(
            "shutdown",
            "drain on exit failed",
            error=str(exc),
        )


def _atexit_handler() -> None:
    """Close every registered writer. Called by atexit; never raises."""
    global _shutdown_in_progress

    if _shutdown_in_progress:
        return
    _shutdown_in_progress = True

    with _lock:
        # Snapshot: close() unregisters, mutating the set
        writers = list(_registered_writers)

    for writer in writers:
        _close_single_writer(writer)


def _reset_for_tests() -> None:
    global _shutdown_in_progress
    with _lock:
        _registered_writers.clear()
    _shutdown_in_progress = False
