"""
Batching writer for the Datadog logs intake API.

Records are converted to wire entries and appended to an in-memory buffer.
The buffer is flushed when it reaches ``batch_size`` (synchronously, on the
writing thread) and every ``flush_interval`` seconds by a timer thread.
``close()`` stops the timer and flushes whatever is left.

Locking:
- ``_buffer_lock`` guards the buffer. A flush swaps the buffer for a fresh
  list under the lock and delivers the detached batch outside it, so slow
  delivery never blocks writers.
- ``_buffer_lock`` also guards the closed flag and the count of deliveries
  in flight; ``close()`` waits on it for running deliveries to finish
  before releasing the HTTP client.
- ``_timer_lock`` guards the timer handle. It is taken before
  ``_buffer_lock`` when both are held.

Two flushes (size and timer triggered) may deliver concurrently; batches
can therefore arrive out of order. Entry order within a batch is the order
in which they were written.
"""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Mapping

import httpx

from ..metrics.metrics import MetricsCollector
from ..sinks.http_intake import IntakeSender
from . import diagnostics
from .config import WriterConfig, build_tags, parse_config
from .entry import LogEntry, Record, build_entry
from .errors import (
    DeliveryError,
    ErrorHandler,
    MissingCredentialError,
    ShipperError,
    WriterClosedError,
)
from .levels import Level
from .retry import RetryPolicy
from .serialization import gzip_payload, serialize_entries
from .shutdown import register_writer, unregister_writer


class DatadogWriter:
    """Thread-safe batching writer that ships log entries over HTTP.

    Example:
        with DatadogWriter(api_key="...", service="billing") as writer:
            writer.log(Level.INFO, "invoice created", invoice_id=42)
    """

    def __init__(
        self,
        config: WriterConfig | Mapping[str, Any] | None = None,
        *,
        client: httpx.Client | None = None,
        metrics: MetricsCollector | None = None,
        sleep: Callable[[float], None] = time.sleep,
        **options: Any,
    ) -> None:
        cfg = parse_config(config, **options)
        if not cfg.api_key:
            raise MissingCredentialError()
        self._config = cfg
        self._tags = build_tags(cfg.tags)
        self._metrics = metrics or MetricsCollector(enabled=False)
        self._sender = IntakeSender(
            site=cfg.site,
            api_key=cfg.api_key,
            timeout=cfg.timeout,
            retry=RetryPolicy(max_retries=cfg.max_retries, delay=cfg.retry_delay),
            client=client,
            metrics=self._metrics,
            sleep=sleep,
        )

        self._buffer: list[LogEntry] = []
        self._buffer_lock = threading.Lock()
        self._timer: threading.Timer | None = None
        self._timer_lock = threading.Lock()
        self._closed = False
        self._in_flight = 0
        self._deliveries_done = threading.Condition(self._buffer_lock)
        self._local = threading.local()

        if cfg.drain_on_exit:
            register_writer(self)
        self._start_flush_timer()

    @classmethod
    def from_env(
        cls,
        *,
        on_error: ErrorHandler | None = None,
        client: httpx.Client | None = None,
        metrics: MetricsCollector | None = None,
        **overrides: Any,
    ) -> DatadogWriter:
        """Build a writer from ``DD_*`` environment variables."""
        from .settings import WriterSettings

        cfg = WriterSettings().to_config(on_error=on_error, **overrides)
        return cls(cfg, client=client, metrics=metrics)

    @property
    def config(self) -> WriterConfig:
        return self._config

    @property
    def metrics(self) -> MetricsCollector:
        return self._metrics

    @property
    def pending(self) -> int:
        """Number of buffered entries not yet handed to delivery."""
        with self._buffer_lock:
            return len(self._buffer)

    @property
    def closed(self) -> bool:
        with self._buffer_lock:
            return self._closed

    def write(self, record: Record) -> None:
        """Buffer ``record``; flush synchronously once the batch is full.

        Raises:
            WriterClosedError: if the writer was closed.
            ShipperError: delivery error of the flush this call triggered.
        """
        entry = build_entry(record, self._config, self._tags)

        with self._buffer_lock:
            # Checked with the append so close() cannot strand the entry
            if self._closed:
                raise WriterClosedError()
            self._buffer.append(entry)
            should_flush = len(self._buffer) >= self._config.batch_size
        self._metrics.record_entry_submitted()

        if should_flush:
            self._flush()

    def log(self, level: Level | str | int, message: str, **fields: Any) -> None:
        self.write(Record(level=level, message=message, fields=fields or None))

    def flush(self) -> None:
        """Deliver everything buffered now, raising the delivery error."""
        self._flush()

    def close(self) -> None:
        """Stop the timer and deliver the remaining entries.

        Deliveries already running on other threads, timer or size
        triggered, are waited for before the HTTP client is released, so
        no delivery happens after this returns. Raises the final flush's
        delivery error after it has been reported to ``on_error``.
        """
        with self._timer_lock:
            timer = self._timer
            if timer is not None:
                timer.cancel()
                self._timer = None
            with self._buffer_lock:
                self._closed = True

        if timer is not None and timer is not threading.current_thread():
            timer.join()
        unregister_writer(self)

        try:
            self._flush()
        finally:
            self._wait_for_deliveries()
            self._sender.close()

    def __enter__(self) -> DatadogWriter:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def _flush(self) -> None:
        with self._buffer_lock:
            if not self._buffer:
                return
            entries, self._buffer = self._buffer, []
            self._in_flight += 1
        self._local.deliveries = getattr(self._local, "deliveries", 0) + 1
        try:
            self._deliver(entries)
        finally:
            self._local.deliveries -= 1
            with self._deliveries_done:
                self._in_flight -= 1
                self._deliveries_done.notify_all()

    def _wait_for_deliveries(self) -> None:
        # close() may run from on_error inside a delivery on this thread
        own = getattr(self._local, "deliveries", 0)
        with self._deliveries_done:
            self._deliveries_done.wait_for(lambda: self._in_flight <= own)

    def _deliver(self, entries: list[LogEntry]) -> None:
        started = time.perf_counter()
        try:
            payload = serialize_entries(entries)
            if self._config.enable_compression:
                payload = gzip_payload(
                    payload, compresslevel=self._config.compression_level
                )
            self._sender.send(payload, batch_size=len(entries))
        except ShipperError as exc:
            self._drop_batch(entries, exc)
            raise
        except Exception as exc:
            error = DeliveryError(
                "failed to deliver batch", batch_size=len(entries), cause=exc
            )
            self._drop_batch(entries, error)
            raise error from exc
        self._metrics.record_batch_delivered(
            latency_seconds=time.perf_counter() - started
        )

    def _drop_batch(self, entries: list[LogEntry], error: ShipperError) -> None:
        self._metrics.record_batch_failed(
            batch_size=len(entries), reason=error.category.value
        )
        diagnostics.warn(
            "writer",
            "batch dropped",
            batch_size=len(entries),
            category=error.category.value,
            error=str(error),
        )
        self._handle_error(error)

    def _handle_error(self, error: ShipperError) -> None:
        handler = self._config.on_error
        if handler is None:
            return
        try:
            handler(error)
        except Exception as exc:
            diagnostics.warn(
                "writer",
                "error handler raised",
                error=str(exc),
                original_error=str(error),
            )

    def _start_flush_timer(self) -> None:
        with self._timer_lock:
            if self._closed:
                return
            timer = threading.Timer(self._config.flush_interval, self._on_timer)
            timer.daemon = True
            timer.name = "ddlogship-flush"
            self._timer = timer
            timer.start()

    def _on_timer(self) -> None:
        try:
            self._flush()
        except ShipperError as exc:
            # Already reported to on_error; the timer has no caller
            diagnostics.debug("writer", "timer flush failed", error=str(exc))
        except Exception as exc:
            diagnostics.warn("writer", "unexpected timer flush error", error=str(exc))
        finally:
            self._start_flush_timer()
