"""
Delivery metrics for the batching shipper.

Implements a small set of Prometheus-compatible counters and a latency
histogram for the delivery pipeline.

Design goals:
- Thread-safe: ingress, timer and close run on different threads
- Zero global state; each writer owns its collector and registry
- Safe no-op export when metrics are disabled, while still tracking
  in-memory counters for tests
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram


@dataclass
class ShipperMetrics:
    """Captured runtime metrics for quick assertions in tests."""

    entries_submitted: int = 0
    batches_delivered: int = 0
    batches_failed: int = 0
    entries_dropped: int = 0
    delivery_attempts: int = 0
    retries: int = 0


class MetricsCollector:
    """Writer-scoped metrics collector."""

    def __init__(self, *, enabled: bool = False) -> None:
        self._enabled = bool(enabled)
        self._lock = threading.Lock()
        self._state = ShipperMetrics()

        self._c_submitted: Any | None = None
        self._c_delivered: Any | None = None
        self._c_failed: Any | None = None
        self._c_dropped: Any | None = None
        self._c_attempts: Any | None = None
        self._c_retries: Any | None = None
        self._h_delivery: Any | None = None
        self._registry: CollectorRegistry | None = None

        if self._enabled:
            # Isolated registry to avoid global duplication across writers
            self._registry = CollectorRegistry()
            self._c_submitted = Counter(
                "ddlogship_entries_submitted_total",
                "Total number of log entries accepted by the writer",
                registry=self._registry,
            )
            self._c_delivered = Counter(
                "ddlogship_batches_delivered_total",
                "Total number of batches accepted by the intake API",
                registry=self._registry,
            )
            self._c_failed = Counter(
                "ddlogship_batches_failed_total",
                "Total number of batches dropped after delivery failed",
                ["reason"],
                registry=self._registry,
            )
            self._c_dropped = Counter(
                "ddlogship_entries_dropped_total",
                "Total number of log entries dropped with a failed batch",
                registry=self._registry,
            )
            self._c_attempts = Counter(
                "ddlogship_delivery_attempts_total",
                "Total number of HTTP delivery attempts",
                registry=self._registry,
            )
            self._c_retries = Counter(
                "ddlogship_retries_total",
                "Total number of delivery retries",
                registry=self._registry,
            )
            self._h_delivery = Histogram(
                "ddlogship_delivery_seconds",
                "Latency for delivering one batch, retries included",
                buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
                registry=self._registry,
            )

    @property
    def is_enabled(self) -> bool:
        return self._enabled

    @property
    def registry(self) -> CollectorRegistry | None:
        """Expose the isolated Prometheus registry when enabled."""
        return self._registry

    def record_entry_submitted(self) -> None:
        with self._lock:
            self._state.entries_submitted += 1
        if self._c_submitted is not None:
            self._c_submitted.inc()

    def record_attempt(self, *, retry: bool) -> None:
        with self._lock:
            self._state.delivery_attempts += 1
            if retry:
                self._state.retries += 1
        if self._c_attempts is not None:
            self._c_attempts.inc()
        if retry and self._c_retries is not None:
            self._c_retries.inc()

    def record_batch_delivered(self, *, latency_seconds: float | None = None) -> None:
        with self._lock:
            self._state.batches_delivered += 1
        if self._c_delivered is not None:
            self._c_delivered.inc()
        if latency_seconds is not None and self._h_delivery is not None:
            self._h_delivery.observe(latency_seconds)

    def record_batch_failed(self, *, batch_size: int, reason: str) -> None:
        with self._lock:
            self._state.batches_failed += 1
            self._state.entries_dropped += batch_size
        if self._c_failed is not None:
            self._c_failed.labels(reason=reason).inc()
        if self._c_dropped is not None:
            self._c_dropped.inc(batch_size)

    def snapshot(self) -> ShipperMetrics:
        with self._lock:
            return replace(self._state)
