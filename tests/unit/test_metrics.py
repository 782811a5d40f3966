from __future__ import annotations

import threading

from ddlogship.metrics.metrics import MetricsCollector


def test_disabled_metrics_track_state_without_registry() -> None:
    mc = MetricsCollector(enabled=False)
    mc.record_entry_submitted()
    mc.record_attempt(retry=False)
    mc.record_attempt(retry=True)
    mc.record_batch_delivered(latency_seconds=0.01)
    mc.record_batch_failed(batch_size=3, reason="remote")

    snap = mc.snapshot()
    assert snap.entries_submitted == 1
    assert snap.delivery_attempts == 2
    assert snap.retries == 1
    assert snap.batches_delivered == 1
    assert snap.batches_failed == 1
    assert snap.entries_dropped == 3
    assert mc.registry is None
    assert mc.is_enabled is False


def test_enabled_counters_and_histogram() -> None:
    mc = MetricsCollector(enabled=True)
    mc.record_entry_submitted()
    mc.record_entry_submitted()
    mc.record_attempt(retry=False)
    mc.record_attempt(retry=True)
    mc.record_batch_delivered(latency_seconds=0.02)
    mc.record_batch_failed(batch_size=5, reason="transport")

    reg = mc.registry
    assert reg is not None
    assert reg.get_sample_value("ddlogship_entries_submitted_total") == 2.0
    assert reg.get_sample_value("ddlogship_delivery_attempts_total") == 2.0
    assert reg.get_sample_value("ddlogship_retries_total") == 1.0
    assert reg.get_sample_value("ddlogship_batches_delivered_total") == 1.0
    assert (
        reg.get_sample_value(
            "ddlogship_batches_failed_total", {"reason": "transport"}
        )
        == 1.0
    )
    assert reg.get_sample_value("ddlogship_entries_dropped_total") == 5.0
    assert reg.get_sample_value("ddlogship_delivery_seconds_count") == 1.0


def test_registries_are_isolated() -> None:
    a = MetricsCollector(enabled=True)
    b = MetricsCollector(enabled=True)
    a.record_entry_submitted()
    assert b.registry is not None
    assert b.registry.get_sample_value("ddlogship_entries_submitted_total") == 0.0


def test_snapshot_is_a_copy_and_counting_is_thread_safe() -> None:
    mc = MetricsCollector()

    def bump() -> None:
        for _ in range(1000):
            mc.record_entry_submitted()

    threads = [threading.Thread(target=bump) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    snap = mc.snapshot()
    assert snap.entries_submitted == 4000
    snap.entries_submitted = 0
    assert mc.snapshot().entries_submitted == 4000
