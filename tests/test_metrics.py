import threading

import pytest

from statiq.metrics import MetricsSnapshot, PoolMetrics

FIELDS = {
    "active",
    "idle",
    "total_created",
    "total_destroyed",
    "total_checkouts",
    "total_timeouts",
    "total_deadlocks",
    "waiters",
}


def test_fresh_metrics_are_zero():
    snap = PoolMetrics().snapshot()
    assert set(snap.to_dict()) == FIELDS
    assert all(value == 0 for value in snap.to_dict().values())


def test_increment_and_decrement():
    metrics = PoolMetrics()
    assert metrics.increment("active_count") == 1
    assert metrics.increment("active_count", 4) == 5
    assert metrics.decrement("active_count", 2) == 3
    snap = metrics.snapshot()
    assert snap.active == 3
    assert snap.idle == 0


def test_counters_map_to_snapshot_fields():
    metrics = PoolMetrics()
    metrics.increment("idle_count", 2)
    metrics.increment("total_deadlocks")
    metrics.increment("waiters", 3)
    snap = metrics.snapshot()
    assert (snap.idle, snap.total_deadlocks, snap.waiters) == (2, 1, 3)


def test_snapshot_is_independent_copy():
    metrics = PoolMetrics()
    before = metrics.snapshot()
    metrics.increment("total_checkouts")
    assert before.total_checkouts == 0
    assert metrics.snapshot().total_checkouts == 1


def test_unknown_metric_rejected():
    with pytest.raises(ValueError):
        PoolMetrics().increment("bogus")


def test_decrement_below_zero_rejected():
    metrics = PoolMetrics()
    with pytest.raises(ValueError):
        metrics.decrement("waiters")
    assert metrics.snapshot().waiters == 0


def test_negative_amount_rejected():
    with pytest.raises(ValueError):
        PoolMetrics().increment("waiters", -1)


def test_concurrent_increments_are_not_lost():
    metrics = PoolMetrics()
    threads_count, per_thread = 8, 1000

    def work():
        for _ in range(per_thread):
            metrics.increment("total_created")

    threads = [threading.Thread(target=work) for _ in range(threads_count)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    assert metrics.snapshot().total_created == threads_count * per_thread


def test_to_dict_round_trip():
    snap = MetricsSnapshot(active=1, idle=2, waiters=3)
    assert MetricsSnapshot(**snap.to_dict()) == snap