"""
Tests for the in-memory attempt store: window arithmetic, reset, sweep,
and lost-update safety under thread contention.
"""
from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

WINDOW = 15 * 60


def test_absent_identity_counts_zero(store):
    assert store.get_failure_count("10.0.0.1") == 0
    assert store.get_record("10.0.0.1") is None


def test_record_failure_returns_running_count(store):
    assert store.record_failure("10.0.0.1") == 1
    assert store.record_failure("10.0.0.1") == 2
    assert store.get_failure_count("10.0.0.1") == 2


def test_window_starts_at_first_failure(store, clock):
    store.record_failure("a")
    start = clock()
    clock.advance(30)
    store.record_failure("a")
    assert store.get_record("a").window_start == start


def test_window_expiry_resets_count(store, clock):
    for _ in range(7):
        store.record_failure("a")
    clock.advance(WINDOW - 1)
    assert store.get_failure_count("a") == 7
    clock.advance(1)
    assert store.get_failure_count("a") == 0


def test_failure_after_expiry_opens_fresh_window(store, clock):
    store.record_failure("a")
    store.record_failure("a")
    clock.advance(WINDOW + 5)
    assert store.record_failure("a") == 1
    assert store.get_record("a").window_start == clock()


def test_clear_identity(store):
    store.record_failure("a")
    store.record_failure("a")
    store.clear_identity("a")
    assert store.get_failure_count("a") == 0
    store.clear_identity("never-seen")


def test_get_record_returns_snapshot(store):
    store.record_failure("a")
    snapshot = store.get_record("a")
    snapshot.failure_count = 99
    assert store.get_failure_count("a") == 1


def test_identities_are_independent(store):
    store.record_failure("a")
    store.record_failure("a")
    store.record_failure("b")
    store.clear_identity("b")
    assert store.get_failure_count("a") == 2
    assert store.get_failure_count("b") == 0


def test_sweep_removes_only_expired(store, clock):
    store.record_failure("old")
    clock.advance(WINDOW - 10)
    store.record_failure("fresh")
    clock.advance(10)
    assert store.sweep_expired() == 1
    assert len(store) == 1
    assert store.get_failure_count("fresh") == 1


def test_concurrent_failures_are_not_lost(store):
    n = 200
    barrier = threading.Barrier(8)

    def hammer(_):
        barrier.wait()
        for _ in range(n // 8):
            store.record_failure("shared")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(hammer, range(8)))

    assert store.get_failure_count("shared") == n
