"""
Tests for the background garbage collector lifecycle.
"""
import threading

from querycache.gc import GarbageCollector


def test_sweeps_repeatedly_until_stopped():
    swept = threading.Event()
    count = 0

    def sweep():
        nonlocal count
        count += 1
        if count >= 3:
            swept.set()

    collector = GarbageCollector(interval=0.01, sweep=sweep)
    assert collector.start() is True
    assert swept.wait(timeout=5)
    assert collector.stop() is True
    assert collector.running is False


def test_start_twice_keeps_one_thread():
    collector = GarbageCollector(interval=10, sweep=lambda: None)
    assert collector.start() is True
    assert collector.start() is False
    collector.stop()


def test_stop_is_idempotent():
    collector = GarbageCollector(interval=10, sweep=lambda: None)
    assert collector.stop() is False
    collector.start()
    assert collector.stop() is True
    assert collector.stop() is False


def test_non_positive_interval_disables():
    collector = GarbageCollector(interval=0, sweep=lambda: None)
    assert collector.start() is False
    assert collector.running is False


def test_sweep_errors_are_logged_and_sweeping_continues(caplog):
    calls = []
    recovered = threading.Event()

    def sweep():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")
        recovered.set()

    collector = GarbageCollector(interval=0.01, sweep=sweep, name="test-gc")
    collector.start()
    try:
        assert recovered.wait(timeout=5)
    finally:
        collector.stop()

    assert "Garbage collection sweep failed (test-gc)" in caplog.text


def test_stop_from_inside_sweep_does_not_deadlock():
    done = threading.Event()
    holder = {}

    def sweep():
        holder["collector"].stop()
        done.set()

    collector = GarbageCollector(interval=0.01, sweep=sweep)
    holder["collector"] = collector
    collector.start()

    assert done.wait(timeout=5)
    assert collector.running is False
