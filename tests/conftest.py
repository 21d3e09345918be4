"""
Shared fixtures: a controllable clock and a log sink that records calls.
"""
import pytest

from querycache import CacheOptions, InMemoryCacheStore


class FakeClock:
    """Clock whose time only moves when a test says so."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingLogger:
    """Log sink that keeps every call's arguments."""

    def __init__(self):
        self.calls = []

    def log(self, *args):
        self.calls.append(args)

    def labels(self):
        """Second argument of each debug line, e.g. "Set:"."""
        return [call[1] for call in self.calls if call and call[0] == "[Cache Debug]"]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sink():
    return RecordingLogger()


@pytest.fixture
def memory_store(clock, sink):
    """Tree store with the background sweep disabled."""
    store = InMemoryCacheStore(
        options=CacheOptions(gc_interval=0, debug=True, logger=sink),
        clock=clock,
    )
    yield store
    store.stop_garbage_collector()
