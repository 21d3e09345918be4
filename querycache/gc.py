"""
Periodic garbage collection for cache stores.

Each store owns exactly one collector. The collector runs a daemon thread
that calls the sweep function every interval until stopped.
"""
import logging
import threading
from typing import Callable, Optional

logger = logging.getLogger("cache.gc")


class GarbageCollector:
    """
    Background sweep lifecycle.

    Usage:
        collector = GarbageCollector(interval=60.0, sweep=store.clean_up)
        collector.start()
        ...
        collector.stop()
    """

    def __init__(
        self,
        interval: float,
        sweep: Callable[[], None],
        name: str = "cache-gc",
    ):
        """
        Args:
            interval: Seconds between sweeps; <= 0 disables the collector
            sweep: Function performing one sweep
            name: Thread name, handy when debugging
        """
        self.interval = interval
        self._sweep = sweep
        self._name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        with self._lock:
            return self._thread is not None

    def start(self) -> bool:
        """
        Start sweeping. No-op if already running or disabled.

        Returns:
            True if a new sweep thread was started
        """
        if self.interval is None or self.interval <= 0:
            return False
        with self._lock:
            if self._thread is not None:
                return False
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name=self._name,
                daemon=True,
            )
            self._thread.start()
            return True

    def stop(self) -> bool:
        """
        Stop sweeping. Safe to call repeatedly or when never started.

        Returns:
            True if a running sweep thread was stopped by this call
        """
        with self._lock:
            thread = self._thread
            if thread is None:
                return False
            self._thread = None
            self._stop_event.set()

        if thread is not threading.current_thread():
            thread.join(timeout=max(self.interval, 1.0))
        return True

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.interval):
            try:
                self._sweep()
            except Exception:
                logger.exception(f"Garbage collection sweep failed ({self._name})")
