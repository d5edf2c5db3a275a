"""
Scheduling services for the playback core.

Provides the cancellable periodic task that drives the position poll, plus
one-shot background work (bounded wait-for-load loops) and delayed calls.
All timing the player needs goes through a Scheduler so tests can replace
real threads with manually driven ticks.
"""

import logging
import threading
import time
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    Metronome thread calling a callback at a fixed interval.

    Uses absolute clock timing to prevent drift, keeps ticking when the
    callback raises, and stops promptly once cancelled. cancel() never joins,
    so it is safe to call from inside the callback or while holding a lock
    the callback needs.
    """

    def __init__(self, interval: float, callback: Callable[[], None], name: str = "PeriodicTask"):
        """
        Initialize periodic task.

        Args:
            interval: Seconds between ticks
            callback: Function called on every tick (from the task thread)
            name: Thread name (for logs)
        """
        self.interval = interval
        self.callback = callback
        self.name = name
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def active(self) -> bool:
        return self._thread is not None and not self._stop_event.is_set()

    def start(self) -> "PeriodicTask":
        if self._thread is not None:
            return self
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()
        logger.debug(f"[CLOCK] {self.name} started (interval={self.interval}s)")
        return self

    def cancel(self) -> None:
        """Stop ticking. Idempotent."""
        if not self._stop_event.is_set():
            self._stop_event.set()
            logger.debug(f"[CLOCK] {self.name} cancelled")

    def join(self, timeout: float = 1.0) -> None:
        """Wait for the task thread to exit (never from the task thread itself)."""
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)

    def _run(self) -> None:
        next_tick = time.monotonic() + self.interval
        while not self._stop_event.wait(max(0.0, next_tick - time.monotonic())):
            try:
                self.callback()
            except Exception as e:
                # A failing tick must not kill the metronome
                logger.error(f"[CLOCK] {self.name} tick error: {e}", exc_info=True)

            next_tick += self.interval
            if next_tick < time.monotonic():
                # Behind schedule - resync instead of accumulating delay
                next_tick = time.monotonic() + self.interval


class Scheduler:
    """
    Thread-backed scheduler.

    Subclasses (test doubles) override every(), spawn(), call_later() and
    sleep() to run work deterministically.
    """

    def every(self, interval: float, callback: Callable[[], None], name: str = "PeriodicTask") -> PeriodicTask:
        """
        Start a periodic task.

        Args:
            interval: Seconds between ticks
            callback: Tick function
            name: Task name

        Returns:
            Started task; call cancel() to stop it
        """
        return PeriodicTask(interval, callback, name).start()

    def spawn(self, target: Callable[[], None], name: str = "worker") -> None:
        """Run target once on a daemon thread."""
        thread = threading.Thread(target=target, name=name, daemon=True)
        thread.start()

    def call_later(self, delay: float, callback: Callable[[], None], name: str = "timer") -> threading.Timer:
        """Run callback once after delay seconds."""
        timer = threading.Timer(delay, callback)
        timer.name = name
        timer.daemon = True
        timer.start()
        return timer

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)
