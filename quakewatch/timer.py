"""Cancellable periodic timer.

A PeriodicTimer calls its callback every ``interval`` seconds on a daemon
thread until cancelled. Cancelling is deterministic: once ``cancel()``
returns, the callback will not be invoked again (unless it was already
running on the timer thread at that moment).
"""

import logging
import threading
from typing import Callable


logger = logging.getLogger(__name__)


class PeriodicTimer:
    """Timer handle with a cancellation token."""

    def __init__(
        self,
        interval: float,
        callback: Callable[[], None],
        name: str = "quakewatch-timer",
    ) -> None:
        """Initialize timer (not started).

        Args:
            interval: Seconds between callbacks
            callback: Called on the timer thread
            name: Thread name
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        self.interval = interval
        self.callback = callback
        self.name = name
        self._cancelled = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._cancelled.is_set()

    def start(self) -> None:
        if self._thread is not None:
            raise RuntimeError("timer already started")
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def cancel(self, timeout: float | None = 1.0) -> None:
        """Stop the timer and wait briefly for its thread to exit."""
        self._cancelled.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run(self) -> None:
        # wait() returns True as soon as the cancellation token is set
        while not self._cancelled.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Periodic timer callback failed")
