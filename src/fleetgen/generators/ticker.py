"""Cancellation and pacing utilities for the generation loop."""
import threading
import time


class CancellationToken:
    """Cooperative cancellation signal shared by a controller and its loop."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: float | None = None) -> bool:
        """Sleep up to ``timeout`` seconds, waking early on cancellation.

        Returns:
            True if the token was cancelled
        """
        return self._event.wait(timeout)


class PeriodicTicker:
    """Fixed-rate pacing for a repeating task.

    Ticks are due on the grid ``start + n * period``. When a tick overruns its
    slot the grid is re-anchored to now instead of firing catch-up ticks.
    """

    def __init__(self, period_seconds: float, clock=time.monotonic):
        """Initialize the ticker.

        Args:
            period_seconds: Interval between ticks
            clock: Monotonic time source
        """
        if period_seconds <= 0:
            raise ValueError("period_seconds must be positive")
        self.period = period_seconds
        self._clock = clock
        self._next_due = None

    def wait_next(self, token: CancellationToken) -> bool:
        """Wait until the next tick is due.

        Args:
            token: Cancellation token checked while waiting

        Returns:
            True if the tick should run, False if the token was cancelled
        """
        now = self._clock()
        if self._next_due is None:
            self._next_due = now + self.period
        elif self._next_due < now:
            self._next_due = now

        delay = self._next_due - now
        if token.wait(delay):
            return False

        self._next_due += self.period
        return not token.is_cancelled
