"""Sliding-window rate gate for calls against the stats API."""

import logging
import threading
import time
from collections import deque
from typing import Callable, Deque, Optional

from .errors import CallCancelled

logger = logging.getLogger(__name__)

DEFAULT_QUOTA = 10
DEFAULT_WINDOW_SECONDS = 60.0


class RateGate:
    """Tracks recent call instants and computes how long the next call must wait.

    One gate is meant to be shared by every pipeline run of the process, since
    the quota belongs to the API credential rather than to a single run. The
    gate never drops or reorders calls; it only reports a delay.
    """

    def __init__(
        self,
        quota: int = DEFAULT_QUOTA,
        window: float = DEFAULT_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if quota < 1:
            raise ValueError("quota must be at least 1")
        if window <= 0:
            raise ValueError("window must be positive")
        self.quota = quota
        self.window = window
        self.clock = clock
        self._timestamps: Deque[float] = deque()
        self._lock = threading.Lock()

    def admit_call(self) -> float:
        """Record a call and return 0.0, or return the wait without recording."""
        with self._lock:
            now = self.clock()
            while self._timestamps and now - self._timestamps[0] >= self.window:
                self._timestamps.popleft()
            if len(self._timestamps) < self.quota:
                self._timestamps.append(now)
                return 0.0
            return self.window - (now - self._timestamps[0])

    def wait_and_admit(
        self,
        sleep: Callable[[float], None] = time.sleep,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> float:
        """Pause once if the window is full, then let the call through.

        The call proceeds after the pause without checking the gate again;
        its instant is still recorded so later calls see it in the window.
        Raises CallCancelled instead, without recording, if `should_stop`
        reports true after the pause. Returns the time slept.
        """
        wait = self.admit_call()
        if wait > 0:
            logger.info("Rate limit reached, waiting %.1fs", wait)
            sleep(wait)
            if should_stop is not None and should_stop():
                raise CallCancelled("stopped during rate wait")
            self._record()
        return wait

    def _record(self) -> None:
        with self._lock:
            self._timestamps.append(self.clock())

    def pending(self) -> int:
        """Number of timestamps currently retained."""
        with self._lock:
            return len(self._timestamps)
