"""
Sliding-window rate limiter keyed by an arbitrary string.

One instance guards search providers (keyed by provider name) and another
guards page fetches (keyed by target domain). The limiter never waits:
callers treat ``False`` as "try the next option" or "reject".
"""

import threading
import time
from collections import deque
from typing import Callable, Deque, Dict

from src.config.logging import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    Per-key request counter over a trailing time window.

    The check-and-record sequence runs under a single lock, so two
    concurrent callers can never both pass the threshold check before
    either records its timestamp.
    """

    def __init__(
        self,
        max_requests: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        name: str = "rate_limiter",
    ):
        """
        Initialize the limiter.

        Args:
            max_requests: Requests allowed per key within the window
            window_seconds: Length of the trailing window
            clock: Monotonic time source (injectable for tests)
            name: Label used in log events
        """
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.name = name
        self._clock = clock
        self._windows: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def _trim(self, key: str, now: float) -> Deque[float]:
        window = self._windows.get(key)
        if window is None:
            return deque()
        cutoff = now - self.window_seconds
        while window and window[0] <= cutoff:
            window.popleft()
        if not window:
            del self._windows[key]
        return window

    def allow(self, key: str) -> bool:
        """
        Record a request for ``key`` if the window has capacity.

        Returns:
            True if the request is allowed (and recorded), False otherwise
        """
        with self._lock:
            now = self._clock()
            window = self._trim(key, now)
            if len(window) >= self.max_requests:
                logger.debug(
                    "rate_limit_exceeded",
                    limiter=self.name,
                    key=key,
                    limit=self.max_requests,
                )
                return False
            window.append(now)
            self._windows[key] = window
            return True

    def remaining(self, key: str) -> int:
        """Number of requests ``key`` may still make in the current window."""
        with self._lock:
            window = self._trim(key, self._clock())
            return self.max_requests - len(window)

    def reset(self) -> None:
        """Forget every recorded request."""
        with self._lock:
            self._windows.clear()
