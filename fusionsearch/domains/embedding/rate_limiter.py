"""
Rate Limiter - Sliding-window admission control for provider calls.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from collections.abc import Awaitable, Callable

from .models import RateLimitStats

logger = logging.getLogger(__name__)

__all__ = ["SlidingWindowRateLimiter"]


class SlidingWindowRateLimiter:
    """
    Allow at most `max_per_window` admissions in any trailing window.

    Example:
        >>> limiter = SlidingWindowRateLimiter(max_per_window=500)
        >>> await limiter.admit()  # blocks while the window is full
    """

    def __init__(
        self,
        max_per_window: int = 500,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """
        Initialize rate limiter.

        Args:
            max_per_window: Maximum admissions per window
            window_seconds: Window length in seconds
            clock: Monotonic time source
            sleep: Async sleep function
        """
        if max_per_window < 1:
            raise ValueError("max_per_window must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")

        self.max_per_window = max_per_window
        self.window_seconds = window_seconds
        self._clock = clock
        self._sleep = sleep

        self._timestamps: deque[float] = deque()
        self._lock = asyncio.Lock()

        self._admitted = 0
        self._waits = 0
        self._waited_seconds = 0.0

    def _prune(self, now: float) -> None:
        """Drop timestamps that left the window."""
        while self._timestamps and now - self._timestamps[0] >= self.window_seconds:
            self._timestamps.popleft()

    async def admit(self) -> None:
        """Wait until one more request fits in the window, then record it."""
        async with self._lock:
            while True:
                now = self._clock()
                self._prune(now)

                if len(self._timestamps) < self.max_per_window:
                    self._timestamps.append(now)
                    self._admitted += 1
                    return

                wait_time = self.window_seconds - (now - self._timestamps[0])
                logger.warning("Rate limit reached, waiting %.1fs", wait_time)
                self._waits += 1
                self._waited_seconds += wait_time
                await self._sleep(wait_time)

    @property
    def in_window(self) -> int:
        """Admissions currently counted in the window."""
        self._prune(self._clock())
        return len(self._timestamps)

    def stats(self) -> RateLimitStats:
        """Get rate limiter statistics."""
        return RateLimitStats(
            max_per_window=self.max_per_window,
            window_seconds=self.window_seconds,
            in_window=self.in_window,
            admitted=self._admitted,
            waits=self._waits,
            waited_seconds=self._waited_seconds,
        )
