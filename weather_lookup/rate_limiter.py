"""
Fixed-window daily rate limiter for outbound provider calls.
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from .clock import Clock, next_local_midnight, system_clock

logger = logging.getLogger(__name__)

MAX_REQUESTS = 999
WINDOW_DURATION = timedelta(hours=24)


@dataclass(frozen=True)
class RateLimitStatus:
    allowed: bool
    remaining: int
    reset_at: datetime


class RateLimiter:
    """
    Counts outbound calls made in the current window.

    Callers are expected to call ``check()`` before ``increment()``; the
    limiter itself never refuses an increment.
    """

    def __init__(
        self,
        max_requests: int = MAX_REQUESTS,
        window_duration: timedelta = WINDOW_DURATION,
        clock: Optional[Clock] = None,
    ):
        self.max_requests = max_requests
        self.window_duration = window_duration
        self._clock = clock or system_clock
        self._lock = threading.Lock()
        self._request_count = 0
        self._window_start = next_local_midnight(self._clock())

    @property
    def request_count(self) -> int:
        return self._request_count

    @property
    def window_start(self) -> datetime:
        return self._window_start

    def check(self) -> RateLimitStatus:
        """Reset the window if it has elapsed, then report capacity."""
        now = self._clock()
        with self._lock:
            if now >= self._window_start + self.window_duration:
                logger.info(
                    f"Rate limit window reset after {self._request_count} requests"
                )
                self._request_count = 0
                self._window_start = now

            return RateLimitStatus(
                allowed=self._request_count < self.max_requests,
                remaining=max(0, self.max_requests - self._request_count),
                reset_at=self._window_start + self.window_duration,
            )

    def increment(self) -> None:
        with self._lock:
            self._request_count += 1
