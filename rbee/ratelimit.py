"""Token-bucket rate limiter shared by all request handlers.

Starts full with `burst` tokens and refills at `rate` tokens per second,
never holding more than `burst`. Each accepted request takes one token;
when none is left the request is rejected outright, never queued.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable


class TokenBucket:
    """Thread-safe token bucket. Inject `clock` for deterministic tests."""

    def __init__(
        self,
        rate: float,
        burst: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if rate < 0 or burst < 0:
            raise ValueError(f"rate and burst must be >= 0 (got {rate}, {burst})")
        self._rate = float(rate)
        self._burst = burst
        self._clock = clock
        self._tokens = float(burst)
        self._last = clock()
        self._lock = threading.Lock()

    @property
    def rate(self) -> float:
        return self._rate

    @property
    def burst(self) -> int:
        return self._burst

    def allow(self) -> bool:
        """Take one token if available. Returns False when the bucket is empty."""
        with self._lock:
            now = self._clock()
            elapsed = max(0.0, now - self._last)
            self._last = now
            self._tokens = min(float(self._burst), self._tokens + elapsed * self._rate)
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return True
            return False
