"""
Randomness for input humanization.

Draws come from the OS CSPRNG (secrets) rather than a seeded PRNG, so the
jitter/timing sequence can't be reconstructed from when the process started.
Planners take any object satisfying RandomSource; tests pass a scripted one.
"""

from __future__ import annotations

import logging
import secrets
from typing import Protocol

log = logging.getLogger(__name__)


class RandomSource(Protocol):
    def uniform_int(self, lo: int, hi: int) -> int: ...

    def uniform_float(self, lo: float, hi: float) -> float: ...


class SecureRandom:
    """RandomSource backed by the OS entropy pool.

    If the entropy source fails, every draw degrades to ``lo``: callers see
    zero jitter, never an exception.
    """

    def uniform_int(self, lo: int, hi: int) -> int:
        """Integer in [lo, hi], inclusive."""
        try:
            return lo + secrets.randbelow(hi - lo + 1)
        except (OSError, NotImplementedError) as exc:
            log.debug("Entropy source unavailable, using %d: %s", lo, exc)
            return lo

    def uniform_float(self, lo: float, hi: float) -> float:
        """Float in [lo, hi] with two-decimal granularity."""
        span = int(round(hi * 100)) - int(round(lo * 100))
        try:
            return round(lo + secrets.randbelow(span + 1) / 100, 2)
        except (OSError, NotImplementedError) as exc:
            log.debug("Entropy source unavailable, using %.2f: %s", lo, exc)
            return lo
