"""Shared pytest configuration for rbee tests."""

from __future__ import annotations

import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# rbee/ is a namespace package (no __init__.py). Modules inside use
# `from rbee.xxx import ...`, so the PROJECT ROOT (parent of rbee/) must be
# on sys.path and rbee/ itself must not be (it would shadow the package).
_PROJECT_ROOT = str(Path(__file__).resolve().parent.parent.parent)
_RBEE_DIR = str(Path(__file__).resolve().parent.parent)

sys.path[:] = [p for p in sys.path if p != _RBEE_DIR]

if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

# ---------------------------------------------------------------------------
# pyautogui needs a display at import time. CI has none, so the desktop
# binding is tested against a mock.
# ---------------------------------------------------------------------------

_pyautogui = MagicMock()
_pyautogui.PAUSE = 0
_pyautogui.FAILSAFE = True
_pyautogui.position.return_value = (500, 500)
sys.modules.setdefault('pyautogui', _pyautogui)

from rbee.errors import PlatformError
from rbee.executor import InputExecutor
from rbee.ratelimit import TokenBucket


# ---------------------------------------------------------------------------
# Random sources
# ---------------------------------------------------------------------------

class ScriptedRandom:
    """RandomSource that replays a fixed script of integers and floats.

    Each draw must fall inside the requested range, so a script that drifts
    out of step with the planner fails loudly. Once a script runs out the
    source returns `lo`, like the degraded entropy path.
    """

    def __init__(self, ints=(), floats=()) -> None:
        self._ints = list(ints)
        self._floats = list(floats)
        self.int_calls: list[tuple[int, int]] = []

    def uniform_int(self, lo: int, hi: int) -> int:
        self.int_calls.append((lo, hi))
        if not self._ints:
            return lo
        value = self._ints.pop(0)
        assert lo <= value <= hi, f'scripted {value} outside [{lo}, {hi}]'
        return value

    def uniform_float(self, lo: float, hi: float) -> float:
        if not self._floats:
            return lo
        value = self._floats.pop(0)
        assert lo <= value <= hi, f'scripted {value} outside [{lo}, {hi}]'
        return value

    @property
    def exhausted(self) -> bool:
        return not self._ints and not self._floats


class EdgeRandom:
    """RandomSource that always returns the low (or high) end of the range."""

    def __init__(self, high: bool = False) -> None:
        self._high = high

    def uniform_int(self, lo: int, hi: int) -> int:
        return hi if self._high else lo

    def uniform_float(self, lo: float, hi: float) -> float:
        return hi if self._high else lo


# ---------------------------------------------------------------------------
# Platform
# ---------------------------------------------------------------------------

class FakePlatform:
    """InputPlatform that records every call instead of touching the desktop."""

    def __init__(self, position=(0, 0), bad_keys=(), bad_chars=(), lock=None) -> None:
        self.calls: list[tuple] = []
        self._position = position
        self._bad_keys = set(bad_keys)
        self._bad_chars = set(bad_chars)
        self._lock = lock
        self.lock_held: list[bool] = []

    def _record(self, *call) -> None:
        if self._lock is not None:
            self.lock_held.append(self._lock.locked())
        self.calls.append(call)

    def position(self) -> tuple[int, int]:
        self._record('position')
        return self._position

    def move_to(self, x: int, y: int) -> None:
        self._record('move_to', x, y)

    def move_smooth(self, x: int, y: int, speed: float, velocity: float) -> None:
        self._record('move_smooth', x, y, speed, velocity)

    def click(self, button: str = 'left') -> None:
        self._record('click', button)

    def key_tap(self, key: str) -> None:
        self._record('key_tap', key)
        if key in self._bad_keys:
            raise PlatformError(f'invalid key name: {key!r}')

    def type_char(self, char: str) -> None:
        self._record('type_char', char)
        if char in self._bad_chars:
            raise PlatformError(f'cannot type character: {char!r}')

    def moves(self) -> list[tuple[int, int]]:
        return [(c[1], c[2]) for c in self.calls if c[0] == 'move_smooth']

    def typed(self) -> str:
        return ''.join(c[1] for c in self.calls if c[0] == 'type_char')


# ---------------------------------------------------------------------------
# Shared fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def platform() -> FakePlatform:
    return FakePlatform(position=(10, 20))


@pytest.fixture()
def sleeps() -> list[float]:
    """Collects every sleep the executor asks for (in seconds)."""
    return []


@pytest.fixture()
def executor(platform: FakePlatform, sleeps: list[float]) -> InputExecutor:
    return InputExecutor(platform, sleep=sleeps.append)


@pytest.fixture()
def frozen_bucket() -> TokenBucket:
    """Burst of 3 with the clock stopped, so nothing refills."""
    return TokenBucket(rate=10, burst=3, clock=lambda: 100.0)
