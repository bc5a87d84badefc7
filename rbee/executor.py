"""Input executor: plays planned waypoints and keystrokes against the platform.

Usage:
    executor = InputExecutor(Desktop())
    executor.run_trajectory(plan_linear(...))
    executor.run_typing(plan_typing(...))

Plans are literal scripts: every entry runs in order, then the executor
waits that entry's delay. A platform error aborts the rest of the script.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable

from rbee.input.capabilities import InputPlatform
from rbee.input.keystrokes import ActionKind, TypingAction
from rbee.input.trajectory import Waypoint

log = logging.getLogger(__name__)


class InputExecutor:
    """Drives an InputPlatform from planner output."""

    def __init__(
        self,
        platform: InputPlatform,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._platform = platform
        self._sleep = sleep

    def run_trajectory(self, waypoints: Iterable[Waypoint]) -> None:
        """Move through each waypoint with its own speed/velocity, pausing after each."""
        count = 0
        for wp in waypoints:
            self._platform.move_smooth(wp.x, wp.y, wp.speed, wp.velocity)
            self._pause(wp.delay_ms)
            count += 1
        log.debug("Trajectory done (%d waypoints)", count)

    def run_typing(self, actions: Iterable[TypingAction]) -> None:
        """Type each planned character; corrections tap their key (backspace)."""
        for action in actions:
            if action.kind is ActionKind.CORRECT:
                self._platform.key_tap(action.payload)
            else:
                self._platform.type_char(action.payload)
            self._pause(action.delay_ms)

    def _pause(self, delay_ms: int) -> None:
        if delay_ms > 0:
            self._sleep(delay_ms / 1000.0)
