"""Commands received over HTTP and the dispatcher that executes them.

A Command is decoded from one request body, dispatched once, and dropped.
The dispatcher owns the choice of planner; the executor owns the timing.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Any

from rbee.errors import CommandDecodeError, UnknownActionError
from rbee.executor import InputExecutor
from rbee.gui_lock import gui_lock
from rbee.input.capabilities import InputPlatform
from rbee.input.keystrokes import plan_typing
from rbee.input.randomness import RandomSource, SecureRandom
from rbee.input.trajectory import plan_linear

log = logging.getLogger(__name__)

# Range for the per-move smoothing parameters
SPEED_RANGE = (0.5, 1.5)
VELOCITY_RANGE = (0.5, 1.5)

# Coordinates must fit a signed 64-bit integer
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 63 - 1


class Action(str, enum.Enum):
    MOVE_MOUSE = 'moveMouse'
    CLICK = 'click'
    RIGHT_CLICK = 'right_click'
    TYPE = 'type'
    KEY_TAP = 'keyTap'


@dataclass(frozen=True)
class Command:
    """One unit of remote work.

    `action` stays a plain string so an unrecognized value survives decoding
    and is rejected by the dispatcher, not by the decoder.
    """

    action: str = ''
    x: int = 0
    y: int = 0
    value: str = ''

    @classmethod
    def from_dict(cls, data: Any) -> Command:
        """Build a Command from decoded JSON.

        Missing or null fields keep their zero value and unknown keys are
        ignored. A field holding the wrong JSON type is an error.
        """
        if not isinstance(data, dict):
            raise CommandDecodeError(
                f"command must be a JSON object, got {_json_type(data)}"
            )
        return cls(
            action=_field(data, 'action', str, ''),
            x=_field(data, 'x', int, 0),
            y=_field(data, 'y', int, 0),
            value=_field(data, 'value', str, ''),
        )


def _json_type(value: Any) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, (int, float)):
        return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, list):
        return 'array'
    return 'object'


def _field(data: dict, name: str, kind: type, default: Any) -> Any:
    value = data.get(name)
    if value is None:
        return default
    # bool is an int subclass; JSON true/false is not a coordinate
    if isinstance(value, kind) and not isinstance(value, bool):
        if kind is int and not INT_MIN <= value <= INT_MAX:
            raise CommandDecodeError(
                f"field {name!r} out of range for a 64-bit integer: {value}"
            )
        return value
    expected = 'integer' if kind is int else 'string'
    raise CommandDecodeError(
        f"field {name!r} must be {expected}, got {_json_type(value)}"
    )


class CommandDispatcher:
    """Routes a Command to its planner and runs the plan on the platform.

    Known commands execute while holding the process-wide GUI lock, so at
    most one command drives the mouse and keyboard at any moment.
    """

    def __init__(
        self,
        platform: InputPlatform,
        rng: RandomSource | None = None,
        executor: InputExecutor | None = None,
        lock=gui_lock,
    ) -> None:
        self._platform = platform
        self._rng = rng if rng is not None else SecureRandom()
        self._executor = executor if executor is not None else InputExecutor(platform)
        self._lock = lock
        self._handlers = {
            Action.MOVE_MOUSE: self._move_mouse,
            Action.CLICK: self._click,
            Action.RIGHT_CLICK: self._right_click,
            Action.TYPE: self._type,
            Action.KEY_TAP: self._key_tap,
        }

    def dispatch(self, command: Command) -> None:
        """Execute one command. Raises UnknownActionError or PlatformError."""
        try:
            action = Action(command.action)
        except ValueError:
            raise UnknownActionError(command.action) from None

        log.info("Executing %s", action.value)
        with self._lock:
            self._handlers[action](command)

    def _move_mouse(self, command: Command) -> None:
        start_x, start_y = self._platform.position()
        speed = self._rng.uniform_float(*SPEED_RANGE)
        velocity = self._rng.uniform_float(*VELOCITY_RANGE)
        log.info(
            "Moving mouse to %d, %d with speed %.2f and end velocity %.2f",
            command.x, command.y, speed, velocity,
        )
        waypoints = plan_linear(
            start_x, start_y, command.x, command.y, speed, velocity, self._rng,
        )
        self._executor.run_trajectory(waypoints)

    def _click(self, command: Command) -> None:
        self._platform.click('left')

    def _right_click(self, command: Command) -> None:
        self._platform.click('right')

    def _type(self, command: Command) -> None:
        self._executor.run_typing(plan_typing(command.value, self._rng))

    def _key_tap(self, command: Command) -> None:
        self._platform.key_tap(command.value)
