"""
pyautogui binding of the input capability set.

Every pyautogui failure (including the corner fail-safe) is re-raised as
PlatformError so the intake layer can report it verbatim.
"""

from __future__ import annotations

from contextlib import contextmanager

import pyautogui

from rbee.errors import PlatformError

# Timing comes from the planners, not from pyautogui
pyautogui.PAUSE = 0
# Keep failsafe (move mouse to corner to abort)
pyautogui.FAILSAFE = True

# Seconds per smooth segment at speed 1.0
SMOOTH_SEGMENT_SECONDS = 0.2


@contextmanager
def _platform_call(what: str):
    try:
        yield
    # OSError and friends come from the display backend (Xlib, Quartz, win32)
    except (pyautogui.PyAutoGUIException, OSError, ValueError, ArithmeticError) as exc:
        raise PlatformError(f"{what} failed: {exc}") from exc


def end_velocity_tween(velocity: float):
    """
    Tween for pyautogui.moveTo shaped by the end-velocity factor.

    velocity < 1 covers most of the distance early and creeps in at the
    end; velocity > 1 starts slow and arrives fast. 1.0 is linear.
    """
    exponent = max(velocity, 0.1)

    def tween(n: float) -> float:
        return n ** exponent

    return tween


class Desktop:
    """The local mouse and keyboard, via pyautogui."""

    def position(self) -> tuple[int, int]:
        with _platform_call("cursor position"):
            x, y = pyautogui.position()
        return int(x), int(y)

    def move_to(self, x: int, y: int) -> None:
        with _platform_call("move"):
            pyautogui.moveTo(x, y)

    def move_smooth(self, x: int, y: int, speed: float, velocity: float) -> None:
        with _platform_call("smooth move"):
            pyautogui.moveTo(
                x, y,
                duration=SMOOTH_SEGMENT_SECONDS * speed,
                tween=end_velocity_tween(velocity),
            )

    def click(self, button: str = 'left') -> None:
        with _platform_call(f"{button} click"):
            pyautogui.click(button=button)

    def key_tap(self, key: str) -> None:
        """Press and release a named key ('enter', 'tab', 'backspace', ...)."""
        name = key.lower() if len(key) > 1 else key
        if name not in pyautogui.KEYBOARD_KEYS:
            raise PlatformError(f"invalid key name: {key!r}")
        with _platform_call(f"key {key!r}"):
            pyautogui.press(name)

    def type_char(self, char: str) -> None:
        """Type one character. Characters with no key mapping are an error."""
        if char not in pyautogui.KEYBOARD_KEYS:
            raise PlatformError(f"cannot type character: {char!r}")
        with _platform_call("typing"):
            pyautogui.write(char)
