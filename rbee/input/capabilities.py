"""The OS input capability set the executor drives.

Desktop (desktop.py) is the real binding; tests use a recording fake.
"""

from __future__ import annotations

from typing import Protocol


class InputPlatform(Protocol):
    def position(self) -> tuple[int, int]: ...

    def move_to(self, x: int, y: int) -> None: ...

    def move_smooth(self, x: int, y: int, speed: float, velocity: float) -> None: ...

    def click(self, button: str = 'left') -> None: ...

    def key_tap(self, key: str) -> None: ...

    def type_char(self, char: str) -> None: ...
