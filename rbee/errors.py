"""Exception hierarchy for the rbee input server.

Only the HTTP intake layer (server.py) maps these to status codes;
everything below it raises and lets them propagate unchanged.
"""

from __future__ import annotations


class RbeeError(Exception):
    """Base class for errors raised by the input synthesis core."""


class UnknownActionError(RbeeError):
    """The command's action is not one of the recognized values."""

    def __init__(self, action: str) -> None:
        super().__init__(f"unknown action: {action}")
        self.action = action


class PlatformError(RbeeError):
    """A call into the OS input capability set failed."""


class CommandDecodeError(RbeeError, ValueError):
    """Request body is valid JSON but does not describe a command."""


class ConfigError(RbeeError, ValueError):
    """Startup configuration is unusable."""
