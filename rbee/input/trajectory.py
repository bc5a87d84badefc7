"""
Mouse trajectory planning.

Straight-line interpolation with per-step jitter, plus an optional circular
detour around the destination. Pure planning: returns the waypoints and
their hold times, never touches the cursor.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from .randomness import RandomSource

STEPS = 10

JITTER_PX = (-2, 2)
STEP_DELAY_MS = (10, 50)
DETOUR_RADIUS_PX = (16, 50)
DETOUR_PAUSE_MS = (5, 50)

APPROACH = 'approach'
DETOUR = 'detour'
CIRCLE = 'circle'
FINAL = 'final'


@dataclass(frozen=True)
class Waypoint:
    """One planned cursor position and the pause held after reaching it."""

    x: int
    y: int
    delay_ms: int
    speed: float = 1.0
    velocity: float = 1.0
    phase: str = APPROACH


def plan_linear(
    start_x: int,
    start_y: int,
    end_x: int,
    end_y: int,
    speed: float,
    velocity: float,
    rng: RandomSource,
    steps: int = STEPS,
) -> list[Waypoint]:
    """
    Plan a jittered straight-line move from start to end.

    Produces `steps` approach waypoints, then (on a coin flip) a circular
    detour around the destination, then the exact destination. The last
    waypoint is always (end_x, end_y) no matter what jitter or detour did.
    """
    waypoints = []
    for i in range(steps):
        t = i / steps
        x = int(start_x + t * (end_x - start_x))
        y = int(start_y + t * (end_y - start_y))
        x += rng.uniform_int(*JITTER_PX)
        y += rng.uniform_int(*JITTER_PX)
        delay = rng.uniform_int(*STEP_DELAY_MS)
        waypoints.append(Waypoint(x, y, delay, speed, velocity, APPROACH))

    if rng.uniform_int(0, 1) > 0:
        if waypoints:
            resume = (waypoints[-1].x, waypoints[-1].y)
        else:
            resume = (start_x, start_y)
        waypoints.extend(
            circular_detour(end_x, end_y, resume, speed, velocity, rng, steps=steps)
        )

    waypoints.append(Waypoint(end_x, end_y, 0, speed, velocity, FINAL))
    return waypoints


def circular_detour(
    x: int,
    y: int,
    resume: tuple[int, int],
    speed: float,
    velocity: float,
    rng: RandomSource,
    steps: int = STEPS,
) -> list[Waypoint]:
    """
    Loop once around a circle next to (x, y), then go back to `resume`.

    The circle's center sits one radius above the target; direction and
    radius are random, with a fixed micro-pause between circle points.
    """
    r = float(rng.uniform_int(*DETOUR_RADIUS_PX))
    pause = rng.uniform_int(*DETOUR_PAUSE_MS)
    clockwise = rng.uniform_int(0, 1) == 0

    # Reach the target first so the loop doesn't start with a jump
    path = [Waypoint(x, y, pause, speed, velocity, DETOUR)]

    center_x = x - int(r * math.cos(math.pi / 2))
    center_y = y - int(r * math.sin(math.pi / 2))

    for i in range(steps + 1):
        angle = 2 * math.pi * i / steps
        if not clockwise:
            angle = -angle
        path.append(Waypoint(
            center_x + int(r * math.cos(angle)),
            center_y + int(r * math.sin(angle)),
            pause,
            speed,
            velocity,
            CIRCLE,
        ))

    path.append(Waypoint(resume[0], resume[1], 0, speed, velocity, DETOUR))
    return path
