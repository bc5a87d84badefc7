"""
Typing plans with human-like pacing and occasional corrected typos.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from .randomness import RandomSource

TYPO_PERCENT = 5
TYPO_PAUSE_MS = (100, 300)
KEY_DELAY_MS = (50, 300)

CORRECTION_KEY = 'backspace'


class ActionKind(enum.Enum):
    EMIT_CHAR = 'emit_char'
    EMIT_TYPO = 'emit_typo'
    CORRECT = 'correct'


@dataclass(frozen=True)
class TypingAction:
    """One keyboard event and the pause held after it."""

    kind: ActionKind
    payload: str
    delay_ms: int = 0


def plan_typing(text: str, rng: RandomSource) -> list[TypingAction]:
    """
    Plan the keystrokes for `text`.

    Every character is emitted exactly once and in order. Before roughly 5%
    of them a wrong character is typed, held for a moment, and erased.
    The wrong character is sampled from anywhere in `text`, not from the
    keys next to the intended one.
    """
    actions = []
    for char in text:
        if rng.uniform_int(0, 100) < TYPO_PERCENT:
            wrong = text[rng.uniform_int(0, len(text) - 1)]
            actions.append(TypingAction(
                ActionKind.EMIT_TYPO, wrong, rng.uniform_int(*TYPO_PAUSE_MS),
            ))
            actions.append(TypingAction(ActionKind.CORRECT, CORRECTION_KEY))

        actions.append(TypingAction(
            ActionKind.EMIT_CHAR, char, rng.uniform_int(*KEY_DELAY_MS),
        ))
    return actions
