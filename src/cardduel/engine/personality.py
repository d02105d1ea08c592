from __future__ import annotations

import random
from dataclasses import dataclass

from .types import CharacterDefinition, Difficulty

BASE_AGGRESSIVENESS = 0.5
BASE_DEFENSIVENESS = 0.4
BASE_HEALING_TENDENCY = 0.6

# Fixed shifts for the stronger tiers, random jitter (+/- bound) for the weaker ones.
_DIFFICULTY_SHIFT: dict[str, tuple[float, float, float]] = {
    "hard": (0.1, 0.15, 0.1),
    "expert": (0.15, 0.2, 0.15),
}
_DIFFICULTY_JITTER: dict[str, tuple[float, float, float]] = {
    "easy": (0.2, 0.2, 0.2),
    "medium": (0.1, 0.1, 0.05),
}


@dataclass(frozen=True)
class Personality:
    aggressiveness: float
    defensiveness: float
    healing_tendency: float


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def make_personality(
    character: CharacterDefinition, difficulty: Difficulty, rng: random.Random
) -> Personality:
    offsets = character.personality
    values = [
        BASE_AGGRESSIVENESS + offsets.aggressiveness,
        BASE_DEFENSIVENESS + offsets.defensiveness,
        BASE_HEALING_TENDENCY + offsets.healing_tendency,
    ]
    shift = _DIFFICULTY_SHIFT.get(difficulty)
    if shift is not None:
        values = [v + s for v, s in zip(values, shift)]
    jitter = _DIFFICULTY_JITTER.get(difficulty)
    if jitter is not None:
        values = [v + rng.uniform(-j, j) for v, j in zip(values, jitter)]
    return Personality(
        aggressiveness=_clamp(values[0]),
        defensiveness=_clamp(values[1]),
        healing_tendency=_clamp(values[2]),
    )
