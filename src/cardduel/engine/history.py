from __future__ import annotations

from collections import deque
from dataclasses import dataclass

from .types import CardKind

DEFAULT_CAPACITY = 10
PREDICTION_WINDOW = 3
BASELINE_ATTACK_PROBABILITY = 0.4
MIN_ATTACK_PROBABILITY = 0.2
MAX_ATTACK_PROBABILITY = 0.8


@dataclass(frozen=True)
class TurnSnapshot:
    turn: int
    my_hp: int
    my_shield: int
    opponent_hp: int
    opponent_shield: int
    hand_size: int


class OpponentHistory:
    """Most-recent-N record of a bot's turns and of what its opponent played."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        self.turns: deque[TurnSnapshot] = deque(maxlen=capacity)
        self.actions: deque[CardKind] = deque(maxlen=capacity)

    def __len__(self) -> int:
        return len(self.actions)

    def record_turn(self, snapshot: TurnSnapshot) -> None:
        self.turns.append(snapshot)

    def observe(self, card: CardKind) -> None:
        self.actions.append(card)

    def recent_actions(self, count: int = PREDICTION_WINDOW) -> list[CardKind]:
        if count <= 0:
            return []
        return list(self.actions)[-count:]

    def predict_opponent_attack(self) -> float:
        if not self.actions:
            return BASELINE_ATTACK_PROBABILITY
        attacks = sum(1 for a in self.recent_actions() if a == "attack")
        span = MAX_ATTACK_PROBABILITY - MIN_ATTACK_PROBABILITY
        # Always divide by the full window, even while it is still filling.
        return min(MAX_ATTACK_PROBABILITY, MIN_ATTACK_PROBABILITY + (attacks / PREDICTION_WINDOW) * span)

    def clear(self) -> None:
        self.turns.clear()
        self.actions.clear()
