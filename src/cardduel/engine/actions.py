from __future__ import annotations

from dataclasses import dataclass

from .types import CardKind


@dataclass(frozen=True)
class Decision:
    """What an AI wants to play this turn. `card_index` of None is a pass."""

    card_index: int | None
    use_special: bool = False

    @staticmethod
    def pass_turn() -> "Decision":
        return Decision(card_index=None, use_special=False)


@dataclass(frozen=True)
class Submission:
    card_index: int | None
    use_special: bool = False
    note: str | None = None
    penalty: int = 0


@dataclass(frozen=True)
class PlayedCard:
    kind: CardKind
    use_special: bool
