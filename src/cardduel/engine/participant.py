from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Sequence

from .actions import PlayedCard
from .cards import draw_cards
from .types import CardKind, Rules


@dataclass
class CurseEffect:
    turns: int


@dataclass(frozen=True)
class ParticipantView:
    """Read-only copy of a participant as seen by its own controller."""

    id: str
    name: str
    character: str
    hp: int
    shield: int
    hand: tuple[CardKind, ...]
    deck_size: int
    discard_size: int
    special_used: bool
    curse_turns: int

    @property
    def cursed(self) -> bool:
        return self.curse_turns > 0


@dataclass(frozen=True)
class OpponentView:
    """Public information about the other side. The hand is hidden."""

    id: str
    name: str
    character: str
    hp: int
    shield: int
    hand_size: int
    special_used: bool
    curse_turns: int


@dataclass(frozen=True)
class MatchView:
    turn: int
    me: ParticipantView
    opponent: OpponentView


@dataclass
class Participant:
    id: str
    name: str
    character: str
    hp: int
    shield: int = 0
    deck: list[CardKind] = field(default_factory=list)
    hand: list[CardKind] = field(default_factory=list)
    discard: list[CardKind] = field(default_factory=list)
    special_used: bool = False
    curse: CurseEffect | None = None
    dealt: int = 0  # cards in circulation, fixed at deal time

    @property
    def cursed(self) -> bool:
        return self.curse is not None and self.curse.turns > 0

    def card_count(self) -> int:
        return len(self.deck) + len(self.hand) + len(self.discard)

    def check_invariants(self, hp_max: int) -> None:
        assert self.card_count() == self.dealt, (
            f"{self.id}: {self.card_count()} cards in circulation, {self.dealt} dealt"
        )
        assert 0 <= self.hp <= hp_max, f"{self.id}: hp {self.hp} out of range"
        assert self.shield >= 0, f"{self.id}: negative shield {self.shield}"

    def deal(self, cards: Sequence[CardKind], hand_size: int, rng: random.Random) -> None:
        self.deck = list(cards)
        self.hand = []
        self.discard = []
        self.dealt = len(self.deck)
        self.draw(hand_size, rng)

    def draw(self, count: int, rng: random.Random) -> list[CardKind]:
        drawn = draw_cards(self.deck, self.hand, self.discard, count, rng)
        assert self.card_count() == self.dealt
        return drawn

    def refill_hand(self, hand_size: int, rng: random.Random) -> list[CardKind]:
        return self.draw(max(0, hand_size - len(self.hand)), rng)

    def can_use_special(self, card: CardKind, rules: Rules) -> bool:
        if self.special_used:
            return False
        special_card = rules.character(self.character).special_card
        return special_card is not None and card == special_card

    def play_card(self, index: int | None, use_special: bool, rules: Rules) -> PlayedCard | None:
        """Move a hand card to the discard pile.

        Returns None (a pass) when `index` is None or out of range. A special
        request the character cannot honour is dropped, not rejected.
        """
        if index is None or index < 0 or index >= len(self.hand):
            return None
        card = self.hand.pop(index)
        self.discard.append(card)
        special = bool(use_special) and self.can_use_special(card, rules)
        if special:
            self.special_used = True
        return PlayedCard(kind=card, use_special=special)

    def view(self) -> ParticipantView:
        return ParticipantView(
            id=self.id,
            name=self.name,
            character=self.character,
            hp=self.hp,
            shield=self.shield,
            hand=tuple(self.hand),
            deck_size=len(self.deck),
            discard_size=len(self.discard),
            special_used=self.special_used,
            curse_turns=self.curse.turns if self.curse is not None else 0,
        )

    def public_view(self) -> OpponentView:
        return OpponentView(
            id=self.id,
            name=self.name,
            character=self.character,
            hp=self.hp,
            shield=self.shield,
            hand_size=len(self.hand),
            special_used=self.special_used,
            curse_turns=self.curse.turns if self.curse is not None else 0,
        )
