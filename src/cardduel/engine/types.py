from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal, Mapping

CardKind = Literal["attack", "defend", "heal", "curse"]
Difficulty = Literal["easy", "medium", "hard", "expert"]
Phase = Literal["deckbuild", "play", "resolve", "ended"]
TimeoutPolicy = Literal["penalty", "pass", "defend", "random"]
EndReason = Literal["hp_exhausted", "turn_limit", "aborted", "forfeit"]

CARD_KINDS: tuple[CardKind, ...] = ("attack", "defend", "heal", "curse")
DIFFICULTIES: tuple[Difficulty, ...] = ("easy", "medium", "hard", "expert")
TIMEOUT_POLICIES: tuple[TimeoutPolicy, ...] = ("penalty", "pass", "defend", "random")


@dataclass(frozen=True)
class DeckShape:
    attack: int
    defend: int
    heal: int
    curse: int

    def counts(self) -> dict[CardKind, int]:
        return {"attack": self.attack, "defend": self.defend, "heal": self.heal, "curse": self.curse}

    def total(self) -> int:
        return self.attack + self.defend + self.heal + self.curse

    def cards(self) -> list[CardKind]:
        out: list[CardKind] = []
        for kind, count in self.counts().items():
            out.extend([kind] * count)
        return out


@dataclass(frozen=True)
class PersonalityOffsets:
    aggressiveness: float = 0.0
    defensiveness: float = 0.0
    healing_tendency: float = 0.0


@dataclass(frozen=True)
class CharacterDefinition:
    name: str
    special_card: CardKind | None
    special_bonus: int
    deck_shape: DeckShape
    personality: PersonalityOffsets = field(default_factory=PersonalityOffsets)


@dataclass(frozen=True)
class CurseRules:
    duration: int = 3
    hp_drain: int = 5
    attack_debuff: int = 5
    cured_heal: int = 15


DEFAULT_CARD_VALUES: dict[CardKind, int] = {"attack": 30, "defend": 25, "heal": 35, "curse": 0}

# Used only when the character table has neither the requested character nor
# the configured default.
FALLBACK_CHARACTER = CharacterDefinition(
    name="default",
    special_card=None,
    special_bonus=0,
    deck_shape=DeckShape(attack=4, defend=4, heal=4, curse=3),
)


@dataclass(frozen=True)
class Rules:
    """Immutable rule set shared by every match created from it."""

    hp_start: int = 100
    hand_size: int = 5
    deck_size: int = 15
    type_limit: int = 6
    card_values: Mapping[CardKind, int] = field(default_factory=lambda: dict(DEFAULT_CARD_VALUES))
    curse: CurseRules = field(default_factory=CurseRules)
    turn_seconds: float = 20.0
    turn_limit: int = 10
    intermission_seconds: float = 0.8
    timeout_policy: TimeoutPolicy = "penalty"
    timeout_penalty: int = 20
    default_character: str = "Reimu"
    characters: Mapping[str, CharacterDefinition] = field(default_factory=dict)

    @property
    def hp_max(self) -> int:
        return self.hp_start

    def card_value(self, kind: CardKind) -> int:
        return self.card_values.get(kind, 0)

    def character(self, name: str) -> CharacterDefinition:
        found = self.characters.get(name)
        if found is None:
            found = self.characters.get(self.default_character, FALLBACK_CHARACTER)
        return found

    def character_names(self) -> list[str]:
        return sorted(self.characters.keys())
