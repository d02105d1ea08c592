from __future__ import annotations

import logging
import random
from collections import Counter

from .types import CARD_KINDS, CardKind, DeckShape, Difficulty, Rules

logger = logging.getLogger(__name__)

# Expert decks trade one heal for one attack, within these bounds.
EXPERT_ATTACK_CAP = 5
EXPERT_HEAL_FLOOR = 3


def shuffle(rng: random.Random, items: list[CardKind]) -> None:
    rng.shuffle(items)


def deck_shape(
    character: str, difficulty: Difficulty | None, rules: Rules, rng: random.Random
) -> DeckShape:
    """Card counts for a character, perturbed by difficulty.

    Every adjustment moves a card from one kind to another, so the total
    always stays at the configured deck size.
    """
    base = rules.character(character).deck_shape
    attack, defend, heal, curse = base.attack, base.defend, base.heal, base.curse

    if difficulty == "easy":
        adjustment = rng.randrange(2) - 1  # -1 or 0
        if attack + adjustment >= 0 and defend - adjustment >= 0:
            attack += adjustment
            defend -= adjustment
    elif difficulty == "expert":
        if attack < EXPERT_ATTACK_CAP and heal > EXPERT_HEAL_FLOOR:
            attack += 1
            heal -= 1

    shape = DeckShape(attack=attack, defend=defend, heal=heal, curse=curse)
    assert shape.total() == rules.deck_size, f"{shape} does not total {rules.deck_size}"
    return shape


def generate_deck(
    character: str, difficulty: Difficulty | None, rules: Rules, rng: random.Random
) -> list[CardKind]:
    shape = deck_shape(character, difficulty, rules, rng)
    deck = shape.cards()
    shuffle(rng, deck)
    logger.debug(
        "Generated %s deck for %s: %dA/%dD/%dH/%dC",
        difficulty or "base",
        character,
        shape.attack,
        shape.defend,
        shape.heal,
        shape.curse,
    )
    return deck


def draw_cards(
    deck: list[CardKind],
    hand: list[CardKind],
    discard: list[CardKind],
    count: int,
    rng: random.Random,
) -> list[CardKind]:
    """Move up to `count` cards from deck to hand, in place.

    An empty deck is refilled by shuffling the discard pile into it. When both
    are empty the draw stops early.
    """
    drawn: list[CardKind] = []
    for _ in range(max(0, count)):
        if not deck:
            if not discard:
                break
            deck.extend(discard)
            discard.clear()
            shuffle(rng, deck)
        card = deck.pop()
        hand.append(card)
        drawn.append(card)
    return drawn


def validate_deck(cards: object, rules: Rules) -> str | None:
    """Check a player-submitted deck list. Returns an error message or None."""
    if not isinstance(cards, (list, tuple)):
        return "Deck must be a list."
    if len(cards) != rules.deck_size:
        return f"Deck size must be exactly {rules.deck_size}."
    for card in cards:
        if card not in CARD_KINDS:
            return f"Unknown card: {card!r}"
    counts = Counter(cards)
    for kind in CARD_KINDS:
        if counts[kind] > rules.type_limit:
            return f"Too many {kind} cards (limit {rules.type_limit})."
    return None
