from __future__ import annotations

import random

import pytest

from cardduel.engine.cards import deck_shape, draw_cards, generate_deck, validate_deck
from cardduel.engine.types import DIFFICULTIES, Rules


@pytest.mark.parametrize("seed", [0, 1, 7, 99])
def test_generated_decks_always_total_deck_size(rules: Rules, seed: int) -> None:
    rng = random.Random(seed)
    for character in rules.character_names():
        for difficulty in (*DIFFICULTIES, None):
            deck = generate_deck(character, difficulty, rules, rng)
            assert len(deck) == rules.deck_size
            assert set(deck) <= {"attack", "defend", "heal", "curse"}


def test_expert_trades_one_heal_for_attack(rules: Rules) -> None:
    shape = deck_shape("Reimu", "expert", rules, random.Random(0))
    assert (shape.attack, shape.defend, shape.heal, shape.curse) == (5, 4, 3, 3)

    # Witch already has 5 attacks so nothing moves.
    shape = deck_shape("Witch", "expert", rules, random.Random(0))
    assert (shape.attack, shape.heal) == (5, 4)


def test_easy_moves_at_most_one_attack_to_defend(rules: Rules) -> None:
    seen = set()
    for seed in range(20):
        shape = deck_shape("Reimu", "easy", rules, random.Random(seed))
        seen.add((shape.attack, shape.defend))
    assert seen <= {(4, 4), (3, 5)}


def test_unknown_character_uses_default_shape(rules: Rules) -> None:
    shape = deck_shape("Nobody", None, rules, random.Random(0))
    assert shape == rules.character("Reimu").deck_shape


def test_draw_reshuffles_discard_into_empty_deck() -> None:
    deck: list = ["attack"]
    hand: list = []
    discard: list = ["heal", "defend"]
    drawn = draw_cards(deck, hand, discard, 3, random.Random(0))
    assert len(drawn) == 3
    assert sorted(hand) == ["attack", "defend", "heal"]
    assert deck == [] and discard == []


def test_draw_stops_when_deck_and_discard_are_empty() -> None:
    deck: list = ["attack"]
    hand: list = ["heal"]
    discard: list = []
    drawn = draw_cards(deck, hand, discard, 4, random.Random(0))
    assert drawn == ["attack"]
    assert hand == ["heal", "attack"]


def test_validate_deck(rules: Rules) -> None:
    good = ["attack"] * 4 + ["defend"] * 4 + ["heal"] * 4 + ["curse"] * 3
    assert validate_deck(good, rules) is None
    assert validate_deck("attack", rules) == "Deck must be a list."
    assert validate_deck(good[:-1], rules) is not None
    assert "Unknown card" in (validate_deck(good[:-1] + ["fireball"], rules) or "")
    too_many = ["attack"] * 7 + ["defend"] * 4 + ["heal"] * 4
    assert "Too many attack" in (validate_deck(too_many, rules) or "")
