from __future__ import annotations

import random

from cardduel.engine.participant import CurseEffect, Participant
from cardduel.engine.types import Rules


def _participant(character: str = "Marisa") -> Participant:
    p = Participant(id="p1", name="Alice", character=character, hp=100)
    p.deal(["attack", "defend", "heal", "curse", "attack", "heal"], 5, random.Random(3))
    return p


def test_deal_draws_hand_and_tracks_circulation() -> None:
    p = _participant()
    assert len(p.hand) == 5
    assert len(p.deck) == 1
    assert p.dealt == 6
    p.check_invariants(100)


def test_play_card_moves_card_to_discard(rules: Rules) -> None:
    p = _participant()
    card = p.hand[0]
    played = p.play_card(0, False, rules)
    assert played is not None
    assert played.kind == card
    assert p.discard == [card]
    assert len(p.hand) == 4
    p.check_invariants(rules.hp_max)


def test_play_card_out_of_range_or_none_is_a_pass(rules: Rules) -> None:
    p = _participant()
    hand = list(p.hand)
    assert p.play_card(None, False, rules) is None
    assert p.play_card(len(hand), False, rules) is None
    assert p.play_card(-1, False, rules) is None
    assert p.hand == hand
    assert p.discard == []


def test_special_is_downgraded_for_wrong_card_and_used_once(rules: Rules) -> None:
    p = Participant(id="p1", name="Alice", character="Marisa", hp=100)
    p.deal(["heal", "attack", "attack"], 3, random.Random(0))
    p.hand = ["heal", "attack", "attack"]

    played = p.play_card(0, True, rules)
    assert played is not None and played.use_special is False
    assert p.special_used is False

    played = p.play_card(0, True, rules)
    assert played is not None and played.kind == "attack" and played.use_special is True
    assert p.special_used is True

    played = p.play_card(0, True, rules)
    assert played is not None and played.use_special is False


def test_views_hide_opponent_hand() -> None:
    p = _participant()
    p.curse = CurseEffect(turns=2)
    mine = p.view()
    public = p.public_view()
    assert mine.hand == tuple(p.hand)
    assert mine.cursed
    assert public.hand_size == len(p.hand)
    assert public.curse_turns == 2
    assert not hasattr(public, "hand")
