"""Exhaustive one-ply search used by the expert AI.

Every (hand card, special flag) pair is simulated in isolation against the
opponent's current HP and shield, then scored with a fixed utility function.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .participant import OpponentView, ParticipantView
from .types import CardKind, CharacterDefinition, Rules

OPPONENT_DAMAGE_WEIGHT = 2.0
SELF_HEAL_WEIGHT = 1.5
SELF_SHIELD_WEIGHT = 1.2
MISSED_KILL_BAND = 20
MISSED_KILL_PENALTY = 10.0
LETHAL_BONUS = 200.0


@dataclass(frozen=True)
class Outcome:
    my_hp_change: int = 0
    my_shield_change: int = 0
    opponent_hp_change: int = 0
    opponent_shield_change: int = 0


@dataclass(frozen=True)
class Scenario:
    card_index: int
    card: CardKind
    use_special: bool
    outcome: Outcome


def attack_damage(rules: Rules, bonus: int, cursed: bool) -> int:
    damage = rules.card_value("attack") + bonus
    if cursed:
        damage = max(0, damage - rules.curse.attack_debuff)
    return damage


def heal_amount(rules: Rules, bonus: int, cursed: bool) -> int:
    """A cursed healer gets the cure value instead of the card value."""
    if cursed:
        return rules.curse.cured_heal + bonus
    return rules.card_value("heal") + bonus


def simulate_outcome(
    card: CardKind,
    use_special: bool,
    me: ParticipantView,
    opponent: OpponentView,
    rules: Rules,
    character: CharacterDefinition,
) -> Outcome:
    bonus = character.special_bonus if use_special else 0
    if card == "attack":
        damage = attack_damage(rules, bonus, me.cursed)
        absorbed = min(opponent.shield, damage)
        return Outcome(opponent_shield_change=-absorbed, opponent_hp_change=-(damage - absorbed))
    if card == "heal":
        healing = heal_amount(rules, bonus, me.cursed)
        return Outcome(my_hp_change=min(healing, rules.hp_max - me.hp))
    if card == "defend":
        return Outcome(my_shield_change=rules.card_value("defend") + bonus)
    return Outcome()


def enumerate_scenarios(
    me: ParticipantView, opponent: OpponentView, rules: Rules, character: CharacterDefinition
) -> list[Scenario]:
    """Hand order, left to right; for each card "no special" comes first."""
    scenarios: list[Scenario] = []
    for index, card in enumerate(me.hand):
        scenarios.append(
            Scenario(
                card_index=index,
                card=card,
                use_special=False,
                outcome=simulate_outcome(card, False, me, opponent, rules, character),
            )
        )
        if not me.special_used and character.special_card == card:
            scenarios.append(
                Scenario(
                    card_index=index,
                    card=card,
                    use_special=True,
                    outcome=simulate_outcome(card, True, me, opponent, rules, character),
                )
            )
    return scenarios


def evaluate_scenario(scenario: Scenario, opponent_hp: int) -> float:
    outcome = scenario.outcome
    value = 0.0
    value += -outcome.opponent_hp_change * OPPONENT_DAMAGE_WEIGHT
    value += outcome.my_hp_change * SELF_HEAL_WEIGHT
    value += outcome.my_shield_change * SELF_SHIELD_WEIGHT

    final_opponent_hp = opponent_hp + outcome.opponent_hp_change
    if 0 < final_opponent_hp <= MISSED_KILL_BAND:
        value -= MISSED_KILL_PENALTY
    if final_opponent_hp <= 0:
        value += LETHAL_BONUS
    return value


def best_scenario(scenarios: Sequence[Scenario], opponent_hp: int) -> Scenario:
    """Highest utility wins; ties keep the earliest enumerated scenario."""
    if not scenarios:
        raise ValueError("No scenarios to choose from.")
    best = scenarios[0]
    best_value = evaluate_scenario(best, opponent_hp)
    for scenario in scenarios[1:]:
        value = evaluate_scenario(scenario, opponent_hp)
        if value > best_value:
            best = scenario
            best_value = value
    return best
