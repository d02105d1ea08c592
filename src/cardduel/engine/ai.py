from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Protocol, Sequence

from .actions import Decision
from .history import OpponentHistory, TurnSnapshot
from .participant import MatchView, OpponentView, ParticipantView
from .personality import Personality, make_personality
from .scenarios import attack_damage, best_scenario, enumerate_scenarios, heal_amount
from .types import CardKind, CharacterDefinition, Difficulty, Rules

logger = logging.getLogger(__name__)

BASE_CARD_SCORES: dict[str, float] = {"attack": 25.0, "defend": 20.0, "heal": 22.0, "curse": 30.0}
UNKNOWN_CARD_SCORE = 15.0


def base_card_score(card: str) -> float:
    return BASE_CARD_SCORES.get(card, UNKNOWN_CARD_SCORE)


def _best_index(scores: Sequence[float]) -> int:
    # First occurrence wins on ties.
    best = 0
    for i, score in enumerate(scores):
        if score > scores[best]:
            best = i
    return best


@dataclass(frozen=True)
class DecisionContext:
    """Everything a strategy may look at. Strategies keep no state of their own."""

    view: MatchView
    rules: Rules
    character: CharacterDefinition
    personality: Personality
    history: OpponentHistory
    rng: random.Random

    @property
    def me(self) -> ParticipantView:
        return self.view.me

    @property
    def opponent(self) -> OpponentView:
        return self.view.opponent

    @property
    def hand(self) -> tuple[CardKind, ...]:
        return self.view.me.hand

    @property
    def turn(self) -> int:
        return self.view.turn

    def holds_special_for(self, card: CardKind) -> bool:
        return not self.me.special_used and card == self.character.special_card


class Strategy(Protocol):
    def choose(self, ctx: DecisionContext) -> Decision: ...


class EasyStrategy:
    """Mostly random; otherwise heal when low, else attack."""

    random_play_chance = 0.7
    random_special_chance = 0.1
    low_hp_fraction = 0.3

    def choose(self, ctx: DecisionContext) -> Decision:
        hand = ctx.hand
        if ctx.rng.random() < self.random_play_chance:
            return Decision(
                card_index=ctx.rng.randrange(len(hand)),
                use_special=ctx.rng.random() < self.random_special_chance,
            )
        if ctx.me.hp <= ctx.rules.hp_max * self.low_hp_fraction and "heal" in hand:
            return Decision(card_index=hand.index("heal"))
        if "attack" in hand:
            return Decision(card_index=hand.index("attack"))
        return Decision(card_index=0)


class MediumStrategy:
    def choose(self, ctx: DecisionContext) -> Decision:
        scores = [self.score(card, ctx) for card in ctx.hand]
        index = _best_index(scores)
        return Decision(card_index=index, use_special=self.should_use_special(ctx.hand[index], ctx))

    def score(self, card: CardKind, ctx: DecisionContext) -> float:
        score = base_card_score(card)
        if card == "heal" and ctx.me.hp <= 40:
            score += 30
        if card == "attack" and ctx.opponent.hp <= 40:
            score += 25
        if card == "defend" and ctx.me.shield <= 15:
            score += 20
        if card == "attack" and ctx.turn >= 10:
            score += 15
        return score

    def should_use_special(self, card: CardKind, ctx: DecisionContext) -> bool:
        if not ctx.holds_special_for(card):
            return False
        if card == "attack":
            return ctx.opponent.hp <= 60 and ctx.turn >= 5
        if card == "heal":
            return ctx.me.hp <= 50
        if card == "defend":
            return ctx.me.shield <= 20 and ctx.turn >= 4
        return False


class HardStrategy(MediumStrategy):
    """Medium's skeleton with situational, personality-scaled card values."""

    def score(self, card: CardKind, ctx: DecisionContext) -> float:
        score = base_card_score(card)
        if card == "attack":
            score += self.attack_value(ctx)
        elif card == "heal":
            score += self.heal_value(ctx)
        elif card == "defend":
            score += self.defend_value(ctx)
        score += self.response_adjustment(card, ctx)
        return score

    def attack_value(self, ctx: DecisionContext) -> float:
        value = 0.0
        opponent = ctx.opponent
        damage = attack_damage(ctx.rules, 0, ctx.me.cursed)
        if opponent.hp - max(0, damage - opponent.shield) <= 0:
            value += 100
        if opponent.hp <= 50:
            value += 20
        if opponent.shield == 0:
            value += 15
        if ctx.turn >= 8:
            value += 10
        value += ctx.personality.aggressiveness * 5
        return value

    def heal_value(self, ctx: DecisionContext) -> float:
        value = 0.0
        hp = ctx.me.hp
        if hp <= 25:
            value += 50
        elif hp <= 50:
            value += 30
        elif hp <= 75:
            value += 10
        if ctx.turn <= 3:
            value -= 10
        value += ctx.personality.healing_tendency * 8
        return value

    def defend_value(self, ctx: DecisionContext) -> float:
        value = 0.0
        shield = ctx.me.shield
        if shield <= 10:
            value += 25
        elif shield <= 20:
            value += 15
        value += ctx.history.predict_opponent_attack() * 20
        value += ctx.personality.defensiveness * 6
        return value

    def response_adjustment(self, card: CardKind, ctx: DecisionContext) -> float:
        adjustment = 0.0
        if card == "attack" and ctx.opponent.hp <= 50:
            # a low opponent is likely to heal or defend
            adjustment -= 5
        if card == "heal" and ctx.me.hp <= 30:
            adjustment += 5
        return adjustment

    def should_use_special(self, card: CardKind, ctx: DecisionContext) -> bool:
        if not ctx.holds_special_for(card):
            return False
        bonus = ctx.character.special_bonus
        if card == "attack":
            actual = max(0, attack_damage(ctx.rules, bonus, ctx.me.cursed) - ctx.opponent.shield)
            return actual >= ctx.opponent.hp or actual >= 40
        if card == "heal":
            total_heal = heal_amount(ctx.rules, bonus, ctx.me.cursed)
            needed = ctx.rules.hp_max - ctx.me.hp
            return needed >= total_heal - 10
        if card == "defend":
            return ctx.history.predict_opponent_attack() > 0.6 and ctx.me.shield <= 30
        return False


class ExpertStrategy:
    def choose(self, ctx: DecisionContext) -> Decision:
        scenarios = enumerate_scenarios(ctx.me, ctx.opponent, ctx.rules, ctx.character)
        best = best_scenario(scenarios, ctx.opponent.hp)
        return Decision(card_index=best.card_index, use_special=best.use_special)


STRATEGIES: dict[str, Strategy] = {
    "easy": EasyStrategy(),
    "medium": MediumStrategy(),
    "hard": HardStrategy(),
    "expert": ExpertStrategy(),
}


def strategy_for(difficulty: str) -> Strategy:
    return STRATEGIES.get(difficulty, STRATEGIES["medium"])


class AIBot:
    """An AI-controlled participant's brain: personality, memory and tier."""

    def __init__(
        self,
        id: str,
        name: str,
        character: str,
        difficulty: Difficulty,
        personality: Personality,
        history: OpponentHistory | None = None,
        created_at: float = 0.0,
    ) -> None:
        self.id = id
        self.name = name
        self.character = character
        self.difficulty = difficulty
        self.personality = personality
        self.history = history if history is not None else OpponentHistory()
        self.created_at = created_at

    @classmethod
    def create(
        cls,
        id: str,
        name: str,
        character: str,
        difficulty: Difficulty,
        rules: Rules,
        rng: random.Random,
        created_at: float = 0.0,
    ) -> "AIBot":
        personality = make_personality(rules.character(character), difficulty, rng)
        bot = cls(
            id=id,
            name=name,
            character=character,
            difficulty=difficulty,
            personality=personality,
            created_at=created_at,
        )
        logger.info("AI bot created: %s (%s) difficulty=%s", name, character, difficulty)
        return bot

    @property
    def strategy(self) -> Strategy:
        return strategy_for(self.difficulty)

    def decide(self, view: MatchView, rules: Rules, rng: random.Random) -> Decision:
        hand = view.me.hand
        if not hand:
            return Decision.pass_turn()

        self.history.record_turn(
            TurnSnapshot(
                turn=view.turn,
                my_hp=view.me.hp,
                my_shield=view.me.shield,
                opponent_hp=view.opponent.hp,
                opponent_shield=view.opponent.shield,
                hand_size=len(hand),
            )
        )
        ctx = DecisionContext(
            view=view,
            rules=rules,
            character=rules.character(self.character),
            personality=self.personality,
            history=self.history,
            rng=rng,
        )
        decision = self.strategy.choose(ctx)

        # Cursed bots always cure first when they can.
        if view.me.cursed and "heal" in hand:
            decision = Decision(card_index=hand.index("heal"), use_special=False)

        logger.debug(
            "AI %s turn %d: card %s (%s) special=%s",
            self.name,
            view.turn,
            decision.card_index,
            hand[decision.card_index] if decision.card_index is not None else None,
            decision.use_special,
        )
        return decision

    def observe_opponent(self, card: CardKind) -> None:
        self.history.observe(card)

    def reset(self) -> None:
        self.history.clear()

    def info(self) -> dict[str, object]:
        return {
            "id": self.id,
            "name": self.name,
            "character": self.character,
            "difficulty": self.difficulty,
            "aggressiveness": self.personality.aggressiveness,
            "defensiveness": self.personality.defensiveness,
            "healing_tendency": self.personality.healing_tendency,
            "observed_actions": len(self.history),
            "created_at": self.created_at,
        }
