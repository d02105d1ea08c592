from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from typing import Callable
from uuid import uuid4

from cardduel.engine.ai import AIBot
from cardduel.engine.types import DIFFICULTIES, Difficulty, Rules

logger = logging.getLogger(__name__)

BOT_NAME_PREFIXES = ("AI", "Bot", "CPU", "Auto")
BOT_NAME_SUFFIXES = ("Player", "Challenger", "Opponent", "Fighter")
DEFAULT_MAX_AGE = 3600.0


@dataclass(frozen=True)
class PlayerStats:
    """A human's record against bots, used to pick an adaptive difficulty."""

    ai_wins: int = 0
    ai_losses: int = 0
    ai_draws: int = 0

    @property
    def games(self) -> int:
        return self.ai_wins + self.ai_losses + self.ai_draws

    @property
    def win_rate(self) -> float:
        if self.games == 0:
            return 0.5
        return self.ai_wins / self.games


def difficulty_for_win_rate(win_rate: float) -> Difficulty:
    if win_rate < 0.3:
        return "easy"
    if win_rate < 0.5:
        return "medium"
    if win_rate < 0.7:
        return "hard"
    return "expert"


class BotStore:
    """Explicit registry of live bots, keyed by bot id.

    Owned by whoever does matchmaking. Old bots are dropped by `cleanup`,
    which sweeps by creation time.
    """

    def __init__(
        self,
        rules: Rules,
        rng: random.Random | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._rules = rules
        self._rng = rng or random.Random()
        self._clock = clock
        self._bots: dict[str, AIBot] = {}

    def __len__(self) -> int:
        return len(self._bots)

    def __contains__(self, bot_id: object) -> bool:
        return bot_id in self._bots

    def generate_name(self) -> str:
        prefix = self._rng.choice(BOT_NAME_PREFIXES)
        suffix = self._rng.choice(BOT_NAME_SUFFIXES)
        return f"{prefix} {suffix} {self._rng.randint(1, 999)}"

    def create_bot(
        self,
        name: str | None = None,
        character: str | None = None,
        difficulty: str = "medium",
    ) -> AIBot:
        if difficulty not in DIFFICULTIES:
            logger.warning("Unknown difficulty %r, using medium", difficulty)
            difficulty = "medium"
        if not character:
            names = self._rules.character_names() or [self._rules.default_character]
            character = self._rng.choice(names)
        bot = AIBot.create(
            id=f"ai-bot-{uuid4().hex[:12]}",
            name=name or self.generate_name(),
            character=character,
            difficulty=difficulty,  # type: ignore[arg-type]
            rules=self._rules,
            rng=self._rng,
            created_at=self._clock(),
        )
        self._bots[bot.id] = bot
        return bot

    def create_adaptive_bot(self, stats: PlayerStats | None = None, character: str | None = None) -> AIBot:
        difficulty: Difficulty = "medium"
        if stats is not None:
            difficulty = difficulty_for_win_rate(stats.win_rate)
            logger.info(
                "Adaptive bot difficulty %s (player win rate %.1f%%)", difficulty, stats.win_rate * 100
            )
        return self.create_bot(character=character, difficulty=difficulty)

    def get(self, bot_id: str) -> AIBot | None:
        return self._bots.get(bot_id)

    def remove(self, bot_id: str) -> bool:
        bot = self._bots.pop(bot_id, None)
        if bot is None:
            return False
        logger.info("Removed bot %s (%s)", bot.name, bot_id)
        return True

    def all_info(self) -> list[dict[str, object]]:
        return [bot.info() for bot in self._bots.values()]

    def cleanup(self, max_age: float = DEFAULT_MAX_AGE) -> list[str]:
        now = self._clock()
        stale = [bot_id for bot_id, bot in self._bots.items() if now - bot.created_at > max_age]
        for bot_id in stale:
            self.remove(bot_id)
        if stale:
            logger.info("Cleaned up %d inactive bots", len(stale))
        return stale
