from __future__ import annotations

import logging
import random

from cardduel.engine.coordinator import EndCallback, TelemetrySink, TurnCallback, TurnCoordinator
from cardduel.engine.deadline import Scheduler
from cardduel.engine.match import Match, MatchResult, Seat, SubmitResult, new_match
from cardduel.engine.types import Rules

from .bots import BotStore

logger = logging.getLogger(__name__)


class MatchRegistry:
    """Session-facing entry point: create matches and route submissions by id.

    Transports call `submit_action(match_id, ...)`; everything else about the
    match is handled by its `TurnCoordinator`.
    """

    def __init__(
        self,
        rules: Rules,
        scheduler: Scheduler,
        bots: BotStore | None = None,
        rng: random.Random | None = None,
        telemetry: TelemetrySink | None = None,
        on_turn_result: TurnCallback | None = None,
        on_match_end: EndCallback | None = None,
    ) -> None:
        self.rules = rules
        self._scheduler = scheduler
        self._rng = rng or random.Random()
        self.bots = bots or BotStore(rules, rng=self._rng)
        self.telemetry = telemetry
        self.on_turn_result = on_turn_result
        self.on_match_end = on_match_end
        self._matches: dict[str, TurnCoordinator] = {}
        self._match_bots: dict[str, list[str]] = {}
        self._next_id = 1

    def _new_id(self, prefix: str) -> str:
        match_id = f"{prefix}-{self._next_id}"
        self._next_id += 1
        return match_id

    def _register(self, match: Match, bot_ids: list[str]) -> TurnCoordinator:
        bots = {}
        for bot_id in bot_ids:
            bot = self.bots.get(bot_id)
            assert bot is not None
            bots[bot_id] = bot
        coordinator = TurnCoordinator(
            match,
            self._scheduler,
            bots=bots,
            on_turn_result=self.on_turn_result,
            on_match_end=self._handle_end,
            telemetry=self.telemetry,
        )
        self._matches[match.id] = coordinator
        self._match_bots[match.id] = bot_ids
        return coordinator

    def _handle_end(self, match: Match, result: MatchResult) -> None:
        for bot_id in self._match_bots.pop(match.id, []):
            self.bots.remove(bot_id)
        if self.on_match_end is not None:
            self.on_match_end(match, result)

    def create_pvp_match(self, a: Seat, b: Seat, seed: int | None = None) -> TurnCoordinator:
        match_id = self._new_id("cardgame")
        seed = seed if seed is not None else self._rng.randrange(2**32)
        match = new_match(match_id, self.rules, [a, b], seed=seed)
        logger.info("Created PvP match %s: %s vs %s", match_id, a.id, b.id)
        return self._register(match, [])

    def create_ai_match(
        self,
        human: Seat,
        difficulty: str = "medium",
        character: str | None = None,
        seed: int | None = None,
    ) -> TurnCoordinator:
        match_id = self._new_id("airoom")
        bot = self.bots.create_bot(character=character, difficulty=difficulty)
        seat = Seat(id=bot.id, name=bot.name, character=bot.character, difficulty=bot.difficulty)
        seed = seed if seed is not None else self._rng.randrange(2**32)
        match = new_match(match_id, self.rules, [human, seat], seed=seed)
        logger.info("Created AI match %s: %s vs %s (%s)", match_id, human.id, bot.name, bot.difficulty)
        return self._register(match, [bot.id])

    def create_bot_match(
        self,
        a: tuple[str | None, str],
        b: tuple[str | None, str],
        seed: int | None = None,
    ) -> TurnCoordinator:
        """Seat two fresh bots, each given as (character, difficulty)."""
        match_id = self._new_id("botmatch")
        seats: list[Seat] = []
        for character, difficulty in (a, b):
            bot = self.bots.create_bot(character=character, difficulty=difficulty)
            seats.append(Seat(id=bot.id, name=bot.name, character=bot.character, difficulty=bot.difficulty))
        seed = seed if seed is not None else self._rng.randrange(2**32)
        match = new_match(match_id, self.rules, seats, seed=seed)
        logger.info("Created bot match %s: %s vs %s", match_id, seats[0].name, seats[1].name)
        return self._register(match, [s.id for s in seats])

    def get(self, match_id: str) -> TurnCoordinator | None:
        return self._matches.get(match_id)

    def active_ids(self) -> list[str]:
        return [mid for mid, c in self._matches.items() if not c.ended]

    def start(self, match_id: str) -> bool:
        coordinator = self._matches.get(match_id)
        if coordinator is None:
            return False
        return coordinator.start()

    def submit_deck(self, match_id: str, participant_id: str, cards: object) -> SubmitResult:
        coordinator = self._matches.get(match_id)
        if coordinator is None:
            return SubmitResult(ok=False, error="Unknown match.")
        return coordinator.submit_deck(participant_id, cards)

    def submit_action(
        self, match_id: str, participant_id: str, card_index: int | None, use_special: bool = False
    ) -> SubmitResult:
        coordinator = self._matches.get(match_id)
        if coordinator is None:
            return SubmitResult(ok=False, error="Unknown match.")
        return coordinator.submit_action(participant_id, card_index, use_special)

    def abort(self, match_id: str) -> None:
        coordinator = self._matches.get(match_id)
        if coordinator is not None:
            coordinator.abort()

    def forfeit(self, match_id: str, participant_id: str) -> None:
        coordinator = self._matches.get(match_id)
        if coordinator is not None:
            coordinator.forfeit(participant_id)

    def remove(self, match_id: str) -> bool:
        coordinator = self._matches.pop(match_id, None)
        if coordinator is None:
            return False
        coordinator.abort()
        for bot_id in self._match_bots.pop(match_id, []):
            self.bots.remove(bot_id)
        return True
