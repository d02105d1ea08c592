from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Mapping, Protocol

from .ai import AIBot
from .deadline import Deadline, Scheduler
from .match import (
    Match,
    MatchResult,
    SubmitResult,
    TurnResult,
    all_submitted,
    begin_resolution,
    deal_decks,
    decide_outcome,
    default_submission,
    finish_match,
    make_result,
    open_turn,
    resolve_turn,
    submit_action,
    submit_deck,
    view_for,
)
from .serialize import match_result_to_dict, turn_result_to_dict

logger = logging.getLogger(__name__)

TurnCallback = Callable[[Match, TurnResult], None]
EndCallback = Callable[[Match, MatchResult], None]


class TelemetrySink(Protocol):
    def log(self, event_type: str, payload: Mapping[str, object]) -> None: ...


class TurnCoordinator:
    """Drives one match through its phases.

    Each match gets its own coordinator and all mutation goes through it, so
    no locking is needed as long as it runs on a single event loop. The one
    `Deadline` is reused for turn timers and for the pause between turns.
    """

    def __init__(
        self,
        match: Match,
        scheduler: Scheduler,
        bots: Mapping[str, AIBot] | None = None,
        on_turn_result: TurnCallback | None = None,
        on_match_end: EndCallback | None = None,
        telemetry: TelemetrySink | None = None,
    ) -> None:
        self.match = match
        self.bots: dict[str, AIBot] = dict(bots or {})
        self.on_turn_result = on_turn_result
        self.on_match_end = on_match_end
        self.telemetry = telemetry
        self._scheduler = scheduler
        self.deadline = Deadline(scheduler)
        unknown = set(self.bots) - set(match.participants)
        if unknown:
            raise ValueError(f"Bots not seated in match {match.id}: {sorted(unknown)}")

    @property
    def ended(self) -> bool:
        return self.match.ended

    def submit_deck(self, participant_id: str, cards: object) -> SubmitResult:
        return submit_deck(self.match, participant_id, cards)

    def start(self) -> bool:
        if self.match.phase != "deckbuild":
            logger.warning("Match %s already started", self.match.id)
            return False
        for bot in self.bots.values():
            bot.reset()
        deal_decks(self.match)
        logger.info(
            "Match %s started: %s",
            self.match.id,
            " vs ".join(f"{p.name} ({p.character})" for p in self.match.participants.values()),
        )
        self._open_turn()
        return True

    def submit_action(
        self, participant_id: str, card_index: int | None, use_special: bool = False
    ) -> SubmitResult:
        result = submit_action(self.match, participant_id, card_index, use_special)
        if not result.ok:
            logger.debug(
                "Match %s: rejected action from %s: %s", self.match.id, participant_id, result.error
            )
            return result
        if all_submitted(self.match):
            self._resolve()
        return result

    def abort(self) -> None:
        if self.match.ended:
            return
        self._finish(make_result(self.match, None, "aborted"))

    def forfeit(self, participant_id: str) -> None:
        if self.match.ended or participant_id not in self.match.participants:
            return
        self._finish(make_result(self.match, self.match.opponent_id(participant_id), "forfeit"))

    def _open_turn(self) -> None:
        match = self.match
        if match.phase not in ("deckbuild", "resolve"):
            return
        open_turn(match, self._scheduler.time())
        self.deadline.arm(match.rules.turn_seconds, self._on_deadline)
        match.deadline_at = self.deadline.expires_at
        turn = match.turn
        for pid, bot in self.bots.items():
            # A previous submission may already have resolved this turn.
            if match.phase != "play" or match.turn != turn:
                break
            decision = bot.decide(view_for(match, pid), match.rules, match.rng)
            if not self.submit_action(pid, decision.card_index, decision.use_special).ok:
                self.submit_action(pid, None, False)

    def _on_deadline(self) -> None:
        missing = [pid for pid in self.match.participants if pid not in self.match.submissions]
        logger.info("Match %s turn %d: deadline elapsed, missing %s", self.match.id, self.match.turn, missing)
        self._resolve()

    def _resolve(self) -> None:
        match = self.match
        if not begin_resolution(match):
            return
        self.deadline.cancel()

        submissions = dict(match.submissions)
        for pid in match.participants:
            if pid not in submissions:
                submissions[pid] = default_submission(match, pid)
        result = resolve_turn(match, submissions)

        for pid, bot in self.bots.items():
            seen = result.side(match.opponent_id(pid)).card
            if seen is not None:
                bot.observe_opponent(seen)

        outcome = decide_outcome(match)
        if outcome is not None:
            self._publish_turn(replace(result, phase="ended"))
            self._finish(outcome)
            return

        delay = match.rules.intermission_seconds
        next_deadline = self._scheduler.time() + delay + match.rules.turn_seconds
        self._publish_turn(replace(result, phase="play", next_turn=match.turn + 1, next_deadline=next_deadline))
        # Even at zero delay the next turn opens from the scheduler, never from this stack.
        self.deadline.arm(delay, self._open_turn)

    def _publish_turn(self, result: TurnResult) -> None:
        logger.info(
            "Match %s turn %d resolved: %s",
            self.match.id,
            result.turn,
            ", ".join(f"{s.participant_id}={s.card or 'pass'} hp={s.hp}" for s in result.sides),
        )
        if self.telemetry is not None:
            self.telemetry.log("turn_resolved", {"match_id": self.match.id, **turn_result_to_dict(result)})
        if self.on_turn_result is not None:
            self.on_turn_result(self.match, result)

    def _finish(self, result: MatchResult) -> None:
        self.deadline.cancel()
        finish_match(self.match, result)
        logger.info(
            "Match %s ended on turn %d: winner=%s reason=%s",
            self.match.id,
            result.turn,
            result.winner,
            result.reason,
        )
        if self.telemetry is not None:
            self.telemetry.log("match_ended", {"match_id": self.match.id, **match_result_to_dict(result)})
        if self.on_match_end is not None:
            self.on_match_end(self.match, result)
