from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Mapping, Sequence

from .actions import PlayedCard, Submission
from .cards import generate_deck, shuffle, validate_deck
from .participant import CurseEffect, MatchView, Participant
from .types import CardKind, Difficulty, EndReason, Phase, Rules


@dataclass(frozen=True)
class Seat:
    """Who sits on one side of a match. Humans leave `difficulty` as None."""

    id: str
    name: str
    character: str
    difficulty: Difficulty | None = None
    deck: tuple[CardKind, ...] | None = None


@dataclass
class SubmitResult:
    ok: bool
    error: str | None = None


@dataclass(frozen=True)
class SideOutcome:
    participant_id: str
    card: CardKind | None
    special_used: bool
    note: str | None
    damage_dealt: int
    damage_received: int
    shield_absorbed: int
    healing: int
    shield_change: int
    curse_applied: bool
    curse_drain: int
    penalty: int
    hp: int
    shield: int
    hand_size: int
    deck_size: int
    discard_size: int


@dataclass(frozen=True)
class TurnResult:
    turn: int
    phase: Phase
    sides: tuple[SideOutcome, ...]
    next_turn: int | None = None
    next_deadline: float | None = None

    def side(self, participant_id: str) -> SideOutcome:
        for s in self.sides:
            if s.participant_id == participant_id:
                return s
        raise KeyError(participant_id)


@dataclass(frozen=True)
class MatchResult:
    winner: str | None
    reason: EndReason
    turn: int
    hp: Mapping[str, int]


@dataclass
class Match:
    id: str
    rules: Rules
    seed: int
    rng: random.Random
    participants: dict[str, Participant]
    difficulties: dict[str, Difficulty | None]
    phase: Phase = "deckbuild"
    turn: int = 0
    deadline_at: float | None = None
    submissions: dict[str, Submission] = field(default_factory=dict)
    pending_decks: dict[str, list[CardKind]] = field(default_factory=dict)
    last_played: dict[str, SideOutcome] = field(default_factory=dict)
    result: MatchResult | None = None

    @property
    def ended(self) -> bool:
        return self.phase == "ended"

    def participant_ids(self) -> list[str]:
        return list(self.participants.keys())

    def opponent_id(self, participant_id: str) -> str:
        for pid in self.participants:
            if pid != participant_id:
                return pid
        raise KeyError(participant_id)

    def opponent_of(self, participant_id: str) -> Participant:
        return self.participants[self.opponent_id(participant_id)]


def new_match(match_id: str, rules: Rules, seats: Sequence[Seat], seed: int) -> Match:
    if len(seats) != 2:
        raise ValueError("A match needs exactly two seats.")
    if seats[0].id == seats[1].id:
        raise ValueError("Seat ids must be unique.")

    participants: dict[str, Participant] = {}
    difficulties: dict[str, Difficulty | None] = {}
    pending: dict[str, list[CardKind]] = {}
    for seat in seats:
        participants[seat.id] = Participant(
            id=seat.id, name=seat.name, character=seat.character, hp=rules.hp_start
        )
        difficulties[seat.id] = seat.difficulty
        if seat.deck is not None:
            err = validate_deck(list(seat.deck), rules)
            if err is not None:
                raise ValueError(f"Invalid deck for {seat.id}: {err}")
            pending[seat.id] = list(seat.deck)

    return Match(
        id=match_id,
        rules=rules,
        seed=seed,
        rng=random.Random(seed),
        participants=participants,
        difficulties=difficulties,
        pending_decks=pending,
    )


def submit_deck(match: Match, participant_id: str, cards: object) -> SubmitResult:
    if match.phase != "deckbuild":
        return SubmitResult(ok=False, error="Decks can only be submitted before the match starts.")
    if participant_id not in match.participants:
        return SubmitResult(ok=False, error="Unknown participant.")
    err = validate_deck(cards, match.rules)
    if err is not None:
        return SubmitResult(ok=False, error=err)
    assert isinstance(cards, (list, tuple))
    match.pending_decks[participant_id] = list(cards)
    return SubmitResult(ok=True)


def deal_decks(match: Match) -> None:
    """Build and shuffle every deck, then draw the opening hands."""
    rules = match.rules
    for pid, p in match.participants.items():
        submitted = match.pending_decks.pop(pid, None)
        if submitted is not None:
            cards = list(submitted)
            shuffle(match.rng, cards)
        else:
            cards = generate_deck(p.character, match.difficulties.get(pid), rules, match.rng)
        p.hp = rules.hp_start
        p.shield = 0
        p.special_used = False
        p.curse = None
        p.deal(cards, rules.hand_size, match.rng)


def open_turn(match: Match, now: float) -> None:
    match.phase = "play"
    match.turn += 1
    match.submissions.clear()
    match.deadline_at = now + match.rules.turn_seconds


def begin_resolution(match: Match) -> bool:
    """Claim the current turn for resolution. Only the first caller wins."""
    if match.phase != "play":
        return False
    match.phase = "resolve"
    match.deadline_at = None
    return True


def submit_action(
    match: Match, participant_id: str, card_index: int | None, use_special: bool = False
) -> SubmitResult:
    if match.phase != "play":
        return SubmitResult(ok=False, error="Not accepting actions right now.")
    p = match.participants.get(participant_id)
    if p is None:
        return SubmitResult(ok=False, error="Unknown participant.")
    if participant_id in match.submissions:
        return SubmitResult(ok=False, error="Already submitted this turn.")
    if card_index is not None:
        if isinstance(card_index, bool) or not isinstance(card_index, int):
            return SubmitResult(ok=False, error="Invalid card index.")
        if card_index < 0 or card_index >= len(p.hand):
            return SubmitResult(ok=False, error="Invalid card index.")
    match.submissions[participant_id] = Submission(card_index=card_index, use_special=bool(use_special))
    return SubmitResult(ok=True)


def all_submitted(match: Match) -> bool:
    return all(pid in match.submissions for pid in match.participants)


def default_submission(match: Match, participant_id: str) -> Submission:
    """The action taken for a participant who missed the turn deadline."""
    policy = match.rules.timeout_policy
    hand = match.participants[participant_id].hand
    if policy == "defend" and "defend" in hand:
        return Submission(card_index=hand.index("defend"), note="timeout")
    if policy == "random" and hand:
        return Submission(card_index=match.rng.randrange(len(hand)), note="timeout")
    if policy == "penalty":
        return Submission(card_index=None, note="timeout", penalty=match.rules.timeout_penalty)
    return Submission(card_index=None, note="timeout")


@dataclass
class _Pending:
    heal: int = 0
    shield_gain: int = 0
    incoming: int = 0
    curse_applied: bool = False
    cured: bool = False


def resolve_turn(match: Match, submissions: Mapping[str, Submission]) -> TurnResult:
    """Apply both submissions simultaneously.

    Each side's effect is computed from the other side's state as it was
    before this turn: incoming damage is absorbed by the shield held at the
    start of the turn, not by shield gained this turn.
    """
    assert match.phase == "resolve"
    rules = match.rules
    ids = match.participant_ids()
    parts = match.participants

    start_shield = {pid: parts[pid].shield for pid in ids}
    start_cursed = {pid: parts[pid].cursed for pid in ids}
    start_special = {pid: parts[pid].special_used for pid in ids}

    subs = {pid: submissions.get(pid) or Submission(card_index=None) for pid in ids}
    played: dict[str, PlayedCard | None] = {}
    for pid in ids:
        sub = subs[pid]
        played[pid] = parts[pid].play_card(sub.card_index, sub.use_special, rules)

    pending = {pid: _Pending() for pid in ids}
    for pid in ids:
        card = played[pid]
        if card is None:
            continue
        opp = match.opponent_id(pid)
        bonus = rules.character(parts[pid].character).special_bonus if card.use_special else 0
        if card.kind == "attack":
            damage = rules.card_value("attack") + bonus
            if start_cursed[pid]:
                damage = max(0, damage - rules.curse.attack_debuff)
            pending[opp].incoming += damage
        elif card.kind == "defend":
            pending[pid].shield_gain += rules.card_value("defend") + bonus
        elif card.kind == "heal":
            if start_cursed[pid]:
                pending[pid].heal += rules.curse.cured_heal + bonus
                pending[pid].cured = True
            else:
                pending[pid].heal += rules.card_value("heal") + bonus
        elif card.kind == "curse":
            pending[opp].curse_applied = True

    healed: dict[str, int] = {}
    absorbed: dict[str, int] = {}
    hp_lost: dict[str, int] = {}
    drained: dict[str, int] = {}
    penalties: dict[str, int] = {}
    curse_landed: dict[str, bool] = {}
    for pid in ids:
        p = parts[pid]
        pend = pending[pid]

        healed[pid] = max(0, min(pend.heal, rules.hp_max - p.hp))
        p.hp += healed[pid]

        absorbed[pid] = min(start_shield[pid], pend.incoming)
        p.shield = start_shield[pid] - absorbed[pid] + pend.shield_gain
        hp_lost[pid] = min(p.hp, pend.incoming - absorbed[pid])
        p.hp -= hp_lost[pid]

        drained[pid] = 0
        if pend.cured:
            p.curse = None
        elif start_cursed[pid] and p.curse is not None:
            drained[pid] = min(p.hp, rules.curse.hp_drain)
            p.hp -= drained[pid]
            p.curse.turns -= 1
            if p.curse.turns <= 0:
                p.curse = None

        # A curse never stacks on an active one.
        curse_landed[pid] = pend.curse_applied and not p.cursed
        if curse_landed[pid]:
            p.curse = CurseEffect(turns=rules.curse.duration)

        penalties[pid] = min(p.hp, subs[pid].penalty)
        p.hp -= penalties[pid]

    for pid in ids:
        parts[pid].refill_hand(rules.hand_size, match.rng)
        parts[pid].check_invariants(rules.hp_max)
        assert parts[pid].special_used or not start_special[pid], f"{pid}: special_used was reset"

    sides: list[SideOutcome] = []
    for pid in ids:
        p = parts[pid]
        opp = match.opponent_id(pid)
        card = played[pid]
        side = SideOutcome(
            participant_id=pid,
            card=card.kind if card is not None else None,
            special_used=card.use_special if card is not None else False,
            note=subs[pid].note or ("pass" if card is None else None),
            damage_dealt=hp_lost[opp] if card is not None and card.kind == "attack" else 0,
            damage_received=hp_lost[pid],
            shield_absorbed=absorbed[pid],
            healing=healed[pid],
            shield_change=p.shield - start_shield[pid],
            curse_applied=curse_landed[opp],
            curse_drain=drained[pid],
            penalty=penalties[pid],
            hp=p.hp,
            shield=p.shield,
            hand_size=len(p.hand),
            deck_size=len(p.deck),
            discard_size=len(p.discard),
        )
        sides.append(side)
        match.last_played[pid] = side

    return TurnResult(turn=match.turn, phase=match.phase, sides=tuple(sides))


def make_result(match: Match, winner: str | None, reason: EndReason) -> MatchResult:
    return MatchResult(
        winner=winner,
        reason=reason,
        turn=match.turn,
        hp={pid: p.hp for pid, p in match.participants.items()},
    )


def decide_outcome(match: Match) -> MatchResult | None:
    """HP exhaustion first, then the turn cap with a higher-HP tie-break."""
    a, b = list(match.participants.values())
    if a.hp <= 0 or b.hp <= 0:
        if a.hp <= 0 and b.hp <= 0:
            return make_result(match, None, "hp_exhausted")
        return make_result(match, b.id if a.hp <= 0 else a.id, "hp_exhausted")
    if match.turn >= match.rules.turn_limit:
        if a.hp == b.hp:
            return make_result(match, None, "turn_limit")
        return make_result(match, a.id if a.hp > b.hp else b.id, "turn_limit")
    return None


def finish_match(match: Match, result: MatchResult) -> None:
    match.phase = "ended"
    match.deadline_at = None
    match.submissions.clear()
    match.result = result


def view_for(match: Match, participant_id: str) -> MatchView:
    me = match.participants[participant_id]
    return MatchView(
        turn=match.turn,
        me=me.view(),
        opponent=match.opponent_of(participant_id).public_view(),
    )
