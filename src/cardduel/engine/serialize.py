from __future__ import annotations

from dataclasses import asdict

from .match import Match, MatchResult, SideOutcome, TurnResult
from .participant import Participant


def side_to_dict(s: SideOutcome) -> dict[str, object]:
    return asdict(s)


def turn_result_to_dict(r: TurnResult) -> dict[str, object]:
    return {
        "turn": r.turn,
        "phase": r.phase,
        "next_turn": r.next_turn,
        "next_deadline": r.next_deadline,
        "sides": [side_to_dict(s) for s in r.sides],
    }


def match_result_to_dict(r: MatchResult) -> dict[str, object]:
    return {
        "winner": r.winner,
        "draw": r.winner is None,
        "reason": r.reason,
        "turn": r.turn,
        "hp": dict(r.hp),
    }


def _public_participant(m: Match, p: Participant) -> dict[str, object]:
    last = m.last_played.get(p.id)
    return {
        "name": p.name,
        "character": p.character,
        "hp": p.hp,
        "shield": p.shield,
        "special_used": p.special_used,
        "curse_turns": p.curse.turns if p.curse is not None else 0,
        "hand_size": len(p.hand),
        "deck_size": len(p.deck),
        "discard_size": len(p.discard),
        "submitted": p.id in m.submissions,
        "last_played": side_to_dict(last) if last is not None else None,
    }


def public_state(m: Match, now: float | None = None) -> dict[str, object]:
    """What both sides and any spectator may see."""
    remaining = None
    if m.deadline_at is not None and now is not None:
        remaining = max(0, int(m.deadline_at - now))
    return {
        "match_id": m.id,
        "phase": m.phase,
        "turn": m.turn,
        "deadline_at": m.deadline_at,
        "timer_remaining": remaining,
        "players": {pid: _public_participant(m, p) for pid, p in m.participants.items()},
        "result": match_result_to_dict(m.result) if m.result is not None else None,
    }


def private_state(m: Match, participant_id: str, now: float | None = None) -> dict[str, object]:
    state = public_state(m, now)
    state["you"] = participant_id
    state["hand"] = list(m.participants[participant_id].hand)
    return state


def _participant_to_dict(p: Participant) -> dict[str, object]:
    return {
        "id": p.id,
        "hp": p.hp,
        "shield": p.shield,
        "deck": list(p.deck),
        "hand": list(p.hand),
        "discard": list(p.discard),
        "special_used": p.special_used,
        "curse_turns": p.curse.turns if p.curse is not None else 0,
    }


def snapshot(m: Match) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the full match state."""
    return {
        "seed": m.seed,
        "phase": m.phase,
        "turn": m.turn,
        "players": [_participant_to_dict(p) for p in m.participants.values()],
        "result": match_result_to_dict(m.result) if m.result is not None else None,
    }
