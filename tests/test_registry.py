from __future__ import annotations

import random
from typing import TYPE_CHECKING

from cardduel.engine.match import Match, MatchResult, Seat
from cardduel.engine.types import Rules
from cardduel.services.matches import MatchRegistry

if TYPE_CHECKING:
    from conftest import ManualScheduler


def test_pvp_match_routes_submissions(rules: Rules, scheduler: ManualScheduler) -> None:
    registry = MatchRegistry(rules, scheduler, rng=random.Random(0))
    coord = registry.create_pvp_match(Seat("a", "A", "Reimu"), Seat("b", "B", "Miko"))
    assert coord.match.id == "cardgame-1"
    assert registry.get("cardgame-1") is coord
    assert registry.start("cardgame-1")
    assert registry.submit_action("cardgame-1", "a", 0).ok
    assert registry.submit_action("cardgame-1", "b", None).ok
    assert coord.match.phase == "resolve"
    assert registry.active_ids() == ["cardgame-1"]


def test_unknown_match_is_rejected(rules: Rules, scheduler: ManualScheduler) -> None:
    registry = MatchRegistry(rules, scheduler)
    res = registry.submit_action("nope", "a", 0)
    assert not res.ok
    assert res.error == "Unknown match."
    assert registry.submit_deck("nope", "a", []).error == "Unknown match."
    assert not registry.start("nope")
    assert not registry.remove("nope")


def test_ai_match_releases_bot_on_end(rules: Rules, scheduler: ManualScheduler) -> None:
    ended: list[MatchResult] = []

    def on_end(match: Match, result: MatchResult) -> None:
        ended.append(result)

    registry = MatchRegistry(rules, scheduler, rng=random.Random(1), on_match_end=on_end)
    coord = registry.create_ai_match(Seat("h", "Human", "Reimu"), difficulty="hard", character="Witch")
    assert coord.match.id == "airoom-1"
    assert len(registry.bots) == 1
    bot_id = coord.match.opponent_id("h")
    assert coord.match.participants[bot_id].character == "Witch"

    registry.start(coord.match.id)
    assert bot_id in coord.match.submissions
    registry.forfeit(coord.match.id, "h")
    assert ended and ended[0].winner == bot_id
    assert len(registry.bots) == 0
    assert registry.active_ids() == []


def test_bot_match_plays_out_and_is_removable(fast_rules: Rules, scheduler: ManualScheduler) -> None:
    registry = MatchRegistry(fast_rules, scheduler, rng=random.Random(2))
    coord = registry.create_bot_match(("Sakuya", "expert"), ("Miko", "easy"), seed=5)
    assert coord.match.id == "botmatch-1"
    coord.start()
    scheduler.advance(0)
    assert coord.ended
    assert len(registry.bots) == 0
    assert registry.remove(coord.match.id)
    assert registry.get(coord.match.id) is None


def test_remove_aborts_running_match(rules: Rules, scheduler: ManualScheduler) -> None:
    registry = MatchRegistry(rules, scheduler, rng=random.Random(3))
    coord = registry.create_ai_match(Seat("h", "Human", "Reimu"))
    registry.start(coord.match.id)
    assert registry.remove(coord.match.id)
    assert coord.ended
    assert coord.match.result is not None and coord.match.result.reason == "aborted"
    assert len(registry.bots) == 0
    assert scheduler.pending() == 0
