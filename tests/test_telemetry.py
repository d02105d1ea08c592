from __future__ import annotations

import random
from pathlib import Path
from typing import TYPE_CHECKING

from cardduel.engine.match import Seat
from cardduel.engine.types import Rules
from cardduel.services.matches import MatchRegistry
from cardduel.services.telemetry import TelemetryService

if TYPE_CHECKING:
    from conftest import ManualScheduler


def test_log_and_read_roundtrip(tmp_path: Path) -> None:
    telemetry = TelemetryService(tmp_path / "logs" / "events.jsonl")
    assert telemetry.read() == []
    telemetry.log("match_ended", {"winner": None})
    telemetry.log("turn_resolved", {"turn": 1})
    assert telemetry.records_written == 2
    recs = telemetry.read()
    assert [r["type"] for r in recs] == ["match_ended", "turn_resolved"]
    assert recs[0]["source"] == "cardduel"
    assert telemetry.read("turn_resolved")[0]["payload"] == {"turn": 1}


def test_coordinator_writes_turn_and_end_events(
    tmp_path: Path, fast_rules: Rules, scheduler: ManualScheduler
) -> None:
    telemetry = TelemetryService(tmp_path / "events.jsonl")
    registry = MatchRegistry(fast_rules, scheduler, rng=random.Random(6), telemetry=telemetry)
    coord = registry.create_bot_match(("Reimu", "hard"), ("Marisa", "medium"), seed=8)
    coord.start()
    scheduler.advance(0)
    assert coord.ended

    turns = telemetry.read("turn_resolved")
    ends = telemetry.read("match_ended")
    assert len(turns) == coord.match.turn
    assert len(ends) == 1
    payload = ends[0]["payload"]
    assert isinstance(payload, dict)
    assert payload["match_id"] == coord.match.id
    assert payload["reason"] in ("hp_exhausted", "turn_limit")


def test_pvp_turn_event_carries_both_sides(
    tmp_path: Path, fast_rules: Rules, scheduler: ManualScheduler
) -> None:
    telemetry = TelemetryService(tmp_path / "events.jsonl")
    registry = MatchRegistry(fast_rules, scheduler, telemetry=telemetry)
    coord = registry.create_pvp_match(Seat("a", "A", "Reimu"), Seat("b", "B", "Reimu"), seed=1)
    coord.start()
    coord.submit_action("a", None)
    coord.submit_action("b", None)
    (event,) = telemetry.read("turn_resolved")
    payload = event["payload"]
    assert isinstance(payload, dict)
    assert [s["participant_id"] for s in payload["sides"]] == ["a", "b"]
    assert payload["next_turn"] == 2
