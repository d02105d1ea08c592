from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from dataclasses import dataclass, field, replace
from pathlib import Path

from cardduel.engine.match import Match, MatchResult
from cardduel.engine.types import DIFFICULTIES, Rules
from cardduel.paths import get_paths
from cardduel.services.bots import BotStore
from cardduel.services.matches import MatchRegistry
from cardduel.services.rules import RulesError, RulesService
from cardduel.services.telemetry import TelemetryService


@dataclass
class SimulationSummary:
    games: int = 0
    wins: dict[str, int] = field(default_factory=lambda: {"p1": 0, "p2": 0})
    draws: int = 0
    turns: int = 0

    @property
    def average_turns(self) -> float:
        return self.turns / self.games if self.games else 0.0


def _parse_side(value: str) -> tuple[str | None, str]:
    """Parse 'Character:difficulty'. Either part may be omitted."""
    character, _, difficulty = value.partition(":")
    difficulty = difficulty or "medium"
    if difficulty not in DIFFICULTIES:
        raise argparse.ArgumentTypeError(f"unknown difficulty {difficulty!r}")
    return (character or None, difficulty)


def _load_rules(path: str | None) -> Rules:
    paths = get_paths()
    service = RulesService(paths.data_dir, paths.schema_dir)
    return service.load_rules(Path(path) if path else None)


async def simulate(
    rules: Rules,
    p1: tuple[str | None, str],
    p2: tuple[str | None, str],
    games: int,
    seed: int,
    telemetry: TelemetryService | None = None,
) -> SimulationSummary:
    loop = asyncio.get_running_loop()
    summary = SimulationSummary()
    finished: dict[str, asyncio.Future[MatchResult]] = {}

    def on_end(match: Match, result: MatchResult) -> None:
        fut = finished.get(match.id)
        if fut is not None and not fut.done():
            fut.set_result(result)

    rng = random.Random(seed)
    registry = MatchRegistry(
        rules,
        loop,
        bots=BotStore(rules, rng=rng, clock=loop.time),
        rng=rng,
        telemetry=telemetry,
        on_match_end=on_end,
    )
    for _ in range(games):
        coordinator = registry.create_bot_match(p1, p2)
        seat_ids = coordinator.match.participant_ids()
        fut: asyncio.Future[MatchResult] = loop.create_future()
        finished[coordinator.match.id] = fut
        coordinator.start()
        result = await fut
        registry.remove(coordinator.match.id)

        summary.games += 1
        summary.turns += result.turn
        if result.winner is None:
            summary.draws += 1
        else:
            summary.wins["p1" if result.winner == seat_ids[0] else "p2"] += 1
    return summary


def _cmd_simulate(args: argparse.Namespace) -> int:
    try:
        rules = replace(_load_rules(args.rules), intermission_seconds=0.0)
    except RulesError as e:
        print(e, file=sys.stderr)
        return 1
    telemetry = TelemetryService(Path(args.telemetry)) if args.telemetry else None
    summary = asyncio.run(simulate(rules, args.p1, args.p2, args.games, args.seed, telemetry))
    print(f"Games: {summary.games}")
    print(f"P1 ({args.p1[0] or 'random'}:{args.p1[1]}) wins: {summary.wins['p1']}")
    print(f"P2 ({args.p2[0] or 'random'}:{args.p2[1]}) wins: {summary.wins['p2']}")
    print(f"Draws: {summary.draws}")
    print(f"Average turns: {summary.average_turns:.2f}")
    return 0


def _cmd_validate_rules(args: argparse.Namespace) -> int:
    try:
        rules = _load_rules(args.path)
    except RulesError as e:
        print(e, file=sys.stderr)
        return 1
    print(f"OK: {len(rules.characters)} characters, default {rules.default_character}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="cardduel")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="command")

    p_sim = sub.add_parser("simulate", help="Run bot-vs-bot matches")
    p_sim.add_argument("--p1", type=_parse_side, default=(None, "medium"), help="Character:difficulty")
    p_sim.add_argument("--p2", type=_parse_side, default=(None, "medium"), help="Character:difficulty")
    p_sim.add_argument("--games", type=int, default=10)
    p_sim.add_argument("--seed", type=int, default=42)
    p_sim.add_argument("--rules", default=None, help="Path to rules JSON")
    p_sim.add_argument("--telemetry", default=None, help="Append JSONL events to this file")

    p_val = sub.add_parser("validate-rules", help="Validate a rules file against the schema")
    p_val.add_argument("path", nargs="?", default=None)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    if args.command == "simulate":
        return _cmd_simulate(args)
    if args.command == "validate-rules":
        return _cmd_validate_rules(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
