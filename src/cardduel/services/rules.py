from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from cardduel.engine.types import (
    CARD_KINDS,
    TIMEOUT_POLICIES,
    CardKind,
    CharacterDefinition,
    CurseRules,
    DeckShape,
    PersonalityOffsets,
    Rules,
)

logger = logging.getLogger(__name__)

RULES_FILE = "rules.json"
RULES_SCHEMA_FILE = "rules.schema.json"


class RulesError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise RulesError(f"Missing rules file: {path}") from e
    except json.JSONDecodeError as e:
        raise RulesError(f"Invalid JSON in {path}: {e}") from e


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(e.absolute_path))
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise RulesError("\n".join(lines))


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise RulesError(f"Expected int for {key}")
    return v


def _require_number(obj: Mapping[str, object], key: str, default: float | None = None) -> float:
    v = obj.get(key, default)
    if not isinstance(v, (int, float)) or isinstance(v, bool):
        raise RulesError(f"Expected number for {key}")
    return float(v)


def _require_mapping(obj: Mapping[str, object], key: str) -> Mapping[str, object]:
    v = obj.get(key)
    if not isinstance(v, dict):
        raise RulesError(f"Expected object for {key}")
    return v


def _parse_character(raw: Mapping[str, object]) -> CharacterDefinition:
    name = raw.get("name")
    if not isinstance(name, str):
        raise RulesError("Character missing name")
    shape_raw = _require_mapping(raw, "deck_shape")
    shape = DeckShape(
        attack=_require_int(shape_raw, "attack"),
        defend=_require_int(shape_raw, "defend"),
        heal=_require_int(shape_raw, "heal"),
        curse=_require_int(shape_raw, "curse"),
    )
    special_card: CardKind | None = None
    special_bonus = 0
    special_raw = raw.get("special")
    if isinstance(special_raw, dict):
        card = special_raw.get("card")
        if card not in CARD_KINDS:
            raise RulesError(f"Unknown special card for {name}: {card!r}")
        special_card = card  # type: ignore[assignment]
        special_bonus = _require_int(special_raw, "bonus")
    personality_raw = raw.get("personality", {})
    personality = PersonalityOffsets()
    if isinstance(personality_raw, dict):
        personality = PersonalityOffsets(
            aggressiveness=_require_number(personality_raw, "aggressiveness", 0.0),
            defensiveness=_require_number(personality_raw, "defensiveness", 0.0),
            healing_tendency=_require_number(personality_raw, "healing_tendency", 0.0),
        )
    return CharacterDefinition(
        name=name,
        special_card=special_card,
        special_bonus=special_bonus,
        deck_shape=shape,
        personality=personality,
    )


def parse_rules(raw: object, *, context: str = "rules") -> Rules:
    """Build a `Rules` from already schema-validated JSON and check what the schema can't."""
    if not isinstance(raw, dict):
        raise RulesError(f"{context} must be an object")

    deck_size = _require_int(raw, "deck_size")
    values_raw = _require_mapping(raw, "card_values")
    card_values: dict[CardKind, int] = {}
    for kind in CARD_KINDS:
        v = values_raw.get(kind, 0)
        if not isinstance(v, int):
            raise RulesError(f"Expected int for card_values.{kind}")
        card_values[kind] = v

    curse_raw = _require_mapping(raw, "curse")
    curse = CurseRules(
        duration=_require_int(curse_raw, "duration"),
        hp_drain=_require_int(curse_raw, "hp_drain"),
        attack_debuff=_require_int(curse_raw, "attack_debuff"),
        cured_heal=_require_int(curse_raw, "cured_heal"),
    )

    timeout_raw = _require_mapping(raw, "timeout")
    policy = timeout_raw.get("policy")
    if policy not in TIMEOUT_POLICIES:
        raise RulesError(f"Unknown timeout policy: {policy!r}")
    penalty = timeout_raw.get("penalty", 0)
    if not isinstance(penalty, int):
        raise RulesError("Expected int for timeout.penalty")

    characters: dict[str, CharacterDefinition] = {}
    raw_chars = raw.get("characters")
    if not isinstance(raw_chars, list):
        raise RulesError(f"{context}.characters must be a list")
    for item in raw_chars:
        if not isinstance(item, dict):
            continue
        char = _parse_character(item)
        if char.name in characters:
            raise RulesError(f"Duplicate character: {char.name}")
        if char.deck_shape.total() != deck_size:
            raise RulesError(
                f"Deck shape for {char.name} has {char.deck_shape.total()} cards, expected {deck_size}"
            )
        characters[char.name] = char

    default_character = raw.get("default_character")
    if not isinstance(default_character, str) or default_character not in characters:
        raise RulesError(f"default_character {default_character!r} is not a known character")

    hand_size = _require_int(raw, "hand_size")
    if hand_size > deck_size:
        raise RulesError("hand_size cannot exceed deck_size")

    return Rules(
        hp_start=_require_int(raw, "hp_start"),
        hand_size=hand_size,
        deck_size=deck_size,
        type_limit=_require_int(raw, "type_limit"),
        card_values=card_values,
        curse=curse,
        turn_seconds=_require_number(raw, "turn_seconds"),
        turn_limit=_require_int(raw, "turn_limit"),
        intermission_seconds=_require_number(raw, "intermission_seconds", 0.0),
        timeout_policy=policy,  # type: ignore[arg-type]
        timeout_penalty=penalty,
        default_character=default_character,
        characters=characters,
    )


class RulesService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_rules(self, path: Path | None = None) -> Rules:
        rules_path = path or self._data_dir / RULES_FILE
        raw = _load_json(rules_path)
        schema = _load_json(self._schema_dir / RULES_SCHEMA_FILE)
        validate_json(raw, schema, context=str(rules_path))
        rules = parse_rules(raw, context=str(rules_path))
        logger.info(
            "Loaded rules from %s: %d characters, hp=%d deck=%d hand=%d",
            rules_path,
            len(rules.characters),
            rules.hp_start,
            rules.deck_size,
            rules.hand_size,
        )
        return rules


def load_default_rules() -> Rules:
    from cardduel.paths import get_paths

    paths = get_paths()
    return RulesService(paths.data_dir, paths.schema_dir).load_rules()
