from __future__ import annotations

import json
from pathlib import Path

import pytest

from cardduel.paths import get_paths
from cardduel.services.rules import RulesError, RulesService


def _service() -> RulesService:
    paths = get_paths()
    return RulesService(paths.data_dir, paths.schema_dir)


def _bundled() -> dict:
    return json.loads((get_paths().data_dir / "rules.json").read_text(encoding="utf-8"))


def _write(tmp_path: Path, data: object) -> Path:
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_bundled_rules_validate() -> None:
    service = _service()
    rules = service.load_rules()
    assert rules.hp_start == 100
    assert rules.deck_size == 15
    assert rules.timeout_policy == "penalty"
    assert rules.character_names() == ["Marisa", "Miko", "Reimu", "Sakuya", "Witch"]
    witch = rules.character("Witch")
    assert witch.special_card == "attack"
    assert witch.special_bonus == 15
    assert witch.personality.aggressiveness == pytest.approx(0.2)


def test_invalid_json_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text("{ not json", encoding="utf-8")
    with pytest.raises(RulesError, match="Invalid JSON"):
        _service().load_rules(path)


def test_missing_file_is_reported(tmp_path: Path) -> None:
    with pytest.raises(RulesError, match="Missing rules file"):
        _service().load_rules(tmp_path / "nope.json")


def test_schema_rejects_unknown_keys(tmp_path: Path) -> None:
    data = _bundled()
    data["mana"] = 3
    with pytest.raises(RulesError, match="Schema validation failed"):
        _service().load_rules(_write(tmp_path, data))


def test_schema_rejects_unknown_timeout_policy(tmp_path: Path) -> None:
    data = _bundled()
    data["timeout"]["policy"] = "explode"
    with pytest.raises(RulesError, match="Schema validation failed"):
        _service().load_rules(_write(tmp_path, data))


def test_deck_shape_must_match_deck_size(tmp_path: Path) -> None:
    data = _bundled()
    data["characters"][0]["deck_shape"]["attack"] = 9
    with pytest.raises(RulesError, match="Deck shape for Reimu"):
        _service().load_rules(_write(tmp_path, data))


def test_default_character_must_exist(tmp_path: Path) -> None:
    data = _bundled()
    data["default_character"] = "Nobody"
    with pytest.raises(RulesError, match="default_character"):
        _service().load_rules(_write(tmp_path, data))


def test_duplicate_characters_are_rejected(tmp_path: Path) -> None:
    data = _bundled()
    data["characters"].append(dict(data["characters"][0]))
    with pytest.raises(RulesError, match="Duplicate character"):
        _service().load_rules(_write(tmp_path, data))
