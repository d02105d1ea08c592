from __future__ import annotations

import json
from pathlib import Path

import pytest

from cardduel.cli import main
from cardduel.paths import get_paths


def test_validate_rules_ok(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["validate-rules"]) == 0
    assert "OK: 5 characters" in capsys.readouterr().out


def test_validate_rules_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    data = json.loads((get_paths().data_dir / "rules.json").read_text(encoding="utf-8"))
    data["hand_size"] = 0
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    assert main(["validate-rules", str(path)]) == 1
    assert "Schema validation failed" in capsys.readouterr().err


def test_simulate_reports_bad_rules_without_traceback(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    assert main(["simulate", "--rules", str(path), "--games", "1"]) == 1
    captured = capsys.readouterr()
    assert "broken.json" in captured.err
    assert "Games:" not in captured.out


def test_simulate_prints_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    telemetry = tmp_path / "sim.jsonl"
    code = main(
        [
            "simulate",
            "--p1",
            "Witch:hard",
            "--p2",
            "Marisa:expert",
            "--games",
            "3",
            "--seed",
            "7",
            "--telemetry",
            str(telemetry),
        ]
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "Games: 3" in out
    assert "Average turns:" in out
    ends = [json.loads(line) for line in telemetry.read_text(encoding="utf-8").splitlines()]
    assert sum(1 for e in ends if e["type"] == "match_ended") == 3


def test_no_command_prints_help() -> None:
    assert main([]) == 1
