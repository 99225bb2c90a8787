from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from apps.cli.main import app

runner = CliRunner()


def _invoke_scan(format: str, text: str, *targets: str, extra: list[str] | None = None):
    args = ["scan", "--format", format, "--input", text]
    for target in targets:
        args.extend(["--target", target])
    args.extend(extra or [])
    return runner.invoke(app, args)


def test_cli_scan_prints_values_as_json() -> None:
    result = _invoke_scan("%d + %d = %d", "1 + 2 = 3", "int", "int", "int")

    assert result.exit_code == 0
    assert json.loads(result.output) == {"values": [1, 2, 3]}


def test_cli_scan_mixed_targets() -> None:
    result = _invoke_scan("%s is %t", "Lola is true", "str", "bool")

    assert result.exit_code == 0
    assert json.loads(result.output) == {"values": ["Lola", True]}


def test_cli_scan_target_count_mismatch_returns_2() -> None:
    result = _invoke_scan("%d + %d", "1 + 2", "int")

    assert result.exit_code == 2
    assert "ERROR(BAD_ARGUMENT)" in result.output


def test_cli_scan_unknown_target_type_returns_2() -> None:
    result = _invoke_scan("%d", "1", "float")

    assert result.exit_code == 2
    assert "Unsupported target type: float" in result.output


def test_cli_scan_no_match_returns_3() -> None:
    result = _invoke_scan("I want %s that way", "just that way, I want it", "str")

    assert result.exit_code == 3
    assert "ERROR(NO_MATCH)" in result.output


def test_cli_scan_conversion_error_returns_4() -> None:
    result = _invoke_scan("age=%d", "age=old", "int")

    assert result.exit_code == 4
    assert "at index 0" in result.output


def test_cli_scan_with_policy_file(tmp_path: Path) -> None:
    policy = tmp_path / "policy.yaml"
    policy.write_text("whitespace_stop:\n  string: true\n", encoding="utf-8")

    result = _invoke_scan(
        "%5s%d", "blue 42 set", "str", "int", extra=["--policy", str(policy)]
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == {"values": ["blue", 42]}


def test_cli_scan_invalid_policy_returns_2(tmp_path: Path) -> None:
    policy = tmp_path / "policy.yaml"
    policy.write_text("nope: 1\n", encoding="utf-8")

    result = _invoke_scan("%d", "1", "int", extra=["--policy", str(policy)])

    assert result.exit_code == 2
    assert "Invalid policy schema" in result.output


def test_cli_explain_prints_trace() -> None:
    result = runner.invoke(app, ["explain", "--format", "x=%d;", "--input", "x=5;"])

    assert result.exit_code == 0
    trace = json.loads(result.output)
    assert trace["alignment"] == [0, 3]
    assert trace["captures"] == [{"text": "5", "verbs": ["%d"]}]


def test_cli_explain_failure_returns_3() -> None:
    result = runner.invoke(app, ["explain", "--format", "x=%d;", "--input", "y=5;"])

    assert result.exit_code == 3
    assert json.loads(result.output)["error"].startswith("NO_MATCH")


def test_cli_targets_lists_types() -> None:
    result = runner.invoke(app, ["targets"])

    assert result.exit_code == 0
    assert "uint8" in result.output.splitlines()
