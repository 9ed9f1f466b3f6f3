from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def run_cli(*args: str) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        [sys.executable, str(PROJECT_ROOT / "main.py"), *args],
        capture_output=True,
        text=True,
        check=False,
        cwd=PROJECT_ROOT,
    )


def test_list_outputs_example_functions() -> None:
    result = run_cli("list")
    assert result.returncode == 0
    output = {line.strip() for line in result.stdout.splitlines() if line.strip()}
    assert {
        "Accountability",
        "Echo",
        "Error",
        "NoParamsNoReturn",
        "NoParamsWithReturn",
        "ParamWithReturn",
    } == output
    assert result.stderr == ""


def test_call_rejects_invalid_json_payload() -> None:
    result = run_cli("call", "Echo", "{not json")
    assert result.returncode == 2
    assert "payload must be valid JSON" in result.stderr


@pytest.mark.parametrize("args", [(), ("call",)])
def test_missing_arguments_are_usage_errors(args: tuple[str, ...]) -> None:
    result = run_cli(*args)
    assert result.returncode == 2


def test_call_reports_unreachable_server() -> None:
    result = run_cli("call", "Echo", '{"Bar": 1}', "--url", "http://127.0.0.1:9")
    assert result.returncode == 1
    assert result.stderr.startswith("Error:")
