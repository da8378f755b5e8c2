"""Scenario runner specs."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from freescrow_spec.runner import ScenarioError, main, resolve_address, run_scenario, run_suite
from freescrow_spec.runner_config import RunnerConfig
from freescrow_spec.test_accounts import BOB, genesis_state

SCENARIOS = Path(__file__).resolve().parent.parent / "scenarios"


def _load(name: str) -> list[dict]:
    with open(SCENARIOS / name) as f:
        return yaml.safe_load(f)["scenarios"]


@pytest.mark.parametrize("scenario", _load("lifecycle.yaml"), ids=lambda s: s["name"])
def test_lifecycle_scenarios_pass(scenario) -> None:
    result, state = run_scenario(scenario, "lifecycle")
    assert result.passed, result.mismatches or result.error
    assert result.steps_run == len(scenario["steps"])
    assert result.state_digest is not None


def test_expectation_mismatch_reported() -> None:
    scenario = {
        "name": "wrong_expectation",
        "steps": [
            {"create": {"title": "t", "duration_in_seconds": 10, "fee_deposit_period": 10}},
            {"call": "deposit", "sender": "client", "value": 100},
            {"call": "close_project", "sender": "bob"},
        ],
        "expect": {"status": "RECLAIM_N_CLOSED"},
    }
    result, _ = run_scenario(scenario)
    assert not result.passed
    fields = [(m.field, m.step) for m in result.mismatches]
    assert ("error", 2) in fields
    assert ("status", None) in fields


def test_malformed_scenario() -> None:
    result, _ = run_scenario({"name": "bad", "steps": [{"call": "no_such_call"}]})
    assert not result.passed
    assert "unknown call type" in result.error


def test_resolve_address() -> None:
    state = genesis_state()
    assert resolve_address(state, "bob") == BOB
    assert resolve_address(state, BOB.hex()) == BOB
    with pytest.raises(ScenarioError):
        resolve_address(state, "escrow")


def test_run_suite_counts() -> None:
    suite = run_suite(str(SCENARIOS / "lifecycle.yaml"))
    assert suite.total_scenarios == len(_load("lifecycle.yaml"))
    assert suite.failed_scenarios == 0
    assert suite.pass_rate == 100.0


def test_config_from_env(monkeypatch) -> None:
    monkeypatch.setenv("FREESCROW_SCENARIO_DIR", "/tmp/scn")
    monkeypatch.setenv("FREESCROW_VERBOSE", "yes")
    config = RunnerConfig.from_env()
    assert config.scenario_dir == "/tmp/scn"
    assert config.verbose
    assert not config.stop_on_first_failure


def test_cli_writes_report(tmp_path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        main, ["--scenarios", str(SCENARIOS), "--result-dir", str(tmp_path)]
    )
    assert result.exit_code == 0, result.output
    report = json.loads((tmp_path / "scenario-report.json").read_text())
    assert report["total_failed"] == 0
    assert report["total_scenarios"] == len(_load("lifecycle.yaml"))


def test_cli_fails_on_mismatch(tmp_path) -> None:
    suite = tmp_path / "broken.yaml"
    suite.write_text(
        yaml.safe_dump(
            {"scenarios": [{"name": "broken", "steps": [], "expect": {"balances": {"bob": 1}}}]}
        )
    )
    runner = CliRunner()
    result = runner.invoke(
        main, ["--scenarios", str(suite), "--result-dir", str(tmp_path / "out"), "--format", "yaml"]
    )
    assert result.exit_code == 1
    assert (tmp_path / "out" / "scenario-report.yaml").exists()
