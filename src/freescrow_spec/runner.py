#!/usr/bin/env python3
"""
Freescrow scenario runner.

Replays YAML scenario files (a genesis state, an ordered list of calls and
clock advances, and the expected outcome) against the Python model and
reports every expectation that does not hold.
"""

import glob
import logging
import os
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click
import yaml

from .config import DEFAULT_FEE_DEPOSIT_PERIOD, FACTORY_ADDRESS
from .errors import ErrorCode
from .fixtures_io import state_to_json
from .ledger import advance_time, balance_of
from .reporter import Mismatch, ReportGenerator, RunReport, ScenarioResult, SuiteResult
from .runner_config import RunnerConfig
from .state_digest import compute_state_digest
from .state_transition import apply_call
from .test_accounts import NAMES, genesis_state
from .types import Call, CallType, ChainState, EscrowStatus

logger = logging.getLogger(__name__)

_ADDRESSES = {name: addr for addr, name in NAMES.items()}

DEFAULT_BALANCE = 1_000
DEFAULT_COST = 10


class ScenarioError(Exception):
    """Malformed scenario file."""


def resolve_address(state: ChainState, ref: str) -> bytes:
    """Map a scenario reference (account name, "escrow", hex) to an address."""
    if ref == "escrow":
        if not state.registry:
            raise ScenarioError("no escrow created yet")
        return state.registry[-1]
    if ref.startswith("escrow:"):
        idx = int(ref.split(":", 1)[1])
        if idx >= len(state.registry):
            raise ScenarioError(f"escrow index {idx} not created")
        return state.registry[idx]
    if ref in _ADDRESSES:
        return _ADDRESSES[ref]
    try:
        return bytes.fromhex(ref)
    except ValueError:
        raise ScenarioError(f"unknown address reference: {ref}") from None


def _build_call(state: ChainState, step: Dict[str, Any]) -> Call:
    if "create" in step:
        payload = dict(step["create"] or {})
        sender = payload.pop("sender", "client")
        payload.setdefault("fee_deposit_period", DEFAULT_FEE_DEPOSIT_PERIOD)
        payload["arbitrator"] = resolve_address(state, payload.get("arbitrator", "arbitrator"))
        payload["extra_data"] = bytes.fromhex(payload.get("extra_data", ""))
        return Call(
            sender=resolve_address(state, sender),
            target=FACTORY_ADDRESS,
            call_type=CallType.CREATE_ESCROW,
            payload=payload,
        )

    if "call" not in step:
        raise ScenarioError(f"step needs one of create, call or advance: {step}")
    try:
        call_type = CallType(step["call"])
    except ValueError:
        raise ScenarioError(f"unknown call type: {step['call']}") from None
    return Call(
        sender=resolve_address(state, step.get("sender", "client")),
        target=resolve_address(state, step.get("target", "escrow")),
        call_type=call_type,
        payload=dict(step.get("payload") or {}),
        value=step.get("value", 0),
    )


def _check_expectations(
    name: str, state: ChainState, expect: Dict[str, Any]
) -> List[Mismatch]:
    mismatches: List[Mismatch] = []
    escrow = state.escrows.get(resolve_address(state, expect.get("escrow", "escrow"))) if state.registry else None

    def check(field: str, expected: Any, actual: Any) -> None:
        if expected != actual:
            mismatches.append(Mismatch(name, field, expected, actual))

    if "status" in expect:
        check("status", EscrowStatus[expect["status"]].name, escrow.status.name if escrow else None)
    for field in ("fund", "highest_bid", "custody"):
        if field in expect:
            check(field, expect[field], getattr(escrow, field) if escrow else None)
    if "freelancer" in expect:
        expected = resolve_address(state, expect["freelancer"]) if expect["freelancer"] else None
        check("freelancer", expected, escrow.freelancer if escrow else None)
    if "bids_count" in expect:
        actual = len(escrow.auction.bids) if escrow and escrow.auction else 0
        check("bids_count", expect["bids_count"], actual)
    for ref, amount in (expect.get("balances") or {}).items():
        check(f"balance[{ref}]", amount, balance_of(state, resolve_address(state, ref)))
    return mismatches


def run_scenario(scenario: Dict[str, Any], suite_name: str = "") -> Tuple[ScenarioResult, ChainState]:
    """Run one scenario and return its result with the final state."""
    name = scenario.get("name", "unknown")
    start_time = time.time()
    state = genesis_state(
        balance=scenario.get("balance", DEFAULT_BALANCE),
        cost=scenario.get("arbitration_cost", DEFAULT_COST),
    )
    mismatches: List[Mismatch] = []
    steps_run = 0

    try:
        for idx, step in enumerate(scenario.get("steps", [])):
            steps_run = idx + 1
            if "advance" in step:
                advance_time(state, step["advance"])
                continue

            call = _build_call(state, step)
            state, result = apply_call(state, call)
            expected_error = step.get("expect_error")
            actual_error = result.error.code.name if result.error else None
            if expected_error is not None and expected_error not in ErrorCode.__members__:
                raise ScenarioError(f"unknown error code: {expected_error}")
            if actual_error != expected_error:
                mismatches.append(Mismatch(name, "error", expected_error, actual_error, step=idx))
                logger.debug("  step %d %s: %s", idx, call.call_type.value, result)

        mismatches.extend(_check_expectations(name, state, scenario.get("expect") or {}))
    except ScenarioError as e:
        logger.error(f"Malformed scenario {name}: {e}")
        return (
            ScenarioResult(
                scenario_name=name,
                suite_name=suite_name,
                passed=False,
                steps_run=steps_run,
                execution_time_ms=(time.time() - start_time) * 1000,
                error=str(e),
            ),
            state,
        )

    return (
        ScenarioResult(
            scenario_name=name,
            suite_name=suite_name,
            passed=not mismatches,
            steps_run=steps_run,
            execution_time_ms=(time.time() - start_time) * 1000,
            mismatches=mismatches,
            state_digest=compute_state_digest(state_to_json(state)),
        ),
        state,
    )


def run_suite(path: str, stop_on_first_failure: bool = False) -> SuiteResult:
    """Run a scenario suite from a YAML file."""
    suite_name = Path(path).stem
    logger.info(f"Running suite: {suite_name}")
    start_time = time.time()

    with open(path) as f:
        suite = yaml.safe_load(f) or {}

    scenarios = suite.get("scenarios", [])
    results: List[ScenarioResult] = []
    for scenario in scenarios:
        result, _ = run_scenario(scenario, suite_name)
        results.append(result)

        status = "PASS" if result.passed else "FAIL"
        logger.info(f"  [{status}] {result.scenario_name}")

        if not result.passed and stop_on_first_failure:
            break

    passed = sum(1 for r in results if r.passed)
    return SuiteResult(
        suite_name=suite_name,
        total_scenarios=len(results),
        passed_scenarios=passed,
        failed_scenarios=len(results) - passed,
        skipped_scenarios=len(scenarios) - len(results),
        execution_time_ms=(time.time() - start_time) * 1000,
        scenario_results=results,
    )


def run_all(paths: List[str], config: RunnerConfig) -> RunReport:
    start_time = time.time()
    suite_results = []
    for path in paths:
        suite_results.append(run_suite(path, config.stop_on_first_failure))
        if config.stop_on_first_failure and suite_results[-1].failed_scenarios:
            break
    return ReportGenerator(config.result_dir).generate_report(
        suite_results, execution_time_ms=(time.time() - start_time) * 1000
    )


def find_scenario_files(scenario_dir: str) -> List[str]:
    """Find all scenario YAML files in directory."""
    patterns = [
        os.path.join(scenario_dir, "**", "*.yaml"),
        os.path.join(scenario_dir, "**", "*.yml"),
    ]

    files = []
    for pattern in patterns:
        files.extend(glob.glob(pattern, recursive=True))

    return sorted(files)


@click.command()
@click.option(
    "--scenarios",
    default=None,
    help="Path to scenarios directory or specific YAML file",
)
@click.option(
    "--result-dir",
    default=None,
    help="Directory to write results",
)
@click.option(
    "--format",
    "report_format",
    type=click.Choice(["json", "yaml"]),
    default=None,
    help="Report file format",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.option(
    "--stop-on-failure",
    is_flag=True,
    help="Stop on first scenario failure",
)
def main(
    scenarios: Optional[str],
    result_dir: Optional[str],
    report_format: Optional[str],
    verbose: bool,
    stop_on_failure: bool,
) -> None:
    """Run Freescrow scenarios."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    # Load config from environment, then override with CLI args
    config = RunnerConfig.from_env()
    if result_dir:
        config.result_dir = result_dir
    if report_format:
        config.report_format = report_format
    if verbose or config.verbose:
        config.verbose = True
        logging.getLogger().setLevel(logging.DEBUG)
    if stop_on_failure:
        config.stop_on_first_failure = True

    scenario_dir = scenarios or config.scenario_dir
    if os.path.isfile(scenario_dir):
        scenario_files = [scenario_dir]
    else:
        scenario_files = find_scenario_files(scenario_dir)

    if not scenario_files:
        logger.error(f"No scenario files found in {scenario_dir}")
        sys.exit(1)

    logger.info(f"Found {len(scenario_files)} scenario files")

    report = run_all(scenario_files, config)
    reporter = ReportGenerator(config.result_dir)
    path = reporter.write_report(report, config.report_format)
    logger.info(f"Report written to {path}")
    reporter.print_summary(report)

    sys.exit(0 if report.total_failed == 0 else 1)


if __name__ == "__main__":
    main()
