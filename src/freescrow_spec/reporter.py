"""
Report generation for scenario runs.
"""

import json
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import yaml


@dataclass
class Mismatch:
    """A single expectation that the model did not meet."""
    scenario_name: str
    field: str
    expected: Any
    actual: Any
    step: Optional[int] = None


@dataclass
class ScenarioResult:
    """Result of a single scenario."""
    scenario_name: str
    suite_name: str
    passed: bool
    steps_run: int
    execution_time_ms: float
    mismatches: List[Mismatch] = field(default_factory=list)
    state_digest: Optional[str] = None
    error: Optional[str] = None


@dataclass
class SuiteResult:
    """Result of a scenario file (collection of scenarios)."""
    suite_name: str
    total_scenarios: int
    passed_scenarios: int
    failed_scenarios: int
    skipped_scenarios: int
    execution_time_ms: float
    scenario_results: List[ScenarioResult]

    @property
    def pass_rate(self) -> float:
        if self.total_scenarios == 0:
            return 0.0
        return self.passed_scenarios / self.total_scenarios * 100


@dataclass
class RunReport:
    """Complete scenario run report."""
    timestamp: str
    total_suites: int
    total_scenarios: int
    total_passed: int
    total_failed: int
    execution_time_ms: float
    suite_results: List[SuiteResult]
    mismatches: List[Mismatch]


class ReportGenerator:
    """Generates scenario run reports."""

    def __init__(self, result_dir: str):
        self.result_dir = result_dir
        os.makedirs(result_dir, exist_ok=True)

    def generate_report(
        self,
        suite_results: List[SuiteResult],
        execution_time_ms: float,
    ) -> RunReport:
        mismatches = [
            m
            for suite in suite_results
            for scenario in suite.scenario_results
            for m in scenario.mismatches
        ]
        return RunReport(
            timestamp=datetime.now(timezone.utc).isoformat(),
            total_suites=len(suite_results),
            total_scenarios=sum(s.total_scenarios for s in suite_results),
            total_passed=sum(s.passed_scenarios for s in suite_results),
            total_failed=sum(s.failed_scenarios for s in suite_results),
            execution_time_ms=execution_time_ms,
            suite_results=suite_results,
            mismatches=mismatches,
        )

    def write_report(self, report: RunReport, fmt: str = "json") -> str:
        """
        Write the report as JSON or YAML.

        Returns:
            Path to written file
        """
        report_dict = self.report_to_dict(report)
        if fmt == "yaml":
            path = os.path.join(self.result_dir, "scenario-report.yaml")
            with open(path, "w") as f:
                yaml.safe_dump(report_dict, f, sort_keys=False, width=4096)
        else:
            path = os.path.join(self.result_dir, "scenario-report.json")
            with open(path, "w") as f:
                json.dump(report_dict, f, indent=2)
        return path

    def print_summary(self, report: RunReport) -> None:
        """Print summary to console."""
        print("\n" + "=" * 60)
        print("Freescrow Scenario Results")
        print("=" * 60)
        print(f"Total:      {report.total_scenarios}")
        print(f"Passed:     {report.total_passed}")
        print(f"Failed:     {report.total_failed}")
        print(f"Pass Rate:  {report.total_passed / max(report.total_scenarios, 1) * 100:.1f}%")
        print()

        if report.mismatches:
            print("MISMATCHES:")
            for m in report.mismatches[:10]:  # Show first 10
                where = f" step {m.step}" if m.step is not None else ""
                print(f"  - {m.scenario_name}{where}: {m.field} expected {m.expected!r}, got {m.actual!r}")
            if len(report.mismatches) > 10:
                print(f"  ... and {len(report.mismatches) - 10} more")

        status = "PASSED" if report.total_failed == 0 else "FAILED"
        print()
        print(f"Overall: {status}")
        print("=" * 60)

    def report_to_dict(self, report: RunReport) -> Dict[str, Any]:
        return {
            "timestamp": report.timestamp,
            "total_suites": report.total_suites,
            "total_scenarios": report.total_scenarios,
            "total_passed": report.total_passed,
            "total_failed": report.total_failed,
            "execution_time_ms": report.execution_time_ms,
            "suite_results": [
                {
                    "suite_name": s.suite_name,
                    "total_scenarios": s.total_scenarios,
                    "passed_scenarios": s.passed_scenarios,
                    "failed_scenarios": s.failed_scenarios,
                    "skipped_scenarios": s.skipped_scenarios,
                    "execution_time_ms": s.execution_time_ms,
                    "pass_rate": s.pass_rate,
                    "scenarios": [
                        {
                            "name": r.scenario_name,
                            "passed": r.passed,
                            "steps_run": r.steps_run,
                            "state_digest": r.state_digest,
                            "error": r.error,
                        }
                        for r in s.scenario_results
                    ],
                }
                for s in report.suite_results
            ],
            "mismatches": [
                {
                    "scenario": m.scenario_name,
                    "step": m.step,
                    "field": m.field,
                    "expected": str(m.expected),
                    "actual": str(m.actual),
                }
                for m in report.mismatches
            ],
        }
