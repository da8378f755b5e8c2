"""
Configuration management for the scenario runner.
"""

import os
from dataclasses import dataclass


_TRUTHY = ("true", "1", "yes")


@dataclass
class RunnerConfig:
    """Main configuration for the scenario runner."""
    # Paths
    scenario_dir: str = "scenarios"
    result_dir: str = "results"

    # Execution settings
    stop_on_first_failure: bool = False
    verbose: bool = False

    # Report format: "json" or "yaml"
    report_format: str = "json"

    @classmethod
    def from_env(cls) -> "RunnerConfig":
        """Load configuration from environment variables."""
        config = cls()

        config.scenario_dir = os.environ.get("FREESCROW_SCENARIO_DIR", config.scenario_dir)
        config.result_dir = os.environ.get("FREESCROW_RESULT_DIR", config.result_dir)
        config.report_format = os.environ.get("FREESCROW_REPORT_FORMAT", config.report_format)

        config.verbose = os.environ.get("FREESCROW_VERBOSE", "").lower() in _TRUTHY
        config.stop_on_first_failure = os.environ.get(
            "FREESCROW_STOP_ON_FIRST_FAILURE", ""
        ).lower() in _TRUTHY

        return config
