"""Run the escrow specs under pytest and write their state fixtures.

    python tools/fill.py                      # every module into fixtures/
    python tools/fill.py dispute arbitrator   # tests/test_dispute.py, tests/test_arbitrator.py
    python tools/fill.py -k time_out --output /tmp/fx
"""

from __future__ import annotations

import argparse
import os
import subprocess
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
TESTS = ROOT / "tests"
OUT = ROOT / "fixtures"


def available_groups() -> list[str]:
    return sorted(p.stem[len("test_"):] for p in TESTS.glob("test_*.py"))


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Generate Freescrow state fixtures")
    parser.add_argument(
        "groups",
        nargs="*",
        metavar="GROUP",
        help="test modules to fill, e.g. 'dispute' for tests/test_dispute.py (default: all)",
    )
    parser.add_argument("-k", dest="keyword", default=None, help="pytest -k expression")
    parser.add_argument("--output", default=str(OUT), help="fixture output directory")
    args = parser.parse_args(argv)

    unknown = sorted(set(args.groups) - set(available_groups()))
    if unknown:
        parser.error(f"unknown group(s): {', '.join(unknown)}")
    return args


def build_command(args: argparse.Namespace) -> list[str]:
    targets = [str(TESTS / f"test_{g}.py") for g in args.groups] or [str(TESTS)]
    cmd = [sys.executable, "-m", "pytest", *targets, "-q", "--output", str(Path(args.output))]
    if args.keyword:
        cmd += ["-k", args.keyword]
    return cmd


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join([str(ROOT / "src"), str(ROOT / "tools")])

    cmd = build_command(args)
    print("Running:", " ".join(cmd))
    return subprocess.call(cmd, env=env, cwd=str(ROOT))


if __name__ == "__main__":
    raise SystemExit(main())
